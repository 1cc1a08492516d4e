#!/usr/bin/env python3
# coding: utf-8

"""
Frame codecs for the xArm protocols.

Two protocol families share the ``0x55 0x55`` signature:

- the *slot* protocol spoken by the xArm board controller, where every
  frame is a fixed 64-byte report::

      0x55 0x55 Length Cmd Prm1 ... PrmN 0x00 ...
      Length = N + 2

- the *bus* protocol spoken by LewanSoul serial bus servos, where frames are
  addressed to one servo ID and end with a checksum::

      0x55 0x55 ID Length Cmd Prm1 ... PrmN Checksum
      Length = N + 3
      Checksum = ~(ID + Length + Cmd + Prm1 + ... + PrmN) & 0xFF

Both codecs implement :class:`FrameCodec` so the facades can be written
against one interface.
"""

from typing import NamedTuple, Optional

from .commands import BusCommand, SIGNATURE, SLOT_FRAME_SIZE
from .errors import (
    ChecksumMismatch,
    InvalidCommand,
    InvalidLength,
    InvalidServoId,
    InvalidSignature,
    NoResponse,
    ProtocolMismatch,
)

_HEADER = bytes((SIGNATURE, SIGNATURE))


class Frame(NamedTuple):
    command: int
    payload: bytes = b""
    servo_id: Optional[int] = None


def checksum(data):
    """One's complement of the low byte of the sum of ``data``."""
    return ~(sum(data) & 0xFF) & 0xFF


def lo(value):
    return int(value) & 0xFF


def hi(value):
    return (int(value) >> 8) & 0xFF


class FrameCodec(object):
    """Turns frames into transport bytes and validates responses."""

    def encode(self, command, payload=b"", servo_id=None):
        raise NotImplementedError

    def decode(self, response, command, servo_id=None, min_length=0):
        raise NotImplementedError

    def response_size(self, payload_length):
        """Number of bytes to read for a reply carrying ``payload_length`` bytes."""
        raise NotImplementedError

    def encode_frame(self, frame):
        return self.encode(frame.command, frame.payload, frame.servo_id)


class SlotCodec(FrameCodec):
    """Fixed 64-byte frames of the xArm board controller."""

    HEADER_SIZE = 4
    MAX_PAYLOAD = SLOT_FRAME_SIZE - HEADER_SIZE

    def encode(self, command, payload=b"", servo_id=None):
        payload = bytes(payload)
        if len(payload) > self.MAX_PAYLOAD:
            raise ValueError(
                f"slot payload is limited to {self.MAX_PAYLOAD} bytes, got {len(payload)}"
            )
        buffer = bytearray(SLOT_FRAME_SIZE)
        buffer[0:2] = _HEADER
        buffer[2] = len(payload) + 2
        buffer[3] = int(command) & 0xFF
        buffer[4 : 4 + len(payload)] = payload
        return bytes(buffer)

    def decode(self, response, command, servo_id=None, min_length=0):
        """
        Validate a board response and return its payload.

        Args:
            response (bytes): Raw bytes read from the transport.
            command (int): Command the response must echo.
            servo_id: Unused, slot frames carry IDs inside the payload.
            min_length (int): Minimum payload size the caller will index.

        Raises:
            NoResponse: ``response`` is empty.
            ProtocolMismatch: Signature, command or length check failed.
        """
        response = bytes(response)
        if not response:
            raise NoResponse(f"no response to command 0x{int(command):02X}")
        if len(response) < self.HEADER_SIZE or response[0:2] != _HEADER:
            raise ProtocolMismatch(f"bad signature in {response[:4].hex()}")
        if response[3] != int(command) & 0xFF:
            raise ProtocolMismatch(
                f"expected command 0x{int(command):02X}, got 0x{response[3]:02X}"
            )
        end = self.HEADER_SIZE + max(response[2] - 2, 0)
        payload = response[self.HEADER_SIZE : end]
        if len(payload) < min_length:
            raise ProtocolMismatch(
                f"expected at least {min_length} payload bytes, got {len(payload)}"
            )
        return payload

    def response_size(self, payload_length):
        # USB reads return the whole report, serial reads stop here.
        return self.HEADER_SIZE + payload_length


class BusCodec(FrameCodec):
    """Addressed, checksummed frames of the LewanSoul bus servos."""

    # signature, id, length, command, checksum
    OVERHEAD = 6

    def encode(self, command, payload=b"", servo_id=None):
        if servo_id is None:
            raise ValueError("bus frames need a servo_id")
        payload = bytes(payload)
        body = bytearray((int(servo_id) & 0xFF, len(payload) + 3, int(command) & 0xFF))
        body += payload
        return _HEADER + bytes(body) + bytes((checksum(body),))

    def decode(self, response, command, servo_id=None, min_length=0):
        """
        Validate a servo response and return its parameter bytes.

        ``ID_READ`` responses are accepted from any ID, since that command is
        used to discover an unknown servo ID.

        Raises:
            NoResponse: ``response`` is empty.
            InvalidSignature, InvalidServoId, InvalidLength, InvalidCommand,
            ChecksumMismatch: The matching check failed, in that order.
        """
        response = bytes(response)
        if not response:
            raise NoResponse(f"no response to command {int(command)}")
        if response[0:2] != _HEADER:
            raise InvalidSignature(f"bad signature in {response[:2].hex()}")
        if len(response) < self.OVERHEAD:
            raise InvalidLength(f"frame too short: {len(response)} bytes")
        if command != BusCommand.ID_READ and response[2] != servo_id:
            raise InvalidServoId(f"expected servo {servo_id}, got {response[2]}")
        if response[3] != len(response) - 3:
            raise InvalidLength(
                f"declared length {response[3]} does not match {len(response) - 3}"
            )
        if response[4] != int(command) & 0xFF:
            raise InvalidCommand(f"expected command {int(command)}, got {response[4]}")
        if response[-1] != checksum(response[2:-1]):
            raise ChecksumMismatch(
                f"expected checksum 0x{checksum(response[2:-1]):02X}, got 0x{response[-1]:02X}"
            )
        payload = response[5:-1]
        if len(payload) < min_length:
            raise InvalidLength(
                f"expected at least {min_length} parameter bytes, got {len(payload)}"
            )
        return payload

    def response_size(self, payload_length):
        return payload_length + self.OVERHEAD
