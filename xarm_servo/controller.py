#!/usr/bin/env python3
# coding: utf-8

"""
xArm Board Controller

Command level access to the Hiwonder/LewanSoul xArm board over USB or a
serial line. Every call writes one 64-byte frame and, for getters, blocks on
the single response that follows.

Usage Example:
    >>> from xarm_servo import Controller, Servo
    >>>
    >>> with Controller.first_usb() as arm:
    ...     print(arm.get_battery_voltage())
    ...     arm.set_position(Servo.S3, 500, duration=1000, wait=True)
    ...     arm.get_positions([Servo.S1, Servo.S2])

Concurrency Notes:
    - The protocol has no request IDs: a second command sent before the
      first response is read corrupts the exchange.
    - A facade serializes its own calls with a lock. Sharing one transport
      between several facades, threads without that facade, or processes
      is not supported.
"""

import struct
import threading
import time

from .commands import ALL_SERVOS, SlotCommand
from .errors import ProtocolMismatch, ResponseError, sentinel
from .frames import SlotCodec, hi, lo
from .log import get_logger
from .transport import DEFAULT_BAUDRATE, DEFAULT_TIMEOUT, SerialTransport, UsbTransport

_POSITION = struct.Struct("<h")
_UNSIGNED_SHORT = struct.Struct("<H")


class BaseController(object):
    """
    Request/response plumbing shared by the controller facades.

    Args:
        transport (Transport): Byte transport, owned by this facade.
        delay (float, optional): Pause in seconds after every write.
        debug (bool, optional): Enable debug logging of every frame.
    """

    codec_class = None

    def __init__(self, transport, delay=0.0, debug=False):
        self.transport = transport
        self.codec = self.codec_class()
        self.delay = delay
        self.debug = debug
        self._lock = threading.Lock()
        self.logger = get_logger(self, debug)

    def open(self):
        self.transport.open()
        return self

    def close(self):
        """Release the transport. Safe to call more than once."""
        self.transport.close()

    @property
    def is_open(self):
        return self.transport.is_open

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _request(self, command, payload=b"", servo_id=None, reply_length=None):
        """
        Send one frame and, when ``reply_length`` is given, return the payload
        of the response.

        Raises:
            TransportError: The transport failed.
            NoResponse: Nothing came back before the read timeout.
            ProtocolMismatch: The response failed validation.
        """
        frame = self.codec.encode(command, payload, servo_id)
        with self._lock:
            self.transport.write(frame)
            if self.debug:
                self.logger.debug("%s: %s", getattr(command, "name", command), frame.hex(" "))
            if reply_length is None:
                if self.delay:
                    time.sleep(self.delay)
                return None
            response = self.transport.read(self.codec.response_size(reply_length))
        try:
            return self.codec.decode(response, command, servo_id, min_length=reply_length)
        except ResponseError as e:
            self.logger.debug("%s failed: %s", getattr(command, "name", command), e)
            raise


class Controller(BaseController):
    """
    Facade for the xArm board controller (slot protocol).

    Servo IDs are expected in 1-6 and positions in 0-1000. Neither is
    checked: values are truncated to their byte fields and sent as given.
    """

    codec_class = SlotCodec

    @classmethod
    def from_serial(cls, port, baudrate=DEFAULT_BAUDRATE, timeout=DEFAULT_TIMEOUT, **kwargs):
        """Create a controller talking to the board over a serial line."""
        debug = kwargs.get("debug", False)
        return cls(SerialTransport(port, baudrate, timeout, debug=debug), **kwargs)

    @classmethod
    def first_usb(cls, timeout=DEFAULT_TIMEOUT, **kwargs):
        """Create a controller on the first xArm found on USB."""
        debug = kwargs.get("debug", False)
        return cls(UsbTransport(timeout=timeout, debug=debug), **kwargs)

    def stop_servo(self, servo_id):
        """Stop a servo and release its torque."""
        self.stop_servos([servo_id])

    def stop_servos(self, servo_ids):
        servo_ids = [int(s) & 0xFF for s in servo_ids]
        self._request(SlotCommand.SERVO_STOP, bytes([len(servo_ids)] + servo_ids))

    def stop_all(self):
        self.stop_servos(ALL_SERVOS)

    def set_position(self, servo_id, position, duration=1000, wait=False):
        """
        Move one servo.

        Args:
            servo_id (int): Servo channel, 1-6.
            position (int): Target position, 0-1000 for most servos.
            duration (int, optional): Move time in milliseconds.
            wait (bool, optional): Sleep for ``duration`` before returning.
                Ignored when ``duration`` is not positive.
        """
        self.set_positions([servo_id], [position], duration, wait)

    def set_positions(self, servo_ids, positions, duration=1000, wait=False):
        """
        Move several servos over the same duration, in the order given.

        Example:
            >>> arm.set_positions([Servo.S1, Servo.S2], [500, 300], 2000)
        """
        servo_ids = list(servo_ids)
        positions = list(positions)
        if len(servo_ids) != len(positions):
            raise ValueError(
                f"got {len(servo_ids)} servo ids but {len(positions)} positions"
            )
        payload = bytearray((len(servo_ids), lo(duration), hi(duration)))
        for servo_id, position in zip(servo_ids, positions):
            payload += bytes((int(servo_id) & 0xFF, lo(position), hi(position)))
        self._request(SlotCommand.SERVO_MOVE, payload)
        if wait and duration > 0:
            time.sleep(duration / 1000.0)

    def get_position(self, servo_id):
        """
        Read the raw position of one servo.

        Raises:
            NoResponse: The board did not answer.
            ProtocolMismatch: The answer was malformed or for another servo.
        """
        payload = self._request(
            SlotCommand.GET_SERVO_POSITION, bytes((1, int(servo_id) & 0xFF)), reply_length=4
        )
        if payload[0] != 1 or payload[1] != int(servo_id):
            raise ProtocolMismatch(
                f"position reply is for servo {payload[1]}, expected {int(servo_id)}"
            )
        return _POSITION.unpack_from(payload, 2)[0]

    def get_positions(self, servo_ids):
        """Read the raw positions of several servos, in the order given."""
        servo_ids = [int(s) & 0xFF for s in servo_ids]
        payload = self._request(
            SlotCommand.GET_SERVO_POSITION,
            bytes([len(servo_ids)] + servo_ids),
            reply_length=1 + 3 * len(servo_ids),
        )
        positions = []
        for i, servo_id in enumerate(servo_ids):
            offset = 1 + 3 * i
            if payload[offset] != servo_id:
                raise ProtocolMismatch(
                    f"position reply slot {i} is for servo {payload[offset]}, expected {servo_id}"
                )
            positions.append(_POSITION.unpack_from(payload, offset + 1)[0])
        return positions

    def get_battery_voltage(self):
        """Battery voltage in volts."""
        payload = self._request(SlotCommand.BATTERY_VOLTAGE, reply_length=2)
        return _UNSIGNED_SHORT.unpack_from(payload)[0] / 1000.0

    def run_action_group(self, group, times=1):
        """Play an action group stored on the board, ``times`` times (0 loops forever)."""
        self._request(SlotCommand.ACTION_GROUP_RUN, bytes((int(group) & 0xFF, lo(times), hi(times))))

    def stop_action_group(self):
        self._request(SlotCommand.ACTION_GROUP_STOP)

    def set_action_group_speed(self, group, percent):
        self._request(
            SlotCommand.ACTION_GROUP_SPEED, bytes((int(group) & 0xFF, lo(percent), hi(percent)))
        )

    def try_get_position(self, servo_id, default=-1):
        """Like :meth:`get_position`, returning ``default`` on a failed read."""
        return sentinel(self.get_position, servo_id, default=default)

    def try_get_positions(self, servo_ids, default=-1):
        servo_ids = list(servo_ids)
        return sentinel(self.get_positions, servo_ids, default=[default] * len(servo_ids))

    def try_get_battery_voltage(self, default=-1.0):
        return sentinel(self.get_battery_voltage, default=default)
