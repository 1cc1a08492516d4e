"""
Python driver for the Hiwonder/LewanSoul xArm and its bus servos.
"""

from .bus import ServoBus
from .commands import (
    ALL_SERVOS,
    Alarm,
    BROADCAST_ID,
    BusCommand,
    SIGNATURE,
    Servo,
    SlotCommand,
)
from .controller import Controller
from .errors import (
    ChecksumMismatch,
    InvalidCommand,
    InvalidLength,
    InvalidServoId,
    InvalidSignature,
    NoResponse,
    ParameterOutOfRange,
    ProtocolMismatch,
    ResponseError,
    TransportError,
    XArmError,
    sentinel,
)
from .frames import BusCodec, Frame, FrameCodec, SlotCodec, checksum
from .kinematics import ArmModel, Position, PositionMove, bearing
from .mapping import ServoDefinition, angle_to_raw, raw_to_angle
from .motor import ServoMotor
from .transport import SerialTransport, Transport, UsbTransport, find_controllers

__version__ = "0.1.0"

__all__ = [
    "ALL_SERVOS",
    "Alarm",
    "ArmModel",
    "BROADCAST_ID",
    "BusCodec",
    "BusCommand",
    "ChecksumMismatch",
    "Controller",
    "Frame",
    "FrameCodec",
    "InvalidCommand",
    "InvalidLength",
    "InvalidServoId",
    "InvalidSignature",
    "NoResponse",
    "ParameterOutOfRange",
    "Position",
    "PositionMove",
    "ProtocolMismatch",
    "ResponseError",
    "SIGNATURE",
    "SerialTransport",
    "Servo",
    "ServoBus",
    "ServoDefinition",
    "ServoMotor",
    "SlotCodec",
    "SlotCommand",
    "Transport",
    "TransportError",
    "UsbTransport",
    "XArmError",
    "angle_to_raw",
    "bearing",
    "checksum",
    "find_controllers",
    "raw_to_angle",
    "sentinel",
]
