#!/usr/bin/env python3
# coding: utf-8

"""
LewanSoul Bus Servo Controller

Drives LewanSoul/Hiwonder serial bus servos (LX-15D, LX-16A, ...) addressed
by ID on a shared half-duplex line.

Every write that carries a bounded value is validated before encoding and
raises :class:`~xarm_servo.errors.ParameterOutOfRange`, so the servo is
never sent an out-of-range value. Reads return typed values and raise
:class:`~xarm_servo.errors.ResponseError` subclasses on a missing or
malformed answer.

Usage Example:
    >>> from xarm_servo import ServoBus
    >>>
    >>> with ServoBus.from_serial("/dev/ttyUSB0") as bus:
    ...     bus.move(1, 500, 1000)
    ...     bus.read_position(1)
    ...     bus.get_vin(1)

Safety Notes:
    - write_servo_id() and read_servo_id() must be used with a single servo
      connected, every servo on the line answers to them otherwise.
    - Limits written with the *_limit methods are kept across power cycles.
"""

import struct

from .commands import (
    Alarm,
    BROADCAST_ID,
    BusCommand,
    MAX_BUS_ID,
    MAX_POSITION,
    MIN_BUS_ID,
    MIN_POSITION,
)
from .controller import BaseController
from .errors import ParameterOutOfRange, ProtocolMismatch, check_range
from .frames import BusCodec
from .transport import DEFAULT_TIMEOUT, SerialTransport

DEFAULT_BUS_BAUDRATE = 115200

MAX_MOVE_TIME = 30000
MIN_VIN = 4500
MAX_VIN = 12000
MIN_TEMP_LIMIT = 50
MAX_TEMP_LIMIT = 100
MIN_ANGLE_OFFSET = -125
MAX_ANGLE_OFFSET = 125
MIN_MOTOR_SPEED = -1000
MAX_MOTOR_SPEED = 1000

_SERVO_MODE = 0
_MOTOR_MODE = 1

_TWO_UNSIGNED_SHORTS = struct.Struct("<HH")
_SIGNED_SHORT = struct.Struct("<h")
_UNSIGNED_SHORT = struct.Struct("<H")
_SIGNED_CHAR = struct.Struct("<b")
_MODE = struct.Struct("<Bxh")


def _check_id(servo_id, broadcast=False):
    if broadcast and servo_id == BROADCAST_ID:
        return servo_id
    return check_range("servo_id", servo_id, MIN_BUS_ID, MAX_BUS_ID)


def _check_pair(min_name, min_value, max_name, max_value, low, high):
    check_range(min_name, min_value, low, high)
    check_range(max_name, max_value, low, high)
    if min_value > max_value:
        raise ParameterOutOfRange(
            min_name,
            min_value,
            maximum=max_value,
            message=f"{min_name} ({min_value}) must not exceed {max_name} ({max_value})",
        )


class ServoBus(BaseController):
    """
    Facade for LewanSoul bus servos (addressed bus protocol).

    Args:
        transport (Transport): Byte transport to the servo line.
        delay (float, optional): Pause in seconds after every write.
        debug (bool, optional): Enable debug logging of every frame.
    """

    codec_class = BusCodec

    @classmethod
    def from_serial(cls, port, baudrate=DEFAULT_BUS_BAUDRATE, timeout=DEFAULT_TIMEOUT, **kwargs):
        debug = kwargs.get("debug", False)
        return cls(SerialTransport(port, baudrate, timeout, debug=debug), **kwargs)

    # Motion

    def _move(self, command, servo_id, position, time_ms):
        _check_id(servo_id, broadcast=True)
        check_range("position", position, MIN_POSITION, MAX_POSITION)
        check_range("time", time_ms, 0, MAX_MOVE_TIME)
        self._request(command, _TWO_UNSIGNED_SHORTS.pack(int(position), int(time_ms)), servo_id)

    def move(self, servo_id, position, time_ms):
        """
        Move a servo to ``position`` (0-1000) over ``time_ms`` (0-30000 ms).

        Example:
            >>> bus.move(1, 500, 1000)
        """
        self._move(BusCommand.MOVE_TIME_WRITE, servo_id, position, time_ms)

    def move_all(self, position, time_ms):
        self.move(BROADCAST_ID, position, time_ms)

    def set_move(self, servo_id, position, time_ms):
        """Preload a move, started later by :meth:`start_move`."""
        self._move(BusCommand.MOVE_TIME_WAIT_WRITE, servo_id, position, time_ms)

    def set_move_all(self, position, time_ms):
        self.set_move(BROADCAST_ID, position, time_ms)

    def start_move(self, servo_id):
        self._request(BusCommand.MOVE_START, servo_id=_check_id(servo_id, broadcast=True))

    def start_move_all(self):
        self.start_move(BROADCAST_ID)

    def stop_move(self, servo_id):
        self._request(BusCommand.MOVE_STOP, servo_id=_check_id(servo_id, broadcast=True))

    def stop_move_all(self):
        self.stop_move(BROADCAST_ID)

    def read_move(self, servo_id, preloaded=False):
        """
        Return the (position, time_ms) of the last move command.

        ``preloaded`` reads the move set by :meth:`set_move` instead.
        """
        command = BusCommand.MOVE_TIME_WAIT_READ if preloaded else BusCommand.MOVE_TIME_READ
        payload = self._request(command, servo_id=_check_id(servo_id), reply_length=4)
        return _TWO_UNSIGNED_SHORTS.unpack_from(payload)

    def read_position(self, servo_id):
        """Current position. May be slightly negative near the lower end."""
        payload = self._request(
            BusCommand.POS_READ, servo_id=_check_id(servo_id), reply_length=2
        )
        return _SIGNED_SHORT.unpack_from(payload)[0]

    # Identity

    def write_servo_id(self, servo_id, new_id):
        """Give ``servo_id`` a new ID. Use with one servo on the line."""
        _check_id(servo_id, broadcast=True)
        check_range("new_id", new_id, MIN_BUS_ID, MAX_BUS_ID)
        self._request(BusCommand.ID_WRITE, bytes((int(new_id),)), servo_id)

    def read_servo_id(self):
        """ID of the only servo on the line."""
        payload = self._request(BusCommand.ID_READ, servo_id=BROADCAST_ID, reply_length=1)
        return payload[0]

    # Calibration

    def write_angle_offset(self, servo_id, offset):
        """Adjust the zero offset (-125..125), lost at power off."""
        _check_id(servo_id, broadcast=True)
        check_range("offset", offset, MIN_ANGLE_OFFSET, MAX_ANGLE_OFFSET)
        self._request(BusCommand.ANGLE_OFFSET_ADJUST, _SIGNED_CHAR.pack(int(offset)), servo_id)

    def write_angle_offset_and_store(self, servo_id, offset):
        """Adjust the zero offset and save it to the servo."""
        self.write_angle_offset(servo_id, offset)
        self._request(BusCommand.ANGLE_OFFSET_WRITE, servo_id=servo_id)

    def read_angle_offset(self, servo_id):
        payload = self._request(
            BusCommand.ANGLE_OFFSET_READ, servo_id=_check_id(servo_id), reply_length=1
        )
        return _SIGNED_CHAR.unpack_from(payload)[0]

    # Limits

    def write_angle_limit(self, servo_id, min_angle, max_angle):
        """Restrict the position range, both bounds in 0-1000."""
        _check_id(servo_id, broadcast=True)
        _check_pair("min_angle", min_angle, "max_angle", max_angle, MIN_POSITION, MAX_POSITION)
        self._request(
            BusCommand.ANGLE_LIMIT_WRITE,
            _TWO_UNSIGNED_SHORTS.pack(int(min_angle), int(max_angle)),
            servo_id,
        )

    def read_angle_limit(self, servo_id):
        """Return (min_angle, max_angle)."""
        payload = self._request(
            BusCommand.ANGLE_LIMIT_READ, servo_id=_check_id(servo_id), reply_length=4
        )
        return _TWO_UNSIGNED_SHORTS.unpack_from(payload)

    def write_vin_limit(self, servo_id, min_voltage, max_voltage):
        """Input voltage window in millivolts, 4500-12000."""
        _check_id(servo_id, broadcast=True)
        _check_pair("min_voltage", min_voltage, "max_voltage", max_voltage, MIN_VIN, MAX_VIN)
        self._request(
            BusCommand.VIN_LIMIT_WRITE,
            _TWO_UNSIGNED_SHORTS.pack(int(min_voltage), int(max_voltage)),
            servo_id,
        )

    def read_vin_limit(self, servo_id):
        """Return (min_voltage, max_voltage) in millivolts."""
        payload = self._request(
            BusCommand.VIN_LIMIT_READ, servo_id=_check_id(servo_id), reply_length=4
        )
        return _TWO_UNSIGNED_SHORTS.unpack_from(payload)

    def set_maximum_temperature_limit(self, servo_id, max_temperature):
        """Shut the motor down above ``max_temperature`` °C (50-100)."""
        _check_id(servo_id, broadcast=True)
        check_range("max_temperature", max_temperature, MIN_TEMP_LIMIT, MAX_TEMP_LIMIT)
        self._request(BusCommand.TEMP_MAX_LIMIT_WRITE, bytes((int(max_temperature),)), servo_id)

    def get_maximum_temperature_limit(self, servo_id):
        payload = self._request(
            BusCommand.TEMP_MAX_LIMIT_READ, servo_id=_check_id(servo_id), reply_length=1
        )
        return payload[0]

    # Telemetry

    def get_temperature(self, servo_id):
        """Internal temperature in °C."""
        payload = self._request(BusCommand.TEMP_READ, servo_id=_check_id(servo_id), reply_length=1)
        return payload[0]

    def get_vin(self, servo_id):
        """Input voltage in millivolts."""
        payload = self._request(BusCommand.VIN_READ, servo_id=_check_id(servo_id), reply_length=2)
        return _UNSIGNED_SHORT.unpack_from(payload)[0]

    # Modes

    def set_servo_mode(self, servo_id):
        _check_id(servo_id, broadcast=True)
        self._request(BusCommand.OR_MOTOR_MODE_WRITE, _MODE.pack(_SERVO_MODE, 0), servo_id)

    def set_motor_mode(self, servo_id, speed):
        """Spin continuously at ``speed`` (-1000..1000)."""
        _check_id(servo_id, broadcast=True)
        check_range("speed", speed, MIN_MOTOR_SPEED, MAX_MOTOR_SPEED)
        self._request(BusCommand.OR_MOTOR_MODE_WRITE, _MODE.pack(_MOTOR_MODE, int(speed)), servo_id)

    def get_mode(self, servo_id):
        """Return ("servo", None) or ("motor", speed)."""
        payload = self._request(
            BusCommand.OR_MOTOR_MODE_READ, servo_id=_check_id(servo_id), reply_length=4
        )
        mode, speed = _MODE.unpack_from(payload)
        if mode == _MOTOR_MODE:
            return "motor", speed
        return "servo", None

    def load_servo(self, servo_id, load=True):
        """Power the motor (``load=True``) or let it turn freely."""
        _check_id(servo_id, broadcast=True)
        self._request(BusCommand.LOAD_OR_UNLOAD_WRITE, bytes((1 if load else 0,)), servo_id)

    def is_loaded_servo(self, servo_id):
        payload = self._request(
            BusCommand.LOAD_OR_UNLOAD_READ, servo_id=_check_id(servo_id), reply_length=1
        )
        return payload[0] == 1

    # LED

    def set_led(self, servo_id, led_on):
        # The servo encodes "LED on" as 0.
        _check_id(servo_id, broadcast=True)
        self._request(BusCommand.LED_CTRL_WRITE, bytes((0 if led_on else 1,)), servo_id)

    def get_led(self, servo_id):
        payload = self._request(BusCommand.LED_CTRL_READ, servo_id=_check_id(servo_id), reply_length=1)
        return payload[0] == 0

    def set_alarm(self, servo_id, alarm):
        """Select which faults make the LED flash."""
        _check_id(servo_id, broadcast=True)
        check_range("alarm", alarm, int(Alarm.NO_ALARM), int(Alarm.ALL))
        self._request(BusCommand.LED_ERROR_WRITE, bytes((int(alarm),)), servo_id)

    def get_alarm(self, servo_id):
        payload = self._request(
            BusCommand.LED_ERROR_READ, servo_id=_check_id(servo_id), reply_length=1
        )
        try:
            return Alarm(payload[0])
        except ValueError:
            raise ProtocolMismatch(f"servo {servo_id} reported unknown alarm {payload[0]}") from None
