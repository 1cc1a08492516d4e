"""LewanSoul bus servo tests against the in-memory transport"""
import pytest

from xarm_servo.bus import ServoBus
from xarm_servo.commands import Alarm, BROADCAST_ID, BusCommand
from xarm_servo.errors import (
    ChecksumMismatch,
    InvalidServoId,
    NoResponse,
    ParameterOutOfRange,
    ProtocolMismatch,
    sentinel,
)
from xarm_servo.frames import BusCodec

codec = BusCodec()


def _reply(command, payload, servo_id):
    return codec.encode(command, payload, servo_id)


@pytest.fixture
def bus(transport):
    return ServoBus(transport)


# ── Motion ──

def test_move_frame(bus, transport):
    bus.move(1, 500, 1000)
    assert transport.written == [bytes.fromhex("55 55 01 07 01 F4 01 E8 03 16")]
    assert transport.read_sizes == []


def test_move_all_uses_broadcast(bus, transport):
    bus.move_all(0, 0)
    assert transport.written == [codec.encode(BusCommand.MOVE_TIME_WRITE, bytes(4), BROADCAST_ID)]


def test_preloaded_move_then_start(bus, transport):
    bus.set_move(2, 1000, 30000)
    bus.start_move(2)
    bus.stop_move_all()
    assert transport.written == [
        codec.encode(BusCommand.MOVE_TIME_WAIT_WRITE, bytes.fromhex("E8 03 30 75"), 2),
        codec.encode(BusCommand.MOVE_START, b"", 2),
        codec.encode(BusCommand.MOVE_STOP, b"", BROADCAST_ID),
    ]


@pytest.mark.parametrize(
    "servo_id, position, time_ms, argument",
    [
        (1, 1001, 100, "position"),
        (1, -1, 100, "position"),
        (1, 500, 30001, "time"),
        (255, 500, 100, "servo_id"),
    ],
)
def test_move_rejects_out_of_range(bus, transport, servo_id, position, time_ms, argument):
    with pytest.raises(ParameterOutOfRange) as excinfo:
        bus.move(servo_id, position, time_ms)
    assert excinfo.value.argument == argument
    assert transport.written == []


def test_read_move(bus, transport):
    transport.queue(_reply(BusCommand.MOVE_TIME_WAIT_READ, bytes.fromhex("F4 01 E8 03"), 1))
    assert bus.read_move(1, preloaded=True) == (500, 1000)
    assert transport.written[0][4] == BusCommand.MOVE_TIME_WAIT_READ


def test_read_position(bus, transport):
    transport.queue(_reply(BusCommand.POS_READ, bytes.fromhex("F4 01"), 1))
    assert bus.read_position(1) == 500
    assert transport.written == [codec.encode(BusCommand.POS_READ, b"", 1)]
    assert transport.read_sizes == [8]


def test_read_position_can_be_negative(bus, transport):
    transport.queue(_reply(BusCommand.POS_READ, bytes.fromhex("F6 FF"), 1))
    assert bus.read_position(1) == -10


def test_read_position_from_other_servo(bus, transport):
    transport.queue(_reply(BusCommand.POS_READ, bytes.fromhex("F4 01"), 2))
    with pytest.raises(InvalidServoId):
        bus.read_position(1)


def test_read_position_bad_checksum(bus, transport):
    reply = bytearray(_reply(BusCommand.POS_READ, bytes.fromhex("F4 01"), 1))
    reply[-1] ^= 0xFF
    transport.queue(bytes(reply))
    with pytest.raises(ChecksumMismatch):
        bus.read_position(1)


def test_read_position_no_response(bus):
    with pytest.raises(NoResponse):
        bus.read_position(1)


def test_reads_cannot_broadcast(bus, transport):
    with pytest.raises(ParameterOutOfRange):
        bus.read_position(BROADCAST_ID)
    assert transport.written == []


# ── Identity ──

def test_write_servo_id(bus, transport):
    bus.write_servo_id(1, 7)
    assert transport.written == [codec.encode(BusCommand.ID_WRITE, bytes((7,)), 1)]


def test_write_servo_id_rejects_broadcast_as_new_id(bus, transport):
    with pytest.raises(ParameterOutOfRange) as excinfo:
        bus.write_servo_id(1, 254)
    assert excinfo.value.argument == "new_id"
    assert transport.written == []


def test_read_servo_id(bus, transport):
    transport.queue(_reply(BusCommand.ID_READ, bytes((7,)), 7))
    assert bus.read_servo_id() == 7
    assert transport.written == [bytes.fromhex("55 55 FE 03 0E F0")]


# ── Calibration ──

def test_angle_offset_round_trip(bus, transport):
    bus.write_angle_offset(1, -20)
    assert transport.written == [codec.encode(BusCommand.ANGLE_OFFSET_ADJUST, bytes((0xEC,)), 1)]
    transport.queue(_reply(BusCommand.ANGLE_OFFSET_READ, bytes((0xEC,)), 1))
    assert bus.read_angle_offset(1) == -20


def test_angle_offset_and_store_writes_two_frames(bus, transport):
    bus.write_angle_offset_and_store(3, 10)
    assert transport.written == [
        codec.encode(BusCommand.ANGLE_OFFSET_ADJUST, bytes((10,)), 3),
        codec.encode(BusCommand.ANGLE_OFFSET_WRITE, b"", 3),
    ]


def test_angle_offset_range(bus, transport):
    with pytest.raises(ParameterOutOfRange):
        bus.write_angle_offset(1, 126)
    with pytest.raises(ParameterOutOfRange):
        bus.write_angle_offset_and_store(1, -126)
    assert transport.written == []


# ── Limits ──

def test_angle_limit(bus, transport):
    bus.write_angle_limit(1, 100, 900)
    assert transport.written == [
        codec.encode(BusCommand.ANGLE_LIMIT_WRITE, bytes.fromhex("64 00 84 03"), 1)
    ]
    transport.queue(_reply(BusCommand.ANGLE_LIMIT_READ, bytes.fromhex("64 00 84 03"), 1))
    assert bus.read_angle_limit(1) == (100, 900)


def test_angle_limit_checks_bounds_before_order(bus, transport):
    with pytest.raises(ParameterOutOfRange) as excinfo:
        bus.write_angle_limit(1, 1200, 100)
    assert excinfo.value.argument == "min_angle"
    assert excinfo.value.maximum == 1000
    assert transport.written == []


def test_angle_limit_min_above_max(bus, transport):
    with pytest.raises(ParameterOutOfRange) as excinfo:
        bus.write_angle_limit(1, 600, 400)
    assert excinfo.value.maximum == 400
    assert transport.written == []


def test_vin_limit(bus, transport):
    bus.write_vin_limit(1, 4500, 12000)
    assert transport.written == [
        codec.encode(BusCommand.VIN_LIMIT_WRITE, bytes.fromhex("94 11 E0 2E"), 1)
    ]
    transport.queue(_reply(BusCommand.VIN_LIMIT_READ, bytes.fromhex("94 11 E0 2E"), 1))
    assert bus.read_vin_limit(1) == (4500, 12000)


@pytest.mark.parametrize("low, high", [(4499, 12000), (4500, 12001), (9000, 6000)])
def test_vin_limit_rejects(bus, low, high):
    with pytest.raises(ParameterOutOfRange):
        bus.write_vin_limit(1, low, high)


def test_temperature_limit(bus, transport):
    bus.set_maximum_temperature_limit(1, 85)
    assert transport.written == [codec.encode(BusCommand.TEMP_MAX_LIMIT_WRITE, bytes((85,)), 1)]
    transport.queue(_reply(BusCommand.TEMP_MAX_LIMIT_READ, bytes((85,)), 1))
    assert bus.get_maximum_temperature_limit(1) == 85


@pytest.mark.parametrize("value", [49, 101])
def test_temperature_limit_rejects(bus, value):
    with pytest.raises(ParameterOutOfRange):
        bus.set_maximum_temperature_limit(1, value)


# ── Telemetry ──

def test_get_temperature(bus, transport):
    transport.queue(_reply(BusCommand.TEMP_READ, bytes((42,)), 1))
    assert bus.get_temperature(1) == 42


def test_get_vin(bus, transport):
    transport.queue(_reply(BusCommand.VIN_READ, bytes.fromhex("6C 1D"), 1))
    assert bus.get_vin(1) == 7532


# ── Modes ──

def test_motor_mode(bus, transport):
    bus.set_motor_mode(1, -500)
    assert transport.written == [
        codec.encode(BusCommand.OR_MOTOR_MODE_WRITE, bytes.fromhex("01 00 0C FE"), 1)
    ]
    transport.queue(_reply(BusCommand.OR_MOTOR_MODE_READ, bytes.fromhex("01 00 0C FE"), 1))
    assert bus.get_mode(1) == ("motor", -500)


def test_servo_mode(bus, transport):
    bus.set_servo_mode(1)
    assert transport.written == [codec.encode(BusCommand.OR_MOTOR_MODE_WRITE, bytes(4), 1)]
    transport.queue(_reply(BusCommand.OR_MOTOR_MODE_READ, bytes(4), 1))
    assert bus.get_mode(1) == ("servo", None)


@pytest.mark.parametrize("speed", [-1001, 1001])
def test_motor_speed_rejects(bus, speed):
    with pytest.raises(ParameterOutOfRange):
        bus.set_motor_mode(1, speed)


def test_load(bus, transport):
    bus.load_servo(1)
    bus.load_servo(1, load=False)
    assert [frame[5] for frame in transport.written] == [1, 0]
    transport.queue(_reply(BusCommand.LOAD_OR_UNLOAD_READ, bytes((1,)), 1))
    assert bus.is_loaded_servo(1) is True


# ── LED ──

def test_led_on_is_encoded_as_zero(bus, transport):
    bus.set_led(1, True)
    bus.set_led(1, False)
    assert [frame[5] for frame in transport.written] == [0, 1]
    transport.queue(_reply(BusCommand.LED_CTRL_READ, bytes((0,)), 1))
    assert bus.get_led(1) is True


def test_alarm(bus, transport):
    bus.set_alarm(1, Alarm.LOCKED_ROTOR)
    assert transport.written == [codec.encode(BusCommand.LED_ERROR_WRITE, bytes((4,)), 1)]
    transport.queue(_reply(BusCommand.LED_ERROR_READ, bytes((7,)), 1))
    assert bus.get_alarm(1) is Alarm.ALL


def test_alarm_rejects_unknown_value(bus, transport):
    with pytest.raises(ParameterOutOfRange) as excinfo:
        bus.set_alarm(1, 8)
    assert excinfo.value.argument == "alarm"
    assert transport.written == []


def test_get_alarm_unknown_value_is_protocol_mismatch(bus, transport):
    transport.queue(_reply(BusCommand.LED_ERROR_READ, bytes((9,)), 1))
    with pytest.raises(ProtocolMismatch):
        bus.get_alarm(1)


def test_get_alarm_unknown_value_with_sentinel(bus, transport):
    transport.queue(_reply(BusCommand.LED_ERROR_READ, bytes((9,)), 1))
    assert sentinel(bus.get_alarm, 1, default=None) is None
