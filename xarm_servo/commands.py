#!/usr/bin/env python3
# coding: utf-8

"""
Command numbers and shared constants for the two xArm protocol families.
"""

from enum import IntEnum

# Both protocols start every frame with this byte, twice.
SIGNATURE = 0x55

# Slot protocol frames are exactly one USB report long.
SLOT_FRAME_SIZE = 64

MIN_POSITION = 0
MAX_POSITION = 1000

MIN_BUS_ID = 0
MAX_BUS_ID = 253
BROADCAST_ID = 0xFE


class Servo(IntEnum):
    """Servo channels of the xArm board controller."""

    S1 = 1
    S2 = 2
    S3 = 3
    S4 = 4
    S5 = 5
    S6 = 6


ALL_SERVOS = tuple(Servo)


class SlotCommand(IntEnum):
    """Commands understood by the xArm board controller."""

    SERVO_RAW = 0x00
    SERVO_MOVE = 0x03
    ACTION_GROUP_RUN = 0x06
    ACTION_GROUP_STOP = 0x07
    ACTION_GROUP_SPEED = 0x0B
    BATTERY_VOLTAGE = 0x0F
    SERVO_STOP = 0x14
    GET_SERVO_POSITION = 0x15


class BusCommand(IntEnum):
    """Commands of the LewanSoul bus servo protocol."""

    MOVE_TIME_WRITE = 1
    MOVE_TIME_READ = 2
    MOVE_TIME_WAIT_WRITE = 7
    MOVE_TIME_WAIT_READ = 8
    MOVE_START = 11
    MOVE_STOP = 12
    ID_WRITE = 13
    ID_READ = 14
    ANGLE_OFFSET_ADJUST = 17
    ANGLE_OFFSET_WRITE = 18
    ANGLE_OFFSET_READ = 19
    ANGLE_LIMIT_WRITE = 20
    ANGLE_LIMIT_READ = 21
    VIN_LIMIT_WRITE = 22
    VIN_LIMIT_READ = 23
    TEMP_MAX_LIMIT_WRITE = 24
    TEMP_MAX_LIMIT_READ = 25
    TEMP_READ = 26
    VIN_READ = 27
    POS_READ = 28
    OR_MOTOR_MODE_WRITE = 29
    OR_MOTOR_MODE_READ = 30
    LOAD_OR_UNLOAD_WRITE = 31
    LOAD_OR_UNLOAD_READ = 32
    LED_CTRL_WRITE = 33
    LED_CTRL_READ = 34
    LED_ERROR_WRITE = 35
    LED_ERROR_READ = 36


class Alarm(IntEnum):
    """Conditions that make a bus servo flash its LED."""

    NO_ALARM = 0
    OVER_TEMPERATURE = 1
    OVER_VOLTAGE = 2
    OVER_TEMPERATURE_AND_OVER_VOLTAGE = 3
    LOCKED_ROTOR = 4
    OVER_TEMPERATURE_AND_STALLED = 5
    OVER_VOLTAGE_AND_STALLED = 6
    ALL = 7
