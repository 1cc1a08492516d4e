#!/usr/bin/env python3
# coding: utf-8

"""
Conversion between servo angles in degrees and raw 0-1000 positions.

The mapping is affine over the angle interval of a :class:`ServoDefinition`.
Angles outside the interval are clamped, and so are raw values outside
0-1000. Converting an angle to raw and back loses at most one raw step,
i.e. ``(max_angle - min_angle) / 1000`` degrees.
"""

from dataclasses import dataclass

from .commands import MAX_POSITION, MIN_POSITION
from .errors import ParameterOutOfRange


def clamp(value, low, high):
    return max(low, min(high, value))


def angle_to_raw(angle, min_angle, max_angle):
    """
    Map ``angle`` in [min_angle, max_angle] degrees to a 0-1000 position.

    Uses ``round()``, so exact half steps go to the even raw value.
    """
    angle = clamp(angle, min_angle, max_angle)
    span = MAX_POSITION - MIN_POSITION
    return MIN_POSITION + round(span * (angle - min_angle) / (max_angle - min_angle))


def raw_to_angle(raw, min_angle, max_angle):
    """Map a 0-1000 position back to degrees in [min_angle, max_angle]."""
    raw = clamp(raw, MIN_POSITION, MAX_POSITION)
    span = MAX_POSITION - MIN_POSITION
    return (raw - MIN_POSITION) / span * (max_angle - min_angle) + min_angle


@dataclass(frozen=True)
class ServoDefinition:
    """
    A servo channel and the angle interval its 0-1000 range covers.

    Example:
        >>> gripper = ServoDefinition(Servo.S1, -90, 90)
        >>> gripper.to_raw(0)
        500
    """

    servo: int
    min_angle: float
    max_angle: float

    def __post_init__(self):
        if not self.min_angle < self.max_angle:
            raise ParameterOutOfRange(
                "min_angle",
                self.min_angle,
                maximum=self.max_angle,
                message=f"min_angle ({self.min_angle}) must be less than max_angle ({self.max_angle})",
            )

    def to_raw(self, angle):
        return angle_to_raw(angle, self.min_angle, self.max_angle)

    def to_angle(self, raw):
        return raw_to_angle(raw, self.min_angle, self.max_angle)
