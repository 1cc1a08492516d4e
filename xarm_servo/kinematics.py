#!/usr/bin/env python3
# coding: utf-8

"""
Forward-kinematics helpers for positioning the xArm by height and bearing.

The arm is modelled as a planar linkage of four segments. Its tool height
for a joint angle ``alpha`` in [0, pi/2] is::

    z(alpha) = L4 + L3*sin(alpha) - L2*cos(2*alpha) - L1*sin(3*alpha)

:class:`ArmModel` samples this function once into a 128 entry height table.
A target height is inverted by scanning the table for the first sample at or
above it, which does not rely on the table being monotonic.
"""

import math
from dataclasses import dataclass, field
from typing import Tuple

from .commands import Servo
from .errors import ParameterOutOfRange
from .mapping import clamp

TABLE_SIZE = 128
QUARTER_TURN = math.pi / 2

# Joint raw positions at alpha = 0 and alpha = pi/2.
ALPHA_RAW_AT_ZERO = 900
ALPHA_RAW_SPAN = 400


def sample_angle(index):
    """Joint angle in radians of height table entry ``index``."""
    return index / TABLE_SIZE * QUARTER_TURN


@dataclass(frozen=True)
class ArmModel:
    """
    Segment lengths of the arm, all in the same unit.

    Attributes:
        l1: Clamp to first servo.
        l2: First servo to second servo.
        l3: Second servo to third servo.
        l4: Third servo to the base.
        heights: The height table, computed once at construction.
    """

    l1: float
    l2: float
    l3: float
    l4: float
    heights: Tuple[float, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for name in ("l1", "l2", "l3", "l4"):
            value = getattr(self, name)
            if value < 0:
                raise ParameterOutOfRange(name, value, minimum=0,
                                          message=f"{name} must be non-negative, got {value}")
        object.__setattr__(self, "heights", tuple(
            self.height_at(sample_angle(i)) for i in range(TABLE_SIZE)
        ))

    def height_at(self, alpha):
        return (
            self.l4
            + self.l3 * math.sin(alpha)
            - self.l2 * math.cos(2 * alpha)
            - self.l1 * math.sin(3 * alpha)
        )

    def height_index(self, z):
        """First table index whose height is >= ``z``, or the last index."""
        for index, height in enumerate(self.heights):
            if z <= height:
                return index
        return TABLE_SIZE - 1

    def alpha_for_height(self, z):
        return sample_angle(self.height_index(z))


def alpha_to_raw(alpha):
    """
    Joint angle in [0, pi/2] to raw position, 900 down to 500.

    Half steps round to even, e.g. ``sample_angle(4)`` gives 888.
    """
    return round(ALPHA_RAW_AT_ZERO - (alpha / QUARTER_TURN) * ALPHA_RAW_SPAN)


def bearing(x, y):
    """
    Horizontal angle of (x, y) in radians.

    Divides by whichever of x and y is larger in magnitude. This is not
    atan2: points with negative x land in the opposite quadrant.
    """
    if x == 0 and y == 0:
        return 0.0
    if abs(x) >= abs(y):
        return math.atan(y / x)
    return QUARTER_TURN - math.atan(x / y)


def bearing_to_raw(teta):
    """Base rotation raw position for a bearing clamped to [-pi/2, pi/2]."""
    teta = clamp(teta, -QUARTER_TURN, QUARTER_TURN)
    return int((teta + QUARTER_TURN) / (2 * math.pi) * 800 + 100)


@dataclass
class Position:
    x: float
    y: float
    z: float


class PositionMove(object):
    """
    Moves the arm so that its tool reaches a height and bearing.

    Args:
        arm_model (ArmModel): Geometry of the arm.
        controller (Controller): Facade used to send the positions.
        joints (tuple, optional): Servos driven by :meth:`move_to`. The last
            one rotates the base, the others follow the joint angle.
    """

    def __init__(self, arm_model, controller, joints=(Servo.S3, Servo.S4, Servo.S5, Servo.S6)):
        if len(joints) not in (3, 4):
            raise ValueError(f"joints must name 3 or 4 servos, got {len(joints)}")
        self.arm_model = arm_model
        self.controller = controller
        self.joints = tuple(joints)

    def raw_positions(self, position):
        alpha_raw = alpha_to_raw(self.arm_model.alpha_for_height(position.z))
        teta_raw = bearing_to_raw(bearing(position.x, position.y))
        # FIXME: with three joints nothing compensates the elbow, confirm which
        # servo the reduced layout should drop before relying on it.
        if len(self.joints) == 4:
            return [1000 - alpha_raw, alpha_raw, alpha_raw, teta_raw]
        return [alpha_raw, alpha_raw, teta_raw]

    def move_to(self, position, duration=1000, wait=False):
        positions = self.raw_positions(position)
        self.controller.set_positions(self.joints, positions, duration, wait=wait)
        return positions
