#!/usr/bin/env python3
# coding: utf-8

"""
Servo motors addressed in degrees instead of raw 0-1000 positions.
"""

from .errors import sentinel


class ServoMotor(object):
    """
    One servo of the xArm, positioned in degrees.

    Args:
        definition (ServoDefinition): Channel and angle interval of the servo.
        controller (Controller): Board facade used for the moves.

    Example:
        >>> wrist = ServoMotor(ServoDefinition(Servo.S4, -90, 90), controller)
        >>> wrist.set_position(45)
        >>> wrist.get_position()
        45.0
    """

    def __init__(self, definition, controller):
        self.definition = definition
        self.controller = controller

    @property
    def servo(self):
        return self.definition.servo

    def get_position(self):
        """Current angle in degrees. Raises ResponseError on a failed read."""
        return self.definition.to_angle(self.controller.get_position(self.servo))

    def try_get_position(self, default=None):
        return sentinel(self.get_position, default=default)

    def set_position(self, angle, duration=1000, wait=False):
        """Move to ``angle`` degrees, clamped to the definition's interval."""
        raw = self.definition.to_raw(angle)
        self.controller.set_position(self.servo, raw, duration, wait)
        return raw

    def stop(self):
        self.controller.stop_servo(self.servo)
