#!/usr/bin/env python3
# coding: utf-8

"""
Exception types raised by the xArm protocol layers.

Every failure surfaces as a typed exception. Callers that prefer the
"-1 on a missed read" convention of the board firmware can opt into it
explicitly with :func:`sentinel` or the ``try_*`` accessors of the
controller facades.
"""


class XArmError(Exception):
    """Base class for all errors raised by this library."""


class ParameterOutOfRange(XArmError, ValueError):
    """
    A caller supplied value is outside the range accepted by the device.

    Raised before any byte is written to the transport.

    Attributes:
        argument (str): Name of the offending argument.
        value: The rejected value.
        minimum: Lowest accepted value, or None when the bound is relative.
        maximum: Highest accepted value, or None when the bound is relative.
    """

    def __init__(self, argument, value, minimum=None, maximum=None, message=None):
        self.argument = argument
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        if message is None:
            message = f"{argument} must be between {minimum} and {maximum}, got {value}"
        super().__init__(message)


class TransportError(XArmError, IOError):
    """Opening, writing to or reading from the transport failed."""


class ResponseError(XArmError):
    """The device did not answer with a usable response."""


class NoResponse(ResponseError):
    """Nothing was received before the read timeout expired."""


class ProtocolMismatch(ResponseError):
    """A response was received but failed structural validation."""


class InvalidSignature(ProtocolMismatch):
    pass


class InvalidServoId(ProtocolMismatch):
    pass


class InvalidLength(ProtocolMismatch):
    pass


class InvalidCommand(ProtocolMismatch):
    pass


class ChecksumMismatch(ProtocolMismatch):
    pass


def check_range(argument, value, minimum, maximum):
    """Raise ParameterOutOfRange unless minimum <= value <= maximum."""
    if value < minimum or value > maximum:
        raise ParameterOutOfRange(argument, value, minimum, maximum)
    return value


def sentinel(func, *args, default=-1, **kwargs):
    """
    Call ``func`` and return ``default`` if the device response was unusable.

    Only :class:`ResponseError` is converted. Parameter and transport errors
    still propagate.

    Example:
        >>> position = sentinel(controller.get_position, Servo.S3)
    """
    try:
        return func(*args, **kwargs)
    except ResponseError:
        return default
