#!/usr/bin/env python3
# coding: utf-8

"""
Byte transports for the xArm controllers.

A transport is the only part of the library that touches hardware. It offers
``open()``, ``close()``, ``write(data)`` and ``read(size)``; ``read`` returns
the bytes received before the timeout, possibly none. Opening claims the
device exclusively and ``close()`` may be called any number of times.

Usage Example:
    >>> with SerialTransport("/dev/ttyUSB0") as port:
    ...     port.write(frame)
    ...     reply = port.read(8)
"""

import serial
import usb.core
import usb.util

from .commands import SLOT_FRAME_SIZE
from .errors import TransportError
from .log import get_logger

DEFAULT_BAUDRATE = 9600
DEFAULT_TIMEOUT = 1.0

VENDOR_ID = 0x0483
PRODUCT_ID = 0x5750
INTERFACE = 0
ENDPOINT_OUT = 0x01
ENDPOINT_IN = 0x81


class Transport(object):
    """Interface of a point-to-point byte transport."""

    def open(self):
        raise NotImplementedError

    def close(self):
        raise NotImplementedError

    def write(self, data):
        raise NotImplementedError

    def read(self, size):
        raise NotImplementedError

    @property
    def is_open(self):
        raise NotImplementedError

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class SerialTransport(Transport):
    """
    Serial line transport built on pyserial.

    Args:
        port (str): Serial port path, e.g. "/dev/ttyUSB0" or "COM3".
        baudrate (int, optional): Defaults to 9600, the rate of the xArm board.
        timeout (float, optional): Read timeout in seconds. Defaults to 1.0.
        debug (bool, optional): Log every byte exchanged.
    """

    def __init__(self, port, baudrate=DEFAULT_BAUDRATE, timeout=DEFAULT_TIMEOUT, debug=False):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.ser = None
        self.logger = get_logger(self, debug)

    @property
    def is_open(self):
        return self.ser is not None and self.ser.is_open

    def open(self):
        if self.is_open:
            return
        try:
            self.ser = serial.Serial(
                self.port,
                self.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.timeout,
            )
        except serial.SerialException as e:
            raise TransportError(f"cannot open {self.port}: {e}") from e
        self.logger.info("Serial %s opened, baudrate=%s", self.port, self.baudrate)

    def close(self):
        if self.ser is None:
            return
        try:
            if self.ser.is_open:
                self.ser.close()
                self.logger.info("Serial %s closed", self.port)
        finally:
            self.ser = None

    def write(self, data):
        if not self.is_open:
            raise TransportError(f"{self.port} is not open")
        try:
            self.ser.reset_input_buffer()
            self.ser.write(bytes(data))
            self.ser.flush()
        except serial.SerialException as e:
            raise TransportError(f"write to {self.port} failed: {e}") from e
        self.logger.debug("tx: %s", bytes(data).hex(" "))

    def read(self, size):
        if not self.is_open:
            raise TransportError(f"{self.port} is not open")
        try:
            data = self.ser.read(size)
        except serial.SerialException as e:
            raise TransportError(f"read from {self.port} failed: {e}") from e
        self.logger.debug("rx: %s", data.hex(" "))
        return data


def find_controllers(vendor_id=VENDOR_ID, product_id=PRODUCT_ID):
    """Return all connected USB devices that look like an xArm controller."""
    return list(usb.core.find(find_all=True, idVendor=vendor_id, idProduct=product_id))


class UsbTransport(Transport):
    """
    USB bulk transport built on pyusb.

    Every write is padded to one 64-byte report and every read returns at most
    one report.

    Args:
        device (usb.core.Device, optional): Device to use. Defaults to the
            first one returned by :func:`find_controllers`.
        timeout (float, optional): Read/write timeout in seconds.
        debug (bool, optional): Log every byte exchanged.
    """

    def __init__(self, device=None, timeout=DEFAULT_TIMEOUT, debug=False):
        self.device = device
        self.timeout = timeout
        self._claimed = False
        self._detached = False
        self.logger = get_logger(self, debug)

    @property
    def is_open(self):
        return self._claimed

    @property
    def _timeout_ms(self):
        return int(self.timeout * 1000)

    def open(self):
        if self._claimed:
            return
        if self.device is None:
            devices = find_controllers()
            if not devices:
                raise TransportError("No xArm controller found")
            self.device = devices[0]
        try:
            if self.device.is_kernel_driver_active(INTERFACE):
                self.device.detach_kernel_driver(INTERFACE)
                self._detached = True
        except NotImplementedError:
            # Windows backends have no kernel driver to detach.
            pass
        except usb.core.USBError as e:
            raise TransportError(f"cannot detach kernel driver: {e}") from e
        try:
            try:
                self.device.set_configuration()
                usb.util.claim_interface(self.device, INTERFACE)
            except usb.core.USBError as e:
                raise TransportError(f"cannot claim USB interface: {e}") from e
            self._claimed = True
            self.logger.info(
                "USB controller %04x:%04x opened",
                self.device.idVendor,
                self.device.idProduct,
            )
            # Drain the report left over from a previous session.
            self.read(SLOT_FRAME_SIZE)
        except BaseException:
            self._release()
            raise

    def _release(self):
        try:
            if self._claimed:
                usb.util.release_interface(self.device, INTERFACE)
            if self._detached:
                self.device.attach_kernel_driver(INTERFACE)
        except usb.core.USBError as e:
            self.logger.warning("USB release failed: %s", e)
        finally:
            usb.util.dispose_resources(self.device)
            self._claimed = False
            self._detached = False

    def close(self):
        if not (self._claimed or self._detached):
            return
        self._release()
        self.logger.info("USB controller closed")

    def write(self, data):
        if not self._claimed:
            raise TransportError("USB controller is not open")
        data = bytes(data)
        if len(data) > SLOT_FRAME_SIZE:
            raise TransportError(
                f"Data length cannot be more than {SLOT_FRAME_SIZE} bytes"
            )
        report = data.ljust(SLOT_FRAME_SIZE, b"\x00")
        try:
            self.device.write(ENDPOINT_OUT, report, self._timeout_ms)
        except usb.core.USBError as e:
            raise TransportError(f"USB write failed: {e}") from e
        self.logger.debug("tx: %s", data.hex(" "))

    def read(self, size):
        if not self._claimed:
            raise TransportError("USB controller is not open")
        try:
            report = bytes(self.device.read(ENDPOINT_IN, SLOT_FRAME_SIZE, self._timeout_ms))
        except usb.core.USBTimeoutError:
            return b""
        except usb.core.USBError as e:
            raise TransportError(f"USB read failed: {e}") from e
        self.logger.debug("rx: %s", report.hex(" "))
        return report[:size]
