"""Shared fixtures: an in-memory transport standing in for the hardware."""
import pytest

from xarm_servo.errors import TransportError
from xarm_servo.transport import Transport


class FakeTransport(Transport):
    """Records every write and replays queued responses, b"" once drained."""

    def __init__(self, responses=()):
        self.responses = list(responses)
        self.written = []
        self.read_sizes = []
        self.open_count = 0
        self.close_count = 0
        self._open = False

    @property
    def is_open(self):
        return self._open

    def open(self):
        if not self._open:
            self._open = True
            self.open_count += 1

    def close(self):
        if self._open:
            self._open = False
            self.close_count += 1

    def write(self, data):
        if not self._open:
            raise TransportError("fake transport is not open")
        self.written.append(bytes(data))

    def read(self, size):
        if not self._open:
            raise TransportError("fake transport is not open")
        self.read_sizes.append(size)
        if not self.responses:
            return b""
        return bytes(self.responses.pop(0))[:size]

    def queue(self, *responses):
        self.responses.extend(responses)


@pytest.fixture
def transport():
    fake = FakeTransport()
    fake.open()
    return fake
