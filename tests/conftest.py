from pathlib import Path

import numpy as np
import pytest

from ascii_camera.config import AppConfig, AppContext
from ascii_camera.controller import CommandController
from ascii_camera.glyphs import GlyphMapper


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeCapture:
    """Capture source returning queued frames, then repeating the last one."""

    def __init__(self, frames=None, opens=True):
        self.frames = list(frames) if frames is not None else [bgr_frame()]
        self.opens = opens
        self.grabs = 0
        self.closed = 0
        self.opened_with = None

    def open(self, device_index, width, height, fps):
        self.opened_with = (device_index, width, height, fps)
        return self.opens

    def grab(self):
        self.grabs += 1
        if len(self.frames) > 1:
            return self.frames.pop(0)
        return self.frames[0]

    def close(self):
        self.closed += 1


class RecordingDisplay:
    def __init__(self):
        self.calls = []

    def clear(self):
        self.calls.append(("clear", None))

    def write(self, text):
        self.calls.append(("write", text))

    def write_status_line(self, text):
        self.calls.append(("status", text))

    def restore_baseline(self):
        self.calls.append(("restore", None))

    def named(self, name):
        return [arg for call, arg in self.calls if call == name]


class RecordingSaver:
    def __init__(self, result=True):
        self.result = result
        self.saved = []
        self.last_path = Path("ascii_art_test.txt")

    def save(self, text_block, metadata):
        self.saved.append((text_block, metadata))
        return self.result


def bgr_frame(width=640, height=480, value=(100, 100, 100)):
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :] = value
    return frame


@pytest.fixture
def context():
    return AppContext(config=AppConfig(startup_delay=0.0))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mapper():
    return GlyphMapper()


@pytest.fixture
def controller(context, mapper, clock):
    return CommandController(context, mapper, clock=clock)
