"""
Shared fixtures: recording surface, manual clock, fake providers, test signals.
"""

import numpy as np
import pytest

from livespectrum.audio_capture import CaptureSession, GrantedCaptureProvider
from livespectrum.config import VisualizerConfig
from livespectrum.render import ManualFrameClock


class RecordingSurface:
    """Raster surface that records every draw call."""

    def __init__(self, width: int = 860, height: int = 320):
        self.width = width
        self.height = height
        self.calls = []
        self.frames = 0

    def clear(self, color):
        self.calls.append(("clear", color))

    def fill_rect(self, x, y, w, h, color):
        self.calls.append(("fill_rect", x, y, w, h, color))

    def present(self):
        self.calls.append(("present",))
        self.frames += 1

    @property
    def paint_calls(self) -> int:
        return len(self.calls)

    def rects(self):
        return [c for c in self.calls if c[0] == "fill_rect"]


def sine(frequency: float, sample_rate: float, n_samples: int, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(n_samples) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


@pytest.fixture
def config():
    return VisualizerConfig()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def clock():
    return ManualFrameClock()


@pytest.fixture
def provider():
    """Grants one video and one audio track at 48 kHz."""
    return GrantedCaptureProvider(audio_tracks=1, video_tracks=1, sample_rate=48000)


@pytest.fixture
def session(provider, surface, clock, config):
    session = CaptureSession(provider, surface, clock, config)
    yield session
    session.stop()


@pytest.fixture
def make_sine():
    """Factory for float32 sine test signals."""
    return sine
