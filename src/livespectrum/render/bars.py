"""
Mapping from spectrum bins to bar chart geometry.

Only the bins below the configured display frequency are drawn, stretched over
the full surface width. Bar color depends on position only, giving a fixed
left-to-right gradient as a frequency cue.
"""

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import List

from ..models import SpectralFrame
from .surface import Color

BACKGROUND_COLOR = Color(15, 15, 20)

HEADROOM = 0.9  # Peaks never reach the top edge
HUE_START = 200.0
HUE_SPAN = 280.0
BAR_SATURATION = 0.70
BAR_LIGHTNESS = 0.55
BAR_ALPHA = 0.85
BAR_GAP = 0.5


@dataclass(frozen=True)
class Bar:
    """Geometry and color of one bar."""
    x: float
    y: float
    width: float
    height: float
    color: Color


def bar_count(bin_count: int, sample_rate: float, max_display_frequency_hz: float) -> int:
    """
    Number of bins shown on the chart.

    Bins above max_display_frequency_hz are dropped; never more than bin_count.
    """
    nyquist = sample_rate / 2
    return min(bin_count, math.floor(max_display_frequency_hz / nyquist * bin_count))


def bar_hue(index: int, count: int) -> float:
    """Hue in degrees for bar index out of count (200 to 480, unwrapped)."""
    return (index / count) * HUE_SPAN + HUE_START


@lru_cache(maxsize=4096)
def bar_color(index: int, count: int) -> Color:
    return Color.from_hsla(bar_hue(index, count), BAR_SATURATION, BAR_LIGHTNESS, BAR_ALPHA)


def layout_bars(
    frame: SpectralFrame,
    surface_width: float,
    surface_height: float,
    max_display_frequency_hz: float,
) -> List[Bar]:
    """Compute the bars for one frame, anchored to the bottom of the surface."""
    count = bar_count(frame.bin_count, frame.sample_rate, max_display_frequency_hz)
    if count <= 0:
        return []

    slot_width = surface_width / count
    drawn_width = max(1.0, slot_width - BAR_GAP)

    bars = []
    for i in range(count):
        height = float(frame.bins[i]) * surface_height * HEADROOM
        bars.append(Bar(
            x=i * slot_width,
            y=surface_height - height,
            width=drawn_width,
            height=height,
            color=bar_color(i, count),
        ))
    return bars
