"""
Rendering of spectrum frames onto a raster surface.
"""

from .bars import Bar, bar_color, bar_count, bar_hue, layout_bars
from .clock import FrameClock, ManualFrameClock
from .loop import RenderLoop
from .surface import Color, RasterSurface

__all__ = [
    "Bar",
    "bar_color",
    "bar_count",
    "bar_hue",
    "layout_bars",
    "FrameClock",
    "ManualFrameClock",
    "RenderLoop",
    "Color",
    "RasterSurface",
]
