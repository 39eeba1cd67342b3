"""
Raster surface boundary used by the render loop.
"""

import colorsys
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Color:
    """RGBA color with 0-255 channels and 0-1 alpha."""
    red: int
    green: int
    blue: int
    alpha: float = 1.0

    @classmethod
    def from_hsla(
        cls, hue: float, saturation: float, lightness: float, alpha: float = 1.0
    ) -> "Color":
        """
        Build a color from CSS-style HSLA.

        Args:
            hue: Degrees; wraps around modulo 360
            saturation: 0-1
            lightness: 0-1
            alpha: 0-1
        """
        r, g, b = colorsys.hls_to_rgb((hue % 360.0) / 360.0, lightness, saturation)
        return cls(round(r * 255), round(g * 255), round(b * 255), alpha)

    def to_tuple(self) -> tuple[int, int, int, float]:
        return (self.red, self.green, self.blue, self.alpha)


class RasterSurface(Protocol):
    """A 2D pixel surface of known size."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def clear(self, color: Color) -> None:
        """Fill the whole surface with color."""
        ...

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None:
        """Fill a rectangle; (x, y) is its top-left corner."""
        ...

    def present(self) -> None:
        """Show what was drawn since the last clear()."""
        ...
