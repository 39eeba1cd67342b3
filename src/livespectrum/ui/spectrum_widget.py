"""
Spectrum display widget backed by an off-screen raster image.
"""

from typing import Callable, Optional

from PySide6.QtCore import QRectF
from PySide6.QtGui import QColor, QImage, QPainter, QPaintEvent
from PySide6.QtWidgets import QSizePolicy, QWidget

from ..config import DEFAULT_SURFACE_HEIGHT, DEFAULT_SURFACE_WIDTH
from ..render import Color
from ..render.bars import BACKGROUND_COLOR


def to_qcolor(color: Color) -> QColor:
    return QColor(color.red, color.green, color.blue, round(color.alpha * 255))


class QImageSurface:
    """
    Raster surface drawing into a fixed-size QImage.

    A painter stays open from clear() until present(), so a frame of several
    hundred rectangles costs one QPainter.
    """

    def __init__(
        self,
        width: int = DEFAULT_SURFACE_WIDTH,
        height: int = DEFAULT_SURFACE_HEIGHT,
        on_present: Optional[Callable[[], None]] = None,
    ):
        self.image = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
        self.image.fill(to_qcolor(BACKGROUND_COLOR))
        self.on_present = on_present
        self._painter: Optional[QPainter] = None

    @property
    def width(self) -> int:
        return self.image.width()

    @property
    def height(self) -> int:
        return self.image.height()

    def _begin(self) -> QPainter:
        if self._painter is None:
            self._painter = QPainter(self.image)
        return self._painter

    def clear(self, color: Color) -> None:
        painter = self._begin()
        painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Source)
        painter.fillRect(self.image.rect(), to_qcolor(color))
        painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_SourceOver)

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None:
        self._begin().fillRect(QRectF(x, y, w, h), to_qcolor(color))

    def present(self) -> None:
        painter, self._painter = self._painter, None
        if painter is not None:
            painter.end()
        if self.on_present:
            self.on_present()


class SpectrumWidget(QWidget):
    """
    Widget that shows the spectrum surface scaled to its own size.

    The render loop paints into `surface`; the widget only blits the image.
    """

    def __init__(
        self,
        surface_width: int = DEFAULT_SURFACE_WIDTH,
        surface_height: int = DEFAULT_SURFACE_HEIGHT,
        parent=None,
    ):
        super().__init__(parent)

        self.setMinimumHeight(150)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        self.surface = QImageSurface(surface_width, surface_height, on_present=self.update)

    def clear_display(self):
        """Blank the chart."""
        self.surface.clear(BACKGROUND_COLOR)
        self.surface.present()

    def paintEvent(self, event: QPaintEvent):
        """Paint the latest surface image."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.drawImage(self.rect(), self.surface.image)
        painter.end()

    def sizeHint(self):
        return self.surface.image.size()

    def hasHeightForWidth(self) -> bool:
        return True

    def heightForWidth(self, width: int) -> int:
        return round(width * self.surface.height / self.surface.width)
