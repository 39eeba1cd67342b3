"""
PySide6 UI components for the spectrum visualizer.
"""

from .frame_clock import QtFrameClock
from .main_window import MainWindow
from .spectrum_widget import QImageSurface, SpectrumWidget

__all__ = [
    "QtFrameClock",
    "MainWindow",
    "QImageSurface",
    "SpectrumWidget",
]
