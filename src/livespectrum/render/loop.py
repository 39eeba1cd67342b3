"""
Frame-driven render loop for the spectrum bar chart.
"""

import logging
from typing import Callable, Hashable, Optional

from ..config import VisualizerConfig
from ..models import SpectralFrame
from .bars import BACKGROUND_COLOR, layout_bars
from .clock import FrameClock
from .surface import RasterSurface

logger = logging.getLogger(__name__)


class RenderLoop:
    """
    Pulls a spectrum frame and paints it once per display refresh.

    Runs one tick at a time on the frame clock and reschedules itself until
    cancelled. Cancellation takes effect immediately: once cancel() returns,
    no tick runs and nothing is painted, even if a refresh was already
    scheduled. A tick without a frame is a silent no-op.
    """

    def __init__(
        self,
        frame_source: Callable[[], Optional[SpectralFrame]],
        surface: RasterSurface,
        clock: FrameClock,
        config: VisualizerConfig,
    ):
        self._frame_source = frame_source
        self._surface = surface
        self._clock = clock
        self._config = config

        self._running = False
        self._handle: Optional[Hashable] = None

        self.ticks = 0
        self.frames_painted = 0

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self):
        """Schedule the first tick."""
        if self._running:
            return
        self._running = True
        self._schedule()

    def cancel(self):
        """Stop the loop (idempotent)."""
        self._running = False
        handle, self._handle = self._handle, None
        if handle is not None:
            self._clock.cancel_frame(handle)
            logger.debug("Render loop cancelled after %d frames", self.frames_painted)

    def tick(self):
        """Paint the latest frame and schedule the next tick."""
        # Drop the pending request so a manual tick never leaves two scheduled
        handle, self._handle = self._handle, None
        if handle is not None:
            self._clock.cancel_frame(handle)
        if not self._running:
            return

        self.ticks += 1
        frame = self._frame_source()

        # The frame source may have stopped us (e.g. the stream died)
        if not self._running:
            return

        if frame is not None:
            self.paint(frame)

        self._schedule()

    def paint(self, frame: SpectralFrame):
        """Draw one frame onto the surface."""
        surface = self._surface
        width = surface.width
        height = surface.height

        surface.clear(BACKGROUND_COLOR)
        for bar in layout_bars(frame, width, height, self._config.max_display_frequency_hz):
            surface.fill_rect(bar.x, bar.y, bar.width, bar.height, bar.color)
        surface.present()

        self.frames_painted += 1

    def _schedule(self):
        self._handle = self._clock.request_frame(self.tick)
