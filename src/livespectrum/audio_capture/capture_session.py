"""
Capture session that owns the live stream, the analyzer and the render loop.

Manages:
- Acquisition through a capture provider
- Ring buffer fed from the capture callback
- Spectral analyzer bound to the stream's sample rate
- Render loop scheduled on the frame clock
"""

import logging
import math
import threading
from typing import Callable, Optional

import numpy as np

from ..analysis import SpectralAnalyzer
from ..config import VisualizerConfig
from ..errors import AcquisitionDenied, CaptureError, NoAudioTrack, RuntimeFailure
from ..models import ActiveCapture, SessionState, SpectralFrame, StartResult
from ..render import FrameClock, RasterSurface, RenderLoop, bar_count
from .providers import CaptureProvider
from .ring_buffer import RingBuffer
from .stream import AudioStream

logger = logging.getLogger(__name__)

# Analysis windows kept in the ring buffer
BUFFER_WINDOWS = 8


class CaptureSession:
    """
    Owns one capture at a time and tears it down in a fixed order.

    Architecture:
    1. The provider grants a stream; its backend pushes blocks into a ring buffer
    2. The render loop pulls frames through latest_frame() once per refresh
    3. stop() cancels the loop first, then drops the analyzer and stops every track

    Errors never escape start(), stop() or latest_frame(); they are returned in
    the StartResult or kept in `failure`.
    """

    def __init__(
        self,
        provider: CaptureProvider,
        surface: RasterSurface,
        clock: FrameClock,
        config: Optional[VisualizerConfig] = None,
    ):
        """
        Initialize capture session.

        Args:
            provider: Source of audio streams (may be replaced while not active)
            surface: Where the bar chart is painted
            clock: Display refresh scheduler
            config: Analysis and display settings
        """
        self.provider = provider
        self.config = config or VisualizerConfig()

        self._surface = surface
        self._clock = clock

        # Resources of the active capture
        self._stream: Optional[AudioStream] = None
        self._buffer: Optional[RingBuffer] = None
        self._analyzer: Optional[SpectralAnalyzer] = None
        self._loop: Optional[RenderLoop] = None

        # State
        self._state = SessionState.IDLE
        self._failure: Optional[CaptureError] = None
        self._lock = threading.RLock()

        # Callbacks
        self._on_state_changed: Optional[Callable[[SessionState], None]] = None

    def set_callbacks(
        self,
        on_state_changed: Optional[Callable[[SessionState], None]] = None,
    ):
        """Set callback functions."""
        self._on_state_changed = on_state_changed

    def _set_state(self, state: SessionState):
        """Update state and notify."""
        if state is self._state:
            return
        logger.debug("Session state: %s -> %s", self._state.value, state.value)
        self._state = state
        if self._on_state_changed:
            self._on_state_changed(state)

    def _on_samples(self, audio: np.ndarray):
        """Called for each audio block from the capture backend."""
        buffer = self._buffer
        if buffer is None:
            return

        if audio.ndim == 2:
            audio = np.mean(audio, axis=1)

        buffer.write(audio)

    def start(self) -> StartResult:
        """
        Acquire a stream and start rendering.

        Any previous capture (active or failed) is released first.

        Returns:
            StartResult with the capture description or the error
        """
        with self._lock:
            if self._state is not SessionState.IDLE:
                logger.info("Releasing previous capture before restart")
                self.stop()

            self._failure = None

            try:
                stream = self.provider.request_stream(audio=True, video=True)
            except AcquisitionDenied as e:
                return self._start_failed(e)
            except Exception as e:
                logger.exception("Capture provider failed")
                return self._start_failed(AcquisitionDenied(str(e)))

            self._stream = stream

            if not stream.audio_tracks:
                logger.warning(
                    "Granted stream has no audio track (%d video)", len(stream.video_tracks)
                )
                return self._start_failed(NoAudioTrack())

            rate = stream.sample_rate
            if not math.isfinite(rate) or rate <= 0:
                return self._start_failed(
                    RuntimeFailure("The audio stream did not report a sample rate")
                )

            # Only the audio is used
            for track in stream.video_tracks:
                track.stop()

            try:
                ready = ActiveCapture(
                    sample_rate=rate,
                    channels=max(1, stream.channels),
                    bin_count=self.config.bin_count,
                    bar_count=bar_count(
                        self.config.bin_count, rate, self.config.max_display_frequency_hz
                    ),
                    tracks=[t.label for t in stream.audio_tracks],
                )
                self._buffer = RingBuffer(
                    capacity=self.config.transform_size * BUFFER_WINDOWS,
                    sample_rate=rate,
                )
                self._analyzer = SpectralAnalyzer(self.config, rate, self._buffer)
                stream.connect(self._on_samples)
                self._loop = RenderLoop(self.latest_frame, self._surface, self._clock, self.config)
            except Exception as e:
                logger.exception("Could not set up the capture")
                return self._start_failed(RuntimeFailure(f"Could not set up the capture: {e}"))

            self._set_state(SessionState.ACTIVE)
            self._loop.start()

            logger.info(
                "Capture started: %s at %.0f Hz, %d bars",
                ", ".join(ready.tracks), ready.sample_rate, ready.bar_count,
            )
            return StartResult(ready=ready)

    def _start_failed(self, error: CaptureError) -> StartResult:
        logger.warning("Capture start failed: %s", error)
        self._release()
        self._failure = error
        self._set_state(SessionState.FAILED)
        return StartResult(error=error)

    def stop(self):
        """
        Stop rendering and release every resource.

        Safe from any state and idempotent; always ends in IDLE.
        """
        with self._lock:
            was_active = self._state is SessionState.ACTIVE
            self._release()
            self._failure = None
            self._set_state(SessionState.IDLE)
            if was_active:
                logger.info("Capture stopped")

    def fail(self, error: CaptureError):
        """Force the session into FAILED, releasing resources."""
        with self._lock:
            if self._state is not SessionState.ACTIVE:
                return
            logger.error("Capture failed: %s", error)
            self._release()
            self._failure = error
            self._set_state(SessionState.FAILED)

    def _release(self):
        """Cancel the loop, then drop the analyzer, then stop the stream."""
        loop, self._loop = self._loop, None
        if loop is not None:
            loop.cancel()

        self._analyzer = None

        stream, self._stream = self._stream, None
        if stream is not None:
            stream.disconnect()
            stream.stop_all()

        buffer, self._buffer = self._buffer, None
        if buffer is not None:
            buffer.clear()

    def latest_frame(self) -> Optional[SpectralFrame]:
        """
        Pull the newest spectrum frame.

        Returns:
            The frame, or None when not active. A dead stream or a failing
            analysis moves the session to FAILED and also returns None.
        """
        analyzer = self._analyzer
        stream = self._stream
        if self._state is not SessionState.ACTIVE or analyzer is None or stream is None:
            return None

        if not stream.is_live:
            self.fail(RuntimeFailure())
            return None

        try:
            return analyzer.refresh()
        except Exception as e:
            logger.exception("Spectral analysis failed")
            self.fail(RuntimeFailure(f"Spectral analysis failed: {e}"))
            return None

    def get_available_seconds(self) -> float:
        """Get how much audio is buffered."""
        buffer = self._buffer
        return buffer.get_available_seconds() if buffer else 0.0

    @property
    def state(self) -> SessionState:
        """Get current state."""
        return self._state

    @property
    def failure(self) -> Optional[CaptureError]:
        """Cause of the last failure, if the session is FAILED."""
        return self._failure

    @property
    def is_active(self) -> bool:
        """Check if currently capturing."""
        return self._state is SessionState.ACTIVE

    @property
    def stream(self) -> Optional[AudioStream]:
        return self._stream

    @property
    def render_loop(self) -> Optional[RenderLoop]:
        return self._loop
