"""
Stream and track handles for captured media.

A stream groups the tracks granted by a capture provider. Audio blocks reach
the single connected sink only while at least one audio track is live.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Iterable, List, Optional

import numpy as np

logger = logging.getLogger(__name__)


class TrackKind(Enum):
    """Kind of media carried by a track."""
    AUDIO = "audio"
    VIDEO = "video"


class MediaTrack:
    """
    One track of a captured stream.

    A track is "live" until it is stopped or its source runs dry. Stopping
    releases the backend resource exactly once, even if the source already
    ended on its own.
    """

    def __init__(
        self,
        kind: TrackKind,
        label: str = "",
        on_stop: Optional[Callable[[], None]] = None,
    ):
        self.kind = kind
        self.label = label or kind.value
        self.on_stop = on_stop
        self._ended = False
        self._stopped = False
        self._lock = threading.Lock()

    @property
    def ready_state(self) -> str:
        return "ended" if self._ended else "live"

    @property
    def is_live(self) -> bool:
        return not self._ended

    @property
    def stopped(self) -> bool:
        """True once stop() released the backend resource."""
        return self._stopped

    def mark_ended(self):
        """Called by the backend when the source stops producing data."""
        if not self._ended:
            logger.debug("Track %r ended by its source", self.label)
        self._ended = True

    def stop(self):
        """Stop the track and release its backend resource (idempotent)."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._ended = True

        logger.debug("Stopping %s track %r", self.kind.value, self.label)
        self._release()

    def _release(self):
        if self.on_stop:
            self.on_stop()

    def __repr__(self):
        return f"MediaTrack({self.kind.value}, {self.label!r}, {self.ready_state})"


class AudioStream:
    """
    Handle to a live multichannel signal at a fixed sample rate.

    Owned by one capture session; invalid after stop_all().
    """

    def __init__(
        self,
        tracks: Iterable[MediaTrack],
        sample_rate: float,
        channels: int = 1,
    ):
        self.tracks: List[MediaTrack] = list(tracks)
        self.sample_rate = float(sample_rate) if sample_rate else 0.0
        self.channels = channels
        self._sink: Optional[Callable[[np.ndarray], None]] = None

    @property
    def audio_tracks(self) -> List[MediaTrack]:
        return [t for t in self.tracks if t.kind is TrackKind.AUDIO]

    @property
    def video_tracks(self) -> List[MediaTrack]:
        return [t for t in self.tracks if t.kind is TrackKind.VIDEO]

    @property
    def is_live(self) -> bool:
        """True while any audio track is still producing data."""
        return any(t.is_live for t in self.audio_tracks)

    def connect(self, sink: Callable[[np.ndarray], None]):
        """Route audio blocks to sink (replaces any previous sink)."""
        self._sink = sink

    def disconnect(self):
        self._sink = None

    def push(self, samples: np.ndarray):
        """Deliver a block of samples from a backend to the connected sink."""
        sink = self._sink
        if sink is not None and self.is_live:
            sink(samples)

    def stop_all(self):
        """Stop every track. Never raises; a failing track does not stop the rest."""
        self._sink = None
        for track in self.tracks:
            try:
                track.stop()
            except Exception as e:
                logger.warning("Error stopping track %r: %s", track.label, e)
