"""
Capture providers: the boundary through which the environment grants audio.

The real providers live in system_audio (devices) and file_source (files).
The granted/denied providers are deterministic stand-ins for the consent
dialog, used by tests and headless runs.
"""

from typing import List, Protocol

import numpy as np

from ..errors import AcquisitionDenied
from .stream import AudioStream, MediaTrack, TrackKind


class CaptureProvider(Protocol):
    """Something that can be asked for an audio-bearing stream."""

    def request_stream(self, audio: bool = True, video: bool = True) -> AudioStream:
        """
        Request a stream from the environment.

        Raises:
            AcquisitionDenied: If the request is refused or cancelled
        """
        ...


class GrantedCaptureProvider:
    """
    Provider that always grants a stream with the given track layout.

    Every request builds fresh tracks; all issued streams are kept so callers
    can check that nothing was left live.
    """

    def __init__(
        self,
        audio_tracks: int = 1,
        video_tracks: int = 1,
        sample_rate: float = 48000,
        channels: int = 2,
    ):
        self.audio_track_count = audio_tracks
        self.video_track_count = video_tracks
        self.sample_rate = sample_rate
        self.channels = channels
        self.issued: List[AudioStream] = []

    def request_stream(self, audio: bool = True, video: bool = True) -> AudioStream:
        n = len(self.issued)
        tracks = []
        if video:
            tracks += [
                MediaTrack(TrackKind.VIDEO, f"screen-{n}-{i}")
                for i in range(self.video_track_count)
            ]
        if audio:
            tracks += [
                MediaTrack(TrackKind.AUDIO, f"audio-{n}-{i}")
                for i in range(self.audio_track_count)
            ]

        stream = AudioStream(tracks, sample_rate=self.sample_rate, channels=self.channels)
        self.issued.append(stream)
        return stream

    @property
    def latest(self) -> AudioStream:
        return self.issued[-1]

    @property
    def live_tracks(self) -> List[MediaTrack]:
        """Tracks from any issued stream that were never stopped."""
        return [t for s in self.issued for t in s.tracks if not t.stopped]

    def feed(self, samples: np.ndarray):
        """Push samples into the most recently issued stream."""
        if self.issued:
            self.issued[-1].push(samples)


class DeniedCaptureProvider:
    """Provider whose every request is refused."""

    def __init__(self, reason: str = "Permission denied"):
        self.reason = reason
        self.requests = 0

    def request_stream(self, audio: bool = True, video: bool = True) -> AudioStream:
        self.requests += 1
        raise AcquisitionDenied(self.reason)
