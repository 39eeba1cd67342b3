"""
Audio file playback as a capture source.

Decodes WAV, FLAC, OGG, MP3 and other common formats (soundfile first, librosa
as fallback) and plays the samples into a stream at real-time pace.
"""

import logging
import threading
import time
from pathlib import Path

import librosa
import numpy as np
import soundfile as sf

from ..config import DEFAULT_BLOCK_SIZE
from ..errors import AcquisitionDenied
from .stream import AudioStream, MediaTrack, TrackKind

logger = logging.getLogger(__name__)


def load_audio(path: Path) -> tuple[np.ndarray, int]:
    """
    Decode an audio file.

    Returns:
        (samples, sample_rate) with samples shaped (frames, channels), float32
    """
    try:
        samples, sr = sf.read(path, dtype="float32", always_2d=True)
    except sf.LibsndfileError:
        # librosa handles MP3 and friends better on some systems
        samples, sr = librosa.load(path, sr=None, mono=False)
        samples = np.atleast_2d(samples).T.astype(np.float32)

    return samples, int(sr)


class FilePlaybackTrack(MediaTrack):
    """
    Audio track fed from decoded samples by a background thread.

    Blocks are pushed at the file's own sample rate so the display behaves as
    with a live device. The track ends when the samples run out unless looping.
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: int,
        block_size: int = DEFAULT_BLOCK_SIZE,
        loop: bool = False,
        label: str = "",
    ):
        super().__init__(TrackKind.AUDIO, label)
        self.samples = samples
        self.sample_rate = sample_rate
        self.block_size = block_size
        self.loop = loop

        self._stop_event = threading.Event()
        self._thread = None

    def begin(self, stream: AudioStream):
        """Start pushing blocks into stream."""
        self._thread = threading.Thread(
            target=self._run, args=(stream,), name=f"file-playback:{self.label}", daemon=True
        )
        self._thread.start()

    def _run(self, stream: AudioStream):
        block_duration = self.block_size / self.sample_rate
        pos = 0
        next_time = time.perf_counter()

        while not self._stop_event.is_set():
            block = self.samples[pos:pos + self.block_size]

            if len(block) == 0:
                if self.loop and len(self.samples) > 0:
                    pos = 0
                    continue
                self.mark_ended()
                return

            stream.push(block)
            pos += self.block_size

            next_time += block_duration
            self._stop_event.wait(max(0.0, next_time - time.perf_counter()))

    def _release(self):
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        self._thread = None


class FileCaptureProvider:
    """Grants a stream that plays an audio file."""

    SUPPORTED_EXTENSIONS = {".wav", ".mp3", ".flac", ".ogg", ".aiff", ".aif", ".m4a"}

    def __init__(self, path: str | Path, block_size: int = DEFAULT_BLOCK_SIZE, loop: bool = False):
        self.path = Path(path)
        self.block_size = block_size
        self.loop = loop

    def request_stream(self, audio: bool = True, video: bool = True) -> AudioStream:
        if not self.path.exists():
            raise AcquisitionDenied(f"Audio file not found: {self.path}")

        if not self.is_supported(self.path):
            raise AcquisitionDenied(
                f"Unsupported audio format: {self.path.suffix}. "
                f"Supported: {', '.join(sorted(self.SUPPORTED_EXTENSIONS))}"
            )

        try:
            samples, sr = load_audio(self.path)
        except Exception as e:
            raise AcquisitionDenied(f"Could not decode {self.path.name}: {e}") from e

        channels = samples.shape[1]
        logger.info(
            "Loaded %s: %.1fs, %d Hz, %d channel(s)",
            self.path.name, len(samples) / sr, sr, channels,
        )

        if not audio or channels == 0:
            return AudioStream([], sample_rate=sr, channels=channels)

        track = FilePlaybackTrack(
            samples, sr, block_size=self.block_size, loop=self.loop, label=self.path.name
        )
        stream = AudioStream([track], sample_rate=sr, channels=channels)
        track.begin(stream)
        return stream

    @classmethod
    def is_supported(cls, path: str | Path) -> bool:
        """Check whether the file extension is supported."""
        return Path(path).suffix.lower() in cls.SUPPORTED_EXTENSIONS
