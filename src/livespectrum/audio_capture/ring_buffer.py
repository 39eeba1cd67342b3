"""
Thread-safe ring buffer for captured audio.

The capture callback writes continuously while the analyzer reads the most
recent window. Reads copy, so the reader never holds the lock while working.
"""

import threading
from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class BufferStats:
    """Statistics about the ring buffer state."""
    total_samples: int
    available_samples: int
    buffer_size: int
    overruns: int  # Writes larger than the whole buffer
    underruns: int  # Reads requesting more than was available


class RingBuffer:
    """
    Single-writer / single-reader ring buffer of mono float32 samples.

    Features:
    - Handles wrap-around transparently
    - Tracks overruns/underruns
    - Reads the last N samples in chronological order
    """

    def __init__(self, capacity: int, sample_rate: float = 44100):
        """
        Initialize ring buffer.

        Args:
            capacity: Number of samples kept
            sample_rate: Rate of the samples, used for duration queries
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")

        self.sample_rate = sample_rate
        self.max_samples = int(capacity)

        self._buffer = np.zeros(self.max_samples, dtype=np.float32)

        self._write_pos = 0
        self._total_written = 0

        self._overruns = 0
        self._underruns = 0

        self._lock = threading.Lock()

    def write(self, samples: np.ndarray):
        """
        Write samples to the buffer.

        Args:
            samples: 1-D audio samples
        """
        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        n_samples = len(samples)

        if n_samples == 0:
            return

        with self._lock:
            if n_samples >= self.max_samples:
                # Only the newest samples fit
                self._overruns += 1
                self._buffer[:] = samples[-self.max_samples:]
                self._write_pos = 0
            elif self._write_pos + n_samples <= self.max_samples:
                self._buffer[self._write_pos:self._write_pos + n_samples] = samples
                self._write_pos = (self._write_pos + n_samples) % self.max_samples
            else:
                first_part = self.max_samples - self._write_pos
                self._buffer[self._write_pos:] = samples[:first_part]
                self._buffer[:n_samples - first_part] = samples[first_part:]
                self._write_pos = n_samples - first_part

            self._total_written += n_samples

    def read_last(self, n_samples: int) -> Optional[np.ndarray]:
        """
        Read the most recent samples.

        Args:
            n_samples: How many samples to read

        Returns:
            Copy of the last n_samples in chronological order, or None if
            fewer have been written so far
        """
        if n_samples <= 0 or n_samples > self.max_samples:
            raise ValueError(
                f"n_samples must be in 1..{self.max_samples}, got {n_samples}"
            )

        with self._lock:
            if min(self._total_written, self.max_samples) < n_samples:
                self._underruns += 1
                return None

            read_pos = (self._write_pos - n_samples) % self.max_samples

            if read_pos + n_samples <= self.max_samples:
                return self._buffer[read_pos:read_pos + n_samples].copy()

            return np.concatenate([
                self._buffer[read_pos:],
                self._buffer[:n_samples - (self.max_samples - read_pos)],
            ])

    @property
    def available_samples(self) -> int:
        """Number of samples that can currently be read."""
        with self._lock:
            return min(self._total_written, self.max_samples)

    def get_available_seconds(self) -> float:
        """Get how many seconds of audio are available."""
        return self.available_samples / self.sample_rate

    def get_stats(self) -> BufferStats:
        """Get buffer statistics."""
        with self._lock:
            return BufferStats(
                total_samples=self._total_written,
                available_samples=min(self._total_written, self.max_samples),
                buffer_size=self.max_samples,
                overruns=self._overruns,
                underruns=self._underruns,
            )

    def clear(self):
        """Clear the buffer."""
        with self._lock:
            self._buffer.fill(0)
            self._write_pos = 0
            self._total_written = 0
            self._overruns = 0
            self._underruns = 0
