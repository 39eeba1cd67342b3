"""
Windowed magnitude spectrum with temporal smoothing.

Each refresh transforms the newest window of samples, maps magnitudes onto a
clamped decibel range normalized to 0-1, and blends the result with the
previous frame so the display decays smoothly instead of flickering.
"""

import logging
from typing import Optional, Protocol

import numpy as np
from scipy.signal import get_window

from ..config import VisualizerConfig
from ..models import SpectralFrame

logger = logging.getLogger(__name__)

# Keeps log10 finite for silent bins
_MAGNITUDE_FLOOR = 1e-12


class SampleSource(Protocol):
    """Anything that can hand out the newest N samples."""

    def read_last(self, n_samples: int) -> Optional[np.ndarray]: ...


class SpectralAnalyzer:
    """
    Fixed-size FFT analyzer with exponential smoothing.

    The smoothing makes it a stateful low-pass filter over magnitude history:
    output = s * previous + (1 - s) * current.
    """

    def __init__(
        self,
        config: VisualizerConfig,
        sample_rate: float,
        source: Optional[SampleSource] = None,
    ):
        """
        Args:
            config: Transform size, smoothing and level range
            sample_rate: Native rate of the analyzed stream
            source: Sample buffer read by refresh()
        """
        if not np.isfinite(sample_rate) or sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        self.config = config
        self.sample_rate = float(sample_rate)
        self.source = source

        self.transform_size = config.transform_size
        self.bin_count = config.bin_count

        # Blackman window, periodic form as used for spectral analysis
        self._window = get_window("blackman", self.transform_size).astype(np.float32)
        self._previous = np.zeros(self.bin_count, dtype=np.float32)

        self._db_floor = config.min_level_db
        self._db_range = config.max_level_db - config.min_level_db

        logger.debug(
            "SpectralAnalyzer initialized: size=%d, rate=%.0fHz, smoothing=%.2f",
            self.transform_size, self.sample_rate, config.smoothing_factor,
        )

    def refresh(self) -> SpectralFrame:
        """
        Analyze the most recent window from the sample source.

        Returns:
            The new smoothed frame, or a frame of zeros if fewer than
            transform_size samples have been captured
        """
        samples = None
        if self.source is not None:
            samples = self.source.read_last(self.transform_size)

        if samples is None or len(samples) < self.transform_size:
            return SpectralFrame.silent(self.bin_count, self.sample_rate)

        return self.process(samples)

    def process(self, samples: np.ndarray) -> SpectralFrame:
        """
        Analyze one window of samples and advance the smoothing state.

        Args:
            samples: At least transform_size mono samples; the newest are used
        """
        window = np.asarray(samples, dtype=np.float32)[-self.transform_size:]
        current = self.normalized_magnitudes(window)

        s = self.config.smoothing_factor
        smoothed = s * self._previous + (1.0 - s) * current
        self._previous = smoothed.astype(np.float32)

        return SpectralFrame(bins=self._previous, sample_rate=self.sample_rate)

    def normalized_magnitudes(self, window: np.ndarray) -> np.ndarray:
        """Unsmoothed magnitudes of one window, clamped and scaled to 0-1."""
        spectrum = np.fft.rfft(window * self._window)[:self.bin_count]
        magnitude = np.abs(spectrum) / self.transform_size

        db = 20.0 * np.log10(np.maximum(magnitude, _MAGNITUDE_FLOOR))
        db = np.clip(db, self.config.min_level_db, self.config.max_level_db)

        return ((db - self._db_floor) / self._db_range).astype(np.float32)

    @property
    def previous(self) -> np.ndarray:
        """Copy of the last smoothed magnitudes."""
        return self._previous.copy()
