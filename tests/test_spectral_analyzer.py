"""
Tests for the spectral analyzer.
"""

import numpy as np
import pytest

from livespectrum.analysis import SpectralAnalyzer
from livespectrum.audio_capture import RingBuffer
from livespectrum.config import VisualizerConfig


SAMPLE_RATE = 48000


class TestSpectralAnalyzer:
    """Test cases for SpectralAnalyzer."""

    @pytest.fixture
    def unsmoothed(self):
        """Analyzer with smoothing disabled."""
        return SpectralAnalyzer(VisualizerConfig(smoothing_factor=0), SAMPLE_RATE)

    @pytest.fixture
    def buffer(self, config):
        return RingBuffer(capacity=config.transform_size * 4, sample_rate=SAMPLE_RATE)

    def test_zero_frame_before_enough_samples(self, config, buffer):
        """Test that refresh returns zeros until a full window is buffered."""
        analyzer = SpectralAnalyzer(config, SAMPLE_RATE, buffer)
        buffer.write(np.ones(100, dtype=np.float32))

        frame = analyzer.refresh()

        assert frame.bin_count == 1024
        assert frame.sample_rate == SAMPLE_RATE
        assert not frame.bins.any()

    def test_zero_frame_without_source(self, config):
        """Test that an analyzer without a source yields zeros."""
        frame = SpectralAnalyzer(config, SAMPLE_RATE).refresh()

        assert frame.bin_count == config.bin_count
        assert not frame.bins.any()

    @pytest.mark.parametrize("size", [256, 1024, 2048, 4096])
    def test_bin_count_is_half_transform_size(self, size, make_sine):
        """Test that every frame has transform_size / 2 bins."""
        config = VisualizerConfig(transform_size=size)
        buffer = RingBuffer(capacity=size * 2, sample_rate=SAMPLE_RATE)
        analyzer = SpectralAnalyzer(config, SAMPLE_RATE, buffer)

        counts = set()
        for i in range(5):
            buffer.write(make_sine(440 * (i + 1), SAMPLE_RATE, size // 2))
            counts.add(analyzer.refresh().bin_count)

        assert counts == {size // 2}

    def test_silence_maps_to_floor(self, unsmoothed):
        """Test that silence is clamped to the dB floor (0.0)."""
        frame = unsmoothed.process(np.zeros(2048, dtype=np.float32))

        assert not frame.bins.any()

    def test_peak_at_sine_frequency(self, unsmoothed, make_sine):
        """Test that a sine shows its peak in the matching bin."""
        # Bin 64 sits exactly at 64 * 48000 / 2048 = 1500 Hz
        frame = unsmoothed.process(make_sine(1500, SAMPLE_RATE, 2048))

        assert int(np.argmax(frame.bins)) == 64
        assert frame.bins[64] > 0.5

    def test_output_is_clamped_to_unit_range(self, unsmoothed, make_sine):
        """Test that a very loud signal saturates at 1.0 and nothing goes negative."""
        frame = unsmoothed.process(make_sine(1500, SAMPLE_RATE, 2048, amplitude=10.0))

        assert frame.bins.max() == pytest.approx(1.0)
        assert frame.bins.min() >= 0.0

    def test_first_frame_is_blended_with_zero_history(self, config, make_sine):
        """Test the smoothing formula on the first refresh."""
        analyzer = SpectralAnalyzer(config, SAMPLE_RATE)
        window = make_sine(1500, SAMPLE_RATE, 2048)
        current = analyzer.normalized_magnitudes(window)

        frame = analyzer.process(window)

        np.testing.assert_allclose(frame.bins, 0.3 * current, atol=1e-6)

    def test_smoothing_converges_monotonically(self, config, make_sine):
        """Test that constant input drives the output toward the unsmoothed value."""
        analyzer = SpectralAnalyzer(config, SAMPLE_RATE)
        window = make_sine(1500, SAMPLE_RATE, 2048) + make_sine(6000, SAMPLE_RATE, 2048, 0.1)
        current = analyzer.normalized_magnitudes(window)

        previous_error = np.abs(analyzer.previous - current)
        for _ in range(60):
            frame = analyzer.process(window)
            error = np.abs(frame.bins - current)
            assert np.all(error <= previous_error + 1e-6)
            previous_error = error

        assert previous_error.max() < 1e-4

    def test_deterministic(self, config, make_sine):
        """Test that identical inputs and history give identical frames."""
        windows = [make_sine(f, SAMPLE_RATE, 2048) for f in (300, 1500, 9000)]
        a = SpectralAnalyzer(config, SAMPLE_RATE)
        b = SpectralAnalyzer(config, SAMPLE_RATE)

        for window in windows:
            frame_a = a.process(window)
            frame_b = b.process(window)

        np.testing.assert_array_equal(frame_a.bins, frame_b.bins)

    def test_frames_are_snapshots(self, config, make_sine):
        """Test that a frame is read-only and not changed by later refreshes."""
        analyzer = SpectralAnalyzer(config, SAMPLE_RATE)
        first = analyzer.process(make_sine(1500, SAMPLE_RATE, 2048))
        snapshot = first.bins.copy()

        analyzer.process(make_sine(9000, SAMPLE_RATE, 2048))

        np.testing.assert_array_equal(first.bins, snapshot)
        with pytest.raises(ValueError):
            first.bins[0] = 1.0

    def test_refresh_uses_most_recent_window(self, buffer, make_sine):
        """Test that refresh analyzes the newest samples in the buffer."""
        analyzer = SpectralAnalyzer(VisualizerConfig(smoothing_factor=0), SAMPLE_RATE, buffer)
        buffer.write(make_sine(1500, SAMPLE_RATE, 2048))
        buffer.write(make_sine(3000, SAMPLE_RATE, 2048))

        frame = analyzer.refresh()

        assert int(np.argmax(frame.bins)) == 128

    @pytest.mark.parametrize("rate", [0, -1, float("nan"), float("inf")])
    def test_rejects_invalid_sample_rate(self, config, rate):
        """Test that a missing sample rate is an error, not a silent default."""
        with pytest.raises(ValueError):
            SpectralAnalyzer(config, rate)
