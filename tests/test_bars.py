"""
Tests for bin-to-bar mapping.
"""

import numpy as np
import pytest

from livespectrum.models import SpectralFrame
from livespectrum.render import Color, bar_color, bar_count, bar_hue, layout_bars


class TestBarCount:
    """Test cases for the displayed bar count."""

    def test_48khz_example(self):
        """Test 48 kHz, 16 kHz display limit and 1024 bins gives 682 bars."""
        assert bar_count(1024, 48000, 16000) == 682

    def test_44khz(self):
        """Test the common 44.1 kHz rate."""
        assert bar_count(1024, 44100, 16000) == 743

    def test_limit_above_nyquist_shows_all_bins(self):
        """Test that the count is capped at the bin count."""
        assert bar_count(1024, 16000, 16000) == 1024
        assert bar_count(1024, 22050, 16000) == 1024

    @pytest.mark.parametrize("sample_rate", [8000, 22050, 44100, 48000, 96000, 192000])
    def test_monotonic_and_bounded(self, sample_rate):
        """Test that more display range never means fewer bars, and never more than bins."""
        counts = [bar_count(1024, sample_rate, f) for f in range(100, 100_000, 250)]

        assert all(a <= b for a, b in zip(counts, counts[1:]))
        assert max(counts) <= 1024


class TestBarColor:
    """Test cases for the position-based gradient."""

    def test_hue_gradient(self):
        """Test the hue formula at the ends and middle."""
        assert bar_hue(0, 100) == 200
        assert bar_hue(50, 100) == 340
        assert bar_hue(100, 100) == 480

    def test_color_ignores_magnitude(self):
        """Test that bar color depends on position only."""
        quiet = SpectralFrame(bins=np.full(1024, 0.1), sample_rate=48000)
        loud = SpectralFrame(bins=np.full(1024, 0.9), sample_rate=48000)

        colors_quiet = [b.color for b in layout_bars(quiet, 860, 320, 16000)]
        colors_loud = [b.color for b in layout_bars(loud, 860, 320, 16000)]

        assert colors_quiet == colors_loud

    def test_hue_wraps_past_360(self):
        """Test that hues above 360 degrees wrap like CSS hsla()."""
        assert Color.from_hsla(480, 0.7, 0.55) == Color.from_hsla(120, 0.7, 0.55)

    def test_first_bar_color(self):
        """Test the first bar's color (hsla(200, 70%, 55%, 0.85))."""
        color = bar_color(0, 682)

        assert color.alpha == 0.85
        assert color.blue > color.green > color.red


class TestLayoutBars:
    """Test cases for bar geometry."""

    def test_geometry(self):
        """Test slot width, height with headroom and bottom anchoring."""
        bins = np.zeros(1024, dtype=np.float32)
        bins[0] = 1.0
        bins[1] = 0.5
        frame = SpectralFrame(bins=bins, sample_rate=48000)

        bars = layout_bars(frame, 682, 100, 16000)

        assert len(bars) == 682
        assert bars[0].x == 0
        assert bars[1].x == pytest.approx(1.0)
        assert bars[0].height == pytest.approx(90.0)
        assert bars[0].y == pytest.approx(10.0)
        assert bars[1].height == pytest.approx(45.0)
        assert bars[1].y == pytest.approx(55.0)
        assert bars[2].height == 0
        assert bars[2].y == 100

    def test_minimum_drawn_width(self):
        """Test that narrow slots are drawn at least one pixel wide."""
        frame = SpectralFrame(bins=np.ones(1024), sample_rate=48000)

        bars = layout_bars(frame, 300, 100, 16000)

        assert all(b.width == 1.0 for b in bars)

    def test_wide_slots_leave_a_gap(self):
        """Test that wide slots are drawn half a pixel narrower."""
        frame = SpectralFrame(bins=np.ones(8), sample_rate=48000)

        bars = layout_bars(frame, 80, 100, 24000)

        assert len(bars) == 8
        assert bars[0].width == pytest.approx(9.5)

    def test_empty_when_no_bins_in_range(self):
        """Test that a tiny display range yields no bars."""
        frame = SpectralFrame(bins=np.ones(1024), sample_rate=48000)

        assert layout_bars(frame, 860, 320, 1.0) == []
