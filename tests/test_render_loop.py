"""
Tests for the frame-driven render loop and the manual frame clock.
"""

import numpy as np
import pytest

from livespectrum.models import SpectralFrame
from livespectrum.render import RenderLoop
from livespectrum.render.bars import BACKGROUND_COLOR


class TestManualFrameClock:
    """Test cases for ManualFrameClock."""

    def test_runs_callback_once(self, clock):
        """Test that a requested callback runs on the next step only."""
        calls = []
        clock.request_frame(lambda: calls.append(1))

        clock.advance()
        clock.advance()

        assert calls == [1]
        assert clock.pending == 0

    def test_cancel(self, clock):
        """Test that a cancelled callback never runs."""
        calls = []
        handle = clock.request_frame(lambda: calls.append(1))
        clock.cancel_frame(handle)

        assert clock.advance() == 0
        assert calls == []

    def test_requests_during_step_wait_for_next_step(self, clock):
        """Test that a callback scheduled from a callback is deferred."""
        calls = []

        def reschedule():
            calls.append(len(calls))
            clock.request_frame(reschedule)

        clock.request_frame(reschedule)
        clock.advance(3)

        assert calls == [0, 1, 2]
        assert clock.pending == 1


class TestRenderLoop:
    """Test cases for RenderLoop."""

    @pytest.fixture
    def frame(self):
        bins = np.linspace(0, 1, 1024, dtype=np.float32)
        return SpectralFrame(bins=bins, sample_rate=48000)

    @pytest.fixture
    def make_loop(self, surface, clock, config):
        def factory(source):
            return RenderLoop(source, surface, clock, config)
        return factory

    def test_paints_one_frame_per_tick(self, make_loop, surface, clock, frame):
        """Test that each refresh paints the background and every bar."""
        loop = make_loop(lambda: frame)
        loop.start()

        clock.advance(3)

        assert loop.ticks == 3
        assert loop.frames_painted == 3
        assert surface.frames == 3
        assert surface.calls[0] == ("clear", BACKGROUND_COLOR)
        assert len(surface.rects()) == 3 * 682

    def test_bars_fill_surface_width(self, make_loop, surface, clock, frame):
        """Test that the displayed bars span the whole surface."""
        loop = make_loop(lambda: frame)
        loop.start()
        clock.advance()

        rects = surface.rects()
        slot = surface.width / 682
        assert rects[0][1] == 0
        assert rects[-1][1] == pytest.approx(surface.width - slot)

    def test_no_frame_is_a_noop(self, make_loop, surface, clock):
        """Test that a tick without a frame paints nothing but keeps running."""
        loop = make_loop(lambda: None)
        loop.start()

        clock.advance(5)

        assert loop.ticks == 5
        assert surface.paint_calls == 0
        assert loop.is_running
        assert clock.pending == 1

    def test_cancel_stops_scheduled_tick(self, make_loop, surface, clock, frame):
        """Test that cancelling removes the pending refresh and blocks painting."""
        loop = make_loop(lambda: frame)
        loop.start()
        clock.advance()
        painted = surface.paint_calls

        loop.cancel()
        clock.advance(5)

        assert surface.paint_calls == painted
        assert clock.pending == 0
        assert not loop.is_running

    def test_cancel_during_frame_pull_prevents_paint(self, surface, clock, config, frame):
        """Test that a source which stops the loop gets nothing painted."""
        holder = {}

        def source():
            holder["loop"].cancel()
            return frame

        loop = RenderLoop(source, surface, clock, config)
        holder["loop"] = loop
        loop.start()

        clock.advance(3)

        assert loop.ticks == 1
        assert surface.paint_calls == 0
        assert clock.pending == 0

    def test_tick_after_cancel_does_nothing(self, make_loop, surface, clock, frame):
        """Test that a stale tick call is ignored."""
        loop = make_loop(lambda: frame)
        loop.start()
        loop.cancel()

        loop.tick()

        assert loop.ticks == 0
        assert surface.paint_calls == 0
        assert clock.pending == 0

    def test_manual_tick_keeps_single_schedule(self, make_loop, clock, frame):
        """Test that ticking by hand never leaves two refreshes queued."""
        loop = make_loop(lambda: frame)
        loop.start()

        loop.tick()
        loop.tick()

        assert clock.pending == 1

    def test_start_is_idempotent(self, make_loop, clock, frame):
        """Test that starting twice schedules only one tick."""
        loop = make_loop(lambda: frame)
        loop.start()
        loop.start()

        assert clock.pending == 1
