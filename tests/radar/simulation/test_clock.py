"""Unit tests for the injectable clocks."""
from __future__ import annotations

import time

import pytest

from radar.simulation.clock import ManualClock, SystemClock


@pytest.mark.unit
class TestClocks:
    def test_system_clock_tracks_wall_time(self):
        before = time.time()
        now = SystemClock().now()
        assert before <= now <= time.time()

    def test_manual_clock_only_moves_when_told(self):
        clock = ManualClock(10.0)
        assert clock.now() == 10.0
        assert clock.advance(0.5) == 10.5
        assert clock.now() == 10.5
        clock.set(3.0)
        assert clock.now() == 3.0
