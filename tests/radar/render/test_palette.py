"""Unit tests for the radar palette and target color rules."""
from __future__ import annotations

import pytest

from radar.render import palette
from radar.simulation.entities import Condition, Target, TargetStatus


def _t(condition=Condition.FAIR, status=TargetStatus.NEW) -> Target:
    return Target("t1", 0.0, 0.0, status=status, condition=condition)


@pytest.mark.unit
class TestHexToBgr:
    def test_converts_to_bgr(self):
        assert palette.hex_to_bgr("#ff0000") == (0, 0, 255)
        assert palette.hex_to_bgr("0f172a") == (42, 23, 15)

    def test_rejects_bad_length(self):
        with pytest.raises(ValueError):
            palette.hex_to_bgr("#fff")

    @pytest.mark.parametrize("color", [
        palette.BACKGROUND, palette.GRID, palette.CRITICAL, palette.POOR, palette.FAIR,
        palette.SECURED, palette.LOST, palette.RIVAL, palette.SWEEP, palette.HAZARD_RED,
    ])
    def test_colors_are_bgr_tuples(self, color):
        assert len(color) == 3
        assert all(0 <= c <= 255 for c in color)


@pytest.mark.unit
class TestTargetColor:
    @pytest.mark.parametrize("condition,expected", [
        (Condition.CRITICAL, palette.CRITICAL),
        (Condition.POOR, palette.POOR),
        (Condition.FAIR, palette.FAIR),
        (Condition.GOOD, palette.FAIR),
    ])
    def test_condition_tiers(self, condition, expected):
        assert palette.target_color(_t(condition)) == expected

    @pytest.mark.parametrize("status", [TargetStatus.SECURED, TargetStatus.BOOKED])
    def test_secured_and_booked_are_green(self, status):
        assert palette.target_color(_t(Condition.CRITICAL, status)) == palette.SECURED

    def test_lost_is_slate(self):
        assert palette.target_color(_t(Condition.CRITICAL, TargetStatus.LOST)) == palette.LOST

    def test_weather_dims_unless_in_hazard(self):
        t = _t(Condition.CRITICAL)
        assert palette.target_color(t, weather_mode=True) == palette.WEATHER_DIM
        assert palette.target_color(t, weather_mode=True, in_hazard=True) == palette.CRITICAL


@pytest.mark.unit
class TestHaloColor:
    def test_halo_rules(self):
        assert palette.halo_color(_t(status=TargetStatus.SECURED)) == (palette.SECURED, 0.5)
        assert palette.halo_color(_t(Condition.CRITICAL)) == (palette.CRITICAL, 0.5)
        assert palette.halo_color(_t(status=TargetStatus.LOST)) == (palette.LOST, 0.3)
        assert palette.halo_color(_t(Condition.POOR)) == (palette.FAIR, 0.5)
