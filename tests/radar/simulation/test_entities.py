"""Unit tests for entity types and their parsing helpers."""
from __future__ import annotations

import pytest

from radar.simulation.entities import (
    Condition,
    EntityKind,
    HazardCell,
    RivalAgent,
    Target,
    TargetStatus,
)


@pytest.mark.unit
class TestEnums:
    def test_status_parse_case_insensitive(self):
        assert TargetStatus.parse("lost") is TargetStatus.LOST
        assert TargetStatus.parse("NEW") is TargetStatus.NEW
        assert TargetStatus.parse(TargetStatus.BOOKED) is TargetStatus.BOOKED

    def test_status_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            TargetStatus.parse("Gone")

    def test_condition_parse(self):
        assert Condition.parse("critical") is Condition.CRITICAL
        with pytest.raises(ValueError):
            Condition.parse("Excellent")


@pytest.mark.unit
class TestTarget:
    def test_defaults(self):
        t = Target("t1", 1.0, 2.0)
        assert t.status is TargetStatus.NEW
        assert t.is_available
        assert not t.is_engaged
        assert t.kind is EntityKind.TARGET

    def test_engaged_until_secured(self):
        t = Target("t1", 1.0, 2.0, status=TargetStatus.CLAIMED, assigned_team="Alpha")
        assert t.is_engaged
        assert not t.is_available
        secured = Target("t1", 1.0, 2.0, status=TargetStatus.SECURED, assigned_team="Alpha")
        assert not secured.is_engaged

    def test_dict_round_trip(self):
        t = Target("t1", 1.5, -2.5, TargetStatus.CLAIMED, Condition.POOR, "9 Elm", "Bravo", 40)
        assert Target.from_dict(t.to_dict()) == t

    def test_frozen(self):
        t = Target("t1", 1.0, 2.0)
        with pytest.raises(AttributeError):
            t.lat = 5.0


@pytest.mark.unit
class TestOtherEntities:
    def test_rival_to_dict(self):
        r = RivalAgent("r1", 1.0, 2.0, "t1", 0.6)
        assert r.to_dict() == {"id": "r1", "lat": 1.0, "lng": 2.0, "target_id": "t1", "speed": 0.6}
        assert r.kind is EntityKind.RIVAL

    def test_hazard_contains(self):
        h = HazardCell(0.0, 0.0, 10.0, 0.2, 0.1)
        assert h.kind is EntityKind.HAZARD
        assert h.contains(3, 4)
        assert not h.contains(6, 8)
        assert h.contains(6, 8, 1.5)
