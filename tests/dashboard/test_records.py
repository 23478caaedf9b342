"""Unit tests for TargetRegistry and the target sources.

Tests cover:
  - mark_lost (known and unknown ids)
  - Team assignment, one target per team, deploy and success notifications
  - Progression to Secured
  - Manual status changes
  - JSON layout loading and demo target generation
"""
from __future__ import annotations

import json
import random

import pytest

from dashboard.records import (
    SECURED_REWARD,
    TEAMS,
    TEAM_DEPLOYED,
    TargetRegistry,
    demo_targets,
    load_layout,
)
from radar.comms.notifications import NotificationLog
from radar.simulation.entities import Condition, Target, TargetStatus


def _registry(notifications=None) -> TargetRegistry:
    return TargetRegistry(
        [Target("t1", 35.0, -97.0), Target("t2", 35.1, -96.9, status=TargetStatus.ARCHIVED)],
        notifications,
    )


@pytest.mark.unit
class TestMarkLost:
    def test_sets_status(self):
        reg = _registry()
        reg.mark_lost("t1")
        assert reg.get("t1").status is TargetStatus.LOST

    def test_unknown_id_is_ignored(self):
        reg = _registry()
        before = reg.get_targets()
        reg.mark_lost("nope")
        assert reg.get_targets() == before

    def test_snapshot_is_immutable_tuple(self):
        reg = _registry()
        before = reg.get_targets()
        reg.mark_lost("t1")
        assert isinstance(before, tuple)
        assert before[0].status is TargetStatus.NEW


@pytest.mark.unit
class TestTeams:
    def test_assign_claims_target(self):
        reg = _registry()
        t = reg.assign_team("t1", "Alpha")
        assert t.status is TargetStatus.CLAIMED
        assert t.assigned_team == "Alpha"
        assert t.team_progress == 0
        assert t.is_engaged

    def test_assign_unknown_team(self):
        with pytest.raises(ValueError):
            _registry().assign_team("t1", "Delta")

    def test_assign_unknown_target(self):
        with pytest.raises(KeyError):
            _registry().assign_team("zzz", "Bravo")

    def test_cannot_assign_lost_target(self):
        reg = _registry()
        reg.mark_lost("t1")
        with pytest.raises(ValueError):
            reg.assign_team("t1", "Charlie")

    def test_progress_reaches_secured_after_ten_steps(self):
        log = NotificationLog()
        reg = _registry(log)
        reg.assign_team("t1", "Bravo")
        for _ in range(9):
            assert reg.advance_teams() == []
        assert reg.get("t1").team_progress == 90
        secured = reg.advance_teams()
        assert [t.target_id for t in secured] == ["t1"]
        t = reg.get("t1")
        assert t.status is TargetStatus.SECURED
        assert t.assigned_team is None
        note = log.recent()[-1]
        assert note.message == "TEAM BRAVO REPORT: TARGET SECURED"
        assert (note.severity, note.reward) == ("success", SECURED_REWARD)

    def test_unengaged_targets_untouched(self):
        reg = _registry()
        before = reg.get_targets()
        reg.advance_teams()
        assert reg.get_targets() == before

    def test_deploy_raises_info_notification(self):
        log = NotificationLog()
        reg = _registry(log)
        reg.assign_team("t1", "Alpha")
        note = log.recent()[-1]
        assert note.message == "STRIKE TEAM ALPHA DEPLOYED TO SECTOR t1"
        assert note.message == TEAM_DEPLOYED.format(team="ALPHA", sector="t1")
        assert note.severity == "info"

    def test_busy_team_cannot_deploy_elsewhere(self):
        log = NotificationLog()
        reg = TargetRegistry([Target("t1", 35.0, -97.0), Target("t3", 35.2, -96.8)], log)
        reg.assign_team("t1", "Alpha")
        with pytest.raises(ValueError, match="already engaged"):
            reg.assign_team("t3", "Alpha")
        assert reg.get("t3").status is TargetStatus.NEW
        assert reg.get("t3").assigned_team is None
        assert len(log.recent()) == 1

    def test_redeploying_same_target_resets_progress(self):
        reg = _registry()
        reg.assign_team("t1", "Alpha")
        reg.advance_teams()
        assert reg.assign_team("t1", "Alpha").team_progress == 0

    def test_available_teams(self):
        reg = TargetRegistry([Target("t1", 35.0, -97.0), Target("t3", 35.2, -96.8)])
        assert reg.available_teams() == ["Alpha", "Bravo", "Charlie"]
        reg.assign_team("t3", "Bravo")
        assert reg.available_teams() == ["Alpha", "Charlie"]

    def test_team_freed_once_target_secured(self):
        reg = TargetRegistry([Target("t1", 35.0, -97.0), Target("t3", 35.2, -96.8)])
        reg.assign_team("t1", "Alpha")
        for _ in range(10):
            reg.advance_teams()
        assert "Alpha" in reg.available_teams()
        assert reg.assign_team("t3", "Alpha").assigned_team == "Alpha"

    def test_teams(self):
        assert TEAMS == ("Alpha", "Bravo", "Charlie")


@pytest.mark.unit
class TestSetStatus:
    def test_set_status_from_string(self):
        reg = _registry()
        assert reg.set_status("t1", "booked").status is TargetStatus.BOOKED

    def test_invalid_status(self):
        with pytest.raises(ValueError):
            _registry().set_status("t1", "vaporized")

    def test_unknown_target(self):
        with pytest.raises(KeyError):
            _registry().set_status("zzz", "New")


@pytest.mark.unit
class TestSources:
    def test_load_layout_list(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text(json.dumps([
            {"id": "a", "lat": 35.0, "lng": -97.0, "condition": "Critical", "label": "1 Elm Dr"},
            {"id": "b", "lat": 35.2, "lng": -97.2, "status": "Claimed"},
        ]))
        targets = load_layout(path)
        assert [t.target_id for t in targets] == ["a", "b"]
        assert targets[0].condition is Condition.CRITICAL
        assert targets[1].status is TargetStatus.CLAIMED

    def test_load_layout_wrapped(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text(json.dumps({"targets": [{"id": 7, "lat": 1, "lng": 2}]}))
        targets = load_layout(str(path))
        assert targets[0].target_id == "7"
        assert targets[0].status is TargetStatus.NEW

    def test_load_layout_rejects_scalar(self, tmp_path):
        path = tmp_path / "layout.json"
        path.write_text("42")
        with pytest.raises(ValueError):
            load_layout(path)

    def test_demo_targets(self):
        targets = demo_targets(35.0, -97.0, 8, random.Random(1))
        assert len(targets) == 8
        assert len({t.target_id for t in targets}) == 8
        for t in targets:
            assert t.status is TargetStatus.NEW
            assert abs(t.lat - 35.0) <= 0.05
            assert abs(t.lng + 97.0) <= 0.05
            assert t.label

    def test_demo_targets_reproducible(self):
        assert demo_targets(0, 0, 5, random.Random(3)) == demo_targets(0, 0, 5, random.Random(3))
