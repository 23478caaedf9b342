"""Target records -- the dashboard's side of the radar engine contract.

The radar engine treats targets as read-only: it reads positions and
statuses every tick and may ask for one transition, to Lost, when a
rival captures a target.  Everything else about a record (team
assignment, progression to Secured, manual status changes) is owned
here.

Targets are held in an immutable tuple that is swapped whole under a
lock, so ``get_targets()`` never hands out a half-updated collection.
"""

from __future__ import annotations

import json
import random
import threading
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from loguru import logger

from radar.comms.notifications import NotificationLog
from radar.simulation.entities import Condition, Target, TargetStatus

TEAMS = ("Alpha", "Bravo", "Charlie")
TEAM_STEP = 10
TEAM_COMPLETE = 100
SECURED_REWARD = 500
TARGET_SECURED = "TEAM {team} REPORT: TARGET SECURED"
TEAM_DEPLOYED = "STRIKE TEAM {team} DEPLOYED TO SECTOR {sector}"


class TargetRegistry:
    """In-memory target collection with team progression."""

    def __init__(
        self,
        targets: Iterable[Target] = (),
        notifications: NotificationLog | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._targets: tuple[Target, ...] = tuple(targets)
        self._notifications = notifications

    def get_targets(self) -> tuple[Target, ...]:
        with self._lock:
            return self._targets

    def get(self, target_id: str) -> Target | None:
        for t in self.get_targets():
            if t.target_id == target_id:
                return t
        return None

    def __len__(self) -> int:
        return len(self.get_targets())

    def replace_all(self, targets: Iterable[Target]) -> None:
        with self._lock:
            self._targets = tuple(targets)

    def _update(self, target_id: str, **changes) -> Target:
        with self._lock:
            for i, t in enumerate(self._targets):
                if t.target_id == target_id:
                    updated = replace(t, **changes)
                    self._targets = self._targets[:i] + (updated,) + self._targets[i + 1:]
                    return updated
        raise KeyError(f"Target '{target_id}' not found")

    def mark_lost(self, target_id: str) -> None:
        """Apply a capture.  Unknown ids are ignored (record already gone)."""
        try:
            self._update(target_id, status=TargetStatus.LOST)
        except KeyError:
            logger.debug(f"mark_lost for unknown target {target_id}")
            return
        logger.info(f"Target {target_id} lost to rival")

    def set_status(self, target_id: str, status: TargetStatus | str) -> Target:
        """Manual status change.  Raises KeyError / ValueError."""
        parsed = TargetStatus.parse(status)
        return self._update(target_id, status=parsed)

    def available_teams(self) -> list[str]:
        """Teams not currently engaged on any target."""
        busy = {t.assigned_team for t in self.get_targets() if t.is_engaged}
        return [team for team in TEAMS if team not in busy]

    def assign_team(self, target_id: str, team: str) -> Target:
        """Engage a strike team on a target; it becomes Claimed at 0 progress.

        A team works one target at a time: deploying a team that is still
        engaged elsewhere raises ValueError.
        """
        if team not in TEAMS:
            raise ValueError(f"Unknown team: {team!r}")
        with self._lock:
            current = next((t for t in self._targets if t.target_id == target_id), None)
            if current is None:
                raise KeyError(f"Target '{target_id}' not found")
            if current.status in (TargetStatus.LOST, TargetStatus.SECURED):
                raise ValueError(f"Target {target_id} is {current.status.value}")
            for other in self._targets:
                if other.target_id != target_id and other.is_engaged and other.assigned_team == team:
                    raise ValueError(f"Team {team} is already engaged on target {other.target_id}")
            updated = replace(
                current,
                status=TargetStatus.CLAIMED,
                assigned_team=team,
                team_progress=0,
            )
            self._targets = tuple(updated if t.target_id == target_id else t for t in self._targets)

        logger.info(f"Team {team} engaged on target {target_id}")
        if self._notifications is not None:
            self._notifications.notify(
                TEAM_DEPLOYED.format(team=team.upper(), sector=target_id[:4]), "info",
            )
        return updated

    def advance_teams(self, step: int = TEAM_STEP) -> list[Target]:
        """Advance every engaged team; returns the targets secured this call."""
        secured: list[tuple[Target, str]] = []
        with self._lock:
            updated = []
            for t in self._targets:
                if t.is_engaged:
                    progress = min(TEAM_COMPLETE, t.team_progress + step)
                    if progress >= TEAM_COMPLETE:
                        team = t.assigned_team
                        t = replace(
                            t,
                            status=TargetStatus.SECURED,
                            assigned_team=None,
                            team_progress=TEAM_COMPLETE,
                        )
                        secured.append((t, team))
                    else:
                        t = replace(t, team_progress=progress)
                updated.append(t)
            self._targets = tuple(updated)

        for target, team in secured:
            logger.info(f"Team {team} secured target {target.target_id}")
            if self._notifications is not None:
                self._notifications.notify(
                    TARGET_SECURED.format(team=team.upper()), "success", SECURED_REWARD,
                )
        return [t for t, _ in secured]


# ---------------------------------------------------------------------------
# Target sources
# ---------------------------------------------------------------------------

def load_layout(path: str | Path) -> list[Target]:
    """Read targets from a JSON file.

    Accepts either a bare list of target objects or ``{"targets": [...]}``.
    Each object needs ``id``, ``lat`` and ``lng``; ``status``,
    ``condition`` and ``label`` are optional.
    """
    with open(path, "r") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("targets", [])
    if not isinstance(data, list):
        raise ValueError(f"Layout {path} must hold a list of targets")
    return [Target.from_dict(item) for item in data]


_STREETS = (
    "Maple Ave", "Oak St", "Pine Rd", "Cedar Ln", "Elm Dr",
    "Walnut St", "Birch Ct", "Hickory Way", "Willow Blvd", "Aspen Pl",
)


def demo_targets(
    center_lat: float,
    center_lng: float,
    count: int = 12,
    rng: random.Random | None = None,
    spread: float = 0.05,
) -> list[Target]:
    """Scatter *count* New targets around a map center."""
    rng = rng or random.Random()
    conditions = list(Condition)
    targets = []
    for i in range(count):
        targets.append(Target(
            target_id=f"tgt-{i + 1:03d}",
            lat=center_lat + (rng.random() - 0.5) * 2 * spread,
            lng=center_lng + (rng.random() - 0.5) * 2 * spread,
            condition=rng.choice(conditions),
            label=f"{rng.randint(100, 9999)} {rng.choice(_STREETS)}",
        ))
    return targets
