"""Entity types shared by the simulation, renderer and hit-tester.

TargetStatus -- lifecycle of a target record (owned by the record subsystem)
Condition    -- severity classification, used only for color coding
EntityKind   -- tag for the three entity variants
Target       -- read-only location record that rivals pursue
RivalAgent   -- competing drone racing toward one target
HazardCell   -- cosmetic drifting storm cell in surface space

All three entity classes are frozen.  Mutation is done by building a new
instance (``dataclasses.replace``) and committing a whole new collection
to the EntityStore.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


class TargetStatus(Enum):
    """Lifecycle status of a target record."""
    NEW = "New"
    CLAIMED = "Claimed"
    ARCHIVED = "Archived"
    SECURED = "Secured"
    LOST = "Lost"
    BOOKED = "Booked"

    @classmethod
    def parse(cls, value: str | TargetStatus) -> TargetStatus:
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).lower():
                return member
        raise ValueError(f"Unknown target status: {value!r}")


class Condition(Enum):
    """Severity tier of a target (color coding only)."""
    CRITICAL = "Critical"
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"

    @classmethod
    def parse(cls, value: str | Condition) -> Condition:
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).lower():
                return member
        raise ValueError(f"Unknown condition: {value!r}")


class EntityKind(Enum):
    TARGET = "target"
    RIVAL = "rival"
    HAZARD = "hazard"


@dataclass(frozen=True)
class Target:
    """A geographically positioned record.

    Attributes:
        target_id: Unique identifier.
        lat, lng: Position in map-space degrees.
        status: Lifecycle status.  Rivals only pursue ``NEW`` targets.
        condition: Severity tier for color coding.
        label: Human-readable line (street address) for tooltips.
        assigned_team: Strike team currently engaged, if any.
        team_progress: 0-100 progress of the engaged team.
    """

    kind: ClassVar[EntityKind] = EntityKind.TARGET

    target_id: str
    lat: float
    lng: float
    status: TargetStatus = TargetStatus.NEW
    condition: Condition = Condition.FAIR
    label: str = ""
    assigned_team: str | None = None
    team_progress: int = 0

    @property
    def is_available(self) -> bool:
        return self.status is TargetStatus.NEW

    @property
    def is_engaged(self) -> bool:
        return self.assigned_team is not None and self.status is not TargetStatus.SECURED

    def to_dict(self) -> dict:
        return {
            "id": self.target_id,
            "lat": self.lat,
            "lng": self.lng,
            "status": self.status.value,
            "condition": self.condition.value,
            "label": self.label,
            "assigned_team": self.assigned_team,
            "team_progress": self.team_progress,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Target:
        return cls(
            target_id=str(data["id"]),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            status=TargetStatus.parse(data.get("status", "New")),
            condition=Condition.parse(data.get("condition", "Fair")),
            label=data.get("label", ""),
            assigned_team=data.get("assigned_team"),
            team_progress=int(data.get("team_progress", 0)),
        )


@dataclass(frozen=True)
class RivalAgent:
    """A competing drone pursuing exactly one target.

    ``lat``/``lng`` are map-space floats, not geodesic coordinates.
    """

    kind: ClassVar[EntityKind] = EntityKind.RIVAL

    rival_id: str
    lat: float
    lng: float
    target_id: str
    speed: float

    def to_dict(self) -> dict:
        return {
            "id": self.rival_id,
            "lat": self.lat,
            "lng": self.lng,
            "target_id": self.target_id,
            "speed": self.speed,
        }


@dataclass(frozen=True)
class HazardCell:
    """A drifting storm cell, positioned in surface pixels."""

    kind: ClassVar[EntityKind] = EntityKind.HAZARD

    x: float
    y: float
    radius: float
    vx: float
    vy: float

    def contains(self, px: float, py: float, multiplier: float = 1.0) -> bool:
        dx = px - self.x
        dy = py - self.y
        return (dx * dx + dy * dy) ** 0.5 < self.radius * multiplier

    def to_dict(self) -> dict:
        return {
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "radius": round(self.radius, 2),
            "vx": self.vx,
            "vy": self.vy,
        }


Entity = Union[Target, RivalAgent, HazardCell]
