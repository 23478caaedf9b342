"""Simulation subsystem -- entities, store, rivals, hazards, drivers.

RadarEngine lives in ``radar.simulation.engine`` and is not re-exported
here: it depends on ``radar.render``, which itself imports from this
package.
"""
from .clock import Clock, ManualClock, SystemClock
from .drivers import PeriodicDriver
from .entities import (
    Condition,
    Entity,
    EntityKind,
    HazardCell,
    RivalAgent,
    Target,
    TargetStatus,
)
from .hazards import HAZARD_COUNT, create_hazards, hazard_at, in_hazard, step_hazard, step_hazards
from .rivals import RivalController, RivalParams, TickOutcome
from .store import EntityStore, WorldSnapshot

__all__ = [
    "Clock",
    "Condition",
    "Entity",
    "EntityKind",
    "EntityStore",
    "HAZARD_COUNT",
    "HazardCell",
    "ManualClock",
    "PeriodicDriver",
    "RivalAgent",
    "RivalController",
    "RivalParams",
    "SystemClock",
    "Target",
    "TargetStatus",
    "TickOutcome",
    "WorldSnapshot",
    "create_hazards",
    "hazard_at",
    "in_hazard",
    "step_hazard",
    "step_hazards",
]
