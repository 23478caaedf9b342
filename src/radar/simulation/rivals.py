"""RivalController -- rival drone pursuit, capture and spawning.

Runs once per simulation tick (1 simulated second) against one target
snapshot captured at tick start.  Two phases, always in this order:

  1. Advance.  Each rival resolves its target by id.  A missing target,
     a target that is no longer New, or one already captured earlier in
     this tick removes the rival silently.  Within the capture threshold
     the rival captures the target (the caller requests Lost on it).
     Otherwise the rival moves straight at the target by
     ``speed * step_scale`` geographic units, recomputed from scratch every
     tick (no inertia).

  2. Spawn.  With ``spawn_probability`` per tick, while the agent count is
     below the cap and at least one New target exists in the tick-start
     snapshot, one rival appears near a random New target.

The controller itself has no side effects beyond its random source: it
returns a TickOutcome and the engine commits the rivals and emits the
notifications.  Hazard cells play no part in any of this; they are a
rendering effect only.
"""

from __future__ import annotations

import math
import random
import uuid
from dataclasses import dataclass, field, replace
from typing import Sequence

from loguru import logger

from .entities import RivalAgent, Target, TargetStatus


@dataclass(frozen=True)
class RivalParams:
    """Tuning for pursuit and spawning (geographic units are degrees)."""

    capture_threshold: float = 0.001
    step_scale: float = 0.002
    spawn_probability: float = 0.10
    max_rivals: int = 3
    spawn_offset: float = 0.025
    min_speed: float = 0.5
    max_speed: float = 1.0
    jam_reward: int = 25


@dataclass
class TickOutcome:
    """Result of one controller tick.

    Attributes:
        rivals: The full rival list to commit.
        captured: (rival, target) pairs; each target must transition to Lost.
        despawned: Rivals removed because their target went stale.
        spawned: The rival created this tick, if any.
    """

    rivals: list[RivalAgent] = field(default_factory=list)
    captured: list[tuple[RivalAgent, Target]] = field(default_factory=list)
    despawned: list[RivalAgent] = field(default_factory=list)
    spawned: RivalAgent | None = None


class RivalController:
    """Advances and spawns rival agents, one tick at a time."""

    def __init__(self, params: RivalParams | None = None, rng: random.Random | None = None) -> None:
        self.params = params or RivalParams()
        self._rng = rng or random.Random()

    def tick(self, targets: Sequence[Target], rivals: Sequence[RivalAgent]) -> TickOutcome:
        by_id = {t.target_id: t for t in targets}
        outcome = TickOutcome()
        captured_ids: set[str] = set()

        for rival in rivals:
            target = by_id.get(rival.target_id)
            if (
                target is None
                or target.status is not TargetStatus.NEW
                or target.target_id in captured_ids
            ):
                outcome.despawned.append(rival)
                continue

            dlat = target.lat - rival.lat
            dlng = target.lng - rival.lng
            dist = math.hypot(dlat, dlng)

            if dist < self.params.capture_threshold:
                captured_ids.add(target.target_id)
                outcome.captured.append((rival, target))
                continue

            outcome.rivals.append(self.advance(rival, dlat, dlng, dist))

        available = [t for t in targets if t.status is TargetStatus.NEW]
        if (
            available
            and len(outcome.rivals) < self.params.max_rivals
            and self._rng.random() < self.params.spawn_probability
        ):
            spawned = self.spawn(available)
            outcome.rivals.append(spawned)
            outcome.spawned = spawned

        return outcome

    def advance(self, rival: RivalAgent, dlat: float, dlng: float, dist: float) -> RivalAgent:
        """Move *rival* one step along the displacement (dlat, dlng)."""
        if dist <= 0.0:
            return rival
        step = min(rival.speed * self.params.step_scale, dist)
        return replace(
            rival,
            lat=rival.lat + (dlat / dist) * step,
            lng=rival.lng + (dlng / dist) * step,
        )

    def spawn(self, available: Sequence[Target]) -> RivalAgent:
        """Create a rival offset from a random available target."""
        p = self.params
        target = available[self._rng.randrange(len(available))]
        rival = RivalAgent(
            rival_id=f"rival-{uuid.uuid4().hex[:8]}",
            lat=target.lat + (self._rng.random() - 0.5) * 2 * p.spawn_offset,
            lng=target.lng + (self._rng.random() - 0.5) * 2 * p.spawn_offset,
            target_id=target.target_id,
            speed=p.min_speed + self._rng.random() * (p.max_speed - p.min_speed),
        )
        logger.debug(f"Rival {rival.rival_id} spawned on target {target.target_id}")
        return rival
