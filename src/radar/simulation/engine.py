"""RadarEngine -- owns the entity store and both timing loops.

Architecture
------------
The engine is the single writer of rival and hazard state.  It runs two
daemon PeriodicDriver threads:

  1. rival-tick (1 Hz) -- refreshes the target snapshot from the record
     subsystem, runs RivalController.tick() against it, marks captured
     targets Lost, then commits targets and rivals as one snapshot.
     Notifications and bus events follow the commit.

  2. radar-frame (display rate) -- steps the hazard cells, commits them,
     renders the latest snapshot and keeps the RenderedFrame for readers
     (HTTP snapshot, MJPEG stream, viewer window).

Pointer events (click/hover) resolve against the last RenderedFrame's
snapshot and projector, so a click always addresses what was drawn.  If
nothing has been rendered yet they fall back to the live snapshot.

Notifications and bus events run after the commit and outside the
store's write lock: a ``target_lost`` listener that re-enters the
engine (reads a snapshot, jams a rival) cannot deadlock.

Data flow:
  TargetSource --(get_targets)--> tick --> EntityStore <-- frame (hazards)
  EntityStore --> RenderPipeline --> RenderedFrame --> hit_test.resolve
  tick --(mark_lost, target_lost, notification)--> record subsystem / shell

Tests drive ``tick()`` and ``frame()`` directly without starting threads.
"""

from __future__ import annotations

import random
import threading
from typing import Protocol, Sequence

from loguru import logger

from radar.comms.event_bus import EventBus
from radar.comms.notifications import (
    RIVAL_DETECTED,
    SIGNAL_JAMMED,
    TARGET_LOST,
    NotificationLog,
)
from radar.geo.projection import Projector
from radar.render import hit_test
from radar.render.hit_test import NO_HIT, Hit, RivalHit, TargetHit
from radar.render.layers import LayerModeController, ViewLayerMode
from radar.render.pipeline import RenderedFrame, RenderPipeline

from .clock import Clock, SystemClock
from .drivers import PeriodicDriver
from .entities import RivalAgent, Target
from .hazards import HAZARD_COUNT, create_hazards, step_hazards
from .rivals import RivalController, RivalParams, TickOutcome
from .store import EntityStore, WorldSnapshot


class TargetSource(Protocol):
    """The record subsystem's side of the contract."""

    def get_targets(self) -> Sequence[Target]:
        ...

    def mark_lost(self, target_id: str) -> None:
        ...


class RadarEngine:
    """Drives the rival simulation at 1 Hz and the radar display per frame."""

    def __init__(
        self,
        source: TargetSource,
        event_bus: EventBus | None = None,
        *,
        width: int = 800,
        height: int = 600,
        padding: float = 50.0,
        tick_interval: float = 1.0,
        fps: float = 30.0,
        params: RivalParams | None = None,
        hazard_count: int = HAZARD_COUNT,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        notifications: NotificationLog | None = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self._source = source
        self._event_bus = event_bus or EventBus()
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()
        self.notifications = notifications or NotificationLog(self._event_bus)

        self._size_lock = threading.Lock()
        self._width = width
        self._height = height
        self.padding = padding

        self.controller = RivalController(params, self._rng)
        self.layers = LayerModeController()
        self.pipeline = RenderPipeline(self._clock, padding=padding)
        self.store = EntityStore(
            targets=source.get_targets(),
            hazards=create_hazards(hazard_count, self._rng),
        )

        self._frame_lock = threading.Lock()
        self._last_frame: RenderedFrame | None = None
        self._hover: Hit = NO_HIT
        self._ticks = 0

        self._tick_driver = PeriodicDriver("rival-tick", tick_interval, self.tick)
        self._frame_driver = PeriodicDriver("radar-frame", 1.0 / fps, self.frame)

    # -- Accessors ----------------------------------------------------------

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def params(self) -> RivalParams:
        return self.controller.params

    @property
    def size(self) -> tuple[int, int]:
        with self._size_lock:
            return self._width, self._height

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def running(self) -> bool:
        return self._tick_driver.running

    @property
    def rendering(self) -> bool:
        return self._frame_driver.running

    @property
    def layer_mode(self) -> ViewLayerMode:
        return self.layers.mode

    def set_layer_mode(self, mode: ViewLayerMode | str) -> ViewLayerMode:
        parsed = self.layers.set_mode(mode)
        logger.info(f"Radar layer mode: {parsed.value}")
        return parsed

    def snapshot(self) -> WorldSnapshot:
        return self.store.snapshot()

    def active_rivals(self) -> tuple[RivalAgent, ...]:
        return self.store.snapshot().rivals

    @property
    def hover_state(self) -> Hit:
        with self._frame_lock:
            return self._hover

    def latest_frame(self) -> RenderedFrame | None:
        with self._frame_lock:
            return self._last_frame

    def resize(self, width: int, height: int) -> None:
        """Change the drawing surface.  Entity positions are untouched."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        with self._size_lock:
            self._width = width
            self._height = height
        logger.debug(f"Radar surface resized to {width}x{height}")

    # -- Lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Start the rival tick driver."""
        if self._tick_driver.running:
            return
        self._tick_driver.start()
        logger.info(f"Rival simulation started ({self._tick_driver.interval:.1f}s tick)")

    def stop(self) -> None:
        """Halt rival advancement.  Rivals stay where they are."""
        self._tick_driver.stop()
        logger.info(f"Rival simulation stopped after {self._ticks} ticks")

    def start_rendering(self) -> None:
        self._frame_driver.start()

    def stop_rendering(self) -> None:
        self._frame_driver.stop()

    def shutdown(self) -> None:
        self.stop()
        self.stop_rendering()

    # -- Simulation tick ----------------------------------------------------

    def tick(self) -> TickOutcome:
        """Run one rival tick (advance, then spawn) and commit it.

        Captured targets are marked Lost before the commit, so the rival
        removal and the Lost status land in the same snapshot.
        """
        targets = tuple(self._source.get_targets())
        with self.store.writing():
            current = self.store.snapshot()
            outcome = self.controller.tick(targets, current.rivals)
            if outcome.captured:
                for _, target in outcome.captured:
                    self._source.mark_lost(target.target_id)
                targets = tuple(self._source.get_targets())
            self.store.commit(targets=targets, rivals=outcome.rivals)
        self._ticks += 1
        self._publish_outcome(outcome)
        return outcome

    def _publish_outcome(self, outcome: TickOutcome) -> None:
        for rival in outcome.despawned:
            self._event_bus.publish("rival_removed", {"id": rival.rival_id, "reason": "stale"})

        for rival, target in outcome.captured:
            self._event_bus.publish("rival_removed", {"id": rival.rival_id, "reason": "captured"})
            self._event_bus.publish("target_lost", {"target_id": target.target_id})
            self.notifications.notify(
                TARGET_LOST.format(label=target.label or target.target_id), "error",
            )

        if outcome.spawned is not None:
            self._event_bus.publish("rival_spawned", outcome.spawned.to_dict())
            self.notifications.notify(RIVAL_DETECTED, "warning")

    def jam(self, rival_id: str) -> bool:
        """Operator jam: remove a rival without touching its target.

        Unknown ids are a no-op and return False.
        """
        removed = self.store.remove_rival(rival_id)
        if removed is None:
            return False
        logger.debug(f"Rival {rival_id} jammed")
        self._event_bus.publish("rival_removed", {"id": rival_id, "reason": "jammed"})
        self.notifications.notify(SIGNAL_JAMMED, "success", self.params.jam_reward)
        return True

    # -- Animation frame ----------------------------------------------------

    def frame(self) -> RenderedFrame:
        """Step the hazards one frame and render the latest snapshot."""
        width, height = self.size
        with self.store.writing():
            current = self.store.snapshot()
            snap = self.store.commit(
                targets=self._source.get_targets(),
                hazards=step_hazards(current.hazards, width, height),
            )
        rendered = self.pipeline.render(
            snap, width, height, mode=self.layers.mode, hover=self.hover_state,
        )
        with self._frame_lock:
            self._last_frame = rendered
        return rendered

    def preview(self) -> RenderedFrame:
        """Render the live snapshot without stepping hazards.

        The result is not kept as the latest frame, so pointer events and
        simulation state are unaffected.
        """
        width, height = self.size
        return self.pipeline.render(
            self.store.snapshot(), width, height, mode=self.layers.mode, hover=self.hover_state,
        )

    # -- Pointer interaction ------------------------------------------------

    def _pointer_context(self) -> tuple[WorldSnapshot, Projector]:
        last = self.latest_frame()
        if last is not None:
            return last.snapshot, last.projector
        snap = self.store.snapshot()
        width, height = self.size
        return snap, Projector.for_points(snap.targets, width, height, self.padding)

    def resolve(self, x: float, y: float, *, hover: bool = False) -> Hit:
        snap, projector = self._pointer_context()
        return hit_test.resolve(snap, projector, x, y, hover=hover)

    def click(self, x: float, y: float) -> Hit:
        """Resolve a click: jam a rival, or select a target."""
        hit = self.resolve(x, y)
        if isinstance(hit, RivalHit):
            self.jam(hit.rival.rival_id)
        elif isinstance(hit, TargetHit):
            self._event_bus.publish("target_selected", {"target_id": hit.target.target_id})
        return hit

    def hover(self, x: float, y: float) -> Hit:
        """Resolve a hover and remember it for the tooltip.  No state change."""
        hit = self.resolve(x, y, hover=True)
        with self._frame_lock:
            self._hover = hit
        return hit

    def clear_hover(self) -> None:
        with self._frame_lock:
            self._hover = NO_HIT

    def get_state(self) -> dict:
        snap = self.store.snapshot()
        width, height = self.size
        return {
            "mode": self.layers.mode.value,
            "running": self.running,
            "rendering": self.rendering,
            "ticks": self._ticks,
            "surface": {"width": width, "height": height, "padding": self.padding},
            "target_count": len(snap.targets),
            "rivals": [r.to_dict() for r in snap.rivals],
            "hazards": [h.to_dict() for h in snap.hazards],
            "version": snap.version,
        }
