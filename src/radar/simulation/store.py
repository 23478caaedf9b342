"""EntityStore -- the single owner of the simulation's shared state.

Two periodic drivers mutate this state (the 1 Hz rival tick and the
per-frame hazard step) while the renderer and pointer handlers read it
from other threads.  Every collection in a WorldSnapshot is an immutable
tuple, and a commit replaces the whole snapshot reference in one
assignment under ``_lock``.  A reader therefore holds either the old
snapshot or the new one, never a half-updated list.

Writers that read, compute and commit must do so inside ``writing()``:
it serializes read-modify-commit sequences so a jam arriving mid-tick is
not overwritten by the tick's stale copy of the rival list.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterable, Iterator

from .entities import HazardCell, RivalAgent, Target


@dataclass(frozen=True)
class WorldSnapshot:
    """One consistent view of targets, rivals and hazards."""

    targets: tuple[Target, ...] = ()
    rivals: tuple[RivalAgent, ...] = ()
    hazards: tuple[HazardCell, ...] = ()
    version: int = 0

    def target(self, target_id: str) -> Target | None:
        for t in self.targets:
            if t.target_id == target_id:
                return t
        return None

    def rival(self, rival_id: str) -> RivalAgent | None:
        for r in self.rivals:
            if r.rival_id == rival_id:
                return r
        return None

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "targets": [t.to_dict() for t in self.targets],
            "rivals": [r.to_dict() for r in self.rivals],
            "hazards": [h.to_dict() for h in self.hazards],
        }


class EntityStore:
    """Holds the current WorldSnapshot and swaps it atomically."""

    def __init__(
        self,
        targets: Iterable[Target] = (),
        rivals: Iterable[RivalAgent] = (),
        hazards: Iterable[HazardCell] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._write_lock = threading.RLock()
        self._snapshot = WorldSnapshot(
            targets=tuple(targets),
            rivals=tuple(rivals),
            hazards=tuple(hazards),
        )

    def snapshot(self) -> WorldSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def version(self) -> int:
        return self.snapshot().version

    @contextmanager
    def writing(self) -> Iterator[EntityStore]:
        """Serialize a read-compute-commit sequence against other writers."""
        with self._write_lock:
            yield self

    def commit(
        self,
        *,
        targets: Iterable[Target] | None = None,
        rivals: Iterable[RivalAgent] | None = None,
        hazards: Iterable[HazardCell] | None = None,
    ) -> WorldSnapshot:
        """Replace any of the three collections and bump the version.

        Collections passed as None keep their current value.
        """
        changes: dict = {}
        if targets is not None:
            changes["targets"] = tuple(targets)
        if rivals is not None:
            changes["rivals"] = tuple(rivals)
        if hazards is not None:
            changes["hazards"] = tuple(hazards)
        with self._write_lock:
            with self._lock:
                self._snapshot = replace(
                    self._snapshot, version=self._snapshot.version + 1, **changes,
                )
                return self._snapshot

    def remove_rival(self, rival_id: str) -> RivalAgent | None:
        """Remove one rival by id.  Returns the removed agent, or None."""
        with self.writing():
            snap = self.snapshot()
            found = snap.rival(rival_id)
            if found is None:
                return None
            self.commit(rivals=[r for r in snap.rivals if r.rival_id != rival_id])
            return found
