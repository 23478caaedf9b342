"""NotificationLog -- operator-facing alerts raised by the simulation.

A notification is (message, severity, optional reward).  Each one is
published on the EventBus as ``notification`` for live consumers and kept
in a bounded recent-history buffer for clients that poll.
"""

from __future__ import annotations

import itertools
import threading
import time
from collections import deque
from dataclasses import asdict, dataclass

from loguru import logger

from .event_bus import EventBus

SEVERITIES = ("success", "info", "warning", "error")

# Messages raised by the rival simulation
RIVAL_DETECTED = "RIVAL DRONE DETECTED IN AIRSPACE"
SIGNAL_JAMMED = "RIVAL SIGNAL JAMMED"
TARGET_LOST = "ASSET LOST TO COMPETITOR: {label}"


@dataclass(frozen=True)
class Notification:
    notification_id: int
    message: str
    severity: str
    reward: int | None = None
    timestamp: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


class NotificationLog:
    """Publishes notifications and remembers the most recent ones."""

    def __init__(self, event_bus: EventBus | None = None, maxlen: int = 50) -> None:
        self._event_bus = event_bus
        self._recent: deque[Notification] = deque(maxlen=maxlen)
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    def notify(self, message: str, severity: str = "info", reward: int | None = None) -> Notification:
        if severity not in SEVERITIES:
            raise ValueError(f"Unknown severity {severity!r}, expected one of {SEVERITIES}")
        with self._lock:
            note = Notification(
                notification_id=next(self._ids),
                message=message,
                severity=severity,
                reward=reward,
                timestamp=time.time(),
            )
            self._recent.append(note)

        if severity == "error":
            logger.warning(f"[{severity}] {message}")
        else:
            logger.info(f"[{severity}] {message}" + (f" (+{reward})" if reward else ""))

        if self._event_bus is not None:
            self._event_bus.publish("notification", {
                "message": message,
                "severity": severity,
                "reward": reward,
            })
        return note

    def recent(self, limit: int | None = None) -> list[Notification]:
        with self._lock:
            items = list(self._recent)
        if limit is not None:
            items = items[-limit:] if limit > 0 else []
        return items

    def clear(self) -> None:
        with self._lock:
            self._recent.clear()
