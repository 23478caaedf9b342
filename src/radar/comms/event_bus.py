"""EventBus -- thread-safe pub/sub between the radar engine and its shell.

Events published by the engine:

    target_lost       {"target_id"}           a rival captured a target
    target_selected   {"target_id"}           a click resolved to a target
    notification      {"message", "severity", "reward"}
    rival_spawned     {"id", "target_id", ...}
    rival_removed     {"id", "reason"}        captured / stale / jammed

Two delivery styles:

  - ``subscribe()`` returns a bounded Queue for consumers on their own
    thread (MJPEG stream, WebSocket bridge).  When a queue is full the
    oldest message is dropped so fresh events are never lost behind
    stale ones.
  - ``add_listener()`` registers a callback invoked synchronously on the
    publishing thread (the record subsystem applying ``target_lost`` in
    the same tick).
"""

from __future__ import annotations

import queue
import threading
from typing import Callable

from loguru import logger

Listener = Callable[[dict], None]


class EventBus:
    """Simple thread-safe pub/sub for pushing events to subscribers."""

    QUEUE_SIZE = 1000

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[tuple[queue.Queue, str | None]] = []
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, event_type: str | None = None) -> queue.Queue:
        """Subscribe to events.  Returns a Queue that receives messages.

        With ``event_type`` set, only messages of that type are delivered.
        """
        q: queue.Queue = queue.Queue(maxsize=self.QUEUE_SIZE)
        with self._lock:
            self._subscribers.append((q, event_type))
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscribers = [(s, f) for s, f in self._subscribers if s is not q]

    def add_listener(self, event_type: str, callback: Listener) -> None:
        with self._lock:
            self._listeners.setdefault(event_type, []).append(callback)

    def remove_listener(self, event_type: str, callback: Listener) -> None:
        with self._lock:
            callbacks = self._listeners.get(event_type, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg: dict = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            subscribers = list(self._subscribers)
            listeners = list(self._listeners.get(event_type, ()))

        for q, event_filter in subscribers:
            if event_filter is not None and event_filter != event_type:
                continue
            try:
                q.put_nowait(msg)
            except queue.Full:
                try:
                    q.get_nowait()
                except queue.Empty:
                    pass
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    pass

        # Listeners run outside the lock so they may publish in turn.
        for callback in listeners:
            try:
                callback(data if data is not None else {})
            except Exception:
                logger.exception(f"EventBus listener for {event_type!r} failed")
