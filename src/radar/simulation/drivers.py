"""PeriodicDriver -- a cancelable fixed-interval callback thread.

The engine runs two of these: the rival tick (1000 ms) and the animation
frame loop (display rate).  Each is a daemon thread that waits on a stop
Event instead of sleeping, so ``stop()`` returns promptly even for a long
interval.  A failing callback is logged and the loop carries on with the
next period; one bad frame must not halt the display.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from loguru import logger


class PeriodicDriver:
    """Call ``callback()`` every ``interval`` seconds on a background thread."""

    def __init__(self, name: str, interval: float, callback: Callable[[], object]) -> None:
        if interval <= 0:
            raise ValueError(f"Driver interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self._callback = callback
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._runs = 0
        self._failures = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def runs(self) -> int:
        return self._runs

    @property
    def failures(self) -> int:
        return self._failures

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"Driver {self.name} started ({self.interval:.3f}s period)")

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._thread = None
        logger.debug(f"Driver {self.name} stopped after {self._runs} runs")

    def _loop(self) -> None:
        next_at = time.monotonic() + self.interval
        while not self._stop.wait(max(0.0, next_at - time.monotonic())):
            try:
                self._callback()
            except Exception:
                self._failures += 1
                logger.exception(f"Driver {self.name} callback failed")
            self._runs += 1
            next_at += self.interval
            # Fell behind (slow callback, suspended process): skip missed
            # periods rather than bursting to catch up.
            now = time.monotonic()
            if next_at < now:
                next_at = now + self.interval
