"""WeatherCycle -- periodic storm advisories for the dashboard.

Every cycle draws one weather state (HAIL above 0.9, WIND above 0.7,
otherwise CLEAR) and raises an advisory only when the state changes.
Purely informational: the radar's hazard cells drift on their own.
"""

from __future__ import annotations

import random
import threading
from enum import Enum

from loguru import logger

from radar.comms.notifications import NotificationLog
from radar.simulation.drivers import PeriodicDriver


class WeatherState(Enum):
    CLEAR = "clear"
    WIND = "wind"
    HAIL = "hail"


ADVISORIES: dict[WeatherState, tuple[str, str]] = {
    WeatherState.HAIL: ("ALERT: SEVERE HAIL STORM DETECTED", "warning"),
    WeatherState.WIND: ("ADVISORY: HIGH WINDS IN SECTOR", "info"),
    WeatherState.CLEAR: ("WEATHER CLEARING: VFR CONDITIONS", "info"),
}


def draw_state(r: float) -> WeatherState:
    if r > 0.9:
        return WeatherState.HAIL
    if r > 0.7:
        return WeatherState.WIND
    return WeatherState.CLEAR


class WeatherCycle:
    def __init__(
        self,
        notifications: NotificationLog,
        interval: float = 45.0,
        rng: random.Random | None = None,
    ) -> None:
        self._notifications = notifications
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._state = WeatherState.CLEAR
        self._driver = PeriodicDriver("weather-cycle", interval, self.step)

    @property
    def state(self) -> WeatherState:
        with self._lock:
            return self._state

    @property
    def running(self) -> bool:
        return self._driver.running

    def step(self) -> WeatherState:
        new_state = draw_state(self._rng.random())
        with self._lock:
            changed = new_state is not self._state
            self._state = new_state
        if changed:
            message, severity = ADVISORIES[new_state]
            logger.info(f"Weather changed to {new_state.value}")
            self._notifications.notify(message, severity)
        return new_state

    def start(self) -> None:
        self._driver.start()

    def stop(self) -> None:
        self._driver.stop()
