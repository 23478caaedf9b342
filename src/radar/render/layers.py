"""View layer modes -- which entities and effects the radar emphasizes.

tactical -- default view: all targets in condition colors, rivals visible
weather  -- hazard cells enlarged and red; targets outside a cell dimmed;
            rivals hidden (and not clickable)
intel    -- tactical plus per-target labels and full-opacity pursuit lines

The mode is UI state only.  It biases rendering and hit-testing and
never feeds back into the simulation.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum

from . import palette


class ViewLayerMode(Enum):
    TACTICAL = "tactical"
    WEATHER = "weather"
    INTEL = "intel"

    @classmethod
    def parse(cls, value: str | ViewLayerMode) -> ViewLayerMode:
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key == "standard":
            return cls.TACTICAL
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown layer mode: {value!r}")


@dataclass(frozen=True)
class LayerStyle:
    """Rendering bias for one mode."""

    grid_color: tuple[int, int, int]
    hazard_color: tuple[int, int, int]
    hazard_opacity: float
    hazard_scale: float          # glow radius multiplier, also rival "in hazard"
    target_hazard_scale: float   # radius multiplier for the target "in hazard" test
    hazard_outline: bool
    show_rivals: bool
    show_labels: bool
    pursuit_line_alpha: float
    dim_outside_hazard: bool


STYLES: dict[ViewLayerMode, LayerStyle] = {
    ViewLayerMode.TACTICAL: LayerStyle(
        grid_color=palette.GRID,
        hazard_color=palette.HAZARD_AMBER,
        hazard_opacity=0.15,
        hazard_scale=1.0,
        target_hazard_scale=0.8,
        hazard_outline=False,
        show_rivals=True,
        show_labels=False,
        pursuit_line_alpha=0.3,
        dim_outside_hazard=False,
    ),
    ViewLayerMode.WEATHER: LayerStyle(
        grid_color=palette.GRID_WEATHER,
        hazard_color=palette.HAZARD_RED,
        hazard_opacity=0.4,
        hazard_scale=1.5,
        target_hazard_scale=1.5,
        hazard_outline=True,
        show_rivals=False,
        show_labels=False,
        pursuit_line_alpha=0.0,
        dim_outside_hazard=True,
    ),
    ViewLayerMode.INTEL: LayerStyle(
        grid_color=palette.GRID,
        hazard_color=palette.HAZARD_AMBER,
        hazard_opacity=0.15,
        hazard_scale=1.0,
        target_hazard_scale=0.8,
        hazard_outline=False,
        show_rivals=True,
        show_labels=True,
        pursuit_line_alpha=1.0,
        dim_outside_hazard=False,
    ),
}


def style_for(mode: ViewLayerMode) -> LayerStyle:
    return STYLES[mode]


class LayerModeController:
    """Holds the active ViewLayerMode; safe to set from any thread."""

    def __init__(self, mode: ViewLayerMode | str = ViewLayerMode.TACTICAL) -> None:
        self._lock = threading.Lock()
        self._mode = ViewLayerMode.parse(mode)

    @property
    def mode(self) -> ViewLayerMode:
        with self._lock:
            return self._mode

    def set_mode(self, mode: ViewLayerMode | str) -> ViewLayerMode:
        parsed = ViewLayerMode.parse(mode)
        with self._lock:
            self._mode = parsed
        return parsed

    @property
    def style(self) -> LayerStyle:
        return STYLES[self.mode]
