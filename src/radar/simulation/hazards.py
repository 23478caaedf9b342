"""Hazard cells -- drifting storm cells over the radar surface.

Cells live in surface pixels, not geographic space, and move at animation
frame rate.  When a cell passes ``dimension + radius`` on an axis it
re-enters from ``-radius`` on that axis (one-directional wrap).  They only
drive the renderer's "in hazard" emphasis; rival movement and capture
never consult them.
"""

from __future__ import annotations

import random
from dataclasses import replace
from typing import Sequence

from .entities import HazardCell

HAZARD_COUNT = 3

# Initial placement and motion ranges (pixels, pixels/frame)
_SPAWN_AREA = 500.0
_RADIUS_RANGE = (60.0, 140.0)
_VX_RANGE = (0.2, 0.5)
_VY_RANGE = (0.1, 0.3)


def create_hazards(count: int = HAZARD_COUNT, rng: random.Random | None = None) -> list[HazardCell]:
    """Create the fixed set of hazard cells, once at startup."""
    rng = rng or random.Random()
    cells = []
    for _ in range(count):
        cells.append(HazardCell(
            x=rng.random() * _SPAWN_AREA,
            y=rng.random() * _SPAWN_AREA,
            radius=rng.uniform(*_RADIUS_RANGE),
            vx=rng.uniform(*_VX_RANGE),
            vy=rng.uniform(*_VY_RANGE),
        ))
    return cells


def step_hazard(cell: HazardCell, width: float, height: float) -> HazardCell:
    """Advance one cell by one frame, wrapping past the far edge."""
    x = cell.x + cell.vx
    y = cell.y + cell.vy
    if x > width + cell.radius:
        x = -cell.radius
    if y > height + cell.radius:
        y = -cell.radius
    return replace(cell, x=x, y=y)


def step_hazards(cells: Sequence[HazardCell], width: float, height: float) -> list[HazardCell]:
    return [step_hazard(c, width, height) for c in cells]


def hazard_at(
    cells: Sequence[HazardCell], x: float, y: float, multiplier: float = 1.0,
) -> HazardCell | None:
    """The first cell whose scaled radius covers surface point (x, y)."""
    for cell in cells:
        if cell.contains(x, y, multiplier):
            return cell
    return None


def in_hazard(cells: Sequence[HazardCell], x: float, y: float, multiplier: float = 1.0) -> bool:
    return hazard_at(cells, x, y, multiplier) is not None
