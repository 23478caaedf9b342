"""Radar color palette and target color rules.

All colors are BGR tuples for OpenCV.  Hex values follow the dashboard's
slate/neon scheme:

  - BACKGROUND:   #0f172a
  - GRID:         #1e293b  (#334155 in weather mode)
  - CRITICAL:     #ef4444
  - POOR:         #f97316
  - FAIR:         #eab308  (also used for Good)
  - SECURED:      #22c55e
  - LOST:         #64748b
  - WEATHER_DIM:  #475569
  - RIVAL:        #d946ef
  - RIVAL_LINE:   #a855f7
  - SWEEP:        rgb(0, 174, 239)
"""

from __future__ import annotations

from radar.simulation.entities import Condition, Target, TargetStatus


def hex_to_bgr(value: str) -> tuple[int, int, int]:
    """Convert '#rrggbb' to an OpenCV BGR tuple."""
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #rrggbb, got {value!r}")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


# -- Surface ---------------------------------------------------------------

BACKGROUND = hex_to_bgr("#0f172a")
GRID = hex_to_bgr("#1e293b")
GRID_WEATHER = hex_to_bgr("#334155")
RING = hex_to_bgr("#334155")
TEXT_DIM = hex_to_bgr("#475569")
WHITE = (255, 255, 255)
PANEL = (42, 23, 15)  # rgba(15, 23, 42) without alpha

# -- Targets ---------------------------------------------------------------

CRITICAL = hex_to_bgr("#ef4444")
POOR = hex_to_bgr("#f97316")
FAIR = hex_to_bgr("#eab308")
SECURED = hex_to_bgr("#22c55e")
LOST = hex_to_bgr("#64748b")
WEATHER_DIM = hex_to_bgr("#475569")
ALERT_RED = hex_to_bgr("#ef4444")

_CONDITION_COLORS: dict[Condition, tuple[int, int, int]] = {
    Condition.CRITICAL: CRITICAL,
    Condition.POOR: POOR,
    Condition.FAIR: FAIR,
    Condition.GOOD: FAIR,
}

# -- Rivals / hazards / sweep ---------------------------------------------

RIVAL = hex_to_bgr("#d946ef")
RIVAL_LINE = hex_to_bgr("#a855f7")
HAZARD_AMBER = hex_to_bgr("#eab308")
HAZARD_RED = (50, 50, 255)  # rgb(255, 50, 50)
SWEEP = (239, 174, 0)


def target_color(target: Target, weather_mode: bool = False, in_hazard: bool = False) -> tuple[int, int, int]:
    """Marker color for *target*.

    Condition tier first, then status overrides (Secured/Booked green,
    Lost slate).  Weather mode dims everything not inside a hazard cell.
    """
    color = _CONDITION_COLORS.get(target.condition, FAIR)
    if target.status in (TargetStatus.SECURED, TargetStatus.BOOKED):
        color = SECURED
    if target.status is TargetStatus.LOST:
        color = LOST
    if weather_mode and not in_hazard:
        color = WEATHER_DIM
    return color


def halo_color(target: Target) -> tuple[tuple[int, int, int], float]:
    """(color, alpha) of the soft halo under a target marker."""
    if target.status in (TargetStatus.SECURED, TargetStatus.BOOKED):
        return SECURED, 0.5
    if target.condition is Condition.CRITICAL:
        return CRITICAL, 0.5
    if target.status is TargetStatus.LOST:
        return LOST, 0.3
    return FAIR, 0.5
