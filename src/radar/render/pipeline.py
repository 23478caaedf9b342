"""RenderPipeline -- draws the radar surface as a BGR numpy frame.

Each call to ``render()`` consumes one WorldSnapshot and draws, in this
fixed order (later layers occlude earlier ones):

  1. background + grid
  2. concentric radar rings
  3. hazard glow (radial gradients; color/opacity from the layer mode)
  4. target markers (halo + core; pulsing halo when inside a hazard)
  5. status badges (dashed ring = team engaged, X = Lost)
  6. rival glyphs (spinning triangle + pulse ring; hidden in weather mode)
  7. dashed pursuit line from each rival to its target
  8. radar sweep wedge
  9. legend / layer-mode overlay
 10. hover highlight + tooltip, last, for at most one entity

With no targets the marker layers are replaced by a "NO SIGNAL DETECTED"
placeholder.

Pulse, spin and sweep phases all come from the injected clock, so they
move smoothly regardless of the 1 Hz simulation tick or the frame rate.
The sweep completes one revolution every SWEEP_PERIOD seconds.

The returned RenderedFrame carries the Projector and snapshot that were
drawn; the hit-test resolver must use exactly those.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Callable, Iterable

import cv2
import numpy as np

from radar.geo.projection import Projector
from radar.simulation.clock import Clock, SystemClock
from radar.simulation.entities import (
    Entity,
    EntityKind,
    HazardCell,
    RivalAgent,
    Target,
    TargetStatus,
)
from radar.simulation.hazards import in_hazard
from radar.simulation.store import WorldSnapshot

from . import palette
from .hit_test import NO_HIT, Hit, RivalHit, TargetHit
from .layers import LayerStyle, ViewLayerMode, style_for

GRID_SPACING = 50
SWEEP_PERIOD = 5.0       # seconds per revolution
SWEEP_WIDTH = 0.2        # radians
SWEEP_MAX_ALPHA = 0.2
RING_MARGIN = 20
FONT = cv2.FONT_HERSHEY_SIMPLEX
NO_SIGNAL_TEXT = "NO SIGNAL DETECTED"


@dataclass(frozen=True)
class RenderContext:
    """Everything a per-entity drawer needs for one frame."""

    projector: Projector
    snapshot: WorldSnapshot
    mode: ViewLayerMode
    style: LayerStyle
    now: float
    hover: Hit

    def target_in_hazard(self, target: Target) -> bool:
        x, y = self.projector.to_surface(target.lat, target.lng)
        return in_hazard(self.snapshot.hazards, x, y, self.style.target_hazard_scale)

    def rival_in_hazard(self, rival: RivalAgent) -> bool:
        x, y = self.projector.to_surface(rival.lat, rival.lng)
        return in_hazard(self.snapshot.hazards, x, y, self.style.hazard_scale)


@dataclass(frozen=True)
class RenderedFrame:
    image: np.ndarray
    projector: Projector
    snapshot: WorldSnapshot
    mode: ViewLayerMode
    sweep_angle: float
    rendered_at: float
    frame_number: int


# -- Blending helpers -------------------------------------------------------

def _blend_draw(
    frame: np.ndarray,
    alpha: float,
    draw: Callable[[np.ndarray], None],
    box: tuple[int, int, int, int] | None = None,
) -> None:
    """Run *draw* on *frame* and blend the result back in at *alpha*.

    ``box`` (x0, y0, x1, y1) must enclose everything *draw* touches; only
    that region is saved and blended.  None means the whole frame.
    """
    if alpha <= 0.0:
        return
    if alpha >= 1.0:
        draw(frame)
        return
    height, width = frame.shape[:2]
    if box is None:
        x0, y0, x1, y1 = 0, 0, width, height
    else:
        x0, y0 = max(0, box[0]), max(0, box[1])
        x1, y1 = min(width, box[2]), min(height, box[3])
        if x0 >= x1 or y0 >= y1:
            return
    before = frame[y0:y1, x0:x1].copy()
    draw(frame)
    after = frame[y0:y1, x0:x1]
    frame[y0:y1, x0:x1] = cv2.addWeighted(after, alpha, before, 1.0 - alpha, 0)


def _around(x: int, y: int, r: int) -> tuple[int, int, int, int]:
    """Box enclosing a circle of radius *r* at (x, y), with antialias margin."""
    return x - r - 2, y - r - 2, x + r + 3, y + r + 3


def _spanning(p1: tuple[int, int], p2: tuple[int, int], pad: int = 3) -> tuple[int, int, int, int]:
    return (
        min(p1[0], p2[0]) - pad,
        min(p1[1], p2[1]) - pad,
        max(p1[0], p2[0]) + pad + 1,
        max(p1[1], p2[1]) + pad + 1,
    )


def _blend_region(
    frame: np.ndarray,
    x0: int,
    y0: int,
    alpha: np.ndarray,
    color: tuple[int, int, int],
) -> None:
    """Blend a solid color into frame[y0:, x0:] with a per-pixel alpha mask."""
    h, w = alpha.shape
    roi = frame[y0:y0 + h, x0:x0 + w].astype(np.float32)
    a = alpha[..., None]
    roi = roi * (1.0 - a) + np.asarray(color, dtype=np.float32) * a
    frame[y0:y0 + h, x0:x0 + w] = roi.astype(np.uint8)


def _clip_box(cx: float, cy: float, r: float, width: int, height: int) -> tuple[int, int, int, int] | None:
    x0 = max(0, int(math.floor(cx - r)))
    y0 = max(0, int(math.floor(cy - r)))
    x1 = min(width, int(math.ceil(cx + r)) + 1)
    y1 = min(height, int(math.ceil(cy + r)) + 1)
    if x0 >= x1 or y0 >= y1:
        return None
    return x0, y0, x1, y1


def _dashed_line(
    frame: np.ndarray,
    p1: tuple[int, int],
    p2: tuple[int, int],
    color: tuple[int, int, int],
    dash: int = 5,
    gap: int = 5,
    thickness: int = 1,
) -> None:
    x1, y1 = p1
    x2, y2 = p2
    length = math.hypot(x2 - x1, y2 - y1)
    if length == 0:
        return
    ux, uy = (x2 - x1) / length, (y2 - y1) / length
    pos = 0.0
    while pos < length:
        end = min(pos + dash, length)
        a = (int(round(x1 + ux * pos)), int(round(y1 + uy * pos)))
        b = (int(round(x1 + ux * end)), int(round(y1 + uy * end)))
        cv2.line(frame, a, b, color, thickness, cv2.LINE_AA)
        pos += dash + gap


def _dashed_circle(
    frame: np.ndarray,
    center: tuple[int, int],
    radius: int,
    color: tuple[int, int, int],
    dash: float = 2.0,
    gap: float = 2.0,
) -> None:
    step = math.degrees((dash + gap) / radius)
    span = math.degrees(dash / radius)
    angle = 0.0
    while angle < 360.0:
        cv2.ellipse(frame, center, (radius, radius), 0, angle, angle + span, color, 1, cv2.LINE_AA)
        angle += step


# -- Static layers ------------------------------------------------------------

def _draw_grid(frame: np.ndarray, color: tuple[int, int, int]) -> None:
    height, width = frame.shape[:2]
    for x in range(0, width + 1, GRID_SPACING):
        cv2.line(frame, (x, 0), (x, height), color, 1)
    for y in range(0, height + 1, GRID_SPACING):
        cv2.line(frame, (0, y), (width, y), color, 1)


def _radar_geometry(width: int, height: int) -> tuple[int, int, int]:
    """(center_x, center_y, max_radius) of the radar rings and sweep."""
    max_radius = max(1, min(width, height) // 2 - RING_MARGIN)
    return width // 2, height // 2, max_radius


def _draw_rings(frame: np.ndarray) -> None:
    height, width = frame.shape[:2]
    cx, cy, max_r = _radar_geometry(width, height)
    for frac in (1.0, 0.66, 0.33):
        cv2.circle(frame, (cx, cy), max(1, int(max_r * frac)), palette.RING, 1, cv2.LINE_AA)


def _draw_hazard(frame: np.ndarray, cell: HazardCell, style: LayerStyle) -> None:
    height, width = frame.shape[:2]
    r = cell.radius * style.hazard_scale
    box = _clip_box(cell.x, cell.y, r, width, height)
    if box is not None:
        x0, y0, x1, y1 = box
        ys, xs = np.ogrid[y0:y1, x0:x1]
        dist = np.sqrt((xs - cell.x) ** 2 + (ys - cell.y) ** 2)
        alpha = np.clip(1.0 - dist / r, 0.0, 1.0) * style.hazard_opacity
        _blend_region(frame, x0, y0, alpha.astype(np.float32), style.hazard_color)
    if style.hazard_outline:
        center = (int(round(cell.x)), int(round(cell.y)))
        _blend_draw(
            frame, 0.5,
            lambda img: cv2.circle(img, center, int(r), style.hazard_color, 1, cv2.LINE_AA),
            _around(center[0], center[1], int(r)),
        )


def sweep_angle_at(now: float) -> float:
    """Sweep angle in radians for clock time *now*."""
    return (now * 2 * math.pi / SWEEP_PERIOD) % (2 * math.pi)


def _draw_sweep(frame: np.ndarray, angle: float) -> None:
    height, width = frame.shape[:2]
    cx, cy, max_r = _radar_geometry(width, height)
    box = _clip_box(cx, cy, max_r, width, height)
    if box is not None:
        x0, y0, x1, y1 = box
        ys, xs = np.ogrid[y0:y1, x0:x1]
        dx = xs - cx
        dy = ys - cy
        r = np.sqrt(dx * dx + dy * dy)
        theta = np.arctan2(dy, dx)
        # Angular offset from the trailing edge, wrapped into [0, 2*pi)
        delta = np.mod(theta - (angle - SWEEP_WIDTH), 2 * math.pi)
        inside = (delta <= SWEEP_WIDTH) & (r <= max_r)
        # Linear gradient along the leading edge: clear at the center
        along = r * np.cos(theta - angle)
        alpha = np.where(inside, np.clip(along / max_r, 0.0, 1.0) * SWEEP_MAX_ALPHA, 0.0)
        _blend_region(frame, x0, y0, alpha.astype(np.float32), palette.SWEEP)

    tip = (int(round(cx + max_r * math.cos(angle))), int(round(cy + max_r * math.sin(angle))))
    _blend_draw(
        frame, 0.8,
        lambda img: cv2.line(img, (cx, cy), tip, palette.SWEEP, 2, cv2.LINE_AA),
        _spanning((cx, cy), tip),
    )


# -- Entity drawers --------------------------------------------------------------

def _draw_target(frame: np.ndarray, target: Target, ctx: RenderContext) -> None:
    x, y = ctx.projector.to_pixel(target.lat, target.lng)
    hazard = ctx.target_in_hazard(target)
    color = palette.target_color(target, ctx.style.dim_outside_hazard, hazard)

    pulse = math.sin(ctx.now * 5.0) * 3.0 if hazard else 0.0
    halo, halo_alpha = palette.halo_color(target)
    halo_r = max(1, int(round(6 + pulse)))
    _blend_draw(
        frame, halo_alpha,
        lambda img: cv2.circle(img, (x, y), halo_r, halo, -1, cv2.LINE_AA),
        _around(x, y, halo_r),
    )

    cv2.circle(frame, (x, y), 3, palette.WHITE if hazard else color, -1, cv2.LINE_AA)

    if ctx.style.show_labels:
        text = f"{(target.label or target.target_id)[:16]} [{target.status.value.upper()}]"
        cv2.putText(frame, text, (x + 8, y + 4), FONT, 0.3, color, 1, cv2.LINE_AA)


def _draw_target_badges(frame: np.ndarray, target: Target, ctx: RenderContext) -> None:
    x, y = ctx.projector.to_pixel(target.lat, target.lng)
    if target.status is TargetStatus.LOST:
        cv2.line(frame, (x - 3, y - 3), (x + 3, y + 3), palette.ALERT_RED, 1, cv2.LINE_AA)
        cv2.line(frame, (x + 3, y - 3), (x - 3, y + 3), palette.ALERT_RED, 1, cv2.LINE_AA)
    if target.is_engaged:
        _dashed_circle(frame, (x, y), 12, palette.SECURED)


def _draw_rival(frame: np.ndarray, rival: RivalAgent, ctx: RenderContext) -> None:
    x, y = ctx.projector.to_pixel(rival.lat, rival.lng)
    spin = ctx.now * 2.0
    cos_a, sin_a = math.cos(spin), math.sin(spin)
    body = []
    for bx, by in ((0, -8), (6, 6), (-6, 6)):
        body.append([x + bx * cos_a - by * sin_a, y + bx * sin_a + by * cos_a])
    pts = np.round(np.array(body)).astype(np.int32)
    cv2.fillPoly(frame, [pts], palette.RIVAL, cv2.LINE_AA)

    ring_alpha = abs(math.sin(ctx.now * 5.0))
    _blend_draw(
        frame, ring_alpha,
        lambda img: cv2.circle(img, (x, y), 15, palette.RIVAL, 1, cv2.LINE_AA),
        _around(x, y, 15),
    )

    if ctx.rival_in_hazard(rival):
        _blend_draw(
            frame, 0.5 + 0.5 * ring_alpha,
            lambda img: cv2.circle(img, (x, y), 20, ctx.style.hazard_color, 1, cv2.LINE_AA),
            _around(x, y, 20),
        )


def _draw_pursuit_line(frame: np.ndarray, rival: RivalAgent, ctx: RenderContext) -> None:
    target = ctx.snapshot.target(rival.target_id)
    if target is None:
        return
    start = ctx.projector.to_pixel(rival.lat, rival.lng)
    end = ctx.projector.to_pixel(target.lat, target.lng)
    _blend_draw(
        frame, ctx.style.pursuit_line_alpha,
        lambda img: _dashed_line(img, start, end, palette.RIVAL_LINE),
        _spanning(start, end),
    )


def _draw_hazard_entity(frame: np.ndarray, cell: HazardCell, ctx: RenderContext) -> None:
    _draw_hazard(frame, cell, ctx.style)


_ENTITY_DRAWERS: dict[EntityKind, Callable[[np.ndarray, Entity, RenderContext], None]] = {
    EntityKind.HAZARD: _draw_hazard_entity,
    EntityKind.TARGET: _draw_target,
    EntityKind.RIVAL: _draw_rival,
}


def draw_entities(frame: np.ndarray, entities: Iterable[Entity], ctx: RenderContext) -> None:
    """Draw each entity with the drawer registered for its kind."""
    for entity in entities:
        drawer = _ENTITY_DRAWERS.get(entity.kind)
        if drawer is None:
            raise TypeError(f"No drawer for entity kind {entity.kind!r}")
        drawer(frame, entity, ctx)


# -- Overlays -----------------------------------------------------------------

def _draw_panel(
    frame: np.ndarray,
    x: int,
    y: int,
    w: int,
    h: int,
    border: tuple[int, int, int],
    alpha: float = 0.95,
) -> tuple[int, int]:
    """Draw a tooltip panel clamped inside the frame; returns its top-left."""
    height, width = frame.shape[:2]
    x = max(0, min(x, width - w - 1))
    y = max(0, min(y, height - h - 1))
    _blend_draw(
        frame, alpha,
        lambda img: cv2.rectangle(img, (x, y), (x + w, y + h), palette.PANEL, -1),
        (x, y, x + w + 1, y + h + 1),
    )
    cv2.rectangle(frame, (x, y), (x + w, y + h), border, 1)
    return x, y


def _draw_target_tooltip(frame: np.ndarray, target: Target, ctx: RenderContext) -> None:
    x, y = ctx.projector.to_pixel(target.lat, target.lng)
    hazard = ctx.target_in_hazard(target)
    color = palette.target_color(target, ctx.style.dim_outside_hazard, hazard)

    cv2.circle(frame, (x, y), 8, palette.WHITE, 1, cv2.LINE_AA)

    px, py = _draw_panel(frame, x + 10, y - 20, 150, 65, color)
    label = target.label or target.target_id
    if len(label) > 18:
        label = label[:18] + "..."
    cv2.putText(frame, label, (px + 5, py + 12), FONT, 0.35, palette.WHITE, 1, cv2.LINE_AA)
    cv2.putText(
        frame, f"COND: {target.condition.value.upper()}", (px + 5, py + 25),
        FONT, 0.33, color, 1, cv2.LINE_AA,
    )
    if hazard:
        cv2.putText(frame, "! STORM CELL ACTIVE", (px + 5, py + 55), FONT, 0.33, palette.ALERT_RED, 1, cv2.LINE_AA)
    elif target.assigned_team:
        cv2.putText(
            frame, f"TEAM {target.assigned_team.upper()} ENGAGED", (px + 5, py + 55),
            FONT, 0.33, palette.SECURED, 1, cv2.LINE_AA,
        )
    elif target.status is TargetStatus.LOST:
        cv2.putText(frame, "STATUS: LOST TO RIVAL", (px + 5, py + 55), FONT, 0.33, palette.ALERT_RED, 1, cv2.LINE_AA)


def _draw_rival_tooltip(frame: np.ndarray, rival: RivalAgent, ctx: RenderContext) -> None:
    x, y = ctx.projector.to_pixel(rival.lat, rival.lng)
    px, py = _draw_panel(frame, x + 10, y - 25, 120, 40, palette.RIVAL, alpha=0.9)
    cv2.putText(frame, "! RIVAL DRONE", (px + 5, py + 13), FONT, 0.35, palette.RIVAL, 1, cv2.LINE_AA)
    cv2.putText(frame, "CLICK TO JAM SIGNAL", (px + 5, py + 30), FONT, 0.33, palette.WHITE, 1, cv2.LINE_AA)


def _draw_legend(frame: np.ndarray, ctx: RenderContext) -> None:
    entries: list[tuple[tuple[int, int, int], str]] = [
        (palette.CRITICAL, "CRITICAL"),
        (palette.POOR, "POOR"),
        (palette.SECURED, "SECURED"),
    ]
    rivals = len(ctx.snapshot.rivals)
    if rivals and ctx.style.show_rivals:
        entries.append((palette.RIVAL, f"RIVAL ACTIVE ({rivals})"))
    if ctx.mode is ViewLayerMode.WEATHER:
        entries.append((palette.ALERT_RED, "HIGH WIND"))

    row_h = 14
    w, h = 130, 8 + row_h * len(entries)
    _blend_draw(
        frame, 0.5,
        lambda img: cv2.rectangle(img, (10, 10), (10 + w, 10 + h), (0, 0, 0), -1),
        (10, 10, 11 + w, 11 + h),
    )
    cv2.rectangle(frame, (10, 10), (10 + w, 10 + h), palette.RING, 1)
    for i, (color, text) in enumerate(entries):
        cy = 10 + 10 + i * row_h
        cv2.circle(frame, (20, cy), 3, color, -1, cv2.LINE_AA)
        cv2.putText(frame, text, (30, cy + 4), FONT, 0.32, palette.WHITE, 1, cv2.LINE_AA)

    # Layer mode indicator, top right
    height, width = frame.shape[:2]
    text = " | ".join(
        m.value.upper() if m is ctx.mode else m.value.lower() for m in ViewLayerMode
    )
    (tw, _), _ = cv2.getTextSize(text, FONT, 0.35, 1)
    cv2.putText(frame, text, (max(0, width - tw - 12), 22), FONT, 0.35, palette.WHITE, 1, cv2.LINE_AA)


def _draw_no_signal(frame: np.ndarray) -> None:
    height, width = frame.shape[:2]
    (tw, th), _ = cv2.getTextSize(NO_SIGNAL_TEXT, FONT, 0.5, 1)
    cv2.putText(
        frame, NO_SIGNAL_TEXT, ((width - tw) // 2, (height + th) // 2),
        FONT, 0.5, palette.TEXT_DIM, 1, cv2.LINE_AA,
    )


# ==========================================================================
# Pipeline
# ==========================================================================

class RenderPipeline:
    """Frame renderer; the only state is the frame counter."""

    def __init__(self, clock: Clock | None = None, padding: float = 50.0) -> None:
        self._clock = clock or SystemClock()
        self.padding = padding
        self._frames = 0
        self._lock = threading.Lock()

    @property
    def frames_rendered(self) -> int:
        return self._frames

    def render(
        self,
        snapshot: WorldSnapshot,
        width: int,
        height: int,
        mode: ViewLayerMode = ViewLayerMode.TACTICAL,
        hover: Hit = NO_HIT,
    ) -> RenderedFrame:
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")

        with self._lock:
            self._frames += 1
            frame_number = self._frames

        now = self._clock.now()
        angle = sweep_angle_at(now)
        style = style_for(mode)
        projector = Projector.for_points(snapshot.targets, width, height, self.padding)
        ctx = RenderContext(
            projector=projector,
            snapshot=snapshot,
            mode=mode,
            style=style,
            now=now,
            hover=hover,
        )

        frame = np.zeros((height, width, 3), dtype=np.uint8)
        frame[:] = palette.BACKGROUND

        _draw_grid(frame, style.grid_color)
        _draw_rings(frame)
        draw_entities(frame, snapshot.hazards, ctx)

        if snapshot.targets:
            draw_entities(frame, snapshot.targets, ctx)
            for target in snapshot.targets:
                _draw_target_badges(frame, target, ctx)
            if style.show_rivals:
                draw_entities(frame, snapshot.rivals, ctx)
                for rival in snapshot.rivals:
                    _draw_pursuit_line(frame, rival, ctx)
        else:
            _draw_no_signal(frame)

        _draw_sweep(frame, angle)
        _draw_legend(frame, ctx)
        self._draw_hover(frame, ctx)

        return RenderedFrame(
            image=frame,
            projector=projector,
            snapshot=snapshot,
            mode=mode,
            sweep_angle=angle,
            rendered_at=now,
            frame_number=frame_number,
        )

    def _draw_hover(self, frame: np.ndarray, ctx: RenderContext) -> None:
        hover = ctx.hover
        if isinstance(hover, RivalHit):
            rival = ctx.snapshot.rival(hover.rival.rival_id)
            if rival is not None and ctx.style.show_rivals:
                _draw_rival_tooltip(frame, rival, ctx)
        elif isinstance(hover, TargetHit):
            target = ctx.snapshot.target(hover.target.target_id)
            if target is not None:
                _draw_target_tooltip(frame, target, ctx)
