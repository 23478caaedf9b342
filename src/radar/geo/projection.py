"""Geographic <-> surface projection for the radar display.

The projection is a local affine mapping, not a geodesic transform.  A
bounding box is derived from the current target set every frame and every
tick; lat/lng are normalized into [0, 1] against it and scaled into the
padded drawing surface.

Convention:
    - +x = East (increasing longitude), left to right
    - +y = South on screen: higher latitude maps to a smaller y
    - The four bounding-box corners land on the four surface corners,
      inset by ``padding``

The functions are pure.  The hit-test resolver relies on this: projecting
the same (lat, lng) against a freshly recomputed, identical bounding box
yields the identical pixel, so a click can be matched to the entity the
renderer drew there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

# Substituted for a zero lat or lng range (all targets on one line).
RANGE_EPSILON = 0.01


class HasLatLng(Protocol):
    lat: float
    lng: float


@dataclass(frozen=True)
class BoundingBox:
    """Min/max latitude and longitude across the current targets."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @property
    def lat_range(self) -> float:
        rng = self.max_lat - self.min_lat
        return rng if rng != 0 else RANGE_EPSILON

    @property
    def lng_range(self) -> float:
        rng = self.max_lng - self.min_lng
        return rng if rng != 0 else RANGE_EPSILON

    def corners(self) -> list[tuple[float, float]]:
        """(lat, lng) of the NW, NE, SW, SE corners."""
        return [
            (self.max_lat, self.min_lng),
            (self.max_lat, self.max_lng),
            (self.min_lat, self.min_lng),
            (self.min_lat, self.max_lng),
        ]


UNIT_BOX = BoundingBox(0.0, 1.0, 0.0, 1.0)


def compute_bbox(points: Iterable[HasLatLng]) -> BoundingBox:
    """Derive the bounding box of *points*, or the unit box if there are none."""
    min_lat = min_lng = float("inf")
    max_lat = max_lng = float("-inf")
    empty = True
    for p in points:
        empty = False
        min_lat = min(min_lat, p.lat)
        max_lat = max(max_lat, p.lat)
        min_lng = min(min_lng, p.lng)
        max_lng = max(max_lng, p.lng)
    if empty:
        return UNIT_BOX
    return BoundingBox(min_lat, max_lat, min_lng, max_lng)


def project(
    lat: float,
    lng: float,
    bbox: BoundingBox,
    width: float,
    height: float,
    padding: float,
) -> tuple[float, float]:
    """Map (lat, lng) to surface (x, y) pixels."""
    y_norm = (lat - bbox.min_lat) / bbox.lat_range
    x_norm = (lng - bbox.min_lng) / bbox.lng_range
    x = padding + x_norm * (width - padding * 2)
    y = height - (padding + y_norm * (height - padding * 2))
    return x, y


def unproject(
    x: float,
    y: float,
    bbox: BoundingBox,
    width: float,
    height: float,
    padding: float,
) -> tuple[float, float]:
    """Inverse of :func:`project`: surface (x, y) back to (lat, lng)."""
    inner_w = width - padding * 2
    inner_h = height - padding * 2
    x_norm = (x - padding) / inner_w if inner_w else 0.0
    y_norm = (height - y - padding) / inner_h if inner_h else 0.0
    lat = bbox.min_lat + y_norm * bbox.lat_range
    lng = bbox.min_lng + x_norm * bbox.lng_range
    return lat, lng


@dataclass(frozen=True)
class Projector:
    """A bounding box bound to a surface size.

    The renderer builds one per frame and hands the same instance to the
    hit-test resolver, so pointer events are matched against exactly what
    was drawn.
    """

    bbox: BoundingBox
    width: int
    height: int
    padding: float = 50.0

    @classmethod
    def for_points(
        cls, points: Iterable[HasLatLng], width: int, height: int, padding: float = 50.0,
    ) -> Projector:
        return cls(compute_bbox(points), width, height, padding)

    def to_surface(self, lat: float, lng: float) -> tuple[float, float]:
        return project(lat, lng, self.bbox, self.width, self.height, self.padding)

    def to_pixel(self, lat: float, lng: float) -> tuple[int, int]:
        """Surface position rounded to integer pixels for OpenCV drawing."""
        x, y = self.to_surface(lat, lng)
        return int(round(x)), int(round(y))

    def to_geo(self, x: float, y: float) -> tuple[float, float]:
        return unproject(x, y, self.bbox, self.width, self.height, self.padding)
