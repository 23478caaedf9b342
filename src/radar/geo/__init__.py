"""Geospatial projection between lat/lng and the radar drawing surface."""

from radar.geo.projection import (
    RANGE_EPSILON,
    UNIT_BOX,
    BoundingBox,
    Projector,
    compute_bbox,
    project,
    unproject,
)

__all__ = [
    "RANGE_EPSILON",
    "UNIT_BOX",
    "BoundingBox",
    "Projector",
    "compute_bbox",
    "project",
    "unproject",
]
