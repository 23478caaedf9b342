"""Unit tests for the lat/lng <-> surface projection.

Tests cover:
  - Bounding box derivation (points, empty set, degenerate ranges)
  - Corner mapping onto the padded surface
  - Round trip project -> unproject
  - Screen orientation (north up, east right)
  - Projector value object
"""
from __future__ import annotations

import pytest

from radar.geo.projection import (
    RANGE_EPSILON,
    UNIT_BOX,
    BoundingBox,
    Projector,
    compute_bbox,
    project,
    unproject,
)
from radar.simulation.entities import Target


def _t(tid: str, lat: float, lng: float) -> Target:
    return Target(target_id=tid, lat=lat, lng=lng)


@pytest.mark.unit
class TestComputeBbox:
    def test_min_max_of_points(self):
        bbox = compute_bbox([_t("a", 35.0, -97.5), _t("b", 35.2, -97.1), _t("c", 34.9, -97.3)])
        assert bbox == BoundingBox(34.9, 35.2, -97.5, -97.1)

    def test_empty_is_unit_box(self):
        assert compute_bbox([]) == UNIT_BOX
        assert UNIT_BOX == BoundingBox(0.0, 1.0, 0.0, 1.0)

    def test_single_point_uses_epsilon(self):
        bbox = compute_bbox([_t("a", 35.0, -97.0)])
        assert bbox.lat_range == RANGE_EPSILON
        assert bbox.lng_range == RANGE_EPSILON

    def test_collinear_points_floor_one_axis(self):
        bbox = compute_bbox([_t("a", 35.0, -97.0), _t("b", 35.0, -96.0)])
        assert bbox.lat_range == RANGE_EPSILON
        assert bbox.lng_range == pytest.approx(1.0)


@pytest.mark.unit
class TestProject:
    BBOX = BoundingBox(35.0, 36.0, -98.0, -97.0)

    def test_corners_map_to_padded_surface_corners(self):
        w, h, pad = 800, 600, 50
        nw, ne, sw, se = self.BBOX.corners()
        assert project(*nw, self.BBOX, w, h, pad) == pytest.approx((pad, pad))
        assert project(*ne, self.BBOX, w, h, pad) == pytest.approx((w - pad, pad))
        assert project(*sw, self.BBOX, w, h, pad) == pytest.approx((pad, h - pad))
        assert project(*se, self.BBOX, w, h, pad) == pytest.approx((w - pad, h - pad))

    def test_north_is_up_east_is_right(self):
        x1, y1 = project(35.2, -97.8, self.BBOX, 800, 600, 50)
        x2, y2 = project(35.8, -97.2, self.BBOX, 800, 600, 50)
        assert x2 > x1
        assert y2 < y1

    def test_center_maps_to_surface_center(self):
        assert project(35.5, -97.5, self.BBOX, 800, 600, 50) == pytest.approx((400, 300))

    @pytest.mark.parametrize("lat,lng", [(35.0, -98.0), (35.37, -97.61), (36.0, -97.0), (35.999, -97.001)])
    def test_round_trip(self, lat, lng):
        x, y = project(lat, lng, self.BBOX, 640, 480, 40)
        back = unproject(x, y, self.BBOX, 640, 480, 40)
        assert back == pytest.approx((lat, lng), abs=1e-9)

    def test_round_trip_with_degenerate_box(self):
        bbox = compute_bbox([_t("a", 35.0, -97.0)])
        x, y = project(35.0, -97.0, bbox, 800, 600, 50)
        assert (x, y) == pytest.approx((50, 550))
        assert unproject(x, y, bbox, 800, 600, 50) == pytest.approx((35.0, -97.0))

    def test_pure(self):
        a = project(35.3, -97.4, self.BBOX, 800, 600, 50)
        b = project(35.3, -97.4, BoundingBox(35.0, 36.0, -98.0, -97.0), 800, 600, 50)
        assert a == b


@pytest.mark.unit
class TestProjector:
    def test_for_points_matches_functions(self):
        targets = [_t("a", 35.0, -97.5), _t("b", 35.1, -97.4)]
        p = Projector.for_points(targets, 800, 600, 50)
        assert p.bbox == compute_bbox(targets)
        assert p.to_surface(35.05, -97.45) == project(35.05, -97.45, p.bbox, 800, 600, 50)

    def test_to_pixel_rounds(self):
        p = Projector(UNIT_BOX, 100, 100, 0)
        assert p.to_pixel(0.254, 0.746) == (75, 75)
        assert all(isinstance(v, int) for v in p.to_pixel(0.25, 0.75))

    def test_to_geo_inverts_to_surface(self):
        p = Projector(BoundingBox(10.0, 20.0, 30.0, 50.0), 500, 400, 25)
        x, y = p.to_surface(12.5, 44.0)
        assert p.to_geo(x, y) == pytest.approx((12.5, 44.0))

    def test_empty_targets_use_unit_box(self):
        p = Projector.for_points([], 800, 600)
        assert p.bbox == UNIT_BOX
        assert p.to_surface(0.0, 0.0) == pytest.approx((50, 550))
