"""Unit tests for hazard cells -- creation ranges, drift, wraparound, containment."""
from __future__ import annotations

import random

import pytest

from radar.simulation.entities import HazardCell
from radar.simulation.hazards import (
    HAZARD_COUNT,
    create_hazards,
    hazard_at,
    in_hazard,
    step_hazard,
    step_hazards,
)


@pytest.mark.unit
class TestCreateHazards:
    def test_default_count_is_three(self):
        assert HAZARD_COUNT == 3
        assert len(create_hazards(rng=random.Random(0))) == 3

    def test_initial_ranges(self):
        for cell in create_hazards(50, random.Random(5)):
            assert 0 <= cell.x < 500
            assert 0 <= cell.y < 500
            assert 60 <= cell.radius <= 140
            assert 0.2 <= cell.vx <= 0.5
            assert 0.1 <= cell.vy <= 0.3

    def test_seeded_rng_is_reproducible(self):
        assert create_hazards(3, random.Random(11)) == create_hazards(3, random.Random(11))


@pytest.mark.unit
class TestStepHazard:
    def test_moves_by_velocity(self):
        cell = HazardCell(x=100, y=100, radius=50, vx=0.3, vy=0.2)
        moved = step_hazard(cell, 800, 600)
        assert moved.x == pytest.approx(100.3)
        assert moved.y == pytest.approx(100.2)
        assert moved.radius == 50

    def test_wraps_past_right_edge(self):
        cell = HazardCell(x=10, y=10, radius=2, vx=5, vy=0)
        positions = []
        for _ in range(4):
            cell = step_hazard(cell, 20, 20)
            positions.append(cell.x)
        assert positions == [15, 20, -2, 3]

    def test_wraps_past_bottom_edge(self):
        cell = HazardCell(x=0, y=590, radius=10, vx=0, vy=12)
        cell = step_hazard(cell, 800, 600)
        assert cell.y == 602
        cell = step_hazard(cell, 800, 600)
        assert cell.y == -10

    def test_never_exceeds_dimension_plus_radius(self):
        cells = create_hazards(3, random.Random(2))
        for _ in range(5000):
            cells = step_hazards(cells, 300, 200)
            for c in cells:
                assert c.x <= 300 + c.radius
                assert c.y <= 200 + c.radius


@pytest.mark.unit
class TestContainment:
    CELLS = [HazardCell(x=100, y=100, radius=50, vx=0, vy=0)]

    def test_inside_and_outside(self):
        assert in_hazard(self.CELLS, 120, 120)
        assert not in_hazard(self.CELLS, 200, 200)

    def test_boundary_is_exclusive(self):
        assert not in_hazard(self.CELLS, 150, 100)

    def test_multiplier_scales_radius(self):
        assert not in_hazard(self.CELLS, 165, 100, 1.0)
        assert in_hazard(self.CELLS, 165, 100, 1.5)
        assert not in_hazard(self.CELLS, 145, 100, 0.8)

    def test_hazard_at_returns_first_match(self):
        cells = self.CELLS + [HazardCell(x=110, y=100, radius=80, vx=0, vy=0)]
        assert hazard_at(cells, 105, 100) is cells[0]
        assert hazard_at(cells, 180, 100) is cells[1]
        assert hazard_at(cells, 400, 400) is None
