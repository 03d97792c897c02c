"""Tests for the enclosure engine (scanline polygon-to-grid fill).

The scanline result is checked against the definition it optimizes: a
point-in-polygon test at every cell center of the bounding box.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from domain.territory.config import TerritoryConfig
from domain.territory.enclosure import contains, enclosed_cells
from domain.territory.grid import format_cell_id
from domain.territory.simplification import simplify
from domain.territory.value_objects import GeoFix
from tests.conftest_utils import grid_square, square_corners


def brute_force_cells(polygon: list[GeoFix], config: TerritoryConfig) -> frozenset[str]:
    """Reference: test every cell center of the (padded) bounding box."""
    g = config.grid_size_deg
    ring = simplify(polygon, config.enclosure_epsilon_deg)
    lats = [p.lat for p in ring]
    lngs = [p.lng for p in ring]
    cells = set()
    for row in range(math.floor(min(lats) / g) - 1, math.ceil(max(lats) / g) + 2):
        for col in range(math.floor(min(lngs) / g) - 1, math.ceil(max(lngs) / g) + 2):
            if contains(ring, row * g, col * g):
                cells.add(format_cell_id(row, col, g))
    return frozenset(cells)


def create_star(n_tips: int, seed: int, grid_size: float) -> list[GeoFix]:
    """Irregular star polygon (concave), ~15 cells across."""
    rng = np.random.default_rng(seed)
    center_lat, center_lng = -23.5505, -46.6333
    points = []
    for k in range(2 * n_tips):
        angle = math.pi * k / n_tips
        radius = (7.5 if k % 2 == 0 else 3.0) * grid_size * rng.uniform(0.7, 1.3)
        points.append(
            GeoFix(
                lat=center_lat + radius * math.sin(angle),
                lng=center_lng + radius * math.cos(angle),
            )
        )
    return [*points, points[0]]


# ===========================================================================
# TC-001: Axis-aligned Square (closed form)
# ===========================================================================
@pytest.mark.parametrize("size", [1, 3, 8])
def test_grid_square_encloses_exact_cells(config, grid_size, size):
    """TC-001: size x size cell centers inside -> exactly size**2 cells."""
    row0, col0 = -392508, -777222
    polygon = grid_square(row0, col0, size, grid_size)

    cells = enclosed_cells(polygon, config)

    expected = {
        format_cell_id(row0 + dr, col0 + dc, grid_size)
        for dr in range(size)
        for dc in range(size)
    }
    assert cells == expected


def test_square_cell_count_matches_area(config, grid_size):
    """TC-002: A 50 m square holds ~area / cell-area cells."""
    polygon = square_corners(50.0)

    cells = enclosed_cells(polygon, config)

    cell_h = grid_size * 111_195.0
    cell_w = cell_h * math.cos(math.radians(polygon[0].lat))
    expected = 2500.0 / (cell_h * cell_w)
    boundary = 2 * (50.0 / cell_h + 50.0 / cell_w)
    assert abs(len(cells) - expected) <= boundary


# ===========================================================================
# TC-003: Winding Invariance
# ===========================================================================
def test_enclosure_ignores_winding_direction(config, grid_size):
    """TC-003: Clockwise and counter-clockwise input give the same set."""
    polygon = create_star(7, seed=3, grid_size=grid_size)

    assert enclosed_cells(polygon, config) == enclosed_cells(polygon[::-1], config)


# ===========================================================================
# TC-004: Equivalence With Point-in-polygon
# ===========================================================================
@pytest.mark.slow
@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_scanline_matches_point_in_polygon(config, grid_size, seed):
    """TC-004: Scanline fill equals per-cell ray casting on a concave star."""
    polygon = create_star(5 + seed, seed=seed, grid_size=grid_size)

    cells = enclosed_cells(polygon, config)

    assert cells
    assert cells == brute_force_cells(polygon, config)


def test_scanline_matches_point_in_polygon_self_intersecting(config, grid_size):
    """TC-005: Even-odd agrees on a bow-tie (self-intersecting) ring."""
    g = grid_size
    base_lat, base_lng = 100.3 * g, 200.7 * g
    polygon = [
        GeoFix(lat=base_lat, lng=base_lng),
        GeoFix(lat=base_lat + 9.1 * g, lng=base_lng + 12.2 * g),
        GeoFix(lat=base_lat + 9.1 * g, lng=base_lng),
        GeoFix(lat=base_lat, lng=base_lng + 12.2 * g),
        GeoFix(lat=base_lat, lng=base_lng),
    ]

    cells = enclosed_cells(polygon, config)

    assert cells
    assert cells == brute_force_cells(polygon, config)


def test_scanline_matches_walked_square(config):
    """TC-006: Same equivalence on a real-world 50 m square ring."""
    polygon = square_corners(50.0)

    assert enclosed_cells(polygon, config) == brute_force_cells(polygon, config)


# ===========================================================================
# TC-007: Degenerate Input
# ===========================================================================
def test_fewer_than_three_points_is_empty(config):
    """TC-007: No polygon, no cells."""
    a, b = GeoFix(lat=0.0, lng=0.0), GeoFix(lat=0.001, lng=0.001)

    assert enclosed_cells([], config) == frozenset()
    assert enclosed_cells([a, b], config) == frozenset()


def test_collinear_polygon_is_empty(config):
    """TC-008: A zero-area ring encloses nothing."""
    line = [GeoFix(lat=0.0, lng=i * 1e-4) for i in range(5)]

    assert enclosed_cells([*line, *line[-2::-1]], config) == frozenset()


# ===========================================================================
# TC-009: Row Guard
# ===========================================================================
def test_huge_polygon_returns_empty(config, caplog):
    """TC-009: A continent-sized jump aborts the scan with a warning."""
    polygon = [
        GeoFix(lat=-23.0, lng=-46.0),
        GeoFix(lat=-23.0, lng=-45.0),
        GeoFix(lat=-20.0, lng=-45.0),
        GeoFix(lat=-23.0, lng=-46.0),
    ]

    assert enclosed_cells(polygon, config) == frozenset()
    assert any("grid rows" in r.getMessage() for r in caplog.records)


def test_row_guard_is_configurable(grid_size):
    """TC-010: max_scan_rows bounds the scan exactly."""
    polygon = grid_square(0, 0, 10, grid_size)

    assert len(enclosed_cells(polygon, TerritoryConfig(max_scan_rows=10))) == 100
    assert enclosed_cells(polygon, TerritoryConfig(max_scan_rows=9)) == frozenset()


def test_wide_polygon_returns_empty(config, caplog):
    """TC-012: An east-west jump spanning few rows is bounded too."""
    polygon = [
        GeoFix(lat=-23.0, lng=-46.0),
        GeoFix(lat=-23.0, lng=-16.0),
        GeoFix(lat=-22.9999, lng=-16.0),
        GeoFix(lat=-22.9999, lng=-46.0),
        GeoFix(lat=-23.0, lng=-46.0),
    ]

    assert enclosed_cells(polygon, config) == frozenset()
    assert any("grid columns" in r.getMessage() for r in caplog.records)


def test_column_guard_is_configurable(grid_size):
    """TC-013: max_scan_cols bounds the scan exactly."""
    polygon = grid_square(0, 0, 10, grid_size)

    assert len(enclosed_cells(polygon, TerritoryConfig(max_scan_cols=10))) == 100
    assert enclosed_cells(polygon, TerritoryConfig(max_scan_cols=9)) == frozenset()


# ===========================================================================
# TC-011: Point-in-polygon Boundary Convention
# ===========================================================================
def test_contains_boundary_convention():
    """TC-011: South/west edges are inside, north/east edges are outside."""
    square = [
        GeoFix(lat=0.0, lng=0.0),
        GeoFix(lat=0.0, lng=1.0),
        GeoFix(lat=1.0, lng=1.0),
        GeoFix(lat=1.0, lng=0.0),
    ]

    assert contains(square, 0.5, 0.5)
    assert contains(square, 0.0, 0.5)  # south edge
    assert contains(square, 0.5, 0.0)  # west edge
    assert not contains(square, 1.0, 0.5)  # north edge
    assert not contains(square, 0.5, 1.0)  # east edge
    assert not contains(square, 2.0, 2.0)
