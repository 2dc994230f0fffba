from __future__ import annotations

import math

import numpy as np
import pytest

from apf_sim.errors import InvalidConfiguration
from apf_sim.grid import OccupancyGrid


def _grid_with_cell(ix: int, iy: int, size: float = 10.0) -> OccupancyGrid:
    grid = OccupancyGrid(width=size, height=size, resolution=1.0)
    grid.set_occupied((ix, iy))
    return grid


def test_cells_are_half_open() -> None:
    grid = OccupancyGrid(width=10.0, height=10.0, resolution=1.0)
    assert grid.world_to_cell(1.0, 2.999) == (1, 2)
    assert grid.world_to_cell(2.0, 3.0) == (2, 3)
    assert grid.cell_to_world(2, 3) == (2.5, 3.5)


def test_resolution_scales_cells() -> None:
    grid = OccupancyGrid(width=10.0, height=5.0, resolution=2.0)
    assert grid.shape == (20, 10)
    assert math.isclose(grid.cell_size, 0.5)
    assert grid.world_to_cell(1.0, 1.0) == (2, 2)


def test_outside_grid_is_occupied() -> None:
    grid = OccupancyGrid(width=10.0, height=10.0)
    assert grid.is_occupied((-1, 0))
    assert grid.is_occupied((0, 10))
    assert grid.is_occupied_at_world((10.0, 5.0))
    assert not grid.is_occupied_at_world((9.99, 5.0))


def test_invalid_resolution_rejected() -> None:
    with pytest.raises(InvalidConfiguration):
        OccupancyGrid(width=10.0, height=10.0, resolution=0.0)


def test_ray_hits_thin_wall_at_cell_boundary() -> None:
    grid = OccupancyGrid(width=10.0, height=10.0)
    for iy in range(10):
        grid.set_occupied((5, iy))
    hit = grid.ray_intersection((1.5, 5.5), 0.0, 10.0)
    assert hit is not None
    assert math.isclose(hit[0], 5.0, abs_tol=1e-9)
    assert math.isclose(hit[1], 5.5, abs_tol=1e-9)


def test_ray_hits_from_negative_direction() -> None:
    grid = _grid_with_cell(5, 5)
    hit = grid.ray_intersection((8.5, 5.5), math.pi, 10.0)
    assert hit is not None
    assert math.isclose(hit[0], 6.0, abs_tol=1e-9)
    assert math.isclose(hit[1], 5.5, abs_tol=1e-9)


def test_diagonal_ray_does_not_skip_single_cell() -> None:
    grid = _grid_with_cell(5, 5)
    hit = grid.ray_intersection((2.5, 2.7), math.pi / 4.0, 10.0)
    assert hit is not None
    assert math.isclose(hit[0], 5.0, abs_tol=1e-9)
    assert math.isclose(hit[1], 5.2, abs_tol=1e-9)


def test_rays_toward_single_cell_always_hit() -> None:
    grid = OccupancyGrid(width=50.0, height=50.0)
    grid.set_occupied((25, 25))
    for k in range(36):
        a = 2.0 * math.pi * k / 36
        ox = 25.5 - 10.0 * math.cos(a)
        oy = 25.5 - 10.0 * math.sin(a)
        assert grid.ray_intersection((ox, oy), a, 15.0) is not None


def test_ray_misses_when_leaving_grid_or_out_of_range() -> None:
    grid = _grid_with_cell(5, 5)
    assert grid.ray_intersection((1.5, 1.5), math.pi / 2.0, 100.0) is None
    assert grid.ray_intersection((1.5, 5.5), 0.0, 3.0) is None
    assert grid.ray_intersection((1.5, 5.5), 0.0, 3.5) is not None


def test_ray_from_occupied_origin_hits_at_origin() -> None:
    grid = _grid_with_cell(5, 5)
    assert grid.ray_intersection((5.5, 5.5), 1.0, 10.0) == (5.5, 5.5)
    assert grid.ray_intersection((-3.0, 5.0), 0.0, 10.0) == (-3.0, 5.0)


def test_ray_intersection_is_idempotent() -> None:
    grid = OccupancyGrid(width=30.0, height=30.0)
    grid.fill_rect(12.0, 12.0, 16.0, 16.0)
    grid.freeze()
    first = grid.ray_intersection((3.3, 4.1), 0.7, 25.0)
    second = grid.ray_intersection((3.3, 4.1), 0.7, 25.0)
    assert first is not None
    assert first == second


def test_fill_rect_and_freeze() -> None:
    grid = OccupancyGrid(width=10.0, height=10.0)
    grid.fill_rect(2.0, 3.0, 4.0, 5.0)
    assert sorted(grid.occupied_cells()) == [(2, 3), (2, 4), (3, 3), (3, 4)]
    grid.freeze()
    assert grid.frozen
    with pytest.raises(RuntimeError):
        grid.set_occupied((0, 0))
    with pytest.raises(RuntimeError):
        grid.fill_rect(0.0, 0.0, 1.0, 1.0)


def test_from_array_uses_x_first_indexing() -> None:
    cells = np.zeros((4, 3), dtype=bool)
    cells[3, 1] = True
    grid = OccupancyGrid.from_array(cells)
    assert grid.shape == (4, 3)
    assert math.isclose(grid.width, 4.0)
    assert grid.is_occupied((3, 1))
    assert grid.is_occupied_at_world((3.5, 1.5))


def test_distance_to_nearest_occupied() -> None:
    grid = _grid_with_cell(5, 5)
    assert math.isclose(grid.distance_to_nearest_occupied((3.0, 5.5)), 2.0)
    assert math.isclose(grid.distance_to_nearest_occupied((9.0, 10.0)), 5.0)
    assert grid.distance_to_nearest_occupied((5.2, 5.7)) == 0.0
    empty = OccupancyGrid(width=10.0, height=10.0)
    assert math.isinf(empty.distance_to_nearest_occupied((1.0, 1.0)))


def test_ray_hits_cell_boundaries_at_finer_resolution() -> None:
    grid = OccupancyGrid(width=10.0, height=10.0, resolution=2.0)
    # ix=10 spans [5.0, 5.5) at half-unit cells
    for iy in range(20):
        grid.set_occupied((10, iy))
    hit = grid.ray_intersection((1.25, 5.5), 0.0, 10.0)
    assert hit is not None
    assert math.isclose(hit[0], 5.0, abs_tol=1e-9)
    assert math.isclose(hit[1], 5.5, abs_tol=1e-9)
    back = grid.ray_intersection((8.25, 5.5), math.pi, 10.0)
    assert back is not None
    assert math.isclose(back[0], 5.5, abs_tol=1e-9)
    assert math.isclose(back[1], 5.5, abs_tol=1e-9)
