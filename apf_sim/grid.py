from __future__ import annotations

from typing import Iterator, Optional, Tuple
import math

import numpy as np

from .errors import InvalidConfiguration
from .pose import Point


Cell = Tuple[int, int]

_DIR_EPS = 1e-12


class OccupancyGrid:
    """Fixed-resolution binary occupancy grid over world coordinates.

    Coordinates are defined with origin at bottom-left of the world:
    - x increases to the right
    - y increases upward

    Cell ``(i, j)`` covers the half-open square
    ``[i*s, (i+1)*s) x [j*s, (j+1)*s)`` where ``s = 1 / resolution``.
    Anything outside the grid is reported as occupied (world boundary).

    Parameters
    ----------
    width : float
        World width (world units).
    height : float
        World height (world units).
    resolution : float
        Cells per world unit.
    """

    def __init__(self, width: float, height: float, resolution: float = 1.0) -> None:
        if resolution <= 0.0:
            raise InvalidConfiguration(f"resolution must be positive, got {resolution}")
        if width <= 0.0 or height <= 0.0:
            raise InvalidConfiguration(f"grid size must be positive, got {width}x{height}")
        self.width = float(width)
        self.height = float(height)
        self.resolution = float(resolution)
        self.cell_size = 1.0 / self.resolution
        nx = int(round(self.width * self.resolution))
        ny = int(round(self.height * self.resolution))
        self._cells = np.zeros((nx, ny), dtype=bool)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_array(cls, cells: np.ndarray, resolution: float = 1.0) -> "OccupancyGrid":
        """Create a grid from a boolean array indexed ``[ix, iy]``."""
        arr = np.asarray(cells, dtype=bool)
        if arr.ndim != 2:
            raise InvalidConfiguration(f"occupancy array must be 2-D, got shape {arr.shape}")
        grid = cls(arr.shape[0] / resolution, arr.shape[1] / resolution, resolution)
        grid._cells[:, :] = arr
        return grid

    @property
    def shape(self) -> Tuple[int, int]:
        return self._cells.shape

    @property
    def frozen(self) -> bool:
        return not self._cells.flags.writeable

    def freeze(self) -> "OccupancyGrid":
        """Make the grid read-only for the rest of its lifetime."""
        self._cells.flags.writeable = False
        return self

    def _check_writable(self) -> None:
        if self.frozen:
            raise RuntimeError("occupancy grid is frozen")

    def set_occupied(self, cell: Cell, occupied: bool = True) -> None:
        """Mark a single cell."""
        self._check_writable()
        ix, iy = cell
        if not self.in_bounds(ix, iy):
            raise IndexError(f"cell {cell} outside grid of shape {self.shape}")
        self._cells[ix, iy] = occupied

    def fill_rect(self, xmin: float, ymin: float, xmax: float, ymax: float) -> None:
        """Mark every cell overlapping the world rectangle [xmin,xmax)x[ymin,ymax)."""
        self._check_writable()
        nx, ny = self.shape
        i0 = max(0, int(math.floor(xmin * self.resolution)))
        j0 = max(0, int(math.floor(ymin * self.resolution)))
        i1 = min(nx, int(math.ceil(xmax * self.resolution)))
        j1 = min(ny, int(math.ceil(ymax * self.resolution)))
        if i1 > i0 and j1 > j0:
            self._cells[i0:i1, j0:j1] = True

    # ------------------------------------------------------------------
    # Coordinate transforms
    # ------------------------------------------------------------------
    def world_to_cell(self, x: float, y: float) -> Cell:
        """Convert world coordinates to the index of the containing cell."""
        return int(math.floor(x * self.resolution)), int(math.floor(y * self.resolution))

    def cell_to_world(self, ix: int, iy: int) -> Point:
        """Convert cell indices to world coordinates (cell center)."""
        return (ix + 0.5) * self.cell_size, (iy + 0.5) * self.cell_size

    def in_bounds(self, ix: int, iy: int) -> bool:
        nx, ny = self.shape
        return 0 <= ix < nx and 0 <= iy < ny

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_occupied(self, cell: Cell) -> bool:
        """Return True if the cell is occupied or lies outside the grid."""
        ix, iy = cell
        if not self.in_bounds(ix, iy):
            return True
        return bool(self._cells[ix, iy])

    def is_occupied_at_world(self, point: Point) -> bool:
        return self.is_occupied(self.world_to_cell(point[0], point[1]))

    def occupied_cells(self) -> Iterator[Cell]:
        """Yield indices of all occupied cells."""
        for ix, iy in np.argwhere(self._cells):
            yield int(ix), int(iy)

    def ray_intersection(
        self,
        origin: Point,
        angle: float,
        max_range: float,
    ) -> Optional[Point]:
        """First occupied-cell boundary point hit by a ray, or None.

        Walks the cells crossed by the ray in order (Amanatides-Woo traversal),
        so no cell is skipped regardless of how thin an obstacle is. Returns
        None when the ray leaves the grid or travels ``max_range`` without
        entering an occupied cell. A ray starting inside an occupied cell, or
        outside the grid, hits at its origin.
        """
        ox, oy = float(origin[0]), float(origin[1])
        ix, iy = self.world_to_cell(ox, oy)
        if self.is_occupied((ix, iy)):
            return (ox, oy)

        dx = math.cos(angle)
        dy = math.sin(angle)
        step_x, t_next_x, t_delta_x = self._axis_walk(ox, ix, dx)
        step_y, t_next_y, t_delta_y = self._axis_walk(oy, iy, dy)

        cells = self._cells
        while True:
            if t_next_x < t_next_y:
                t = t_next_x
                ix += step_x
                t_next_x += t_delta_x
            else:
                t = t_next_y
                iy += step_y
                t_next_y += t_delta_y
            if t > max_range or not self.in_bounds(ix, iy):
                return None
            if cells[ix, iy]:
                return (ox + t * dx, oy + t * dy)

    def _axis_walk(self, origin: float, index: int, direction: float) -> Tuple[int, float, float]:
        """Step sign, distance to first boundary, and distance per cell along one axis."""
        size = self.cell_size
        if direction > _DIR_EPS:
            return 1, ((index + 1) * size - origin) / direction, size / direction
        if direction < -_DIR_EPS:
            return -1, (index * size - origin) / direction, -size / direction
        return 0, math.inf, math.inf

    def distance_to_nearest_occupied(self, point: Point) -> float:
        """Distance from a point to the closest occupied cell (0 if inside one).

        Returns ``math.inf`` when the grid holds no occupied cells.
        """
        occupied = np.argwhere(self._cells)
        if occupied.size == 0:
            return math.inf
        s = self.cell_size
        xmin = occupied[:, 0] * s
        ymin = occupied[:, 1] * s
        px, py = float(point[0]), float(point[1])
        closest_x = np.clip(px, xmin, xmin + s)
        closest_y = np.clip(py, ymin, ymin + s)
        return float(np.min(np.hypot(px - closest_x, py - closest_y)))
