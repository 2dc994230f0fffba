"""
Scenario setup: occupancy grid, start pose and goal for a run.

Two presets are provided (``diagonal`` and ``reverse``); obstacles are
axis-aligned rectangles placed by rejection sampling so that start and goal
keep a minimum clearance. Placement gives up with ScenarioError after a
bounded number of attempts per obstacle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import math
import random

from .config import SimConfig
from .errors import InvalidConfiguration, ScenarioError
from .geometry_utils import point_rect_distance
from .grid import OccupancyGrid
from .pose import Point, Pose


@dataclass(frozen=True)
class Obstacle:
    """Axis-aligned rectangular obstacle in world coordinates.

    Attributes
    ----------
    x : float
        X coordinate of the rectangle center.
    y : float
        Y coordinate of the rectangle center.
    w : float
        Width of the rectangle.
    h : float
        Height of the rectangle.
    """

    x: float
    y: float
    w: float
    h: float

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Return (xmin, ymin, xmax, ymax)."""
        half_w = self.w / 2.0
        half_h = self.h / 2.0
        return (self.x - half_w, self.y - half_h, self.x + half_w, self.y + half_h)

    def distance_to(self, point: Point) -> float:
        return point_rect_distance(point[0], point[1], *self.bounds)


@dataclass(frozen=True)
class ScenarioPreset:
    start: Pose
    goal: Point


def _presets(map_size: float) -> Dict[str, ScenarioPreset]:
    near = 0.1 * map_size
    far = 0.9 * map_size
    return {
        "diagonal": ScenarioPreset(start=Pose(near, far, -math.pi / 2.0), goal=(far, near)),
        "reverse": ScenarioPreset(start=Pose(far, near, math.pi / 2.0), goal=(near, far)),
    }


PRESET_NAMES: Tuple[str, ...] = tuple(_presets(100.0))


def get_preset(name: str, map_size: float = 100.0) -> ScenarioPreset:
    presets = _presets(map_size)
    if name not in presets:
        raise KeyError(f"Unknown scenario preset: {name}. Available: {list(presets)}")
    return presets[name]


@dataclass
class ScenarioConfig:
    """Parameters for obstacle placement."""

    preset: str = "diagonal"
    num_obstacles: int = 12
    min_size: Tuple[float, float] = (3.0, 3.0)
    max_size: Tuple[float, float] = (8.0, 8.0)
    clearance: float = 10.0
    edge_margin: float = 5.0
    max_attempts: int = 100

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScenarioConfig":
        data = data or {}
        defaults = cls()
        return cls(
            preset=str(data.get("preset", defaults.preset)),
            num_obstacles=int(data.get("num_obstacles", defaults.num_obstacles)),
            min_size=tuple(float(v) for v in data.get("min_size", defaults.min_size)),
            max_size=tuple(float(v) for v in data.get("max_size", defaults.max_size)),
            clearance=float(data.get("clearance", defaults.clearance)),
            edge_margin=float(data.get("edge_margin", defaults.edge_margin)),
            max_attempts=int(data.get("max_attempts", defaults.max_attempts)),
        )


@dataclass
class Scenario:
    """Everything the core needs for one run."""

    name: str
    grid: OccupancyGrid
    start: Pose
    goal: Point
    obstacles: List[Obstacle] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Obstacle placement
# ---------------------------------------------------------------------------


def place_obstacles(
    width: float,
    height: float,
    count: int,
    min_size: Tuple[float, float],
    max_size: Tuple[float, float],
    keep_clear: Sequence[Point],
    clearance: float,
    rng: random.Random,
    margin: float = 0.5,
    max_attempts: int = 100,
) -> List[Obstacle]:
    """Sample rectangles that stay at least ``clearance`` from every keep-clear point.

    Each obstacle gets ``max_attempts`` tries; ScenarioError is raised when
    one cannot be placed.
    """
    if max_attempts < 1:
        raise InvalidConfiguration(f"max_attempts must be >= 1, got {max_attempts}")
    min_w, min_h = min_size
    max_w, max_h = max_size
    obstacles: List[Obstacle] = []
    for index in range(count):
        for _ in range(max_attempts):
            w = rng.uniform(min_w, max_w)
            h = rng.uniform(min_h, max_h)
            x = rng.uniform(margin + w / 2.0, width - margin - w / 2.0)
            y = rng.uniform(margin + h / 2.0, height - margin - h / 2.0)
            candidate = Obstacle(x=x, y=y, w=w, h=h)
            if all(candidate.distance_to(p) >= clearance for p in keep_clear):
                obstacles.append(candidate)
                break
        else:
            raise ScenarioError(
                f"could not place obstacle {index + 1}/{count} after {max_attempts} attempts"
            )
    return obstacles


def rasterize(grid: OccupancyGrid, obstacles: Sequence[Obstacle]) -> None:
    """Mark the cells covered by each obstacle."""
    for obs in obstacles:
        grid.fill_rect(*obs.bounds)


# ---------------------------------------------------------------------------
# Scenario construction
# ---------------------------------------------------------------------------


def build_scenario(
    sim_config: SimConfig,
    scenario_config: ScenarioConfig,
    rng: Optional[random.Random] = None,
) -> Scenario:
    """Build a frozen grid with random obstacles around the chosen preset."""
    sim_config.validate()
    rng = rng or random.Random(sim_config.seed)
    preset = get_preset(scenario_config.preset, sim_config.map_size)

    grid = OccupancyGrid(sim_config.map_size, sim_config.map_size, sim_config.resolution)
    obstacles = place_obstacles(
        width=grid.width,
        height=grid.height,
        count=scenario_config.num_obstacles,
        min_size=scenario_config.min_size,
        max_size=scenario_config.max_size,
        keep_clear=[preset.start.position, preset.goal],
        clearance=scenario_config.clearance,
        rng=rng,
        margin=scenario_config.edge_margin,
        max_attempts=scenario_config.max_attempts,
    )
    rasterize(grid, obstacles)
    return Scenario(
        name=scenario_config.preset,
        grid=grid.freeze(),
        start=preset.start,
        goal=preset.goal,
        obstacles=obstacles,
    )
