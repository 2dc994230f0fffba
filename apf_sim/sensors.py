from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple
import math

import numpy as np

from .errors import InvalidConfiguration
from .geometry_utils import wrap_angle
from .grid import OccupancyGrid
from .pose import Pose


@dataclass(frozen=True)
class LidarConfig:
    """Configuration for the simulated 2D LiDAR.

    Attributes
    ----------
    relative_angles : tuple[float, ...]
        Beam offsets from the robot heading (radians), in scan order.
    max_range : float
        Range reported when a beam hits nothing (world units).
    """

    relative_angles: Tuple[float, ...]
    max_range: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "relative_angles", tuple(float(a) for a in self.relative_angles))
        if not self.relative_angles:
            raise InvalidConfiguration("lidar needs at least one scan angle")
        if not self.max_range > 0.0:
            raise InvalidConfiguration(f"lidar max_range must be positive, got {self.max_range}")

    @classmethod
    def full_circle(cls, num_angles: int, max_range: float) -> "LidarConfig":
        """Evenly spaced beams over [0, 2*pi), first beam along the heading."""
        if num_angles < 1:
            raise InvalidConfiguration(f"lidar needs at least one scan angle, got {num_angles}")
        angles = np.linspace(0.0, 2.0 * math.pi, int(num_angles), endpoint=False)
        return cls(relative_angles=tuple(float(a) for a in angles), max_range=float(max_range))


@dataclass(frozen=True)
class ScanReading:
    """One LiDAR sweep.

    ``ranges[i]`` and ``angles[i]`` belong to beam ``i`` of the configured
    scan order; ``angles`` are absolute (world frame).
    """

    ranges: Tuple[float, ...]
    angles: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.ranges)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(zip(self.ranges, self.angles))

    @property
    def min_range(self) -> float:
        return min(self.ranges)


class LidarSimulator:
    """Ray-casting LiDAR against an occupancy grid. Stateless between scans."""

    def __init__(self, config: LidarConfig) -> None:
        self.config = config

    def scan(self, grid: OccupancyGrid, pose: Pose) -> ScanReading:
        """Perform a LiDAR scan from the given pose.

        Parameters
        ----------
        grid : OccupancyGrid
            Static map to cast against.
        pose : Pose
            Scanner pose in world frame.

        Returns
        -------
        ScanReading
            One (range, absolute angle) entry per configured beam, in
            configuration order. Beams that hit nothing read ``max_range``.
        """
        max_range = self.config.max_range
        origin = pose.position
        ranges: List[float] = []
        angles: List[float] = []
        for rel in self.config.relative_angles:
            angle = wrap_angle(pose.theta + rel)
            hit = grid.ray_intersection(origin, angle, max_range)
            if hit is None:
                r = max_range
            else:
                r = min(pose.distance_to(hit), max_range)
            ranges.append(r)
            angles.append(angle)
        return ScanReading(ranges=tuple(ranges), angles=tuple(angles))

