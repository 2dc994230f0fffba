from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np

from .errors import InvalidConfiguration
from .geometry_utils import angle_diff, clamp, wrap_angle
from .pose import Point, Pose
from .sensors import ScanReading


@dataclass(frozen=True)
class ControllerConfig:
    """Parameters of the potential-field steering law.

    All values are fixed for the whole run.
    """

    safety_margin: float = 3.0
    speed: float = 0.2
    turn_gain: float = 0.7
    map_size: float = 100.0
    boundary_margin: float = 2.0
    attraction_gain: float = 0.5
    repulsion_weight: float = 0.6
    min_range: float = 0.1

    def __post_init__(self) -> None:
        if self.speed < 0.0:
            raise InvalidConfiguration(f"speed must be non-negative, got {self.speed}")
        if not 0.0 < self.turn_gain <= 1.0:
            raise InvalidConfiguration(f"turn_gain must be in (0, 1], got {self.turn_gain}")
        if self.safety_margin < 0.0:
            raise InvalidConfiguration(f"safety_margin must be non-negative, got {self.safety_margin}")
        if self.boundary_margin < 0.0 or self.map_size <= 2.0 * self.boundary_margin:
            raise InvalidConfiguration(
                f"boundary_margin {self.boundary_margin} leaves no interior in a map of size {self.map_size}"
            )
        if self.min_range <= 0.0:
            raise InvalidConfiguration(f"min_range must be positive, got {self.min_range}")

    @property
    def repulsion_threshold(self) -> float:
        """Readings strictly below this range push the robot away."""
        return 2.0 * self.safety_margin


@dataclass(frozen=True)
class FieldForce:
    """Force components for one control step (world frame)."""

    attraction: np.ndarray
    repulsion: np.ndarray
    total: np.ndarray

    @property
    def heading(self) -> float:
        return math.atan2(float(self.total[1]), float(self.total[0]))


class PotentialFieldController:
    """Reactive artificial-potential-field controller with unicycle motion.

    A constant-magnitude pull toward the goal is combined with inverse-square
    pushes away from every close LiDAR return; the robot turns a fixed
    fraction of the way toward the resulting heading and drives one step.
    The field has no planning horizon, so symmetric obstacle layouts can
    trap the robot in a local minimum.
    """

    def __init__(self, config: ControllerConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Field
    # ------------------------------------------------------------------
    def attraction(self, pose: Pose, goal: Point) -> np.ndarray:
        """Constant-magnitude pull toward the goal, independent of distance."""
        heading = pose.bearing_to(goal)
        return self.config.attraction_gain * np.array([math.cos(heading), math.sin(heading)])

    def repulsion(self, scan: ScanReading) -> np.ndarray:
        """Sum of inverse-square pushes directly away from close returns."""
        ranges = np.asarray(scan.ranges, dtype=float)
        angles = np.asarray(scan.angles, dtype=float)
        close = ranges < self.config.repulsion_threshold
        if not np.any(close):
            return np.zeros(2)
        r = np.maximum(ranges[close], self.config.min_range)
        away = angles[close] + math.pi
        weight = 1.0 / (r * r)
        return np.array([np.sum(weight * np.cos(away)), np.sum(weight * np.sin(away))])

    def compute_force(self, pose: Pose, scan: ScanReading, goal: Point) -> FieldForce:
        attraction = self.attraction(pose, goal)
        repulsion = self.repulsion(scan)
        # No cap on the repulsion magnitude
        total = attraction + self.config.repulsion_weight * repulsion
        return FieldForce(attraction=attraction, repulsion=repulsion, total=total)

    # ------------------------------------------------------------------
    # Control step
    # ------------------------------------------------------------------
    def heading_error(self, pose: Pose, desired_heading: float) -> float:
        """Signed shortest turn from the current heading, in (-pi, pi]."""
        return angle_diff(pose.theta, desired_heading)

    def step(self, pose: Pose, scan: ScanReading, goal: Point) -> Pose:
        """Return the pose after one control step. Pure function of its inputs."""
        cfg = self.config
        force = self.compute_force(pose, scan, goal)
        error = self.heading_error(pose, force.heading)
        theta = wrap_angle(pose.theta + cfg.turn_gain * error)

        # Unicycle model, single Euler step
        x = pose.x + cfg.speed * math.cos(theta)
        y = pose.y + cfg.speed * math.sin(theta)

        lo = cfg.boundary_margin
        hi = cfg.map_size - cfg.boundary_margin
        return Pose(x=clamp(x, lo, hi), y=clamp(y, lo, hi), theta=theta)
