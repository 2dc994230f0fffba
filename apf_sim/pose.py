from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple
import math

from .geometry_utils import wrap_angle


Point = Tuple[float, float]


@dataclass(frozen=True)
class Pose:
    """Pose of the robot in world coordinates.

    Attributes
    ----------
    x : float
        X position (world units).
    y : float
        Y position (world units).
    theta : float
        Heading (radians), CCW from +x, wrapped to (-pi, pi].
    """

    x: float
    y: float
    theta: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "theta", wrap_angle(float(self.theta)))

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def distance_to(self, point: Point) -> float:
        """Euclidean distance from the pose position to a point."""
        return math.hypot(point[0] - self.x, point[1] - self.y)

    def bearing_to(self, point: Point) -> float:
        """World-frame heading from the pose position to a point."""
        return math.atan2(point[1] - self.y, point[0] - self.x)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize pose to a dict for logging/telemetry."""
        return {"x": self.x, "y": self.y, "theta": self.theta}
