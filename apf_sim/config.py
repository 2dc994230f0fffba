"""
Run-time configuration for the potential-field simulator.

Values come from a YAML file (see ``configs/sim.yaml``) with the sections
``map``, ``robot``, ``lidar`` and ``sim``; missing keys fall back to the
defaults below. ``validate()`` rejects physically meaningless values before
any simulation tick runs.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict
import os

import yaml

from .controller import ControllerConfig
from .errors import InvalidConfiguration
from .sensors import LidarConfig


@dataclass(frozen=True)
class SimConfig:
    """Scalar parameters of one simulation run."""

    map_size: float = 100.0
    resolution: float = 1.0
    speed: float = 0.2
    safety_margin: float = 3.0
    turn_gain: float = 0.7
    max_scan_range: float = 15.0
    scan_angle_count: int = 90
    goal_radius: float = 8.0
    iteration_budget: int = 2000
    boundary_margin: float = 2.0
    seed: int = 0

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate(self) -> "SimConfig":
        """Return self if every parameter is sane, else raise InvalidConfiguration."""
        if self.map_size <= 0.0:
            raise InvalidConfiguration(f"map_size must be positive, got {self.map_size}")
        if self.resolution <= 0.0:
            raise InvalidConfiguration(f"resolution must be positive, got {self.resolution}")
        if self.scan_angle_count < 1:
            raise InvalidConfiguration(f"scan_angle_count must be >= 1, got {self.scan_angle_count}")
        if self.max_scan_range <= 0.0:
            raise InvalidConfiguration(f"max_scan_range must be positive, got {self.max_scan_range}")
        if self.goal_radius <= 0.0:
            raise InvalidConfiguration(f"goal_radius must be positive, got {self.goal_radius}")
        if self.iteration_budget < 1:
            raise InvalidConfiguration(f"iteration_budget must be >= 1, got {self.iteration_budget}")
        # Controller-level checks (speed, gains, margins)
        self.controller_config()
        return self

    # ------------------------------------------------------------------
    # Component configs
    # ------------------------------------------------------------------
    def controller_config(self) -> ControllerConfig:
        return ControllerConfig(
            safety_margin=self.safety_margin,
            speed=self.speed,
            turn_gain=self.turn_gain,
            map_size=self.map_size,
            boundary_margin=self.boundary_margin,
        )

    def lidar_config(self) -> LidarConfig:
        return LidarConfig.full_circle(self.scan_angle_count, self.max_scan_range)

    def with_overrides(self, **changes: Any) -> "SimConfig":
        """Copy with some fields replaced; ``None`` values are ignored."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimConfig":
        """Create config from a dict with ``map``/``robot``/``lidar``/``sim`` sections."""
        defaults = cls()
        map_cfg = data.get("map", {}) or {}
        robot_cfg = data.get("robot", {}) or {}
        lidar_cfg = data.get("lidar", {}) or {}
        sim_cfg = data.get("sim", {}) or {}
        return cls(
            map_size=float(map_cfg.get("size", defaults.map_size)),
            resolution=float(map_cfg.get("resolution", defaults.resolution)),
            boundary_margin=float(map_cfg.get("boundary_margin", defaults.boundary_margin)),
            speed=float(robot_cfg.get("speed", defaults.speed)),
            safety_margin=float(robot_cfg.get("safety_margin", defaults.safety_margin)),
            turn_gain=float(robot_cfg.get("turn_gain", defaults.turn_gain)),
            max_scan_range=float(lidar_cfg.get("max_range", defaults.max_scan_range)),
            scan_angle_count=int(lidar_cfg.get("num_angles", defaults.scan_angle_count)),
            goal_radius=float(sim_cfg.get("goal_radius", defaults.goal_radius)),
            iteration_budget=int(sim_cfg.get("iteration_budget", defaults.iteration_budget)),
            seed=int(data.get("seed", defaults.seed)),
        )


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data or {}


def load_config(path: str) -> SimConfig:
    """Load and validate a SimConfig from a YAML file."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"config file not found: {path}")
    return SimConfig.from_dict(load_yaml(path)).validate()
