"""
Top-level package for the potential-field navigation simulator.

Components:
- grid: binary occupancy grid and ray intersection
- sensors: LiDAR ray-casting against the grid
- controller: artificial-potential-field steering with unicycle motion
- loop: scan / control / report cycle with terminal states
- config: run parameters, YAML loading and validation
- scenario: presets and random obstacle placement
- metrics: per-run and per-scenario statistics
- render: pygame-based visualization
- geometry_utils: angle/distance helpers
"""

from .config import SimConfig, load_config
from .controller import ControllerConfig, FieldForce, PotentialFieldController
from .errors import InvalidConfiguration, ScenarioError
from .grid import OccupancyGrid
from .loop import LoopStatus, SimulationLoop, SimulationResult, TickReport
from .pose import Pose
from .scenario import Scenario, ScenarioConfig, build_scenario
from .sensors import LidarConfig, LidarSimulator, ScanReading

__all__ = [
    "SimConfig",
    "load_config",
    "ControllerConfig",
    "FieldForce",
    "PotentialFieldController",
    "InvalidConfiguration",
    "ScenarioError",
    "OccupancyGrid",
    "LoopStatus",
    "SimulationLoop",
    "SimulationResult",
    "TickReport",
    "Pose",
    "Scenario",
    "ScenarioConfig",
    "build_scenario",
    "LidarConfig",
    "LidarSimulator",
    "ScanReading",
]
