from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from .config import SimConfig
from .controller import PotentialFieldController
from .errors import InvalidConfiguration
from .grid import OccupancyGrid
from .pose import Point, Pose
from .sensors import LidarSimulator, ScanReading


class LoopStatus(Enum):
    RUNNING = "running"
    GOAL_REACHED = "goal_reached"
    BUDGET_EXHAUSTED = "budget_exhausted"

    @property
    def terminal(self) -> bool:
        return self is not LoopStatus.RUNNING


@dataclass(frozen=True)
class TickReport:
    """What observers see after each tick."""

    tick: int
    pose: Pose
    scan: ScanReading
    distance_to_goal: float
    status: LoopStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "pose": self.pose.to_dict(),
            "distance_to_goal": self.distance_to_goal,
            "status": self.status.value,
            "lidar": {"min_range": self.scan.min_range},
        }


@dataclass
class SimulationResult:
    """Terminal outcome of a run and the pose recorded after every tick."""

    status: LoopStatus
    start: Pose
    trajectory: List[Pose] = field(default_factory=list)

    @property
    def ticks(self) -> int:
        return len(self.trajectory)

    @property
    def reached_goal(self) -> bool:
        return self.status is LoopStatus.GOAL_REACHED

    @property
    def final_pose(self) -> Pose:
        return self.trajectory[-1] if self.trajectory else self.start

    @property
    def path(self) -> List[Point]:
        """Start position followed by every recorded position."""
        return [self.start.position] + [p.position for p in self.trajectory]


Observer = Callable[[TickReport], None]


class SimulationLoop:
    """Drive the scan / control / report cycle until a terminal state.

    The grid is only read; the current pose is owned by the loop and replaced
    once per tick. Observers are notified after every tick and cannot feed
    anything back into the loop.
    """

    def __init__(
        self,
        grid: OccupancyGrid,
        lidar: LidarSimulator,
        controller: PotentialFieldController,
        goal: Point,
        goal_radius: float,
        iteration_budget: int,
        observers: Optional[Sequence[Observer]] = None,
    ) -> None:
        if goal_radius <= 0.0:
            raise InvalidConfiguration(f"goal_radius must be positive, got {goal_radius}")
        if iteration_budget < 1:
            raise InvalidConfiguration(f"iteration_budget must be >= 1, got {iteration_budget}")
        self.grid = grid
        self.lidar = lidar
        self.controller = controller
        self.goal = (float(goal[0]), float(goal[1]))
        self.goal_radius = float(goal_radius)
        self.iteration_budget = int(iteration_budget)
        self.observers: List[Observer] = list(observers) if observers is not None else []

        self._start: Optional[Pose] = None
        self._pose: Optional[Pose] = None
        self._trajectory: List[Pose] = []
        self._status = LoopStatus.RUNNING

    @classmethod
    def from_config(
        cls,
        config: SimConfig,
        grid: OccupancyGrid,
        goal: Point,
        observers: Optional[Sequence[Observer]] = None,
    ) -> "SimulationLoop":
        config.validate()
        return cls(
            grid=grid,
            lidar=LidarSimulator(config.lidar_config()),
            controller=PotentialFieldController(config.controller_config()),
            goal=goal,
            goal_radius=config.goal_radius,
            iteration_budget=config.iteration_budget,
            observers=observers,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def status(self) -> LoopStatus:
        return self._status

    @property
    def pose(self) -> Pose:
        if self._pose is None:
            raise RuntimeError("simulation loop has not been reset")
        return self._pose

    @property
    def tick_count(self) -> int:
        return len(self._trajectory)

    def reset(self, start: Pose) -> None:
        self._start = start
        self._pose = start
        self._trajectory = []
        self._status = LoopStatus.RUNNING

    def result(self) -> SimulationResult:
        if self._start is None:
            raise RuntimeError("simulation loop has not been reset")
        return SimulationResult(status=self._status, start=self._start, trajectory=list(self._trajectory))

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    def tick(self) -> TickReport:
        """Advance one scan/control step and update the loop status."""
        if self._status.terminal:
            raise RuntimeError(f"simulation already finished: {self._status.value}")
        pose = self.pose

        scan = self.lidar.scan(self.grid, pose)
        pose = self.controller.step(pose, scan, self.goal)
        self._pose = pose
        self._trajectory.append(pose)

        distance_to_goal = pose.distance_to(self.goal)
        if distance_to_goal < self.goal_radius:
            self._status = LoopStatus.GOAL_REACHED
        elif self.tick_count >= self.iteration_budget:
            self._status = LoopStatus.BUDGET_EXHAUSTED

        report = TickReport(
            tick=self.tick_count,
            pose=pose,
            scan=scan,
            distance_to_goal=distance_to_goal,
            status=self._status,
        )
        for observer in self.observers:
            observer(report)
        return report

    def run(self, start: Pose) -> SimulationResult:
        """Reset to ``start`` and tick until the loop reaches a terminal state."""
        self.reset(start)
        while not self._status.terminal:
            self.tick()
        return self.result()
