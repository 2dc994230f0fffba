"""
Run-level metrics for potential-field navigation.

Summarizes a SimulationResult against its grid and goal, and aggregates many
runs per scenario preset for batch evaluation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import math
import os

import numpy as np

from .geometry_utils import path_length
from .grid import OccupancyGrid
from .loop import LoopStatus, SimulationResult
from .pose import Point


# ---------------------------------------------------------------------------
# Single run
# ---------------------------------------------------------------------------


@dataclass
class RunMetrics:
    """Metrics for a single run.

    ``min_clearance`` is the smallest distance from any recorded position to
    an occupied cell; 0 means the robot entered an occupied cell. Nothing in
    the controller enforces a floor on it, so near misses are expected and
    counted rather than treated as failures.
    """

    status: LoopStatus
    ticks: int
    path_length: float
    final_distance_to_goal: float
    min_clearance: float
    near_misses: int
    scenario: Optional[str] = None
    seed: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def reached_goal(self) -> bool:
        return self.status is LoopStatus.GOAL_REACHED

    @property
    def penetrated(self) -> bool:
        return self.min_clearance <= 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "ticks": int(self.ticks),
            "path_length": float(self.path_length),
            "final_distance_to_goal": float(self.final_distance_to_goal),
            "min_clearance": None if math.isinf(self.min_clearance) else float(self.min_clearance),
            "near_misses": int(self.near_misses),
            "scenario": self.scenario,
            "seed": self.seed,
            **self.extra,
        }


def summarize_run(
    result: SimulationResult,
    grid: OccupancyGrid,
    goal: Point,
    near_miss_distance: float = 1.0,
    scenario: Optional[str] = None,
    seed: Optional[int] = None,
) -> RunMetrics:
    """Compute RunMetrics for a finished run."""
    path = result.path
    clearances = [grid.distance_to_nearest_occupied(p) for p in path]
    min_clearance = min(clearances) if clearances else math.inf
    near_misses = sum(1 for c in clearances if c < near_miss_distance)
    return RunMetrics(
        status=result.status,
        ticks=result.ticks,
        path_length=path_length(path),
        final_distance_to_goal=result.final_pose.distance_to(goal),
        min_clearance=min_clearance,
        near_misses=near_misses,
        scenario=scenario,
        seed=seed,
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def aggregate_metrics(runs: List[RunMetrics]) -> Dict[str, Optional[float]]:
    """Success/budget rates and means over a list of runs."""
    if not runs:
        return {"count": 0.0}
    ticks = [r.ticks for r in runs]
    lengths = [r.path_length for r in runs]
    clearances = [r.min_clearance for r in runs if not math.isinf(r.min_clearance)]
    return {
        "count": float(len(runs)),
        "success_rate": float(np.mean([r.reached_goal for r in runs])),
        "budget_exhausted_rate": float(np.mean([r.status is LoopStatus.BUDGET_EXHAUSTED for r in runs])),
        "penetration_rate": float(np.mean([r.penetrated for r in runs])),
        "mean_ticks": float(np.mean(ticks)),
        "mean_path_length": float(np.mean(lengths)),
        "worst_clearance": float(np.min(clearances)) if clearances else None,
        "mean_near_misses": float(np.mean([r.near_misses for r in runs])),
    }


class PerScenarioAggregator:
    """Aggregate run metrics per scenario preset."""

    def __init__(self) -> None:
        self._by_scenario: Dict[str, List[RunMetrics]] = {}

    def add(self, metrics: RunMetrics) -> None:
        key = metrics.scenario or "unknown"
        self._by_scenario.setdefault(key, []).append(metrics)

    def all_runs(self) -> List[RunMetrics]:
        return [m for runs in self._by_scenario.values() for m in runs]

    def summary(self) -> Dict[str, Dict[str, Optional[float]]]:
        return {name: aggregate_metrics(runs) for name, runs in self._by_scenario.items()}

    def save_json(self, path: str) -> None:
        data = {
            "overall": aggregate_metrics(self.all_runs()),
            "per_scenario": self.summary(),
            "runs": [m.to_dict() for m in self.all_runs()],
        }
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, allow_nan=False)
