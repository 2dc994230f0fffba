from __future__ import annotations

import math
from typing import List

import pytest

from apf_sim.config import SimConfig
from apf_sim.errors import InvalidConfiguration
from apf_sim.grid import OccupancyGrid
from apf_sim.loop import LoopStatus, SimulationLoop, TickReport
from apf_sim.metrics import summarize_run
from apf_sim.pose import Pose


START = Pose(10.0, 90.0, -math.pi / 2.0)
GOAL = (90.0, 10.0)


def _empty_grid() -> OccupancyGrid:
    return OccupancyGrid(width=100.0, height=100.0, resolution=1.0).freeze()


def test_empty_grid_reaches_goal() -> None:
    config = SimConfig(safety_margin=3.0, speed=0.2, turn_gain=0.7)
    loop = SimulationLoop.from_config(config, _empty_grid(), GOAL)
    result = loop.run(START)

    assert result.status is LoopStatus.GOAL_REACHED
    assert result.reached_goal
    assert result.final_pose.distance_to(GOAL) < 8.0
    assert 0 < result.ticks < config.iteration_budget


def test_budget_of_one_records_single_update() -> None:
    config = SimConfig(iteration_budget=1)
    loop = SimulationLoop.from_config(config, _empty_grid(), GOAL)
    result = loop.run(START)

    assert result.status is LoopStatus.BUDGET_EXHAUSTED
    assert len(result.trajectory) == 1
    assert result.path[0] == START.position


def test_block_on_straight_line_path_records_clearance() -> None:
    grid = OccupancyGrid(width=100.0, height=100.0)
    # 4x4 block centered on the start-goal diagonal
    grid.fill_rect(48.0, 48.0, 52.0, 52.0)
    grid.freeze()

    min_ranges: List[float] = []
    config = SimConfig()
    loop = SimulationLoop.from_config(
        config, grid, GOAL, observers=[lambda report: min_ranges.append(report.scan.min_range)]
    )
    result = loop.run(START)
    metrics = summarize_run(result, grid, GOAL, near_miss_distance=1.0)

    assert result.status.terminal
    assert min(min_ranges) < 2.0 * config.safety_margin
    # Clearance is a property of the field, not a guarantee; record it
    assert metrics.min_clearance >= 0.0
    assert metrics.near_misses >= 0
    for pose in result.trajectory:
        assert 2.0 <= pose.x <= 98.0
        assert 2.0 <= pose.y <= 98.0


def test_observers_see_every_tick() -> None:
    reports: List[TickReport] = []
    config = SimConfig(iteration_budget=5)
    loop = SimulationLoop.from_config(config, _empty_grid(), GOAL, observers=[reports.append])
    result = loop.run(START)

    assert [r.tick for r in reports] == [1, 2, 3, 4, 5]
    assert [r.pose for r in reports] == result.trajectory
    assert all(r.status is LoopStatus.RUNNING for r in reports[:-1])
    assert reports[-1].status is LoopStatus.BUDGET_EXHAUSTED
    assert len(reports[0].scan) == config.scan_angle_count


def test_goal_check_precedes_budget_check() -> None:
    config = SimConfig(iteration_budget=1)
    loop = SimulationLoop.from_config(config, _empty_grid(), (50.0, 50.0))
    result = loop.run(Pose(50.0, 45.0, math.pi / 2.0))
    assert result.status is LoopStatus.GOAL_REACHED


def test_tick_after_terminal_state_raises() -> None:
    loop = SimulationLoop.from_config(SimConfig(iteration_budget=1), _empty_grid(), GOAL)
    loop.run(START)
    with pytest.raises(RuntimeError):
        loop.tick()


def test_tick_before_reset_raises() -> None:
    loop = SimulationLoop.from_config(SimConfig(), _empty_grid(), GOAL)
    with pytest.raises(RuntimeError):
        loop.tick()


def test_reset_allows_rerun() -> None:
    loop = SimulationLoop.from_config(SimConfig(iteration_budget=3), _empty_grid(), GOAL)
    first = loop.run(START)
    second = loop.run(START)
    assert first.trajectory == second.trajectory
    assert loop.tick_count == 3


def test_invalid_config_rejected_before_loop() -> None:
    with pytest.raises(InvalidConfiguration):
        SimulationLoop.from_config(SimConfig(speed=-1.0), _empty_grid(), GOAL)
    with pytest.raises(InvalidConfiguration):
        SimulationLoop.from_config(SimConfig(scan_angle_count=0), _empty_grid(), GOAL)
