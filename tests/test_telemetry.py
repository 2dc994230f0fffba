from __future__ import annotations

import json
import math
from pathlib import Path

from apf_sim.config import SimConfig
from apf_sim.grid import OccupancyGrid
from apf_sim.loop import SimulationLoop
from apf_sim.pose import Pose
from telemetry.logger import TelemetryLogger


def test_logger_writes_one_line_per_tick(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "run.jsonl"
    grid = OccupancyGrid(width=100.0, height=100.0).freeze()
    with TelemetryLogger(str(path), run_id="diagonal-0") as logger:
        loop = SimulationLoop.from_config(
            SimConfig(iteration_budget=3), grid, (90.0, 10.0), observers=[logger.on_tick]
        )
        loop.run(Pose(10.0, 90.0, -math.pi / 2.0))

    records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [r["tick"] for r in records] == [1, 2, 3]
    assert all(r["run_id"] == "diagonal-0" for r in records)
    assert records[-1]["status"] == "budget_exhausted"
    assert set(records[0]["pose"]) == {"x", "y", "theta"}
    assert records[0]["lidar"]["min_range"] == 15.0


def test_logger_ignores_writes_after_close(tmp_path: Path) -> None:
    path = tmp_path / "run.jsonl"
    logger = TelemetryLogger(str(path))
    logger.log_record({"a": 1})
    logger.close()
    logger.log_record({"a": 2})
    assert path.read_text(encoding="utf-8").splitlines() == ['{"a":1}']
