from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path
from typing import List

# Ensure project root is on path when running this script directly
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from apf_sim.config import SimConfig, load_yaml
from apf_sim.errors import InvalidConfiguration, ScenarioError
from apf_sim.loop import Observer, SimulationLoop
from apf_sim.metrics import summarize_run
from apf_sim.scenario import PRESET_NAMES, ScenarioConfig, build_scenario
from telemetry.logger import TelemetryLogger


def main() -> int:
    parser = argparse.ArgumentParser(description="Run one potential-field navigation scenario.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/sim.yaml",
        help="Path to sim YAML config.",
    )
    parser.add_argument("--preset", type=str, choices=PRESET_NAMES, default=None, help="Scenario preset.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for obstacle placement.")
    parser.add_argument("--budget", type=int, default=None, help="Iteration budget override.")
    parser.add_argument("--obstacles", type=int, default=None, help="Number of random obstacles.")
    parser.add_argument("--render", action="store_true", help="Show pygame visualization.")
    parser.add_argument("--telemetry", type=str, default=None, help="Append per-tick JSONL records here.")
    args = parser.parse_args()

    try:
        cfg = load_yaml(args.config)
        sim_config = SimConfig.from_dict(cfg).with_overrides(
            seed=args.seed, iteration_budget=args.budget
        ).validate()
        scenario_cfg = ScenarioConfig.from_dict(cfg.get("scenario"))
        if args.preset is not None:
            scenario_cfg.preset = args.preset
        if args.obstacles is not None:
            scenario_cfg.num_obstacles = args.obstacles
        scenario = build_scenario(sim_config, scenario_cfg, rng=random.Random(sim_config.seed))
    except (OSError, InvalidConfiguration, ScenarioError) as exc:
        print(f"Setup failed: {exc}", file=sys.stderr)
        return 2

    observers: List[Observer] = []
    renderer = None
    if args.render:
        from apf_sim.render import PygameRenderer

        render_cfg = cfg.get("render", {})
        renderer = PygameRenderer(
            grid=scenario.grid,
            goal=scenario.goal,
            goal_radius=sim_config.goal_radius,
            window_width=int(render_cfg.get("window_width", 700)),
            window_height=int(render_cfg.get("window_height", 700)),
            fps=int(render_cfg.get("fps", 120)),
            show_lidar=bool(render_cfg.get("show_lidar", True)),
            show_trail=bool(render_cfg.get("show_trail", True)),
        )
        observers.append(renderer.on_tick)

    telemetry_path = args.telemetry or (cfg.get("logging") or {}).get("telemetry_path")
    telemetry_logger = None
    if telemetry_path:
        telemetry_logger = TelemetryLogger(telemetry_path, run_id=f"{scenario.name}-{sim_config.seed}")
        observers.append(telemetry_logger.on_tick)

    loop = SimulationLoop.from_config(sim_config, scenario.grid, scenario.goal, observers=observers)

    print(
        f"Scenario '{scenario.name}': start ({scenario.start.x:.1f}, {scenario.start.y:.1f}), "
        f"goal ({scenario.goal[0]:.1f}, {scenario.goal[1]:.1f}), {len(scenario.obstacles)} obstacles"
    )
    try:
        result = loop.run(scenario.start)
        metrics = summarize_run(result, scenario.grid, scenario.goal, scenario=scenario.name, seed=sim_config.seed)
        if result.reached_goal:
            print(f"  ✓ Goal reached in {metrics.ticks} ticks")
        else:
            print(f"  ⏱ Budget exhausted after {metrics.ticks} ticks")
        print(f"  Final distance to goal:  {metrics.final_distance_to_goal:.2f}")
        print(f"  Path length:             {metrics.path_length:.2f}")
        print(f"  Min clearance:           {metrics.min_clearance:.2f}")
        print(f"  Near misses:             {metrics.near_misses}")

        if renderer is not None:
            renderer.wait_for_close()
    finally:
        if telemetry_logger is not None:
            telemetry_logger.close()
        if renderer is not None:
            renderer.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
