from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path
from typing import List

_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from apf_sim.config import SimConfig, load_yaml
from apf_sim.errors import InvalidConfiguration, ScenarioError
from apf_sim.loop import SimulationLoop
from apf_sim.metrics import PerScenarioAggregator, summarize_run
from apf_sim.scenario import ScenarioConfig, build_scenario


def main() -> int:
    parser = argparse.ArgumentParser(description="Evaluate the potential-field controller over presets and seeds.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/sim.yaml",
        help="Path to sim YAML config.",
    )
    parser.add_argument("--output", type=str, default=None, help="Where to write the JSON summary.")
    args = parser.parse_args()

    try:
        cfg = load_yaml(args.config)
        base_config = SimConfig.from_dict(cfg).validate()
        base_scenario = ScenarioConfig.from_dict(cfg.get("scenario"))
    except (OSError, InvalidConfiguration) as exc:
        print(f"Setup failed: {exc}", file=sys.stderr)
        return 2
    eval_cfg = cfg.get("eval", {})

    seeds: List[int] = [int(s) for s in eval_cfg.get("seeds", [0])]
    presets: List[str] = list(eval_cfg.get("presets", [base_scenario.preset]))
    near_miss = float(eval_cfg.get("near_miss_distance", 1.0))
    output_path = args.output or eval_cfg.get("output_path", "runs/eval_metrics.json")

    aggregator = PerScenarioAggregator()
    for preset in presets:
        print(f"Evaluating preset '{preset}'...")
        for seed in seeds:
            sim_config = base_config.with_overrides(seed=seed)
            scenario_cfg = ScenarioConfig.from_dict({**(cfg.get("scenario") or {}), "preset": preset})
            try:
                scenario = build_scenario(sim_config, scenario_cfg, rng=random.Random(seed))
            except ScenarioError as exc:
                print(f"  Seed {seed}: skipped ({exc})")
                continue
            loop = SimulationLoop.from_config(sim_config, scenario.grid, scenario.goal)
            result = loop.run(scenario.start)
            metrics = summarize_run(
                result,
                scenario.grid,
                scenario.goal,
                near_miss_distance=near_miss,
                scenario=preset,
                seed=seed,
            )
            aggregator.add(metrics)
            outcome = "✓ goal" if metrics.reached_goal else "⏱ budget"
            print(f"  Seed {seed}: {outcome} in {metrics.ticks} ticks, min clearance {metrics.min_clearance:.2f}")

    aggregator.save_json(output_path)
    print(f"Saved evaluation metrics to {output_path}")
    print()
    print("=" * 72)
    print("EVALUATION METRICS SUMMARY")
    print("=" * 72)
    for preset, summary in aggregator.summary().items():
        print(f"  {preset}:")
        print(f"    Success rate:          {summary['success_rate']:.1%}")
        print(f"    Budget exhausted rate: {summary['budget_exhausted_rate']:.1%}")
        print(f"    Mean ticks:            {summary['mean_ticks']:.1f}")
        worst = summary["worst_clearance"]
        print(f"    Worst clearance:       {'n/a' if worst is None else format(worst, '.2f')}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
