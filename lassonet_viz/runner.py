#!/usr/bin/env python3
"""
LassoNet Path Runner
Drives the toy LassoNet simulation from INIT to FINISHED, printing the
milestone log as it grows, and writes results, trajectory and plots.

Usage:
    lassonet-viz [--preset reference] [--interval 500] [--output-dir results/lassonet]
"""

import argparse
import json
import os
import time
import traceback
from datetime import datetime
from typing import List, Optional

from .config import PRESETS, get_preset, load_config
from .scheduler import LassoNetSimulation
from .summary import analyze_state
from .utils import format_detail, results_dict, state_stats, trajectory_frame


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Step through the LassoNet warm-start path on a toy network.")
    parser.add_argument("--preset", default="reference", choices=PRESETS,
                        help="Named configuration (default: reference)")
    parser.add_argument("--config", default=None,
                        help="JSON file with configuration overrides")
    parser.add_argument("--interval", type=int, default=0,
                        help="Milliseconds to wait between steps (0 = as fast as possible)")
    parser.add_argument("--max-calls", type=int, default=None,
                        help="Stop after this many steps even if the path is not finished")
    parser.add_argument("--output-dir", default="results/lassonet",
                        help="Directory for results.json, trajectory.csv and plots")
    parser.add_argument("--no-plots", action="store_true", help="Skip figure generation")
    parser.add_argument("--analyze", action="store_true",
                        help="Ask the LLM service for a summary of the final state")
    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")
    return parser.parse_args(argv)


def run_simulation(sim: LassoNetSimulation, interval_ms: int = 0,
                   max_calls: Optional[int] = None, verbose: bool = True) -> None:
    """Advance ``sim`` until it finishes, echoing new log lines."""
    printed = 0
    calls = 0
    if verbose:
        for line in sim.state.logs:
            print(f"  {line}")
        printed = len(sim.state.logs)

    while not sim.is_finished:
        if max_calls is not None and calls >= max_calls:
            print(f"⚠️ Stopped after {calls} calls (phase {sim.state.phase.value})")
            break
        if interval_ms > 0:
            time.sleep(interval_ms / 1000.0)
        state = sim.step()
        calls += 1
        if verbose:
            for line in state.logs[printed:]:
                print(f"  {line}")
            printed = len(state.logs)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    start_time = time.time()

    config = get_preset(args.preset)
    if args.config:
        config = load_config(args.config, base=config)

    print("=" * 80)
    print("LASSONET PATH RUNNER")
    print("=" * 80)
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"Preset: {args.preset}")
    print(f"Features: {config.num_features} | Hidden: {config.hidden_size} | M: {config.hierarchy_coefficient}")
    print(f"λ path: {config.lambda_step} → {config.max_lambda}, {config.epochs_per_lambda} epochs per λ")
    print(f"Output directory: {args.output_dir}")
    print()

    os.makedirs(args.output_dir, exist_ok=True)
    sim = LassoNetSimulation(config)

    try:
        run_simulation(sim, interval_ms=args.interval, max_calls=args.max_calls, verbose=not args.quiet)
        results = results_dict(sim.history, config)
    except Exception as e:
        print(f"✗ Simulation failed: {e}")
        traceback.print_exc()
        results = {"model_name": "LassoNet-Toy", "error": str(e), "n_calls": len(sim.history) - 1}
        with open(os.path.join(args.output_dir, "results.json"), "w") as f:
            json.dump(results, f, indent=2)
        return 1

    frame = trajectory_frame(sim.history)
    frame.to_csv(os.path.join(args.output_dir, "trajectory.csv"), index=False)

    if not args.no_plots:
        try:
            from .plots import plot_hidden_weights, plot_regularization_path
            plot_regularization_path(frame, config,
                                     save_path=os.path.join(args.output_dir, "regularization_path.png"))
            plot_hidden_weights(sim.state, save_path=os.path.join(args.output_dir, "hidden_weights.png"))
            print("✓ Plots saved")
        except Exception as e:
            print(f"✗ Error creating plots: {e}")
            traceback.print_exc()
            results["plot_error"] = str(e)

    if args.analyze:
        results["analysis"] = analyze_state(sim.state, config)

    results["execution_time"] = time.time() - start_time
    with open(os.path.join(args.output_dir, "results.json"), "w") as f:
        json.dump(results, f, indent=2)

    stats = state_stats(sim.state, config)
    print()
    print("=" * 80)
    print(f"Phase: {stats['phase']} | λ={stats['lambda']} | active features: {stats['active_features']}")
    print(f"Selected features: {results['selected_features']}")
    print(f"Pruned at λ: {results['pruning_lambda']}")
    print(format_detail(sim.state.detail, config))
    if args.analyze:
        print(f"Analysis: {results['analysis']}")
    print(f"✓ Completed in {results['execution_time']:.2f}s, results in {args.output_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
