#!/usr/bin/env python3
"""
Headless Filter CLI

Run the LIDAR/RADAR unscented Kalman filter over an observation log or a
synthetic scenario and report accuracy and consistency.

Usage:
    python run_filter.py --data input.txt                # Observation log
    python run_filter.py --simulate --steps 500          # Synthetic scenario
    python run_filter.py --data input.txt --config ukf.yaml --output out.csv

Examples:
    # LIDAR only
    python run_filter.py --data input.txt --no-radar

    # Per-step belief logging
    python run_filter.py --simulate --verbose
"""

import argparse
import dataclasses
import logging
import os
import sys

from ukf_fusion.evaluation.runner import FilterRunner
from ukf_fusion.io.config_loader import ConfigLoader
from ukf_fusion.io.exporter import export_estimates_to_csv, generate_output_filename
from ukf_fusion.io.observation_loader import ObservationLoader
from ukf_fusion.simulation.synthetic import ScenarioConfig, generate_observations
from ukf_fusion.tracking.config import FilterConfig


def main():
    parser = argparse.ArgumentParser(description="Run the CTRV unscented Kalman filter")

    # Input
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--data", type=str, default=None, help="Observation log file")
    source.add_argument("--simulate", action="store_true", help="Use a synthetic scenario")
    parser.add_argument("--steps", type=int, default=500, help="Synthetic steps (default: 500)")
    parser.add_argument("--seed", type=int, default=None, help="Synthetic random seed")

    # Filter
    parser.add_argument("--config", type=str, default=None, help="YAML configuration file")
    parser.add_argument("--no-laser", action="store_true", help="Disable LIDAR updates")
    parser.add_argument("--no-radar", action="store_true", help="Disable RADAR updates")

    # Output
    parser.add_argument(
        "--output",
        type=str,
        nargs="?",
        const="",
        default=None,
        help="CSV file for estimates (timestamped name if no path given)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress output")
    parser.add_argument("--verbose", action="store_true", help="Log belief after every step")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Load config
    if args.config:
        if not os.path.exists(args.config):
            print(f"Error: Config file not found: {args.config}")
            return 1
        config = ConfigLoader(args.config).get_config()
    else:
        config = FilterConfig()

    if args.no_laser or args.no_radar:
        config = dataclasses.replace(
            config,
            use_laser=config.use_laser and not args.no_laser,
            use_radar=config.use_radar and not args.no_radar,
        )

    if args.simulate:
        observations = generate_observations(
            ScenarioConfig(n_steps=args.steps), config, seed=args.seed
        )
    else:
        if not os.path.exists(args.data):
            print(f"Error: Observation file not found: {args.data}")
            return 1
        observations = ObservationLoader(args.data)

    if not args.quiet:
        print("=" * 60)
        print("UKF Fusion Headless Mode")
        print("=" * 60)
        print(f"Source: {'synthetic' if args.simulate else args.data}")
        print(f"Process noise: std_a={config.std_a} m/s², std_yawdd={config.std_yawdd} rad/s²")
        print(f"LIDAR updates: {'on' if config.use_laser else 'off'}")
        print(f"RADAR updates: {'on' if config.use_radar else 'off'}")
        print("=" * 60)

    result = FilterRunner(config).run(observations)

    output_path = None
    if args.output is not None:
        output_path = args.output or generate_output_filename()
        export_estimates_to_csv(result.records, output_path)

    if not args.quiet:
        print("\n--- RESULTS ---")
        print(f"Observations: {result.n_observations:,}")
        print(f"Rejected (numerical): {result.n_failures:,}")
        if result.rmse is not None:
            px, py, vx, vy = result.rmse
            print(f"RMSE px/py/vx/vy: {px:.4f} / {py:.4f} / {vx:.4f} / {vy:.4f}")
        for name, stats in (("LIDAR", result.nis_laser), ("RADAR", result.nis_radar)):
            if stats is not None:
                print(
                    f"{name} NIS: mean={stats.mean_nis:.3f} (dof={stats.dof}), "
                    f"above 95% threshold={stats.fraction_above * 100:.1f}%"
                )
        if output_path:
            print(f"Estimates written to: {output_path}")
        print(f"Runtime: {result.runtime_s * 1000:.1f} ms")
        print("=" * 60)
    elif result.rmse is not None:
        # Machine-readable output
        print(" ".join(f"{value:.4f}" for value in result.rmse))

    return 0


if __name__ == "__main__":
    sys.exit(main())
