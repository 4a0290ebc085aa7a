"""Command-line interface for the analysis framework.

This module provides a simple CLI for running gain sweeps,
generating statistical reports, and creating visualizations.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from analysis import statistics, sweep, visualize
from ramsete_control.config import DEFAULT_SEED, JITTER_MAX_FACTOR, JITTER_MIN_FACTOR
from ramsete_control.trajectory import arc_trajectory, lemniscate_trajectory, line_trajectory

TRAJECTORIES = {
    "lemniscate": lemniscate_trajectory,
    "line": lambda: line_trajectory(distance=20.0),
    "arc": lambda: arc_trajectory(radius=4.0, sweep=3.0),
}


def parse_param_specs(specs: List[str]) -> dict:
    """Parse ``NAME=v1,v2,v3`` specifications.

    Raises:
        ValueError: If a specification is malformed
    """
    parameters = {}
    for spec in specs:
        if "=" not in spec:
            raise ValueError(f"Invalid parameter specification: {spec} (format: NAME=v1,v2,v3)")
        name, values_str = spec.split("=", 1)
        try:
            parameters[name.strip()] = [float(v.strip()) for v in values_str.split(",")]
        except ValueError:
            raise ValueError(f"Invalid parameter values for {name}: {values_str}")
    return parameters


def run_sweep(args: argparse.Namespace) -> int:
    """Run a gain sweep from command line.

    Returns:
        Exit code (0 for success)
    """
    try:
        parameters = parse_param_specs(args.param or [])
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if not parameters:
        print("Error: No parameters specified!")
        print("Example: --param b=5,15,30 --param zeta=0.5,0.7,0.9")
        return 1

    print(f"Parameters: {parameters}")
    print(f"Runs per config: {args.runs}")
    print(f"Invalid threshold: {args.threshold}\n")

    try:
        gs = sweep.GainSweep(
            parameters=parameters,
            runs_per_config=args.runs,
            invalid_threshold=args.threshold,
            trajectory_factory=TRAJECTORIES[args.path],
            jitter_range=tuple(args.jitter),
            base_seed=args.seed,
            start_offset=tuple(args.start_offset),
        )
        gs.run()
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.")
        return 1

    csv_path = gs.save_results(Path(args.output) if args.output else None)
    gs.print_summary(top_n=args.top)

    if args.visualize:
        print("\nGenerating visualizations...")
        visualize.visualize_csv(csv_path)

    if args.report:
        print("\nGenerating statistical report...")
        statistics.generate_report(csv_path, csv_path.with_suffix(".txt"), top_n=args.top)

    print(f"\n✓ Sweep complete! Results saved to {csv_path}")
    return 0


def run_visualize(args: argparse.Namespace) -> int:
    """Generate visualizations from existing CSV."""
    csv_path = Path(args.csv)
    output_dir = Path(args.output_dir) if args.output_dir else None
    try:
        visualize.visualize_csv(csv_path, output_dir)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1
    return 0


def run_stats(args: argparse.Namespace) -> int:
    """Generate statistical report from existing CSV."""
    csv_path = Path(args.csv)
    if not csv_path.exists():
        print(f"Error: File not found: {csv_path}")
        return 1

    output_path = Path(args.output) if args.output else None
    report = statistics.generate_report(csv_path, output_path, top_n=args.top)
    if not output_path:
        print(report)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI.

    Args:
        argv: Optional command-line arguments (for testing)

    Returns:
        Exit code (0 for success)
    """
    parser = argparse.ArgumentParser(
        description="Analysis framework for Ramsete gain sweeps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sweep b and zeta over a 3x3 grid, 10 jittered runs each
  python -m analysis.cli sweep --param b=5,15,30 --param zeta=0.5,0.7,0.9 --runs 10

  # Start 0.5 off the path and plot the results
  python -m analysis.cli sweep --param b=5,15,30 --start-offset 0 0.5 0 --visualize --report

  # Visualize existing results
  python -m analysis.cli visualize results/gain_sweep_20261018_120000.csv

  # Generate statistical report
  python -m analysis.cli stats results/gain_sweep_20261018_120000.csv
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    sweep_parser = subparsers.add_parser("sweep", help="Run a gain sweep")
    sweep_parser.add_argument(
        "--param",
        action="append",
        help="Parameter to sweep: NAME=val1,val2,val3 (b, zeta, wheel_base, max_wheel_speed)",
    )
    sweep_parser.add_argument(
        "--runs", type=int, default=10, help="Number of runs per configuration (default: 10)"
    )
    sweep_parser.add_argument(
        "--threshold",
        type=float,
        default=1.0,
        help="A configuration is invalid if its worst run's mean tracking error exceeds this (default: 1.0)",
    )
    sweep_parser.add_argument(
        "--path", choices=sorted(TRAJECTORIES), default="lemniscate", help="Reference path"
    )
    sweep_parser.add_argument(
        "--jitter",
        type=float,
        nargs=2,
        metavar=("MIN", "MAX"),
        default=[JITTER_MIN_FACTOR, JITTER_MAX_FACTOR],
        help="Timing jitter factor range",
    )
    sweep_parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Seed of the first run")
    sweep_parser.add_argument(
        "--start-offset",
        type=float,
        nargs=3,
        metavar=("DX", "DY", "DTHETA"),
        default=[0.0, 0.0, 0.0],
        help="Offset of the start pose from the first segment",
    )
    sweep_parser.add_argument(
        "--output", "-o", help="Output CSV path (default: auto-generated in results/)"
    )
    sweep_parser.add_argument(
        "--visualize", action="store_true", help="Generate visualizations after sweep"
    )
    sweep_parser.add_argument(
        "--report", action="store_true", help="Generate statistical report after sweep"
    )
    sweep_parser.add_argument(
        "--top", type=int, default=10, help="Number of top configurations to show (default: 10)"
    )

    viz_parser = subparsers.add_parser("visualize", help="Generate visualizations from CSV")
    viz_parser.add_argument("csv", help="Path to sweep results CSV file")
    viz_parser.add_argument(
        "--output-dir", "-o", help="Output directory for plots (default: same as CSV)"
    )

    stats_parser = subparsers.add_parser("stats", help="Generate statistical report from CSV")
    stats_parser.add_argument("csv", help="Path to sweep results CSV file")
    stats_parser.add_argument("--output", "-o", help="Output report path (default: print)")
    stats_parser.add_argument(
        "--top", type=int, default=10, help="Number of top configurations to show (default: 10)"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "sweep":
        return run_sweep(args)
    elif args.command == "visualize":
        return run_visualize(args)
    elif args.command == "stats":
        return run_stats(args)
    print(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
