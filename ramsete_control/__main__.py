"""
Main entry point when running the ramsete_control module with python -m.

Runs one closed-loop simulation of the Ramsete controller against the
kinematic integrator and saves the run data for plotting.
"""

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import List, Optional

from .config import (
    DEFAULT_SEED,
    MAX_VELOCITY,
    PATH_DT,
    PATH_DURATION,
    RAMSETE_B,
    RAMSETE_ZETA,
    TERM_ORANGE,
    TERM_RESET,
    WHEELBASE,
)
from .controller import RamseteController
from .data_collector import DataCollector
from .integrator import IntegrationMode, KinematicIntegrator, TimingJitter
from .model import ConfigurationError, Pose
from .simulation import run_simulation, setup_logging
from .trajectory import (
    Trajectory,
    arc_trajectory,
    lemniscate_trajectory,
    line_trajectory,
    load_trajectory_csv,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simulate Ramsete trajectory tracking for a differential drive robot"
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--path",
        choices=["lemniscate", "line", "arc"],
        default="lemniscate",
        help="Analytic reference path to follow (default: lemniscate)",
    )
    source.add_argument(
        "--trajectory-csv",
        type=Path,
        default=None,
        help="Follow a trajectory exported as CSV (dt,x,y,position,velocity,acceleration,jerk,heading)",
    )

    parser.add_argument("--b", type=float, default=RAMSETE_B, help="Correction gain b (> 0)")
    parser.add_argument("--zeta", type=float, default=RAMSETE_ZETA, help="Damping zeta in [0, 1)")
    parser.add_argument("--wheel-base", type=float, default=WHEELBASE, help="Wheel base (> 0)")
    parser.add_argument("--dt", type=float, default=PATH_DT, help="Analytic path time step (s)")
    parser.add_argument(
        "--duration", type=float, default=PATH_DURATION, help="Lemniscate period (s)"
    )
    parser.add_argument(
        "--velocity", type=float, default=MAX_VELOCITY, help="Line/arc feed-forward velocity"
    )
    parser.add_argument(
        "--start-offset",
        type=float,
        nargs=3,
        metavar=("DX", "DY", "DTHETA"),
        default=None,
        help="Offset the start pose from the first segment",
    )
    parser.add_argument(
        "--jitter",
        type=float,
        nargs=2,
        metavar=("MIN", "MAX"),
        default=None,
        help="Scale each integration step by a uniform factor in [MIN, MAX]",
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Seed for timing jitter")
    parser.add_argument(
        "--integration",
        choices=[mode.value for mode in IntegrationMode],
        default=IntegrationMode.SEMI_IMPLICIT_EULER.value,
        help="Integration scheme (default: euler)",
    )
    parser.add_argument(
        "--max-wheel-speed", type=float, default=None, help="Clamp wheel speeds to +/- this value"
    )
    parser.add_argument(
        "--output-dir", type=str, default=".", help="Base directory for results/ (default: .)"
    )
    parser.add_argument("--no-save", action="store_true", help="Do not write run data to disk")
    parser.add_argument("--plot", action="store_true", help="Show diagnostic plots after the run")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging with timestamps"
    )
    return parser


def build_trajectory(args: argparse.Namespace) -> Trajectory:
    """Trajectory selected by the command-line arguments."""
    if args.trajectory_csv is not None:
        return load_trajectory_csv(args.trajectory_csv)
    if args.path == "line":
        return line_trajectory(distance=args.velocity * args.duration, velocity=args.velocity, dt=args.dt)
    if args.path == "arc":
        return arc_trajectory(radius=4.0, sweep=math.pi / 2.0, velocity=args.velocity, dt=args.dt)
    return lemniscate_trajectory(duration=args.duration, dt=args.dt)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        trajectory = build_trajectory(args)
        controller = RamseteController(
            trajectory,
            b=args.b,
            zeta=args.zeta,
            wheel_base=args.wheel_base,
            max_wheel_speed=args.max_wheel_speed,
        )
        jitter = None
        if args.jitter is not None:
            jitter = TimingJitter.from_seed(args.seed, args.jitter[0], args.jitter[1])
        integrator = KinematicIntegrator(mode=IntegrationMode(args.integration), jitter=jitter)
    except (ConfigurationError, FileNotFoundError) as e:
        logging.error(f"{TERM_ORANGE}Configuration error: {e}{TERM_RESET}")
        return 1

    start_pose = controller.initial_pose()
    if args.start_offset is not None:
        dx, dy, dtheta = args.start_offset
        start_pose = Pose(start_pose.x + dx, start_pose.y + dy, start_pose.theta + dtheta)

    if args.no_save:
        result = run_simulation(controller, integrator, start_pose)
        run_dir = None
    else:
        try:
            collector = DataCollector(output_dir=args.output_dir)
        except (ValueError, OSError) as e:
            logging.error(f"{TERM_ORANGE}Cannot write run data: {e}{TERM_RESET}")
            return 1
        with collector:
            result = run_simulation(controller, integrator, start_pose, collector)
            collector.log_summary(result.summary())
        run_dir = collector.run_dir

    if args.plot:
        if run_dir is None:
            logging.warning("--plot needs saved run data; ignoring because --no-save was given")
        else:
            from .diagnostic_plots import plot_run_summary

            plot_run_summary(run_dir, save_plots=True, show_plots=True)

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.info("\nExiting...")
        sys.exit(0)
