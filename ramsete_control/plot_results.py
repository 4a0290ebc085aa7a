#!/usr/bin/env python3
"""
Plot saved Ramsete simulation runs.

Picks a run directory written by DataCollector (the most recent one by
default), prints its summary.txt and renders the diagnostic plots.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import TERM_BLUE, TERM_ORANGE, TERM_RESET
from .diagnostic_plots import plot_run_summary


def _run_dirs(results_dir: Path) -> List[Path]:
    """Run directories under ``results_dir``, oldest first (names are timestamps)."""
    if not results_dir.exists():
        raise FileNotFoundError(f"Results directory not found: {results_dir}")
    return sorted(d for d in results_dir.iterdir() if d.is_dir() and d.name.startswith("run_"))


def find_latest_run(results_dir: Path) -> Path:
    """Most recent run directory.

    Raises:
        FileNotFoundError: If the directory is missing or holds no runs.
    """
    runs = _run_dirs(results_dir)
    if not runs:
        raise FileNotFoundError(f"No run directories found in {results_dir}")
    return runs[-1]


def list_available_runs(results_dir: Path) -> None:
    """Log every run directory with its final tracking error, if recorded."""
    runs = _run_dirs(results_dir)
    if not runs:
        logging.info(f"No run directories found in {results_dir}")
        return

    logging.info("Available runs:")
    for i, run_dir in enumerate(runs, 1):
        final_error = read_summary(run_dir).get("final_error", "?")
        logging.info(f"  {i}. {run_dir.name}  (final error: {final_error})")


def read_summary(run_dir: Path) -> dict:
    """Parse ``key: value`` lines of a run's summary.txt (empty if absent)."""
    summary_path = run_dir / "summary.txt"
    if not summary_path.exists():
        return {}
    summary = {}
    for line in summary_path.read_text().splitlines():
        key, sep, value = line.partition(":")
        if sep:
            summary[key.strip()] = value.strip()
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for ``python -m ramsete_control.plot_results``."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    parser = argparse.ArgumentParser(
        description="Plot saved Ramsete simulation runs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Plot the most recent run
  python -m ramsete_control.plot_results

  # Plot a specific run by name
  python -m ramsete_control.plot_results --run run_20261018_184704

  # Save figures to the run directory without displaying them
  python -m ramsete_control.plot_results --save --no-show

  # List all runs with their final tracking error
  python -m ramsete_control.plot_results --list
        """,
    )
    parser.add_argument(
        "--run", default=None, help="Run directory name (default: most recent run)"
    )
    parser.add_argument(
        "--results-dir", default="results", help="Directory holding run_* folders (default: results)"
    )
    parser.add_argument("--save", action="store_true", help="Save PNGs into the run directory")
    parser.add_argument("--no-show", action="store_true", help="Do not open plot windows")
    parser.add_argument("--list", action="store_true", help="List runs and exit")
    args = parser.parse_args(argv)

    results_dir = Path(args.results_dir)

    try:
        if args.list:
            list_available_runs(results_dir)
            return 0

        if args.run:
            run_dir = results_dir / args.run
            if not run_dir.is_dir():
                raise FileNotFoundError(f"Run directory not found: {run_dir}")
        else:
            run_dir = find_latest_run(results_dir)

        logging.info(f"{TERM_BLUE}Plotting {run_dir}{TERM_RESET}")
        for key, value in read_summary(run_dir).items():
            logging.info(f"  {key}: {value}")

        plot_run_summary(run_dir=run_dir, save_plots=args.save, show_plots=not args.no_show)
    except FileNotFoundError as e:
        logging.error(f"{TERM_ORANGE}Error: {e}{TERM_RESET}")
        return 1

    if args.save:
        logging.info(f"{TERM_BLUE}✓ Saved plots to {run_dir}/{TERM_RESET}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
