"""Diagnostic plots for Ramsete tracking performance analysis.

This module loads the pose trace, reference trajectory, wheel commands and
tracking metrics of a simulated run from CSV files and generates diagnostic
plots to identify tracking errors.
"""

import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from .config import ACTUAL_COLOR, GUIDE_COLOR, REFERENCE_COLOR


def load_csv_to_dict(csv_path: Path) -> Dict[str, np.ndarray]:
    """Load CSV file into dictionary of numpy arrays.

    Args:
        csv_path: Path to CSV file

    Returns:
        Dictionary mapping column names to numpy arrays
    """
    with open(csv_path, "r") as f:
        reader = csv.DictReader(f)
        data: Dict[str, List[float]] = {key: [] for key in (reader.fieldnames or [])}
        for row in reader:
            for key, value in row.items():
                try:
                    data[key].append(float(value))
                except (ValueError, TypeError):
                    data[key].append(np.nan)

    return {key: np.array(values) for key, values in data.items()}


def load_run_data(run_dir: Path) -> Dict[str, Dict[str, np.ndarray]]:
    """Load all CSV data from a run directory.

    Args:
        run_dir: Path to the run directory containing CSV files

    Returns:
        Dictionary containing data dicts for 'pose', 'reference', 'command', 'tracking'

    Raises:
        FileNotFoundError: If the pose trace is missing
    """
    pose_path = run_dir / "pose_data.csv"
    if not pose_path.exists():
        raise FileNotFoundError(f"Pose trace not found: {pose_path}")

    data = {"pose": load_csv_to_dict(pose_path)}

    for key, filename in (
        ("reference", "reference_data.csv"),
        ("command", "command_data.csv"),
        ("tracking", "tracking_metrics.csv"),
    ):
        path = run_dir / filename
        if path.exists():
            data[key] = load_csv_to_dict(path)
        else:
            logging.warning(f"{path} not found. {key.capitalize()} plots will be missing.")

    return data


def _finish(fig: Figure, save_path: Optional[Path]) -> Figure:
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
        logging.info(f"Saved plot: {save_path}")
    return fig


def plot_xy_trajectory(
    data: Dict[str, Dict[str, np.ndarray]], save_path: Optional[Path] = None
) -> Figure:
    """Plot XY trajectory comparison: reference vs simulated pose trace.

    Args:
        data: Dictionary containing data dicts
        save_path: Optional path to save the figure
    """
    fig, ax = plt.subplots(figsize=(10, 8))

    if "reference" in data:
        ref = data["reference"]
        ax.plot(ref["x_ref"], ref["y_ref"], "-", color=REFERENCE_COLOR, linewidth=2,
                label="Reference", alpha=0.7)
        ax.plot(ref["x_ref"][-1], ref["y_ref"][-1], "*", color=REFERENCE_COLOR,
                markersize=15, label="End")

    pose = data["pose"]
    ax.plot(pose["x"], pose["y"], "-", color=ACTUAL_COLOR, linewidth=1.5, label="Simulated")
    ax.plot(pose["x"][0], pose["y"][0], "o", color=ACTUAL_COLOR, markersize=10, label="Start")

    ax.set_xlabel("X Position", fontsize=12)
    ax.set_ylabel("Y Position", fontsize=12)
    ax.set_title("Trajectory Comparison: Reference vs Simulated", fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")
    ax.axis("equal")

    return _finish(fig, save_path)


def plot_tracking_error(
    data: Dict[str, Dict[str, np.ndarray]], save_path: Optional[Path] = None
) -> Optional[Figure]:
    """Plot position and heading error over the run.

    Args:
        data: Dictionary containing data dicts
        save_path: Optional path to save the figure
    """
    if "tracking" not in data:
        logging.warning("Missing tracking data. Cannot plot tracking error.")
        return None

    tracking = data["tracking"]
    ticks = tracking["tick"]

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax1.plot(ticks, tracking["error_l2"], "-", color=ACTUAL_COLOR, linewidth=2, label="L2 Error")
    mean_error = float(np.mean(tracking["error_l2"])) if len(ticks) else 0.0
    ax1.axhline(y=mean_error, color=GUIDE_COLOR, linestyle="--",
                label=f"Mean: {mean_error:.3f}", linewidth=2)
    ax1.set_ylabel("Position Error", fontsize=12)
    ax1.set_title(f"Position Error (Mean: {mean_error:.3f})", fontsize=14, fontweight="bold")
    ax1.grid(True, alpha=0.3)
    ax1.legend(loc="best")

    ax2.plot(ticks, np.degrees(tracking["error_theta"]), "-", color=REFERENCE_COLOR, linewidth=1.5)
    ax2.axhline(y=0, color=GUIDE_COLOR, linestyle="--", alpha=0.3)
    ax2.set_xlabel("Tick", fontsize=12)
    ax2.set_ylabel("Heading Error (degrees)", fontsize=12)
    ax2.set_title("Heading Error", fontsize=13)
    ax2.grid(True, alpha=0.3)

    return _finish(fig, save_path)


def plot_wheel_commands(
    data: Dict[str, Dict[str, np.ndarray]], save_path: Optional[Path] = None
) -> Optional[Figure]:
    """Plot commanded wheel speeds and the (v, w) they were built from.

    Args:
        data: Dictionary containing data dicts
        save_path: Optional path to save the figure
    """
    if "command" not in data:
        logging.warning("Missing command data. Cannot plot wheel commands.")
        return None

    cmd = data["command"]
    ticks = cmd["tick"]

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax1.plot(ticks, cmd["left"], "-", color=ACTUAL_COLOR, linewidth=1.5, label="Left")
    ax1.plot(ticks, cmd["right"], "-", color=REFERENCE_COLOR, linewidth=1.5, label="Right")
    ax1.set_ylabel("Wheel Speed", fontsize=12)
    ax1.set_title("Wheel Commands", fontsize=14, fontweight="bold")
    ax1.grid(True, alpha=0.3)
    ax1.legend(loc="best")

    ax2.plot(ticks, cmd["v"], "-", color=ACTUAL_COLOR, linewidth=1.5, label="v (command)")
    ax2.plot(ticks, cmd["v_d"], "--", color=ACTUAL_COLOR, alpha=0.6, label="v_d (feed-forward)")
    ax2.plot(ticks, cmd["w"], "-", color=REFERENCE_COLOR, linewidth=1.5, label="w (command)")
    ax2.plot(ticks, cmd["w_d"], "--", color=REFERENCE_COLOR, alpha=0.6, label="w_d (feed-forward)")
    ax2.set_xlabel("Tick", fontsize=12)
    ax2.set_ylabel("Velocity", fontsize=12)
    ax2.grid(True, alpha=0.3)
    ax2.legend(loc="best")

    return _finish(fig, save_path)


def plot_run_summary(run_dir: Path, save_plots: bool = False, show_plots: bool = True) -> None:
    """Generate all diagnostic plots for a run directory.

    Args:
        run_dir: Run directory written by DataCollector
        save_plots: Save each figure as PNG in run_dir
        show_plots: Display figures interactively
    """
    data = load_run_data(run_dir)

    plot_xy_trajectory(data, run_dir / "trajectory.png" if save_plots else None)
    plot_tracking_error(data, run_dir / "tracking_error.png" if save_plots else None)
    plot_wheel_commands(data, run_dir / "wheel_commands.png" if save_plots else None)

    if show_plots:
        plt.show()
    else:
        plt.close("all")
