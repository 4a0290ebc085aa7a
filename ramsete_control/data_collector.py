"""Data collection and CSV logging for simulated Ramsete runs.

This module provides CSV data logging for:
- Pose trace (integrated robot pose per tick)
- Reference trajectory (segment targeted per tick)
- Wheel commands and controller diagnostics
- Tracking metrics (position/heading errors, cumulative L2 error)
- Run summary (final and mean tracking error)
"""

import csv
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from .config import TERM_BLUE, TERM_RESET
from .model import Pose, TrajectorySegment, WheelCommand

POSE_HEADERS = ["tick", "time", "x", "y", "theta"]
REFERENCE_HEADERS = ["tick", "elapsed_time", "x_ref", "y_ref", "theta_ref", "v_ref"]
COMMAND_HEADERS = [
    "tick",
    "left",
    "right",
    "v",
    "w",
    "v_d",
    "w_d",
    "k",
    "error_along",
    "error_cross",
    "error_theta",
]
TRACKING_HEADERS = [
    "tick",
    "error_x",
    "error_y",
    "error_l2",
    "error_theta",
    "cumulative_l2_error",
]


class DataCollector:
    """Manages CSV file creation and logging for simulation runs.

    This class handles all data logging responsibilities:
    - Creates timestamped output directories
    - Initializes CSV files with headers
    - Writes pose, reference, command and tracking rows
    - Ensures proper cleanup on shutdown

    Attributes:
        run_dir: Directory path for this run's output files.
        pose_csv_file: File handle for the pose trace CSV.
        reference_csv_file: File handle for the reference CSV.
        command_csv_file: File handle for the wheel command CSV.
        tracking_csv_file: File handle for tracking metrics CSV.
        summary_output_path: Path for the run summary text file.
    """

    def __init__(self, output_dir: str = ".", run_dir: Optional[str] = None) -> None:
        """Initialize the data collector.

        Args:
            output_dir: Base directory for output files (default: current directory).
            run_dir: Optional specific run directory. If None, creates timestamped
                directory. Can also be set via RUN_DIR environment variable.

        Raises:
            ValueError: If output_dir is not a valid directory.
        """
        output_path = Path(output_dir)
        if output_path.exists() and not output_path.is_dir():
            raise ValueError(f"Output path exists but is not a directory: {output_dir}")

        self.pose_csv_file: Optional[TextIO] = None
        self.pose_csv_writer: Any = None
        self.reference_csv_file: Optional[TextIO] = None
        self.reference_csv_writer: Any = None
        self.command_csv_file: Optional[TextIO] = None
        self.command_csv_writer: Any = None
        self.tracking_csv_file: Optional[TextIO] = None
        self.tracking_csv_writer: Any = None

        if run_dir:
            self.run_dir: Path = Path(run_dir)
        elif env_run_dir := os.environ.get("RUN_DIR"):
            self.run_dir = Path(env_run_dir)
        else:
            # results/run_YYYYMMDD_HHMMSS/
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.run_dir = output_path / "results" / f"run_{timestamp}"

        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.pose_output_path: Path = self.run_dir / "pose_data.csv"
        self.reference_output_path: Path = self.run_dir / "reference_data.csv"
        self.command_output_path: Path = self.run_dir / "command_data.csv"
        self.tracking_output_path: Path = self.run_dir / "tracking_metrics.csv"
        self.summary_output_path: Path = self.run_dir / "summary.txt"

    @staticmethod
    def _open_csv(path: Path, headers: list) -> tuple:
        f = open(path, "w", newline="")
        writer = csv.writer(f)
        writer.writerow(headers)
        f.flush()
        return f, writer

    def setup(self) -> None:
        """Initialize CSV files with headers.

        Must be called before writing data. If any file cannot be opened, the
        ones already opened are closed before the error propagates.
        """
        try:
            self.pose_csv_file, self.pose_csv_writer = self._open_csv(
                self.pose_output_path, POSE_HEADERS
            )
            self.reference_csv_file, self.reference_csv_writer = self._open_csv(
                self.reference_output_path, REFERENCE_HEADERS
            )
            self.command_csv_file, self.command_csv_writer = self._open_csv(
                self.command_output_path, COMMAND_HEADERS
            )
            self.tracking_csv_file, self.tracking_csv_writer = self._open_csv(
                self.tracking_output_path, TRACKING_HEADERS
            )
        except OSError:
            self._close_files()
            raise

        logging.info(
            f"{TERM_BLUE}✓ Initialized data collection to {self.run_dir}/{TERM_RESET}"
        )

    def log_pose(self, tick: int, time: float, pose: Pose) -> None:
        """Log an integrated pose.

        Args:
            tick: Control tick the pose was fed into (0 = start pose).
            time: Simulated time including timing jitter (seconds).
            pose: Robot pose.
        """
        self.pose_csv_writer.writerow([tick, time, pose.x, pose.y, pose.theta])
        if self.pose_csv_file:
            self.pose_csv_file.flush()

    def log_reference(self, tick: int, elapsed_time: float, segment: TrajectorySegment) -> None:
        """Log the trajectory segment targeted on a tick.

        Args:
            tick: Control tick.
            elapsed_time: Nominal trajectory time of the segment (seconds).
            segment: Targeted segment.
        """
        self.reference_csv_writer.writerow(
            [tick, elapsed_time, segment.x, segment.y, segment.heading, segment.velocity]
        )
        if self.reference_csv_file:
            self.reference_csv_file.flush()

    def log_command(self, tick: int, command: WheelCommand, diagnostics: Dict[str, float]) -> None:
        """Log a wheel command together with controller diagnostics.

        Args:
            tick: Control tick.
            command: Wheel command sent on this tick.
            diagnostics: Dictionary from RamseteController.get_diagnostics().
        """
        self.command_csv_writer.writerow(
            [
                tick,
                command.left,
                command.right,
                diagnostics.get("v", ""),
                diagnostics.get("w", ""),
                diagnostics.get("v_d", ""),
                diagnostics.get("w_d", ""),
                diagnostics.get("k", ""),
                diagnostics.get("error_along", ""),
                diagnostics.get("error_cross", ""),
                diagnostics.get("error_theta", ""),
            ]
        )
        if self.command_csv_file:
            self.command_csv_file.flush()

    def log_tracking_metrics(
        self,
        tick: int,
        error_x: float,
        error_y: float,
        error_l2: float,
        error_theta: float,
        cumulative_l2_error: float,
    ) -> None:
        """Log tracking error metrics to CSV.

        Args:
            tick: Control tick.
            error_x: X position error.
            error_y: Y position error.
            error_l2: L2 norm of position error.
            error_theta: Heading error (rad).
            cumulative_l2_error: Running sum of L2 errors.
        """
        self.tracking_csv_writer.writerow(
            [tick, error_x, error_y, error_l2, error_theta, cumulative_l2_error]
        )
        if self.tracking_csv_file:
            self.tracking_csv_file.flush()

    def log_summary(self, summary: Dict[str, float]) -> None:
        """Write the run summary as ``key: value`` lines.

        Args:
            summary: Summary values, e.g. from SimulationResult.summary().
        """
        with open(self.summary_output_path, "w") as f:
            for key, value in summary.items():
                f.write(f"{key}: {value}\n")
        logging.info(f"{TERM_BLUE}✓ Saved run summary to {self.summary_output_path.name}{TERM_RESET}")

    def _close_files(self) -> None:
        for f in (
            self.pose_csv_file,
            self.reference_csv_file,
            self.command_csv_file,
            self.tracking_csv_file,
        ):
            if f:
                f.close()

    def cleanup(self) -> None:
        """Close all CSV files and log final output location."""
        self._close_files()
        logging.info(f"{TERM_BLUE}✓ Saved run data to {self.run_dir}/{TERM_RESET}")

    def __enter__(self) -> "DataCollector":
        self.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.cleanup()
