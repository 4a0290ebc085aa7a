"""
Closed-loop simulation harness for the Ramsete controller.

This module drives the controller against the kinematic integrator in
place of real hardware feedback: each tick the current pose is handed to
the controller, the resulting wheel command is integrated into a new pose,
and the loop repeats until the trajectory is exhausted. All loop state
(pose, timing, metrics) is owned by the run itself.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import TERM_BLUE, TERM_RESET
from .controller import RamseteController
from .data_collector import DataCollector
from .integrator import KinematicIntegrator
from .model import Pose, TrajectorySegment, WheelCommand


class CustomFormatter(logging.Formatter):
    """Custom logging formatter that removes timestamps from INFO messages.

    This formatter provides clean console output by showing INFO messages without
    timestamps while preserving full context for WARNING, ERROR, and DEBUG messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return record.getMessage()
        return f"{self.formatTime(record, self.datefmt)} - {record.levelname} - {record.getMessage()}"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, show all levels with timestamps (including the
                 per-tick controller trace). If False, show INFO without
                 timestamps and WARNING/ERROR with timestamps.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(CustomFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
        logger = logging.getLogger()
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)


@dataclass
class SimulationResult:
    """Pose trace and tracking metrics from one closed-loop run.

    ``poses`` holds the start pose followed by one integrated pose per tick,
    so it is one longer than ``commands``. Tracking errors compare the pose
    handed to the controller on each tick with the segment it targeted.
    """

    poses: List[Pose] = field(default_factory=list)
    commands: List[WheelCommand] = field(default_factory=list)
    references: List[TrajectorySegment] = field(default_factory=list)
    errors: List[float] = field(default_factory=list)
    heading_errors: List[float] = field(default_factory=list)
    elapsed_time: float = 0.0

    @property
    def ticks(self) -> int:
        return len(self.commands)

    @property
    def final_pose(self) -> Pose:
        return self.poses[-1]

    @property
    def cumulative_error(self) -> float:
        return float(sum(self.errors))

    @property
    def mean_error(self) -> float:
        if not self.errors:
            return 0.0
        return self.cumulative_error / len(self.errors)

    @property
    def max_error(self) -> float:
        return max(self.errors, default=0.0)

    @property
    def final_error(self) -> float:
        """Distance between the final pose and the last trajectory segment."""
        if not self.references:
            return 0.0
        last = self.references[-1]
        return self.final_pose.distance_to(last.x, last.y)

    def summary(self) -> Dict[str, float]:
        return {
            "ticks": self.ticks,
            "elapsed_time": self.elapsed_time,
            "final_x": self.final_pose.x,
            "final_y": self.final_pose.y,
            "final_theta": self.final_pose.theta,
            "final_error": self.final_error,
            "mean_error": self.mean_error,
            "max_error": self.max_error,
            "cumulative_error": self.cumulative_error,
        }


def run_simulation(
    controller: RamseteController,
    integrator: Optional[KinematicIntegrator] = None,
    start_pose: Optional[Pose] = None,
    data_collector: Optional[DataCollector] = None,
) -> SimulationResult:
    """Run the controller to completion against the kinematic integrator.

    Args:
        controller: Controller to drive. It should be freshly constructed or reset.
        integrator: Integrator closing the loop. Default: semi-implicit Euler, no jitter.
        start_pose: Initial robot pose. Default: the trajectory's first segment.
        data_collector: Optional collector that must already be set up.

    Returns:
        SimulationResult with the pose trace and tracking metrics
    """
    if integrator is None:
        integrator = KinematicIntegrator()

    pose = start_pose.copy() if start_pose is not None else controller.initial_pose()
    result = SimulationResult(poses=[pose])

    sim_time = 0.0  # includes timing jitter
    ref_time = 0.0  # nominal trajectory time
    tick = 0

    if data_collector:
        data_collector.log_pose(tick, sim_time, pose)

    logging.info(f"{TERM_BLUE}✓ Running Ramsete trajectory following{TERM_RESET}")

    while not controller.is_complete():
        controller.set_pose(pose)
        segment = controller.current_segment()
        command = controller.compute_command()

        error_x = segment.x - pose.x
        error_y = segment.y - pose.y
        error_l2 = math.hypot(error_x, error_y)
        error_theta = segment.heading - pose.theta

        result.commands.append(command)
        result.references.append(segment)
        result.errors.append(error_l2)
        result.heading_errors.append(error_theta)

        if data_collector:
            data_collector.log_reference(tick, ref_time, segment)
            data_collector.log_command(tick, command, controller.get_diagnostics())
            data_collector.log_tracking_metrics(
                tick, error_x, error_y, error_l2, error_theta, result.cumulative_error
            )

        dt = integrator.sample_dt(segment.dt)
        pose = integrator.step(pose, command, dt, controller.wheel_base)

        sim_time += dt
        ref_time += segment.dt
        tick += 1

        logging.debug(
            f"New X: {pose.x:.4f} New Y: {pose.y:.4f} "
            f"New Heading: {math.degrees(pose.theta):.2f}"
        )

        result.poses.append(pose)
        if data_collector:
            data_collector.log_pose(tick, sim_time, pose)

    result.elapsed_time = sim_time

    logging.info(
        f"{TERM_BLUE}\033[1m→ Trajectory complete after {result.ticks} ticks  "
        f"Final error: {result.final_error:.4f}  Mean error: {result.mean_error:.4f}{TERM_RESET}"
    )

    return result
