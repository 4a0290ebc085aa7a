"""Ramsete trajectory-tracking controller for differential drive robots.

This module implements the Ramsete nonlinear feedback law, which actively
corrects longitudinal, lateral, and angular error by asymptotically
stabilizing the tracking error at zero:
- Steps through a precomputed trajectory one segment per control tick
- Derives the desired yaw rate from the heading change to the next segment
- Combines feed-forward velocities with nonlinear feedback on pose error
- Splits the resulting (v, omega) into left/right wheel speeds

Reference: A. De Luca, G. Oriolo, C. Samson, "Feedback Control of
a Nonholonomic Car-like Robot", eq. 5.12.
https://www.dis.uniroma1.it/~labrob/pub/papers/Ramsete01.pdf
"""

import logging
import math
from typing import Dict, Optional

from .config import RAMSETE_B, RAMSETE_ZETA, SINC_TOLERANCE, WHEELBASE
from .model import ConfigurationError, Pose, TrajectorySegment, WheelCommand, inverse_kinematics
from .trajectory import TrajectorySource


def sinc(error: float, tolerance: float = SINC_TOLERANCE) -> float:
    """Compute sin(e)/e with the removable singularity at e = 0 resolved.

    Within |e| < tolerance the series 1 - e²/6 is used instead of the
    quotient, which gives exactly 1.0 at e = 0.

    Args:
        error: Heading error (rad)
        tolerance: Half-width of the band around zero that uses the series

    Returns:
        sin(error) / error
    """
    if abs(error) < tolerance:
        return 1.0 - error * error / 6.0
    return math.sin(error) / error


def ramsete_gain(b: float, zeta: float, v_d: float, w_d: float) -> float:
    """Time-varying feedback gain k = 2 * zeta * sqrt(w_d² + b * v_d²)."""
    return 2.0 * zeta * math.sqrt(w_d**2 + b * v_d**2)


class RamseteController:
    """Ramsete trajectory follower.

    Holds a monotonically advancing segment index into the trajectory and
    the latest externally supplied pose estimate. Each call to
    :meth:`compute_command` consumes exactly one segment until the trajectory
    is exhausted, after which it keeps returning a zero command.

    Attributes:
        b: Correction gain (> 0). Larger values correct harder.
        zeta: Damping factor, should be in [0, 1).
        wheel_base: Distance between left and right wheels (> 0).
        trajectory: The trajectory being followed.
        max_wheel_speed: Optional symmetric clamp on each wheel speed.
    """

    def __init__(
        self,
        trajectory: TrajectorySource,
        b: float = RAMSETE_B,
        zeta: float = RAMSETE_ZETA,
        wheel_base: float = WHEELBASE,
        max_wheel_speed: Optional[float] = None,
    ):
        """Initialize the controller.

        Args:
            trajectory: Trajectory to follow (must contain at least one segment).
            b: Correction gain, must be > 0. Default: RAMSETE_B.
            zeta: Damping factor in [0, 1). Default: RAMSETE_ZETA.
            wheel_base: Distance between the wheels, must be > 0. Default: WHEELBASE.
            max_wheel_speed: Clamp wheel speeds to +/- this value. Default: None (no clamp).

        Raises:
            ConfigurationError: If any parameter is out of range or the trajectory is empty.
        """
        if not (math.isfinite(b) and b > 0):
            raise ConfigurationError(f"Ramsete gain b must be > 0, got {b}")
        if not math.isfinite(zeta):
            raise ConfigurationError(f"Ramsete damping zeta must be finite, got {zeta}")
        if not (math.isfinite(wheel_base) and wheel_base > 0):
            raise ConfigurationError(f"Wheel base must be > 0, got {wheel_base}")
        if max_wheel_speed is not None and max_wheel_speed <= 0:
            raise ConfigurationError(f"Max wheel speed must be > 0, got {max_wheel_speed}")
        if trajectory.length() < 1:
            raise ConfigurationError("Trajectory must contain at least one segment")

        if not 0.0 <= zeta < 1.0:
            logging.warning(f"zeta={zeta} is outside [0, 1); convergence is not guaranteed")

        self.b = b
        self.zeta = zeta
        self.wheel_base = wheel_base
        self.max_wheel_speed = max_wheel_speed
        self.trajectory = trajectory

        self._length = trajectory.length()
        self._index = 0  # progress through the trajectory
        self._pose = Pose(0.0, 0.0, 0.0)
        self._diagnostics: Dict[str, float] = {}

        logging.info(
            f"Initializing Ramsete controller: b={b}, zeta={zeta}, "
            f"wheel_base={wheel_base}, segments={self._length}"
        )

    @property
    def index(self) -> int:
        """Index of the next segment to be commanded."""
        return self._index

    @property
    def pose(self) -> Pose:
        """Copy of the controller's current pose estimate."""
        return self._pose.copy()

    def set_pose(self, pose: Pose) -> None:
        """Replace the controller's pose estimate with a copy of ``pose``."""
        self._pose = pose.copy()

    def initial_pose(self) -> Pose:
        """Pose of the first trajectory segment, for seeding odometry."""
        return self.trajectory.get(0).to_pose()

    def is_complete(self) -> bool:
        return self._index == self._length

    def current_segment(self) -> Optional[TrajectorySegment]:
        """Segment the next command will target, or None once complete."""
        if self.is_complete():
            return None
        return self.trajectory.get(self._index)

    def reset(self) -> None:
        """Restart from the first segment with the pose at the origin."""
        self._index = 0
        self._pose = Pose(0.0, 0.0, 0.0)
        self._diagnostics = {}

    def desired_angular_velocity(self) -> float:
        """Forward-difference yaw rate from the current segment to the next.

        Uses the current segment's dt. The last segment has no successor, so
        its desired yaw rate is zero.
        """
        if self._index < self._length - 1:
            current = self.trajectory.get(self._index)
            following = self.trajectory.get(self._index + 1)
            return (following.heading - current.heading) / current.dt
        return 0.0

    def compute_command(self) -> WheelCommand:
        """Compute the wheel command for the current segment and advance.

        Returns:
            WheelCommand for this tick, or a zero command once complete
        """
        if self.is_complete():
            return WheelCommand(0.0, 0.0)

        logging.debug(f"Seg {self._index} of {self._length - 1}")

        segment = self.trajectory.get(self._index)
        w_d = self.desired_angular_velocity()
        v_d = segment.velocity
        k = ramsete_gain(self.b, self.zeta, v_d, w_d)

        pose = self._pose
        cos_theta = math.cos(pose.theta)
        sin_theta = math.sin(pose.theta)
        dx = segment.x - pose.x
        dy = segment.y - pose.y

        # Pose error expressed in the robot frame
        error_along = cos_theta * dx + sin_theta * dy
        error_cross = cos_theta * dy - sin_theta * dx
        error_theta = segment.heading - pose.theta
        sinc_error = sinc(error_theta)

        # eq. 5.12
        v = v_d * math.cos(error_theta) + k * error_along
        w = w_d + self.b * v_d * sinc_error * error_cross + k * error_theta

        left, right = inverse_kinematics(v, w, self.wheel_base, self.max_wheel_speed)

        logging.debug(f"Velocity: {v:.4f} Angular Velocity: {w:.4f}")
        logging.debug(f"Left: {left:.4f} Right: {right:.4f}")

        self._diagnostics = {
            "index": float(self._index),
            "v_d": v_d,
            "w_d": w_d,
            "k": k,
            "error_along": error_along,
            "error_cross": error_cross,
            "error_theta": error_theta,
            "sinc": sinc_error,
            "v": v,
            "w": w,
            "left": left,
            "right": right,
        }

        self._index += 1
        return WheelCommand(left, right)

    def get_diagnostics(self) -> Dict[str, float]:
        """Intermediate values from the most recent non-terminal tick.

        Returns:
            Dictionary with keys 'index', 'v_d', 'w_d', 'k', 'error_along',
            'error_cross', 'error_theta', 'sinc', 'v', 'w', 'left', 'right'.
            Empty before the first command.
        """
        return dict(self._diagnostics)
