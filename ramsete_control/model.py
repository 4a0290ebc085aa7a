"""
Differential drive data types and kinematic model.

This module provides the value types passed around the control loop (pose,
trajectory segment, wheel command) and the kinematic maps between robot
velocities (v, omega) and individual wheel velocities.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple


class ConfigurationError(ValueError):
    """Raised when the controller, integrator or trajectory is misconfigured.

    Always raised at construction time, never in the middle of a run.
    """


@dataclass
class Pose:
    """Estimated robot position and heading on the field.

    The positive X-axis points straight ahead from the starting position and
    the positive Y-axis points to the robot's left. Theta is in radians,
    counter-clockwise positive, and is never wrapped.
    """

    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0

    def copy(self) -> "Pose":
        return replace(self)

    def distance_to(self, x: float, y: float) -> float:
        """Euclidean distance from this pose to the point (x, y)."""
        return math.hypot(x - self.x, y - self.y)


@dataclass(frozen=True)
class TrajectorySegment:
    """One sample of a time-parameterized reference trajectory.

    Attributes:
        x: Target x position.
        y: Target y position.
        heading: Target heading (rad).
        velocity: Feed-forward linear velocity at this sample.
        dt: Time step to the next sample (s), strictly positive.
        position: Distance travelled along the path (optional, planner output).
        acceleration: Profile acceleration (optional, planner output).
        jerk: Profile jerk (optional, planner output).
    """

    x: float
    y: float
    heading: float
    velocity: float
    dt: float
    position: float = 0.0
    acceleration: float = 0.0
    jerk: float = 0.0

    def to_pose(self) -> Pose:
        return Pose(self.x, self.y, self.heading)


@dataclass(frozen=True)
class WheelCommand:
    """Left/right wheel speed setting and brake mode for one control tick."""

    left: float
    right: float
    brake: bool = False

    @property
    def linear_velocity(self) -> float:
        """Velocity of the robot center implied by the wheel speeds."""
        return (self.left + self.right) / 2.0

    def angular_velocity(self, wheel_base: float) -> float:
        """Yaw rate implied by the wheel speed differential."""
        return (-self.left + self.right) / wheel_base


def inverse_kinematics(
    v_cmd: float, omega_cmd: float, wheel_base: float, max_wheel_speed: Optional[float] = None
) -> Tuple[float, float]:
    """
    Compute wheel velocities from desired linear and angular velocities.

    For a differential drive robot, the relationship between the robot's
    linear velocity (v), angular velocity (omega), and the individual
    wheel velocities is:
        v_left = v - (L/2) * omega
        v_right = v + (L/2) * omega

    where L is the wheel base (distance between wheels).

    Args:
        v_cmd: Desired linear velocity of the robot center
        omega_cmd: Desired angular velocity of the robot (rad/s)
                   Positive omega results in counter-clockwise rotation
        wheel_base: Distance between left and right wheels
        max_wheel_speed: If given, clamp each wheel to
                         [-max_wheel_speed, max_wheel_speed]

    Returns:
        tuple[float, float]: (v_left, v_right) wheel velocities

    Example:
        >>> v_left, v_right = inverse_kinematics(1.0, 0.5, 2.5)
        >>> # Robot moves forward while turning left
    """
    v_left = v_cmd - wheel_base * omega_cmd / 2.0
    v_right = v_cmd + wheel_base * omega_cmd / 2.0

    # Clamp velocities to respect actuator limits
    if max_wheel_speed is not None:
        v_left = max(-max_wheel_speed, min(max_wheel_speed, v_left))
        v_right = max(-max_wheel_speed, min(max_wheel_speed, v_right))

    return v_left, v_right


def forward_kinematics(v_left: float, v_right: float, wheel_base: float) -> Tuple[float, float]:
    """Compute robot linear and angular velocity from wheel velocities.

    Exact inverse of :func:`inverse_kinematics` without clamping.

    Args:
        v_left: Left wheel velocity
        v_right: Right wheel velocity
        wheel_base: Distance between left and right wheels

    Returns:
        Tuple of (v, omega)
    """
    v = (v_left + v_right) / 2.0
    omega = (-v_left + v_right) / wheel_base
    return v, omega
