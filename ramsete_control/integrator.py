"""Kinematic integration of wheel commands into a pose trace.

This module closes the control loop in simulation by advancing a pose
estimate under unicycle kinematics, given the wheel speeds commanded by the
controller. It also provides seeded timing jitter so that the integration
time step can vary around the nominal segment dt reproducibly.
"""

import math
from enum import Enum
from typing import Optional

import numpy as np

from .config import DEFAULT_SEED, JITTER_MAX_FACTOR, JITTER_MIN_FACTOR
from .model import ConfigurationError, Pose, WheelCommand, forward_kinematics

ARC_OMEGA_TOLERANCE = 1e-9
"""Yaw rate (rad/s) below which the exact-arc step falls back to a straight line."""


class IntegrationMode(Enum):
    """Integration scheme used by :class:`KinematicIntegrator`."""

    SEMI_IMPLICIT_EULER = "euler"
    EXACT_ARC = "exact-arc"


class TimingJitter:
    """Uniform multiplicative noise on the integration time step.

    Each sample returns dt * U(min_factor, max_factor), drawn from an
    injected numpy Generator so runs can be reproduced from a seed.
    """

    def __init__(
        self,
        rng: np.random.Generator,
        min_factor: float = JITTER_MIN_FACTOR,
        max_factor: float = JITTER_MAX_FACTOR,
    ):
        if min_factor <= 0 or max_factor <= 0:
            raise ConfigurationError(
                f"Jitter factors must be positive, got [{min_factor}, {max_factor}]"
            )
        if min_factor > max_factor:
            raise ConfigurationError(
                f"Jitter min factor {min_factor} exceeds max factor {max_factor}"
            )
        self.rng = rng
        self.min_factor = min_factor
        self.max_factor = max_factor

    @classmethod
    def from_seed(
        cls,
        seed: Optional[int] = DEFAULT_SEED,
        min_factor: float = JITTER_MIN_FACTOR,
        max_factor: float = JITTER_MAX_FACTOR,
    ) -> "TimingJitter":
        return cls(np.random.default_rng(seed), min_factor, max_factor)

    def sample(self, dt: float) -> float:
        """Return dt scaled by a freshly drawn jitter factor."""
        return dt * float(self.rng.uniform(self.min_factor, self.max_factor))


class KinematicIntegrator:
    """Differential drive pose integrator.

    The default mode is a heading-first (semi-implicit) Euler step: the
    heading is advanced first and the position is then moved along the
    post-update heading. This is not an exact arc and drifts from the true
    unicycle motion in turns; EXACT_ARC integrates the constant-curvature arc
    in closed form instead.

    Attributes:
        mode: Integration scheme.
        jitter: Optional timing jitter applied by :meth:`sample_dt`.
    """

    def __init__(
        self,
        mode: IntegrationMode = IntegrationMode.SEMI_IMPLICIT_EULER,
        jitter: Optional[TimingJitter] = None,
    ):
        self.mode = mode
        self.jitter = jitter

    def sample_dt(self, nominal_dt: float) -> float:
        """Time step to integrate over for a segment of ``nominal_dt``.

        Returns the nominal value unchanged when no jitter is configured.
        """
        if self.jitter is None:
            return nominal_dt
        return self.jitter.sample(nominal_dt)

    def step(self, pose: Pose, cmd: WheelCommand, dt: float, wheel_base: float) -> Pose:
        """Advance ``pose`` by ``dt`` seconds under wheel command ``cmd``.

        Args:
            pose: Pose at the start of the step (not modified)
            cmd: Wheel speeds held constant over the step
            dt: Step duration (seconds), must be >= 0
            wheel_base: Distance between the wheels, must be > 0

        Returns:
            New pose at the end of the step

        Raises:
            ConfigurationError: If wheel_base <= 0 or dt < 0
        """
        if wheel_base <= 0:
            raise ConfigurationError(f"Wheel base must be > 0, got {wheel_base}")
        if dt < 0:
            raise ConfigurationError(f"Integration step must be >= 0, got {dt}")

        v, w = forward_kinematics(cmd.left, cmd.right, wheel_base)

        if self.mode is IntegrationMode.EXACT_ARC:
            return self._step_exact_arc(pose, v, w, dt)
        return self._step_euler(pose, v, w, dt)

    @staticmethod
    def _step_euler(pose: Pose, v: float, w: float, dt: float) -> Pose:
        heading_delta = w * dt
        distance = v * dt
        new_theta = pose.theta + heading_delta
        # Position uses the post-update heading
        new_x = pose.x + distance * math.cos(new_theta)
        new_y = pose.y + distance * math.sin(new_theta)
        return Pose(new_x, new_y, new_theta)

    @staticmethod
    def _step_exact_arc(pose: Pose, v: float, w: float, dt: float) -> Pose:
        heading_delta = w * dt
        new_theta = pose.theta + heading_delta

        if abs(w) < ARC_OMEGA_TOLERANCE:
            # Straight line along the unchanged heading
            new_x = pose.x + v * dt * math.cos(pose.theta)
            new_y = pose.y + v * dt * math.sin(pose.theta)
        else:
            radius = v / w
            new_x = pose.x + radius * (math.sin(new_theta) - math.sin(pose.theta))
            new_y = pose.y - radius * (math.cos(new_theta) - math.cos(pose.theta))

        return Pose(new_x, new_y, new_theta)
