"""Configuration parameters for the Ramsete control system.

This module centralizes all configuration parameters including:
- Physical robot parameters
- Ramsete controller gains
- Reference trajectory limits
- Simulation and timing-jitter settings
- Terminal output colors

All parameters are documented with their purpose, valid ranges, and tuning rationale.
"""

# ============================================================================
# Physical Robot Parameters
# ============================================================================

WHEELBASE = 2.5
"""Distance between left and right drive wheels (feet).

Must be strictly positive. Used both by the controller to split (v, omega)
into wheel speeds and by the integrator to recover omega from the wheel
differential, so the two must agree for the loop to close."""


# ============================================================================
# Ramsete Controller Parameters
# ============================================================================

RAMSETE_B = 15.0
"""Correction gain b (range: b > 0).

Larger values make the controller correct lateral error more aggressively,
analogous to a proportional gain on cross-track error.

Tuning rationale:
- 15.0 is tuned for distances in feet; values around 2.0 are typical in meters
- Too small = slow convergence back onto the path
- Too large = oscillation around the path at speed
"""

RAMSETE_ZETA = 0.9
"""Damping factor zeta (range: [0, 1)).

Values outside this range are accepted but void the convergence guarantee
of the control law, and the controller logs a warning.

Tuning rationale:
- 0.9 gives a well damped response with little overshoot
- Lower values (0.5-0.7) respond faster but overshoot in turns
"""

SINC_TOLERANCE = 1e-9
"""Heading error band (radians) in which sin(e)/e is replaced by its series.

Inside |e| < SINC_TOLERANCE the controller uses 1 - e²/6, which is exact to
machine precision there and evaluates to exactly 1.0 at e = 0.
"""


# ============================================================================
# Reference Trajectory Limits
# ============================================================================

MAX_VELOCITY = 2.0
"""Maximum feed-forward velocity of generated reference paths (ft/s)."""

MAX_ACCELERATION = 2.3
"""Maximum acceleration of generated reference paths (ft/s²)."""

MAX_JERK = 60.0
"""Maximum jerk of generated reference paths (ft/s³)."""


# ============================================================================
# Simulation Configuration
# ============================================================================

PATH_DT = 0.02
"""Time step between trajectory segments (seconds).
Matches a 50 Hz control period."""

PATH_DURATION = 20.0
"""Total duration for analytic reference trajectories (seconds)."""

JITTER_MIN_FACTOR = 0.9
"""Lower bound of the uniform timing-jitter factor applied to segment dt.

The integrator advances by dt * U(JITTER_MIN_FACTOR, JITTER_MAX_FACTOR)
when jitter is enabled, emulating an imperfect control period."""

JITTER_MAX_FACTOR = 1.1
"""Upper bound of the uniform timing-jitter factor applied to segment dt."""

DEFAULT_SEED = 0
"""Seed for the timing-jitter random generator, so runs are reproducible."""


# ============================================================================
# Terminal Colors
# ============================================================================

TERM_ORANGE = "\033[38;2;247;72;35m"
"""Terminal color code for warnings and highlights (RGB: 247, 72, 35)."""

TERM_BLUE = "\033[38;2;35;116;247m"
"""Terminal color code for status messages (RGB: 35, 116, 247)."""

TERM_RESET = "\033[0m"
"""Terminal color reset code."""


# ============================================================================
# Plot Colors
# ============================================================================

REFERENCE_COLOR = "#2374f7"
"""Color for reference trajectory lines."""

ACTUAL_COLOR = "#f74823"
"""Color for simulated (actual) trajectory lines."""

GUIDE_COLOR = "#686a5f"
"""Neutral color for guides, grids, and zero lines."""
