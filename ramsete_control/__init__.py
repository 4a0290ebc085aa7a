"""Ramsete Control - Trajectory Tracking for Differential-Drive Robots

A nonlinear trajectory-tracking controller (the Ramsete law) plus a simulation
harness that integrates commanded wheel speeds into a synthetic pose trace.

## Architecture Overview

The control loop is a simple synchronous pipeline, one pass per trajectory segment:

### Layer 1: Reference Trajectory (trajectory.py)
An immutable, time-ordered sequence of segments (position, heading,
feed-forward velocity, dt), loaded from a motion-profiler CSV export or
built from an analytic reference path.

### Layer 2: Ramsete Controller (controller.py)
Combines the segment's feed-forward velocities with nonlinear feedback on
the pose error.
- Desired yaw rate from the heading change to the next segment
- Gain k = 2·zeta·sqrt(w_d² + b·v_d²)
- sinc(e) singularity at zero heading error handled by series expansion
- Output: left and right wheel speeds

### Layer 3: Kinematic Integrator (integrator.py)
Advances the pose under unicycle kinematics in place of real odometry.
- Heading-first semi-implicit Euler (default) or exact arc integration
- Optional seeded timing jitter on the integration step

### Harness (simulation.py)
Feeds each integrated pose back into the controller until the trajectory
is exhausted, collecting tracking metrics.

## Modules

- `config.py` - Centralized configuration parameters with documentation
- `model.py` - Pose, segment and wheel command types, differential kinematics
- `trajectory.py` - Trajectory container, CSV import/export, analytic paths
- `controller.py` - Ramsete control law
- `integrator.py` - Pose integration and timing jitter
- `simulation.py` - Closed-loop harness and logging setup
- `data_collector.py` - CSV data logging for all run signals
- `diagnostic_plots.py` - Trajectory, tracking error and command plots
- `plot_results.py` - CLI for visualization tools

## Quick Start

```python
from ramsete_control import RamseteController, run_simulation
from ramsete_control.trajectory import lemniscate_trajectory

controller = RamseteController(lemniscate_trajectory(), b=15.0, zeta=0.9, wheel_base=2.5)
result = run_simulation(controller)
print(result.final_error)
```

Or use the command-line interface:
```bash
python -m ramsete_control --path lemniscate --jitter 0.9 1.1 --seed 3
```
"""

__version__ = "0.1.0"

from .controller import RamseteController, ramsete_gain, sinc
from .data_collector import DataCollector
from .integrator import IntegrationMode, KinematicIntegrator, TimingJitter
from .model import ConfigurationError, Pose, TrajectorySegment, WheelCommand
from .simulation import SimulationResult, run_simulation
from .trajectory import Trajectory, TrajectorySource

__all__ = [
    "RamseteController",
    "ramsete_gain",
    "sinc",
    "KinematicIntegrator",
    "IntegrationMode",
    "TimingJitter",
    "Pose",
    "TrajectorySegment",
    "WheelCommand",
    "ConfigurationError",
    "Trajectory",
    "TrajectorySource",
    "DataCollector",
    "SimulationResult",
    "run_simulation",
]
