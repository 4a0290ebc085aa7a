"""Reference trajectories for Ramsete path following.

This module defines the trajectory source consumed by the controller: an
ordered, finite, immutable sequence of segments. Trajectories are normally
produced by an external motion-profiling tool and loaded from its CSV export;
a few analytic reference paths are provided for simulation and testing.
"""

import csv
import math
from pathlib import Path
from typing import Iterable, Iterator, List, Protocol, Sequence, Union

import numpy as np
import numpy.typing as npt

from .config import MAX_VELOCITY, PATH_DT, PATH_DURATION
from .model import ConfigurationError, TrajectorySegment

CSV_COLUMNS = ["dt", "x", "y", "position", "velocity", "acceleration", "jerk", "heading"]
"""Column layout of trajectory CSV files (the Pathfinder export format)."""

REQUIRED_CSV_COLUMNS = ("dt", "x", "y", "velocity", "heading")


class TrajectorySource(Protocol):
    """Anything the controller can follow: indexed, finite, read-only."""

    def length(self) -> int:
        ...

    def get(self, index: int) -> TrajectorySegment:
        ...


class Trajectory:
    """Immutable sequence of trajectory segments.

    Supports both the ``length()``/``get(i)`` accessors used by the controller
    and the usual ``len()``, indexing and iteration.
    """

    def __init__(self, segments: Iterable[TrajectorySegment]):
        self._segments = tuple(segments)
        for i, segment in enumerate(self._segments):
            if not segment.dt > 0:
                raise ConfigurationError(
                    f"Segment {i} has non-positive dt ({segment.dt}); dt must be > 0"
                )

    @classmethod
    def from_arrays(
        cls,
        x: npt.ArrayLike,
        y: npt.ArrayLike,
        heading: npt.ArrayLike,
        velocity: npt.ArrayLike,
        dt: Union[float, npt.ArrayLike],
    ) -> "Trajectory":
        """Build a trajectory from per-sample arrays.

        Args:
            x: X positions
            y: Y positions
            heading: Headings (rad)
            velocity: Feed-forward velocities
            dt: Time step per sample, or a single value used for every sample

        Returns:
            Trajectory with one segment per sample

        Raises:
            ConfigurationError: If the arrays or dt have mismatched lengths
        """
        x_arr = np.asarray(x, dtype=float)
        y_arr = np.asarray(y, dtype=float)
        heading_arr = np.asarray(heading, dtype=float)
        velocity_arr = np.asarray(velocity, dtype=float)
        dt_arr = np.asarray(dt, dtype=float)

        if not (x_arr.shape == y_arr.shape == heading_arr.shape == velocity_arr.shape):
            raise ConfigurationError("Trajectory arrays must all have the same length")
        if dt_arr.ndim > 0 and dt_arr.shape != x_arr.shape:
            raise ConfigurationError("dt must be a single value or match the trajectory length")
        dt_arr = np.broadcast_to(dt_arr, x_arr.shape)

        return cls(
            TrajectorySegment(
                x=float(x_arr[i]),
                y=float(y_arr[i]),
                heading=float(heading_arr[i]),
                velocity=float(velocity_arr[i]),
                dt=float(dt_arr[i]),
            )
            for i in range(len(x_arr))
        )

    def length(self) -> int:
        return len(self._segments)

    def get(self, index: int) -> TrajectorySegment:
        return self._segments[index]

    def __len__(self) -> int:
        return len(self._segments)

    def __getitem__(self, index: int) -> TrajectorySegment:
        return self._segments[index]

    def __iter__(self) -> Iterator[TrajectorySegment]:
        return iter(self._segments)

    @property
    def duration(self) -> float:
        """Total time covered by the trajectory (seconds)."""
        return float(sum(segment.dt for segment in self._segments))

    def times(self) -> npt.NDArray[np.float64]:
        """Start time of each segment relative to the first one."""
        dts = np.array([segment.dt for segment in self._segments], dtype=float)
        return np.concatenate(([0.0], np.cumsum(dts)[:-1])) if len(dts) else dts

    def to_arrays(self) -> dict[str, npt.NDArray[np.float64]]:
        """Column arrays for plotting and analysis.

        Returns:
            Dictionary with keys 't', 'x', 'y', 'heading', 'velocity', 'dt'
        """
        return {
            "t": self.times(),
            "x": np.array([s.x for s in self._segments]),
            "y": np.array([s.y for s in self._segments]),
            "heading": np.array([s.heading for s in self._segments]),
            "velocity": np.array([s.velocity for s in self._segments]),
            "dt": np.array([s.dt for s in self._segments]),
        }


def load_trajectory_csv(filepath: Union[str, Path]) -> Trajectory:
    """Load a trajectory from a motion-profiler CSV export.

    Expected header: dt,x,y,position,velocity,acceleration,jerk,heading.
    The position, acceleration and jerk columns are optional.

    Args:
        filepath: Path to the CSV file

    Returns:
        Loaded trajectory

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If required columns are missing or there are no rows
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Trajectory file not found: {filepath}")

    segments: List[TrajectorySegment] = []
    with open(filepath, "r", newline="") as f:
        reader = csv.DictReader(f)
        headers = [h.strip() for h in (reader.fieldnames or [])]
        missing = [col for col in REQUIRED_CSV_COLUMNS if col not in headers]
        if missing:
            raise ConfigurationError(f"Trajectory CSV {filepath} is missing columns: {missing}")

        for line_no, row in enumerate(reader, start=2):
            row = {k.strip(): v for k, v in row.items() if k is not None}
            try:
                segments.append(
                    TrajectorySegment(
                        x=float(row["x"]),
                        y=float(row["y"]),
                        heading=float(row["heading"]),
                        velocity=float(row["velocity"]),
                        dt=float(row["dt"]),
                        position=float(row.get("position") or 0.0),
                        acceleration=float(row.get("acceleration") or 0.0),
                        jerk=float(row.get("jerk") or 0.0),
                    )
                )
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"{filepath}:{line_no}: invalid trajectory row ({e})")

    if not segments:
        raise ConfigurationError(f"Trajectory CSV {filepath} contains no segments")

    return Trajectory(segments)


def save_trajectory_csv(trajectory: Sequence[TrajectorySegment], filepath: Union[str, Path]) -> Path:
    """Write a trajectory in the same CSV layout read by :func:`load_trajectory_csv`."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for s in trajectory:
            writer.writerow(
                [s.dt, s.x, s.y, s.position, s.velocity, s.acceleration, s.jerk, s.heading]
            )
    return filepath


def line_trajectory(
    distance: float,
    velocity: float = MAX_VELOCITY,
    dt: float = PATH_DT,
    heading: float = 0.0,
    x0: float = 0.0,
    y0: float = 0.0,
) -> Trajectory:
    """Straight-line trajectory at constant velocity.

    Args:
        distance: Length of the line (must be > 0)
        velocity: Constant feed-forward velocity (must be > 0)
        dt: Time step between samples
        heading: Direction of travel (rad)
        x0: Start x position
        y0: Start y position

    Returns:
        Trajectory with samples every velocity * dt along the line
    """
    if distance <= 0 or velocity <= 0 or dt <= 0:
        raise ConfigurationError("Line trajectory needs positive distance, velocity and dt")

    n = int(math.ceil(distance / (velocity * dt))) + 1
    s = np.minimum(np.arange(n) * velocity * dt, distance)
    return Trajectory.from_arrays(
        x0 + s * math.cos(heading),
        y0 + s * math.sin(heading),
        np.full(n, heading),
        np.full(n, velocity),
        dt,
    )


def arc_trajectory(
    radius: float,
    sweep: float,
    velocity: float = MAX_VELOCITY,
    dt: float = PATH_DT,
) -> Trajectory:
    """Circular arc starting at the origin heading along +x.

    A positive sweep turns left (counter-clockwise), a negative sweep turns right.

    Args:
        radius: Turn radius (must be > 0)
        sweep: Total heading change (rad)
        velocity: Constant feed-forward velocity (must be > 0)
        dt: Time step between samples

    Returns:
        Trajectory along the arc
    """
    if radius <= 0 or velocity <= 0 or dt <= 0:
        raise ConfigurationError("Arc trajectory needs positive radius, velocity and dt")

    direction = 1.0 if sweep >= 0 else -1.0
    arc_length = abs(sweep) * radius
    n = int(math.ceil(arc_length / (velocity * dt))) + 1
    phi = np.minimum(np.arange(n) * velocity * dt / radius, abs(sweep))
    return Trajectory.from_arrays(
        radius * np.sin(phi),
        direction * radius * (1.0 - np.cos(phi)),
        direction * phi,
        np.full(n, velocity),
        dt,
    )


def lemniscate_trajectory(
    duration: float = PATH_DURATION, dt: float = PATH_DT, scale: float = 2.0
) -> Trajectory:
    """Figure-eight trajectory following the Lemniscate of Gerono.

    The curve is defined by:
        x = -scale * sin(k) * cos(k)
        y = scale * (sin(k) + 1)

    with k = 2*pi*t/duration - pi/2, so the path starts at the origin heading
    along +x and closes after one period. Heading is the direction of the
    velocity vector, unwrapped so it is continuous over the whole loop.

    Args:
        duration: Time to traverse the figure-eight (seconds)
        dt: Time step between samples (seconds)
        scale: Size of the curve

    Returns:
        Trajectory sampled every dt
    """
    if duration <= 0 or dt <= 0:
        raise ConfigurationError("Lemniscate trajectory needs positive duration and dt")

    t = np.arange(0.0, duration + dt / 2.0, dt)
    dk_dt = 2.0 * np.pi / duration
    k = dk_dt * t - np.pi / 2.0

    x = -scale * np.sin(k) * np.cos(k)
    y = scale * (np.sin(k) + 1.0)

    # x = -(scale/2)*sin(2k), so dx/dk = -scale*cos(2k); dy/dk = scale*cos(k)
    dx_dt = -scale * np.cos(2.0 * k) * dk_dt
    dy_dt = scale * np.cos(k) * dk_dt

    heading = np.unwrap(np.arctan2(dy_dt, dx_dt))
    velocity = np.hypot(dx_dt, dy_dt)

    return Trajectory.from_arrays(x, y, heading, velocity, dt)
