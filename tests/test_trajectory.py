import math

import numpy as np
import pytest

from ramsete_control.model import ConfigurationError, TrajectorySegment
from ramsete_control.trajectory import (
    Trajectory,
    arc_trajectory,
    lemniscate_trajectory,
    line_trajectory,
    load_trajectory_csv,
    save_trajectory_csv,
)


def test_from_arrays_broadcasts_dt():
    trajectory = Trajectory.from_arrays([0, 1, 2], [0, 0, 0], [0, 0, 0], [1, 1, 1], 0.5)
    assert trajectory.length() == 3
    assert trajectory.get(2) == TrajectorySegment(x=2.0, y=0.0, heading=0.0, velocity=1.0, dt=0.5)
    assert trajectory.duration == pytest.approx(1.5)
    np.testing.assert_allclose(trajectory.times(), [0.0, 0.5, 1.0])


def test_from_arrays_rejects_mismatched_lengths():
    with pytest.raises(ConfigurationError):
        Trajectory.from_arrays([0, 1], [0], [0, 0], [1, 1], 0.02)


@pytest.mark.parametrize("dt", [0.0, -0.02])
def test_non_positive_dt_raises(dt):
    with pytest.raises(ConfigurationError):
        Trajectory([TrajectorySegment(x=0.0, y=0.0, heading=0.0, velocity=1.0, dt=dt)])


def test_trajectory_supports_len_indexing_and_iteration():
    trajectory = line_trajectory(distance=1.0)
    assert len(trajectory) == trajectory.length()
    assert trajectory[0] is trajectory.get(0)
    assert list(trajectory)[-1] == trajectory.get(len(trajectory) - 1)


def test_csv_round_trip(tmp_path):
    trajectory = arc_trajectory(radius=2.0, sweep=0.5)
    path = save_trajectory_csv(trajectory, tmp_path / "arc.csv")
    loaded = load_trajectory_csv(path)
    assert list(loaded) == list(trajectory)


def test_csv_optional_columns_default_to_zero(tmp_path):
    path = tmp_path / "minimal.csv"
    path.write_text("dt,x,y,velocity,heading\n0.02,1.0,2.0,1.5,0.25\n")
    segment = load_trajectory_csv(path).get(0)
    assert segment == TrajectorySegment(x=1.0, y=2.0, heading=0.25, velocity=1.5, dt=0.02)


def test_csv_missing_column_raises(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("dt,x,y,velocity\n0.02,0,0,1\n")
    with pytest.raises(ConfigurationError, match="heading"):
        load_trajectory_csv(path)


def test_csv_invalid_row_raises(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("dt,x,y,velocity,heading\n0.02,abc,0,1,0\n")
    with pytest.raises(ConfigurationError):
        load_trajectory_csv(path)


def test_csv_without_rows_raises(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("dt,x,y,position,velocity,acceleration,jerk,heading\n")
    with pytest.raises(ConfigurationError):
        load_trajectory_csv(path)


def test_missing_csv_raises_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_trajectory_csv(tmp_path / "nope.csv")


def test_line_trajectory_ends_at_distance():
    trajectory = line_trajectory(distance=3.0, velocity=1.5, heading=math.pi / 2.0)
    last = trajectory.get(trajectory.length() - 1)
    assert last.x == pytest.approx(0.0, abs=1e-12)
    assert last.y == pytest.approx(3.0)
    assert all(s.velocity == 1.5 for s in trajectory)
    assert all(s.heading == pytest.approx(math.pi / 2.0) for s in trajectory)


def test_line_trajectory_rejects_non_positive_distance():
    with pytest.raises(ConfigurationError):
        line_trajectory(distance=0.0)


@pytest.mark.parametrize("sweep", [math.pi / 2.0, -math.pi / 2.0])
def test_arc_trajectory_stays_on_circle(sweep):
    radius = 4.0
    trajectory = arc_trajectory(radius=radius, sweep=sweep)
    center_y = radius if sweep > 0 else -radius
    for segment in trajectory:
        assert math.hypot(segment.x, segment.y - center_y) == pytest.approx(radius)
    assert trajectory.get(trajectory.length() - 1).heading == pytest.approx(sweep)


def test_lemniscate_starts_at_origin_and_closes():
    trajectory = lemniscate_trajectory(duration=20.0, dt=0.02)
    arrays = trajectory.to_arrays()

    assert trajectory.length() == 1001
    assert arrays["x"][0] == pytest.approx(0.0, abs=1e-12)
    assert arrays["y"][0] == pytest.approx(0.0, abs=1e-12)
    assert arrays["heading"][0] == pytest.approx(0.0, abs=1e-9)
    assert arrays["x"][-1] == pytest.approx(0.0, abs=1e-9)
    assert arrays["y"][-1] == pytest.approx(0.0, abs=1e-9)
    assert np.all(arrays["velocity"] > 0)
    # Unwrapped heading has no jumps
    assert np.max(np.abs(np.diff(arrays["heading"]))) < 0.5


@pytest.mark.parametrize(
    "build",
    [
        lambda: line_trajectory(distance=1.0, dt=0.0),
        lambda: line_trajectory(distance=1.0, dt=-0.02),
        lambda: arc_trajectory(radius=2.0, sweep=1.0, dt=0.0),
        lambda: arc_trajectory(radius=2.0, sweep=1.0, dt=-0.02),
        lambda: lemniscate_trajectory(dt=0.0),
        lambda: lemniscate_trajectory(dt=-0.02),
        lambda: lemniscate_trajectory(duration=0.0),
        lambda: lemniscate_trajectory(duration=-5.0),
    ],
)
def test_analytic_builders_reject_non_positive_time_step(build):
    with pytest.raises(ConfigurationError):
        build()


def test_from_arrays_accepts_per_sample_dt():
    trajectory = Trajectory.from_arrays([0, 1], [0, 0], [0, 0], [1, 1], [0.1, 0.2])
    assert [s.dt for s in trajectory] == [0.1, 0.2]


def test_from_arrays_rejects_dt_of_wrong_length():
    with pytest.raises(ConfigurationError):
        Trajectory.from_arrays([0, 1, 2], [0, 0, 0], [0, 0, 0], [1, 1, 1], [0.02, 0.02])
