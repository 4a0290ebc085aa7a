import math

import pytest

from ramsete_control.controller import RamseteController, ramsete_gain, sinc
from ramsete_control.model import ConfigurationError, Pose, TrajectorySegment, WheelCommand
from ramsete_control.trajectory import Trajectory, arc_trajectory, line_trajectory


def single_segment_trajectory():
    return Trajectory([TrajectorySegment(x=1.0, y=0.0, heading=0.0, velocity=1.0, dt=0.02)])


def test_sinc_at_zero_is_exactly_one():
    assert sinc(0.0) == 1.0


def test_sinc_matches_quotient_away_from_zero():
    assert sinc(0.5) == pytest.approx(math.sin(0.5) / 0.5)
    assert sinc(-1e-5) == pytest.approx(1.0, abs=1e-9)


def test_ramsete_gain():
    assert ramsete_gain(15.0, 0.9, 1.0, 0.0) == pytest.approx(1.8 * math.sqrt(15.0))


def test_single_segment_command():
    controller = RamseteController(single_segment_trajectory(), b=15.0, zeta=0.9, wheel_base=2.5)
    controller.set_pose(Pose(0.0, 0.0, 0.0))

    cmd = controller.compute_command()

    assert cmd.left == pytest.approx(7.9714, abs=1e-3)
    assert cmd.right == pytest.approx(7.9714, abs=1e-3)
    assert cmd.brake is False
    assert controller.is_complete()


def test_zero_error_reproduces_feed_forward():
    trajectory = arc_trajectory(radius=4.0, sweep=1.0, velocity=1.5)
    controller = RamseteController(trajectory)
    controller.set_pose(trajectory.get(0).to_pose())

    controller.compute_command()
    diag = controller.get_diagnostics()

    assert diag["v"] == pytest.approx(diag["v_d"])
    assert diag["w"] == pytest.approx(diag["w_d"])
    assert diag["sinc"] == 1.0


def test_desired_angular_velocity_is_forward_difference():
    trajectory = Trajectory(
        [
            TrajectorySegment(x=0.0, y=0.0, heading=0.0, velocity=1.0, dt=0.02),
            TrajectorySegment(x=0.02, y=0.0, heading=0.1, velocity=1.0, dt=0.05),
        ]
    )
    controller = RamseteController(trajectory)

    assert controller.desired_angular_velocity() == pytest.approx(5.0)
    controller.compute_command()
    # Last segment has no successor
    assert controller.desired_angular_velocity() == 0.0


def test_index_advances_once_per_command():
    trajectory = line_trajectory(distance=1.0)
    controller = RamseteController(trajectory)

    for expected in range(len(trajectory)):
        assert controller.index == expected
        assert controller.current_segment() == trajectory.get(expected)
        controller.compute_command()

    assert controller.index == len(trajectory)
    assert controller.is_complete()
    assert controller.current_segment() is None


def test_complete_controller_returns_zero_command_without_advancing():
    controller = RamseteController(single_segment_trajectory())
    controller.compute_command()

    for _ in range(3):
        assert controller.compute_command() == WheelCommand(0.0, 0.0)
        assert controller.index == 1


def test_set_pose_stores_a_copy():
    controller = RamseteController(single_segment_trajectory())
    pose = Pose(1.0, 1.0, 0.0)
    controller.set_pose(pose)
    pose.x = 50.0
    assert controller.pose.x == 1.0


def test_initial_pose_is_first_segment():
    trajectory = line_trajectory(distance=2.0, heading=0.5, x0=1.0, y0=-1.0)
    controller = RamseteController(trajectory)
    assert controller.initial_pose() == Pose(1.0, -1.0, 0.5)


def test_reset_restarts_from_first_segment():
    controller = RamseteController(line_trajectory(distance=1.0))
    controller.set_pose(Pose(0.3, 0.1, 0.2))
    controller.compute_command()
    controller.compute_command()

    controller.reset()

    assert controller.index == 0
    assert controller.pose == Pose(0.0, 0.0, 0.0)
    assert controller.get_diagnostics() == {}


def test_diagnostics_empty_before_first_command():
    controller = RamseteController(single_segment_trajectory())
    assert controller.get_diagnostics() == {}
    controller.compute_command()
    assert set(controller.get_diagnostics()) == {
        "index", "v_d", "w_d", "k", "error_along", "error_cross",
        "error_theta", "sinc", "v", "w", "left", "right",
    }


def test_lateral_error_turns_toward_path():
    trajectory = line_trajectory(distance=5.0)
    controller = RamseteController(trajectory)
    # Robot sits to the right of the path, so it must turn left
    controller.set_pose(Pose(0.0, -0.5, 0.0))
    cmd = controller.compute_command()
    assert cmd.right > cmd.left


def test_max_wheel_speed_clamps_command():
    controller = RamseteController(single_segment_trajectory(), max_wheel_speed=2.0)
    cmd = controller.compute_command()
    assert cmd.left == pytest.approx(2.0)
    assert cmd.right == pytest.approx(2.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"b": 0.0},
        {"b": -1.0},
        {"b": float("nan")},
        {"zeta": float("inf")},
        {"wheel_base": 0.0},
        {"max_wheel_speed": -1.0},
    ],
)
def test_invalid_parameters_raise(kwargs):
    with pytest.raises(ConfigurationError):
        RamseteController(single_segment_trajectory(), **kwargs)


def test_empty_trajectory_raises():
    with pytest.raises(ConfigurationError):
        RamseteController(Trajectory([]))


def test_zeta_outside_unit_interval_only_warns(caplog):
    controller = RamseteController(single_segment_trajectory(), zeta=1.5)
    assert controller.zeta == 1.5
    assert "outside [0, 1)" in caplog.text


def test_on_path_straight_line_commands_feed_forward_speed():
    trajectory = line_trajectory(distance=2.0, velocity=1.2)
    controller = RamseteController(trajectory)
    controller.set_pose(controller.initial_pose())
    cmd = controller.compute_command()
    assert cmd.left == pytest.approx(1.2)
    assert cmd.right == pytest.approx(1.2)
