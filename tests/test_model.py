import pytest

from ramsete_control.model import (
    ConfigurationError,
    Pose,
    TrajectorySegment,
    WheelCommand,
    forward_kinematics,
    inverse_kinematics,
)


def test_configuration_error_is_value_error():
    assert issubclass(ConfigurationError, ValueError)


def test_pose_copy_is_independent():
    pose = Pose(1.0, 2.0, 0.5)
    copied = pose.copy()
    copied.x = 10.0
    assert pose.x == 1.0
    assert copied == Pose(10.0, 2.0, 0.5)


def test_pose_distance_to():
    assert Pose(0.0, 0.0).distance_to(3.0, 4.0) == pytest.approx(5.0)


def test_segment_to_pose():
    segment = TrajectorySegment(x=1.0, y=2.0, heading=0.3, velocity=1.0, dt=0.02)
    assert segment.to_pose() == Pose(1.0, 2.0, 0.3)
    assert segment.position == 0.0 and segment.jerk == 0.0


def test_wheel_command_defaults_to_no_brake():
    cmd = WheelCommand(1.0, 3.0)
    assert cmd.brake is False
    assert cmd.linear_velocity == pytest.approx(2.0)
    assert cmd.angular_velocity(2.0) == pytest.approx(1.0)


def test_inverse_kinematics_splits_turn_across_wheels():
    left, right = inverse_kinematics(1.0, 0.4, 2.5)
    assert left == pytest.approx(0.5)
    assert right == pytest.approx(1.5)


def test_inverse_kinematics_clamps_each_wheel():
    left, right = inverse_kinematics(3.0, 2.0, 2.5, max_wheel_speed=2.0)
    assert left == pytest.approx(0.5)
    assert right == pytest.approx(2.0)


def test_forward_kinematics_inverts_inverse_kinematics():
    left, right = inverse_kinematics(1.3, -0.7, 2.5)
    v, w = forward_kinematics(left, right, 2.5)
    assert v == pytest.approx(1.3)
    assert w == pytest.approx(-0.7)
