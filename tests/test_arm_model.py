import math

import numpy as np
import pytest

from Pose2Arm.control.arm_model import (
    ARM_EXTENSION_OFFSET,
    HEAD_ELBOW_OFFSET,
    MIN_ANGULAR_SPEED,
    ArmModelInputError,
    OrientationArmModel,
    extension_ratio,
    lerp_suppression,
    wrist_lerp_value,
)
from Pose2Arm.control.pose import ArmModelInput
from Pose2Arm.math3d.quaternion import (
    euler_yaw_pitch_roll_to_q,
    q_identity,
    q_inverse,
    q_mul,
    q_to_euler_yaw_pitch_roll,
)


def _clock(*times: float):
    return iter(times).__next__


def _q(yaw: float = 0.0, pitch: float = 0.0, roll: float = 0.0) -> np.ndarray:
    return euler_yaw_pitch_roll_to_q(yaw, pitch, roll)


def _same_rotation(a: np.ndarray, b: np.ndarray) -> bool:
    return abs(abs(float(np.dot(a, b))) - 1.0) < 1e-9


def test_extension_ratio_ramp_is_clamped():
    assert extension_ratio(-30.0) == 0.0
    assert extension_ratio(11.0) == 0.0
    assert extension_ratio(30.5) == pytest.approx(0.5)
    assert extension_ratio(50.0) == 1.0
    assert extension_ratio(89.0) == 1.0


def test_lerp_suppression_falls_from_one_to_zero():
    values = [lerp_suppression(a) for a in np.linspace(0.0, 180.0, 37)]
    assert values[0] == 1.0
    assert values[-1] == pytest.approx(0.0)
    assert all(b <= a for a, b in zip(values, values[1:]))


def test_wrist_lerp_value_baseline_and_extended():
    assert wrist_lerp_value(1.0, 0.0) == pytest.approx(0.4)
    assert wrist_lerp_value(1.0, 1.0) == pytest.approx(0.4 + 0.6 * 0.4)
    assert wrist_lerp_value(0.5, 0.0) == pytest.approx(0.2)


def test_neutral_pose_at_origin():
    model = OrientationArmModel(clock=_clock(0.0, 1.0))
    for _ in range(2):
        pose = model.update(controller_q=q_identity(), head_q=q_identity(), head_pos=np.zeros(3))

    np.testing.assert_allclose(model.get_root_orientation(), q_identity())
    assert model.diagnostics.extension_ratio == 0.0
    assert model.diagnostics.root_snapped is True
    np.testing.assert_allclose(model.get_elbow_position(), HEAD_ELBOW_OFFSET, atol=1e-12)

    expected_wrist = HEAD_ELBOW_OFFSET + np.array([0.0, 0.0, -0.25 + 0.05])
    np.testing.assert_allclose(model.get_wrist_position(), expected_wrist, atol=1e-12)
    np.testing.assert_allclose(pose.position, expected_wrist, atol=1e-12)
    np.testing.assert_allclose(pose.quaternion, q_identity())


def test_raised_controller_is_fully_extended():
    model = OrientationArmModel(clock=_clock(0.0))
    raised = _q(pitch=60.0)
    pose = model.update(controller_q=raised, head_q=q_identity(), head_pos=np.zeros(3))

    assert model.diagnostics.extension_ratio == 1.0
    np.testing.assert_allclose(
        model.get_elbow_position(), HEAD_ELBOW_OFFSET + ARM_EXTENSION_OFFSET, atol=1e-12
    )
    np.testing.assert_allclose(
        pose.position - model.get_wrist_position(), ARM_EXTENSION_OFFSET, atol=1e-12
    )


def test_fast_controller_motion_only_nudges_root():
    model = OrientationArmModel(clock=_clock(0.0, 0.016))
    model.update(controller_q=q_identity(), head_q=q_identity(), head_pos=np.zeros(3))
    model.update(controller_q=_q(yaw=90.0), head_q=_q(yaw=90.0), head_pos=np.zeros(3))

    diag = model.diagnostics
    assert diag.angular_speed > MIN_ANGULAR_SPEED
    assert diag.root_snapped is False
    yaw, _, _ = q_to_euler_yaw_pitch_roll(model.get_root_orientation())
    expected = (math.pi / 2.0 / 10.0) * (math.pi / 2.0)
    assert yaw == pytest.approx(expected, abs=1e-9)
    assert 0.0 < math.degrees(yaw) < 90.0


def test_repeated_update_with_same_inputs_snaps_root():
    model = OrientationArmModel(clock=_clock(0.0, 0.016, 0.016))
    snapshot = ArmModelInput(
        controller_q=_q(yaw=90.0), head_q=_q(yaw=90.0), head_pos=np.zeros(3)
    )
    model.update(controller_q=q_identity(), head_q=q_identity(), head_pos=np.zeros(3))
    model.apply(snapshot)
    assert model.diagnostics.root_snapped is False

    model.apply(snapshot)
    assert model.diagnostics.angular_speed == 0.0
    assert model.diagnostics.root_snapped is True
    np.testing.assert_allclose(model.get_root_orientation(), _q(yaw=90.0), atol=1e-12)


def test_first_update_snaps_even_after_large_change():
    model = OrientationArmModel(clock=_clock(5.0))
    model.update(controller_q=_q(yaw=120.0), head_q=_q(yaw=30.0, pitch=20.0), head_pos=np.zeros(3))
    assert model.diagnostics.angular_speed == 0.0
    np.testing.assert_allclose(model.get_root_orientation(), _q(yaw=30.0), atol=1e-9)


def test_setter_keeps_previous_controller_orientation():
    model = OrientationArmModel()
    a = _q(yaw=10.0)
    b = _q(yaw=20.0)
    model.set_controller_orientation(a)
    model.set_controller_orientation(b)
    np.testing.assert_allclose(model.last_controller_q, a)
    np.testing.assert_allclose(model.controller_q, b)


def test_setters_then_update_match_snapshot_update():
    head_q = _q(yaw=-20.0, pitch=10.0)
    head_pos = np.array([0.1, 1.6, -0.2])
    controller_q = _q(yaw=35.0, pitch=25.0, roll=5.0)

    a = OrientationArmModel(clock=_clock(0.0))
    a.set_controller_orientation(controller_q)
    a.set_head_orientation(head_q)
    a.set_head_position(head_pos)
    a.update()

    b = OrientationArmModel(clock=_clock(0.0))
    b.update(controller_q=controller_q, head_q=head_q, head_pos=head_pos)

    np.testing.assert_allclose(a.get_pose().position, b.get_pose().position)
    np.testing.assert_allclose(a.get_pose().quaternion, b.get_pose().quaternion)


def test_elbow_and_wrist_rotations_compose_to_controller():
    model = OrientationArmModel(clock=_clock(0.0, 1.0, 2.0))
    head_q = _q(yaw=15.0)
    for controller_q in (_q(yaw=40.0, pitch=30.0), _q(yaw=-100.0, pitch=-20.0, roll=45.0)):
        model.update(controller_q=controller_q, head_q=head_q, head_pos=np.zeros(3))
        diag = model.diagnostics
        assert 0.0 <= diag.lerp_value <= 1.0
        camera_q = q_mul(q_inverse(model.get_root_orientation()), controller_q)
        assert _same_rotation(q_mul(diag.elbow_q, diag.wrist_q), camera_q)


def test_output_orientation_is_controller_orientation_unchanged():
    model = OrientationArmModel(clock=_clock(0.0))
    q = np.array([0.9, 0.1, 0.3, 0.2])
    pose = model.update(controller_q=q, head_q=q_identity(), head_pos=np.zeros(3))
    np.testing.assert_array_equal(pose.quaternion, q)


def test_forearm_length_is_constant():
    model = OrientationArmModel(clock=_clock(0.0))
    assert model.get_forearm_length() == pytest.approx(0.25)
    model.update(controller_q=_q(yaw=50.0, pitch=70.0), head_q=q_identity(), head_pos=np.ones(3))
    assert model.get_forearm_length() == pytest.approx(0.25)


def test_joint_positions_are_rotated_into_world_by_root():
    model = OrientationArmModel(clock=_clock(0.0))
    model.update(controller_q=_q(yaw=90.0), head_q=_q(yaw=90.0), head_pos=np.zeros(3))
    # Yaw +90 maps (x, y, z) -> (z, y, -x).
    np.testing.assert_allclose(
        model.get_elbow_position(), np.array([-0.15, -0.465, -0.155]), atol=1e-9
    )
    np.testing.assert_allclose(model.elbow_pos, HEAD_ELBOW_OFFSET, atol=1e-12)


def test_left_handed_model_mirrors_elbow():
    model = OrientationArmModel(handedness="left", clock=_clock(0.0))
    model.update(controller_q=q_identity(), head_q=q_identity(), head_pos=np.zeros(3))
    np.testing.assert_allclose(
        model.get_elbow_position(), np.array([-0.155, -0.465, -0.15]), atol=1e-12
    )


def test_rejects_unknown_handedness():
    with pytest.raises(ValueError, match="handedness"):
        OrientationArmModel(handedness="both")


def test_validating_model_rejects_bad_inputs():
    model = OrientationArmModel(validate_inputs=True)
    with pytest.raises(ArmModelInputError, match="unit quaternion"):
        model.set_controller_orientation(np.array([2.0, 0.0, 0.0, 0.0]))
    with pytest.raises(ArmModelInputError, match="finite"):
        model.set_head_orientation(np.array([np.nan, 0.0, 0.0, 0.0]))
    with pytest.raises(ArmModelInputError, match="shape"):
        model.set_head_position(np.zeros(2))
    model.set_controller_orientation(_q(yaw=10.0))


def test_non_validating_model_propagates_bad_inputs():
    model = OrientationArmModel(clock=_clock(0.0))
    pose = model.update(
        controller_q=q_identity(), head_q=q_identity(), head_pos=np.array([np.nan, 0.0, 0.0])
    )
    assert not np.isfinite(pose.position).all()


def test_rejected_snapshot_leaves_model_unchanged():
    model = OrientationArmModel(validate_inputs=True, clock=_clock(0.0))
    with pytest.raises(ArmModelInputError, match="finite"):
        model.update(
            controller_q=_q(yaw=90.0),
            head_q=np.array([np.nan, 0.0, 0.0, 0.0]),
            head_pos=np.zeros(3),
        )
    np.testing.assert_array_equal(model.controller_q, q_identity())
    np.testing.assert_array_equal(model.last_controller_q, q_identity())
    np.testing.assert_array_equal(model.head_q, q_identity())
    assert model.last_time is None


def test_non_unit_controller_quaternion_scales_the_arm():
    # |q| = 2: the elbow rotation scales the wrist offset by |q|^2 = 4.
    model = OrientationArmModel(clock=_clock(0.0))
    pose = model.update(
        controller_q=np.array([2.0, 0.0, 0.0, 0.0]), head_q=q_identity(), head_pos=np.zeros(3)
    )
    np.testing.assert_allclose(pose.position, np.array([0.155, -0.465, -0.95]), atol=1e-12)
