"""Orientation arm model for 3DoF hand controllers.

Estimates where a hand-held controller is from the head pose and the
controller's orientation alone, by hanging the controller off a procedural
arm (shoulder -> elbow -> wrist) attached below the head.

Frame: x right, y up, -z forward. Offsets are in meters for a right arm in
the neutral pose. Quaternions are [w, x, y, z].
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from ..math3d.coords import clamp
from ..math3d.quaternion import (
    pointing_angle,
    q_identity,
    q_inverse,
    q_mul,
    q_rotate_vec,
    q_slerp,
    q_to_euler_yaw_pitch_roll,
    q_yaw_only,
)
from .pose import ArmModelInput, Pose6D

logger = logging.getLogger(__name__)

HEAD_ELBOW_OFFSET = np.array([0.155, -0.465, -0.15], dtype=np.float64)
ELBOW_WRIST_OFFSET = np.array([0.0, 0.0, -0.25], dtype=np.float64)
WRIST_CONTROLLER_OFFSET = np.array([0.0, 0.0, 0.05], dtype=np.float64)
ARM_EXTENSION_OFFSET = np.array([-0.08, 0.14, 0.08], dtype=np.float64)
for _offset in (
    HEAD_ELBOW_OFFSET,
    ELBOW_WRIST_OFFSET,
    WRIST_CONTROLLER_OFFSET,
    ARM_EXTENSION_OFFSET,
):
    _offset.setflags(write=False)

ELBOW_BEND_RATIO = 0.4  # 40% elbow, 60% wrist.
EXTENSION_RATIO_WEIGHT = 0.4

# 35 deg/s; faster controller motion is attributed to torso rotation.
MIN_ANGULAR_SPEED = 0.61

EXTENSION_PITCH_MIN_DEG = 11.0
EXTENSION_PITCH_MAX_DEG = 50.0

HANDEDNESS = ("right", "left")


class ArmModelInputError(ValueError):
    """Tracking input rejected by a validating arm model."""


def extension_ratio(pitch_deg: float) -> float:
    """0 below 11 deg controller pitch, 1 above 50 deg, linear in between."""
    return clamp(
        (pitch_deg - EXTENSION_PITCH_MIN_DEG)
        / (EXTENSION_PITCH_MAX_DEG - EXTENSION_PITCH_MIN_DEG),
        0.0,
        1.0,
    )


def lerp_suppression(total_angle_deg: float) -> float:
    return 1.0 - (total_angle_deg / 180.0) ** 4


def wrist_lerp_value(suppression: float, ext_ratio: float) -> float:
    """Share of the root-relative controller rotation given to the wrist."""
    return suppression * (
        ELBOW_BEND_RATIO
        + (1.0 - ELBOW_BEND_RATIO) * ext_ratio * EXTENSION_RATIO_WEIGHT
    )


@dataclass(slots=True)
class ArmModelDiagnostics:
    """Intermediate values of the last update()."""

    time_delta: float = 0.0
    angle_delta: float = 0.0
    angular_speed: float = 0.0
    root_snapped: bool = True
    extension_ratio: float = 0.0
    total_angle_deg: float = 0.0
    lerp_suppression: float = 1.0
    lerp_value: float = 0.0
    wrist_q: np.ndarray = field(default_factory=q_identity)
    elbow_q: np.ndarray = field(default_factory=q_identity)


def _check_vector(name: str, value: np.ndarray, size: int) -> None:
    if value.shape != (size,):
        raise ArmModelInputError(f"{name} must have shape ({size},), got {value.shape}")
    if not np.isfinite(value).all():
        raise ArmModelInputError(f"{name} must be finite, got {value!r}")


def _check_quaternion(name: str, q: np.ndarray) -> None:
    _check_vector(name, q, 4)
    n = float(np.linalg.norm(q))
    if abs(n - 1.0) > 1e-3:
        raise ArmModelInputError(f"{name} must be a unit quaternion, got norm {n:.6f}")


class OrientationArmModel:
    """Arm model for a 3DoF controller. Feed it head and controller poses,
    call update() once per frame, read get_pose().

    Not thread-safe: one instance per tracking loop.
    """

    def __init__(
        self,
        handedness: str = "right",
        validate_inputs: bool = False,
        clock: Optional[Callable[[], float]] = None,
    ):
        if handedness not in HANDEDNESS:
            raise ValueError(f"handedness must be right|left, got {handedness!r}")
        self.handedness = handedness
        self.validate_inputs = bool(validate_inputs)
        self._clock = clock or time.monotonic

        mirror = np.array([-1.0, 1.0, 1.0]) if handedness == "left" else np.ones(3)
        self.head_elbow_offset = HEAD_ELBOW_OFFSET * mirror
        self.arm_extension_offset = ARM_EXTENSION_OFFSET * mirror

        self.controller_q = q_identity()
        self.last_controller_q = q_identity()
        self.head_q = q_identity()
        self.head_pos = np.zeros(3, dtype=np.float64)

        # Joint positions, root-relative (mostly for debugging).
        self.elbow_pos = np.zeros(3, dtype=np.float64)
        self.wrist_pos = np.zeros(3, dtype=np.float64)

        self.time: Optional[float] = None
        self.last_time: Optional[float] = None

        # Smoothed torso orientation.
        self.root_q = q_identity()

        self.pose = Pose6D(position=np.zeros(3, dtype=np.float64), quaternion=q_identity())
        self.diagnostics = ArmModelDiagnostics()

        logger.debug(
            "[ARM] model created (handedness=%s, validate_inputs=%s)",
            self.handedness,
            self.validate_inputs,
        )

    def set_controller_orientation(self, q: np.ndarray) -> None:
        q = np.asarray(q, dtype=np.float64).reshape(-1)
        if self.validate_inputs:
            _check_quaternion("controller orientation", q)
        self.last_controller_q = self.controller_q
        self.controller_q = q.copy()

    def set_head_orientation(self, q: np.ndarray) -> None:
        q = np.asarray(q, dtype=np.float64).reshape(-1)
        if self.validate_inputs:
            _check_quaternion("head orientation", q)
        self.head_q = q.copy()

    def set_head_position(self, p: np.ndarray) -> None:
        p = np.asarray(p, dtype=np.float64).reshape(-1)
        if self.validate_inputs:
            _check_vector("head position", p, 3)
        self.head_pos = p.copy()

    def apply(self, snapshot: ArmModelInput) -> Pose6D:
        return self.update(
            controller_q=snapshot.controller_q,
            head_q=snapshot.head_q,
            head_pos=snapshot.head_pos,
        )

    def update(
        self,
        controller_q: Optional[np.ndarray] = None,
        head_q: Optional[np.ndarray] = None,
        head_pos: Optional[np.ndarray] = None,
    ) -> Pose6D:
        """Recompute the controller pose.

        Arguments that are given go through the matching setter first, so
        update(controller_q, head_q, head_pos) consumes a full snapshot and
        update() alone reuses whatever the setters stored.
        """
        if self.validate_inputs:
            # Reject the whole snapshot before any setter touches state.
            if controller_q is not None:
                _check_quaternion(
                    "controller orientation", np.asarray(controller_q, dtype=np.float64).reshape(-1)
                )
            if head_q is not None:
                _check_quaternion("head orientation", np.asarray(head_q, dtype=np.float64).reshape(-1))
            if head_pos is not None:
                _check_vector("head position", np.asarray(head_pos, dtype=np.float64).reshape(-1), 3)

        if controller_q is not None:
            self.set_controller_orientation(controller_q)
        if head_q is not None:
            self.set_head_orientation(head_q)
        if head_pos is not None:
            self.set_head_position(head_pos)

        self.time = float(self._clock())
        diag = ArmModelDiagnostics()

        # Fast controller motion means the torso is turning: only nudge the
        # root toward the head yaw. Otherwise the torso follows the head.
        head_yaw_q = q_yaw_only(self.head_q)
        angle_delta = pointing_angle(self.last_controller_q, self.controller_q)
        time_delta = 0.0 if self.last_time is None else self.time - self.last_time
        angular_speed = angle_delta / time_delta if time_delta > 0.0 else 0.0
        if angular_speed > MIN_ANGULAR_SPEED:
            # Step size is angle_delta / 10 (radians used as a fraction).
            self.root_q = q_slerp(self.root_q, head_yaw_q, angle_delta / 10.0)
            diag.root_snapped = False
        else:
            self.root_q = head_yaw_q
            diag.root_snapped = True

        # Raising the controller moves the elbow up and toward the center.
        _, pitch, _ = q_to_euler_yaw_pitch_roll(self.controller_q)
        ext = extension_ratio(math.degrees(pitch))

        controller_camera_q = q_mul(q_inverse(self.root_q), self.controller_q)

        self.elbow_pos = self.head_pos + self.head_elbow_offset + self.arm_extension_offset * ext

        total_angle_deg = math.degrees(pointing_angle(controller_camera_q, q_identity()))
        suppression = lerp_suppression(total_angle_deg)
        lerp_value = wrist_lerp_value(suppression, ext)

        wrist_q = q_slerp(q_identity(), controller_camera_q, lerp_value)
        elbow_q = q_mul(controller_camera_q, q_inverse(wrist_q))

        # Forward kinematics: controller <- wrist <- elbow.
        wrist_pos = q_rotate_vec(wrist_q, WRIST_CONTROLLER_OFFSET, normalize=False)
        wrist_pos = wrist_pos + ELBOW_WRIST_OFFSET
        wrist_pos = q_rotate_vec(elbow_q, wrist_pos, normalize=False)
        self.wrist_pos = wrist_pos + self.elbow_pos

        # Rotations use q as given; a non-unit controller quaternion scales
        # the offsets instead of being corrected.
        position = q_rotate_vec(
            self.root_q, self.wrist_pos + self.arm_extension_offset * ext, normalize=False
        )

        self.pose = Pose6D(position=position, quaternion=self.controller_q.copy())

        diag.time_delta = time_delta
        diag.angle_delta = angle_delta
        diag.angular_speed = angular_speed
        diag.extension_ratio = ext
        diag.total_angle_deg = total_angle_deg
        diag.lerp_suppression = suppression
        diag.lerp_value = lerp_value
        diag.wrist_q = wrist_q
        diag.elbow_q = elbow_q
        self.diagnostics = diag

        self.last_time = self.time
        return self.pose

    def get_pose(self) -> Pose6D:
        return self.pose

    def get_root_orientation(self) -> np.ndarray:
        return self.root_q.copy()

    def get_forearm_length(self) -> float:
        return float(np.linalg.norm(ELBOW_WRIST_OFFSET))

    def get_elbow_position(self) -> np.ndarray:
        return q_rotate_vec(self.root_q, self.elbow_pos, normalize=False)

    def get_wrist_position(self) -> np.ndarray:
        return q_rotate_vec(self.root_q, self.wrist_pos, normalize=False)
