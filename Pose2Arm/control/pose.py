"""Pose data structures for head, controller and arm tracking."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(slots=True)
class Pose6D:
    """Pose in world space.

    position:
      3D translation [x, y, z], meters.
    quaternion:
      Orientation quaternion [w, x, y, z], unit length.
    """

    position: np.ndarray
    quaternion: np.ndarray


@dataclass(frozen=True, slots=True)
class ArmModelInput:
    """Tracking snapshot for one frame."""

    controller_q: np.ndarray
    head_q: np.ndarray
    head_pos: np.ndarray


def identity_pose() -> Pose6D:
    return Pose6D(
        position=np.zeros(3, dtype=np.float64),
        quaternion=np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64),
    )
