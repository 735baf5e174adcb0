"""Control plane for mapping tracked poses -> arm model updates."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import numpy as np

from .arm_model import OrientationArmModel
from .display_provider import ArmDisplayFrame, DisplayProvider
from .pose import ArmModelInput, Pose6D
from .pose_provider import PoseProvider

logger = logging.getLogger(__name__)


class ArmController:
    """Owns the per-session state of the frame loop."""

    def __init__(
        self,
        model: OrientationArmModel,
        pose_provider: PoseProvider,
        display_provider: DisplayProvider,
        display_hz: float = 5.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.model = model
        self.pose_provider = pose_provider
        self.display_provider = display_provider
        self.display_interval = (1.0 / display_hz) if display_hz > 0.0 else 0.0
        self.last_display_t: Optional[float] = None
        self._clock = clock or time.monotonic

        self.frame_index = 0
        self.skipped_frames = 0
        self._tracking = True

    def read_input(self) -> ArmModelInput:
        head = self.pose_provider.get_head_pose()
        return ArmModelInput(
            controller_q=np.asarray(
                self.pose_provider.get_controller_quaternion(), dtype=np.float64
            ).reshape(4),
            head_q=np.asarray(head.quaternion, dtype=np.float64).reshape(4),
            head_pos=np.asarray(head.position, dtype=np.float64).reshape(3),
        )

    def tick(self) -> Optional[Pose6D]:
        tracking = self.pose_provider.has_tracking()
        if tracking != self._tracking:
            logger.info("[POSE] tracking %s", "restored" if tracking else "lost")
            self._tracking = tracking
        if not tracking:
            self.skipped_frames += 1
            return None

        snapshot = self.read_input()
        pose = self.model.apply(snapshot)
        self.frame_index += 1

        now = self._clock()
        due = self.last_display_t is None or (now - self.last_display_t) >= self.display_interval
        if self.display_interval > 0.0 and due:
            self.display_provider.update(
                ArmDisplayFrame(
                    frame_index=self.frame_index,
                    arm_pose=pose,
                    head_pose=Pose6D(position=snapshot.head_pos, quaternion=snapshot.head_q),
                    root_q=self.model.get_root_orientation(),
                    elbow_world=self.model.get_elbow_position(),
                    wrist_world=self.model.get_wrist_position(),
                    forearm_length=self.model.get_forearm_length(),
                    diagnostics=self.model.diagnostics,
                )
            )
            self.last_display_t = now
        return pose
