"""Headless scripted pose provider.

Drives the controller and head with slow sinusoids so the arm model can be
exercised without a UI or tracking hardware. Samples depend only on the
frame index, so runs are reproducible.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

import numpy as np

from ..control.pose import Pose6D
from ..control.pose_provider import PoseProvider
from ..math3d.quaternion import euler_yaw_pitch_roll_to_q

logger = logging.getLogger(__name__)


class SweepPoseProvider(PoseProvider):
    """Controller yaw/pitch and head yaw follow fixed sinusoids."""

    def __init__(
        self,
        fps: float = 60.0,
        duration_s: float = 0.0,
        yaw_amplitude_deg: float = 45.0,
        pitch_amplitude_deg: float = 35.0,
        period_s: float = 4.0,
        head_height: float = 1.6,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.fps = float(fps)
        self.frame_s = 1.0 / self.fps
        self.duration_s = max(0.0, float(duration_s))
        self.yaw_amplitude_deg = float(yaw_amplitude_deg)
        self.pitch_amplitude_deg = float(pitch_amplitude_deg)
        self.period_s = float(period_s)
        self.head_height = float(head_height)
        self._sleep = sleep or time.sleep

        self.frame_index = 0
        self._closed = False
        self._status_text = ""

        logger.info(
            "[POSE] provider=sweep (fps=%.1f, duration=%.1fs, yaw_amp=%.1fdeg, "
            "pitch_amp=%.1fdeg, period=%.2fs)",
            self.fps,
            self.duration_s,
            self.yaw_amplitude_deg,
            self.pitch_amplitude_deg,
            self.period_s,
        )

    @property
    def t(self) -> float:
        return self.frame_index * self.frame_s

    def _phase(self, scale: float = 1.0) -> float:
        return 2.0 * math.pi * self.t / (self.period_s * scale)

    def get_controller_quaternion(self) -> np.ndarray:
        yaw = self.yaw_amplitude_deg * math.sin(self._phase())
        # Pitch oscillates between level and the full amplitude.
        pitch = self.pitch_amplitude_deg * 0.5 * (1.0 - math.cos(self._phase()))
        return euler_yaw_pitch_roll_to_q(yaw, pitch, 0.0)

    def get_head_pose(self) -> Pose6D:
        head_yaw = 0.5 * self.yaw_amplitude_deg * math.sin(self._phase(scale=3.0))
        return Pose6D(
            position=np.array([0.0, self.head_height, 0.0], dtype=np.float64),
            quaternion=euler_yaw_pitch_roll_to_q(head_yaw, 0.0, 0.0),
        )

    def set_status(self, text: str) -> None:
        self._status_text = text

    def _finished(self) -> bool:
        return self.duration_s > 0.0 and self.t >= self.duration_s

    def run(self, on_tick):
        while not self._closed and not self._finished():
            on_tick()
            self.frame_index += 1
            self._sleep(self.frame_s)
        logger.info("[POSE] sweep finished after %d frames", self.frame_index)

    def close(self) -> None:
        self._closed = True
