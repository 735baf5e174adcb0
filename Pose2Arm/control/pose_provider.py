"""Pose provider interfaces for head and controller tracking."""

from __future__ import annotations

from typing import Callable

import numpy as np

from .pose import Pose6D, identity_pose


class PoseProvider:
    """Base interface for tracking providers.

    Implementations may be UI-based (ToyCV sliders) or scripted (sweep).
    Each tick the controller reads the head pose and the controller
    orientation, both in world frame.
    """

    def get_head_pose(self) -> Pose6D:
        return identity_pose()

    def get_controller_quaternion(self) -> np.ndarray:
        raise NotImplementedError

    def set_status(self, text: str) -> None:
        # Optional UI hook.
        pass

    def has_tracking(self) -> bool:
        """Whether current samples come from valid tracking."""
        return True

    def run(self, on_tick: Callable[[], None]) -> None:
        """Run the provider's event loop and call on_tick periodically."""
        raise NotImplementedError

    def close(self) -> None:
        pass
