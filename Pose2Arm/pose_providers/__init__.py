"""Pose provider implementations.

ToyCvTkPoseProvider is not re-exported here: import it from
``Pose2Arm.pose_providers.toycv_tk`` so that importing this package does not
require tkinter.
"""

from .sweep import SweepPoseProvider

__all__ = [
    "SweepPoseProvider",
]
