"""
Orientation arm model demo:
- Pose provider (toycv sliders / headless sweep) supplies head pose and
  3DoF controller orientation every frame
- Orientation arm model estimates the controller position at the end of a
  procedural shoulder -> elbow -> wrist arm
- Display provider (tui/3d) renders the same runtime frame data

Deps:
  pip install numpy pyyaml
  pip install matplotlib  # for --display-provider 3d
"""

from __future__ import annotations

import logging

from .config import parse_args
from .control.arm_model import OrientationArmModel
from .control.controller import ArmController
from .control.display_provider import Matplotlib3DAnimationDisplayProvider, TuiDisplayProvider
from .pose_providers.sweep import SweepPoseProvider

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_sweep_provider(cfg) -> SweepPoseProvider:
    return SweepPoseProvider(
        fps=cfg.sweep_fps,
        duration_s=cfg.sweep_duration_s,
        yaw_amplitude_deg=cfg.sweep_yaw_amplitude_deg,
        pitch_amplitude_deg=cfg.sweep_pitch_amplitude_deg,
        period_s=cfg.sweep_period_s,
        head_height=cfg.head_height,
    )


def build_pose_provider(cfg):
    if cfg.pose_provider == "sweep":
        return build_sweep_provider(cfg)

    try:
        if cfg.pose_provider == "toycv":
            from .pose_providers.toycv_tk import ToyCvTkPoseProvider

            return ToyCvTkPoseProvider(
                title="Pose2Arm - ToyCV Arm Model",
                head_height=cfg.head_height,
            )
        raise RuntimeError(f"Unsupported pose provider: {cfg.pose_provider}")
    except (ImportError, RuntimeError):
        logger.exception("[POSE] failed to init requested pose provider")
        logger.warning("[POSE] fallback to headless sweep")
        return build_sweep_provider(cfg)


def build_display_provider(cfg, pose_provider):
    if cfg.display_provider == "tui":
        return TuiDisplayProvider(
            pose_provider=pose_provider,
            cli_output=cfg.cli_output,
        )

    if cfg.display_provider == "3d":
        try:
            return Matplotlib3DAnimationDisplayProvider(title="Pose2Arm 3D Scene")
        except RuntimeError:
            logger.exception("[DISPLAY] failed to initialize 3D display provider")
            logger.warning("[DISPLAY] fallback to tui provider")
            return TuiDisplayProvider(
                pose_provider=pose_provider,
                cli_output=cfg.cli_output,
            )

    raise RuntimeError(f"Unsupported display provider: {cfg.display_provider}")


def main(argv=None):
    cfg = parse_args(argv)
    configure_logging(cfg.log_level)

    model = OrientationArmModel(
        handedness=cfg.handedness,
        validate_inputs=cfg.validate_inputs,
    )
    logger.info(
        "[SCENE] arm model handedness=%s validate_inputs=%s forearm=%.2fm",
        cfg.handedness,
        cfg.validate_inputs,
        model.get_forearm_length(),
    )

    pose_provider = build_pose_provider(cfg)
    display_provider = build_display_provider(cfg, pose_provider)
    controller = ArmController(
        model=model,
        pose_provider=pose_provider,
        display_provider=display_provider,
        display_hz=cfg.display_hz,
    )

    try:
        pose_provider.run(controller.tick)
    except KeyboardInterrupt:
        logger.info("[SCENE] interrupted after %d frames", controller.frame_index)
    finally:
        try:
            display_provider.close()
        finally:
            pose_provider.close()


if __name__ == "__main__":
    main()
