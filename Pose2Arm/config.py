"""CLI config and defaults."""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class AppConfig:
    pose_provider: str = "sweep"
    display_provider: str = "tui"
    display_hz: float = 5.0
    cli_output: str = "live"
    log_level: str = "info"
    handedness: str = "right"
    validate_inputs: bool = False
    head_height: float = 1.6
    sweep_fps: float = 60.0
    sweep_duration_s: float = 0.0
    sweep_yaw_amplitude_deg: float = 45.0
    sweep_pitch_amplitude_deg: float = 35.0
    sweep_period_s: float = 4.0


_APP_CONFIG_FIELDS = {f.name for f in fields(AppConfig)}
_BOOL_FIELDS = {"validate_inputs"}
_FLOAT_FIELDS = {
    "display_hz",
    "head_height",
    "sweep_fps",
    "sweep_duration_s",
    "sweep_yaw_amplitude_deg",
    "sweep_pitch_amplitude_deg",
    "sweep_period_s",
}
_STRING_FIELDS = {
    "pose_provider",
    "display_provider",
    "cli_output",
    "log_level",
    "handedness",
}


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        s = value.strip().lower()
        if s in {"1", "true", "yes", "on"}:
            return True
        if s in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"config key '{key}' expects a bool, got {value!r}")


def _coerce_config_value(key: str, value: Any) -> Any:
    try:
        if key in _BOOL_FIELDS:
            return _parse_bool(value, key)
        if key in _FLOAT_FIELDS:
            return float(value)
        if key in _STRING_FIELDS:
            return "" if value is None else str(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid value for config key '{key}': {value!r}") from exc
    raise ValueError(f"unsupported config key '{key}'")


def _normalize_config_key(raw_key: Any) -> str:
    if not isinstance(raw_key, str):
        raise ValueError(f"config key must be string, got {type(raw_key).__name__}")
    key = raw_key.strip().replace("-", "_")
    if not key:
        raise ValueError("config key cannot be empty")
    return key


def _load_yaml_config(path: str) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ValueError(f"--config file not found: {p}")
    if not p.is_file():
        raise ValueError(f"--config must point to a file: {p}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"failed to read --config file {p}: {exc}") from exc
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse YAML config {p}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"--config root must be a mapping/object, got {type(loaded).__name__}")

    normalized: dict[str, Any] = {}
    for raw_key, raw_value in loaded.items():
        key = _normalize_config_key(raw_key)
        if key not in _APP_CONFIG_FIELDS:
            raise ValueError(f"unknown config key in {p}: {raw_key!r}")
        normalized[key] = _coerce_config_value(key, raw_value)
    return normalized


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Orientation arm model demo for 3DoF controllers."
    )
    ap.add_argument(
        "--config",
        type=str,
        default="",
        help="YAML config file path. CLI args override YAML values.",
    )
    ap.add_argument(
        "--pose-provider",
        choices=["toycv", "sweep"],
        default="sweep",
        help="Tracking input: ToyCV Tk sliders or headless scripted sweep.",
    )
    ap.add_argument(
        "--display-provider",
        choices=["tui", "3d"],
        default="tui",
        help="Display provider: terminal TUI or matplotlib 3D stick figure.",
    )
    ap.add_argument(
        "--display-hz",
        type=float,
        default=5.0,
        help="Display refresh rate in Hz (0 disables display updates).",
    )
    ap.add_argument(
        "--cli-output",
        choices=["live", "scroll"],
        default="live",
        help="TUI output mode: in-place live panel or scrolling logs.",
    )
    ap.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Global log level.",
    )
    ap.add_argument(
        "--handedness",
        choices=["right", "left"],
        default="right",
        help="Which arm holds the controller.",
    )
    ap.add_argument(
        "--validate-inputs",
        action="store_true",
        help="Reject non-finite or non-unit tracking input instead of propagating it.",
    )
    ap.add_argument(
        "--head-height",
        type=float,
        default=1.6,
        help="Head height in meters for the toycv and sweep providers.",
    )
    ap.add_argument(
        "--sweep-fps",
        type=float,
        default=60.0,
        help="Frame rate of the sweep provider.",
    )
    ap.add_argument(
        "--sweep-duration-s",
        type=float,
        default=0.0,
        help="Stop the sweep after this many seconds (0 runs until interrupted).",
    )
    ap.add_argument(
        "--sweep-yaw-amplitude-deg",
        type=float,
        default=45.0,
        help="Controller yaw amplitude of the sweep (head yaw uses half).",
    )
    ap.add_argument(
        "--sweep-pitch-amplitude-deg",
        type=float,
        default=35.0,
        help="Peak controller pitch of the sweep.",
    )
    ap.add_argument(
        "--sweep-period-s",
        type=float,
        default=4.0,
        help="Period of the controller sweep in seconds.",
    )
    return ap


def validate_config(cfg: AppConfig) -> None:
    if cfg.pose_provider not in {"toycv", "sweep"}:
        raise ValueError(f"--pose-provider must be one of toycv|sweep, got {cfg.pose_provider}")
    if cfg.display_provider not in {"tui", "3d"}:
        raise ValueError(f"--display-provider must be one of tui|3d, got {cfg.display_provider}")
    if not math.isfinite(cfg.display_hz) or cfg.display_hz < 0.0:
        raise ValueError(f"--display-hz must be a finite number >= 0, got {cfg.display_hz}")
    if cfg.cli_output not in {"live", "scroll"}:
        raise ValueError(f"--cli-output must be live|scroll, got {cfg.cli_output}")
    if cfg.log_level not in {"debug", "info", "warning", "error"}:
        raise ValueError(
            f"--log-level must be one of debug|info|warning|error, got {cfg.log_level}"
        )
    if cfg.handedness not in {"right", "left"}:
        raise ValueError(f"--handedness must be right|left, got {cfg.handedness}")
    if not math.isfinite(cfg.head_height) or cfg.head_height <= 0.0:
        raise ValueError(f"--head-height must be > 0, got {cfg.head_height}")
    if not math.isfinite(cfg.sweep_fps) or cfg.sweep_fps <= 0.0:
        raise ValueError(f"--sweep-fps must be a finite number > 0, got {cfg.sweep_fps}")
    if not math.isfinite(cfg.sweep_duration_s) or cfg.sweep_duration_s < 0.0:
        raise ValueError(
            f"--sweep-duration-s must be a finite number >= 0, got {cfg.sweep_duration_s}"
        )
    if not (0.0 <= cfg.sweep_yaw_amplitude_deg <= 180.0):
        raise ValueError(
            f"--sweep-yaw-amplitude-deg must be in [0,180], got {cfg.sweep_yaw_amplitude_deg}"
        )
    if not (0.0 <= cfg.sweep_pitch_amplitude_deg <= 89.0):
        raise ValueError(
            f"--sweep-pitch-amplitude-deg must be in [0,89], got {cfg.sweep_pitch_amplitude_deg}"
        )
    if not math.isfinite(cfg.sweep_period_s) or cfg.sweep_period_s <= 0.0:
        raise ValueError(f"--sweep-period-s must be a finite number > 0, got {cfg.sweep_period_s}")


def parse_args(argv=None) -> AppConfig:
    bootstrap = argparse.ArgumentParser(add_help=False)
    bootstrap.add_argument("--config", type=str, default="")
    bootstrap_ns, _ = bootstrap.parse_known_args(argv)

    yaml_cfg: dict[str, Any] = {}
    yaml_error: str | None = None
    if bootstrap_ns.config:
        try:
            yaml_cfg = _load_yaml_config(bootstrap_ns.config)
        except ValueError as exc:
            yaml_error = str(exc)

    ap = build_arg_parser()
    if yaml_error is not None:
        ap.error(yaml_error)
    if yaml_cfg:
        ap.set_defaults(**yaml_cfg)
    args = ap.parse_args(argv)

    cfg = AppConfig(
        pose_provider=args.pose_provider,
        display_provider=args.display_provider,
        display_hz=float(args.display_hz),
        cli_output=args.cli_output,
        log_level=args.log_level,
        handedness=args.handedness,
        validate_inputs=bool(args.validate_inputs),
        head_height=float(args.head_height),
        sweep_fps=float(args.sweep_fps),
        sweep_duration_s=float(args.sweep_duration_s),
        sweep_yaw_amplitude_deg=float(args.sweep_yaw_amplitude_deg),
        sweep_pitch_amplitude_deg=float(args.sweep_pitch_amplitude_deg),
        sweep_period_s=float(args.sweep_period_s),
    )
    try:
        validate_config(cfg)
    except ValueError as exc:
        ap.error(str(exc))
    return cfg
