import pytest

from Pose2Arm.config import AppConfig, parse_args, validate_config


def test_validate_config_accepts_defaults():
    validate_config(AppConfig())


def test_validate_config_rejects_invalid_pose_provider():
    cfg = AppConfig(pose_provider="kinect")
    with pytest.raises(ValueError, match="--pose-provider"):
        validate_config(cfg)


def test_validate_config_rejects_invalid_display_provider():
    cfg = AppConfig(display_provider="open3d")
    with pytest.raises(ValueError, match="--display-provider"):
        validate_config(cfg)


def test_validate_config_rejects_negative_display_hz():
    cfg = AppConfig(display_hz=-1.0)
    with pytest.raises(ValueError, match="--display-hz"):
        validate_config(cfg)


def test_validate_config_rejects_invalid_cli_output():
    cfg = AppConfig(cli_output="bad")
    with pytest.raises(ValueError, match="--cli-output"):
        validate_config(cfg)


def test_validate_config_rejects_invalid_handedness():
    cfg = AppConfig(handedness="both")
    with pytest.raises(ValueError, match="--handedness"):
        validate_config(cfg)


def test_validate_config_rejects_non_positive_head_height():
    cfg = AppConfig(head_height=0.0)
    with pytest.raises(ValueError, match="--head-height"):
        validate_config(cfg)


def test_validate_config_rejects_invalid_sweep_settings():
    with pytest.raises(ValueError, match="--sweep-fps"):
        validate_config(AppConfig(sweep_fps=0.0))
    with pytest.raises(ValueError, match="--sweep-pitch-amplitude-deg"):
        validate_config(AppConfig(sweep_pitch_amplitude_deg=95.0))
    with pytest.raises(ValueError, match="--sweep-period-s"):
        validate_config(AppConfig(sweep_period_s=0.0))


def test_parse_args_defaults():
    cfg = parse_args([])
    assert cfg == AppConfig()


def test_parse_args_reads_yaml_config(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "pose_provider: toycv",
                "display-provider: 3d",
                "display_hz: 30",
                "handedness: left",
                "validate_inputs: yes",
                "sweep_duration_s: 2.5",
            ]
        ),
        encoding="utf-8",
    )
    cfg = parse_args(["--config", str(cfg_path)])
    assert cfg.pose_provider == "toycv"
    assert cfg.display_provider == "3d"
    assert cfg.display_hz == 30.0
    assert cfg.handedness == "left"
    assert cfg.validate_inputs is True
    assert cfg.sweep_duration_s == 2.5


def test_parse_args_cli_overrides_yaml(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "display_provider: 3d",
                "display_hz: 60",
            ]
        ),
        encoding="utf-8",
    )
    cfg = parse_args(
        [
            "--config",
            str(cfg_path),
            "--display-provider",
            "tui",
            "--display-hz",
            "12",
        ]
    )
    assert cfg.display_provider == "tui"
    assert cfg.display_hz == 12.0


def test_parse_args_rejects_unknown_yaml_key(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("pose_provider: sweep\nbad_key: 1\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        parse_args(["--config", str(cfg_path)])


def test_parse_args_rejects_invalid_yaml_value(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("handedness: both\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        parse_args(["--config", str(cfg_path)])


def test_parse_args_rejects_missing_config_file(tmp_path):
    with pytest.raises(SystemExit):
        parse_args(["--config", str(tmp_path / "missing.yaml")])


@pytest.mark.parametrize(
    "field, flag",
    [
        ("display_hz", "--display-hz"),
        ("sweep_fps", "--sweep-fps"),
        ("sweep_duration_s", "--sweep-duration-s"),
        ("sweep_period_s", "--sweep-period-s"),
        ("sweep_yaw_amplitude_deg", "--sweep-yaw-amplitude-deg"),
        ("sweep_pitch_amplitude_deg", "--sweep-pitch-amplitude-deg"),
    ],
)
@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_validate_config_rejects_non_finite_numbers(field, flag, value):
    cfg = AppConfig(**{field: value})
    with pytest.raises(ValueError, match=flag):
        validate_config(cfg)


def test_parse_args_rejects_nan_sweep_fps():
    with pytest.raises(SystemExit):
        parse_args(["--sweep-fps", "nan"])
