from __future__ import annotations

import json

import pytest

from pose_coach.processing.config import (
    DEFAULT_MIN_CONFIDENCE,
    PoseConfig,
    build_config,
    config_as_dict,
    get_config,
    load_config_from_file,
    load_mapping_file,
    validate_config_values,
)


def test_defaults_without_file_or_env(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = get_config()
    assert config == PoseConfig()
    assert config.min_confidence == DEFAULT_MIN_CONFIDENCE
    assert config_as_dict(config)["source"] == "defaults"


def test_toml_pipeline_section(tmp_path) -> None:
    path = tmp_path / "pose.toml"
    path.write_text(
        "[pipeline]\nmin_confidence = 0.6\nenable_smoothing = false\nsmoothing_factor = 0.3\n",
        encoding="utf-8",
    )
    config = load_config_from_file(path)
    assert config.min_confidence == pytest.approx(0.6)
    assert config.enable_smoothing is False
    assert config.smoothing_factor == pytest.approx(0.3)
    assert config.tolerance_degrees == pytest.approx(15.0)


def test_json_root_level_mapping(tmp_path) -> None:
    path = tmp_path / "pose.json"
    path.write_text(json.dumps({"target_fps": 60, "tolerance_degrees": 10}), encoding="utf-8")
    config = load_config_from_file(path)
    assert config.target_fps == pytest.approx(60.0)
    assert config.tolerance_degrees == pytest.approx(10.0)


def test_env_overrides_file_values(monkeypatch) -> None:
    monkeypatch.setenv("POSE_COACH_MIN_CONFIDENCE", "0.7")
    monkeypatch.setenv("POSE_COACH_ENABLE_SMOOTHING", "off")
    config = build_config({"pipeline": {"min_confidence": 0.6, "enable_smoothing": True}})
    assert config.min_confidence == pytest.approx(0.7)
    assert config.enable_smoothing is False


def test_non_numeric_env_is_ignored(monkeypatch) -> None:
    monkeypatch.setenv("POSE_COACH_TARGET_FPS", "fast")
    assert build_config().target_fps == pytest.approx(30.0)


def test_config_env_var_points_at_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"pipeline": {"smoothing_factor": 0.8}}), encoding="utf-8")
    monkeypatch.setenv("POSE_COACH_CONFIG", str(path))
    assert get_config().smoothing_factor == pytest.approx(0.8)
    assert config_as_dict()["source"] == str(path)


def test_with_overrides_ignores_none() -> None:
    base = PoseConfig()
    assert base.with_overrides(tolerance_degrees=None) is base
    assert base.with_overrides(tolerance_degrees=5.0).tolerance_degrees == pytest.approx(5.0)


def test_load_mapping_file_errors(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_mapping_file(tmp_path / "missing.toml")
    with pytest.raises(ValueError):
        load_mapping_file(tmp_path)
    bad = tmp_path / "pose.yaml"
    bad.write_text("min_confidence: 0.5\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_mapping_file(bad)


def test_validate_config_values_warns() -> None:
    assert validate_config_values(PoseConfig()) == []
    with pytest.warns(RuntimeWarning):
        problems = validate_config_values(PoseConfig(smoothing_factor=1.5, target_fps=0.0))
    assert len(problems) == 2
