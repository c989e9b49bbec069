"""Configuration for the pose landmark processing pipeline.

Settings include:
- MIN_CONFIDENCE: Confidence floor a landmark must exceed to be trusted.
- ENABLE_SMOOTHING: Whether the EMA smoother runs before angle calculation.
- SMOOTHING_FACTOR: Raw-frame weight of the EMA (1.0 disables history).
- TARGET_FPS: Nominal frame rate, used to derive timestamps when absent.
- TOLERANCE_DEGREES: Per-joint tolerance used when scoring against a reference.

All values can be overridden via `POSE_COACH_*` environment variables, which
take precedence over values loaded from a TOML/JSON config file.
"""

from __future__ import annotations

import json
import logging
import os
import warnings
from dataclasses import asdict, dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pose_coach.env import get_env, get_env_flag

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python <3.11
    try:
        import tomli as tomllib  # type: ignore
    except ModuleNotFoundError:
        tomllib = None  # type: ignore[assignment]


def _configure_logger() -> logging.Logger:
    logger = logging.getLogger("pose_coach.processing")
    level_name = get_env("LOG_LEVEL") or os.getenv("LOG_LEVEL")
    if level_name:
        level = getattr(logging, level_name.upper(), logging.INFO)
        logger.setLevel(level)
    return logger


PROCESSING_LOGGER = _configure_logger()
logger = PROCESSING_LOGGER

DEFAULT_MIN_CONFIDENCE = 0.5
DEFAULT_SMOOTHING_FACTOR = 0.5
DEFAULT_TARGET_FPS = 30.0
DEFAULT_TOLERANCE_DEGREES = 15.0

DEFAULT_CONFIG_CANDIDATES = ("config/pose_coach.toml", "config/pose_coach.json")


@dataclass(frozen=True)
class PoseConfig:
    """Per-session pipeline settings."""

    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    enable_smoothing: bool = True
    smoothing_factor: float = DEFAULT_SMOOTHING_FACTOR
    target_fps: float = DEFAULT_TARGET_FPS
    tolerance_degrees: float = DEFAULT_TOLERANCE_DEGREES

    def with_overrides(self, **changes: Any) -> "PoseConfig":
        """Return a copy with the non-None keyword arguments applied."""
        applied = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **applied) if applied else self


def _get_env_float(key: str, default: float) -> float:
    raw = get_env(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric POSE_COACH_%s=%r", key, raw)
        return default


def _coerce_float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() not in {"0", "false", "no", "off", ""}
    return bool(value)


def _load_toml_file(path: Path) -> Dict[str, Any]:
    if tomllib is None:
        raise ImportError("TOML configuration requires Python 3.11+ or the 'tomli' package.")
    with path.open("rb") as handle:
        return tomllib.load(handle)


def load_mapping_file(path: Path) -> Dict[str, Any]:
    """Read a TOML or JSON file into a dict."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    if not path.is_file():
        raise ValueError(f"Expected a file, but got a directory: {path}")

    suffix = path.suffix.lower()
    if suffix == ".toml":
        return _load_toml_file(path)
    if suffix == ".json":
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object in {path}.")
        return payload
    raise ValueError(f"Unsupported config format for {path}; expected .toml or .json.")


def build_config(raw: Optional[Mapping[str, Any]] = None) -> PoseConfig:
    """Build a `PoseConfig` from a mapping, letting env vars take precedence."""
    body: Mapping[str, Any] = raw or {}
    section = body.get("pipeline")
    if isinstance(section, Mapping):
        body = section

    base = PoseConfig(
        min_confidence=_coerce_float(body.get("min_confidence"), DEFAULT_MIN_CONFIDENCE),
        enable_smoothing=_coerce_bool(body.get("enable_smoothing"), True),
        smoothing_factor=_coerce_float(body.get("smoothing_factor"), DEFAULT_SMOOTHING_FACTOR),
        target_fps=_coerce_float(body.get("target_fps"), DEFAULT_TARGET_FPS),
        tolerance_degrees=_coerce_float(body.get("tolerance_degrees"), DEFAULT_TOLERANCE_DEGREES),
    )
    return PoseConfig(
        min_confidence=_get_env_float("MIN_CONFIDENCE", base.min_confidence),
        enable_smoothing=get_env_flag("ENABLE_SMOOTHING", base.enable_smoothing),
        smoothing_factor=_get_env_float("SMOOTHING_FACTOR", base.smoothing_factor),
        target_fps=_get_env_float("TARGET_FPS", base.target_fps),
        tolerance_degrees=_get_env_float("TOLERANCE_DEGREES", base.tolerance_degrees),
    )


def load_config_from_file(config_path: Path) -> PoseConfig:
    """Load pipeline config from TOML or JSON and apply env var overrides.

    Supports either a root-level mapping or a [pipeline] table/object.
    """
    return build_config(load_mapping_file(Path(config_path)))


def _config_path() -> Path | None:
    """Resolve the configuration file, if present."""
    env_override = get_env("CONFIG")
    if env_override:
        path = Path(env_override).expanduser()
        return path if path.exists() else None

    for candidate in DEFAULT_CONFIG_CANDIDATES:
        default_path = Path(candidate)
        if default_path.exists():
            return default_path
    return None


@lru_cache(maxsize=1)
def get_config() -> PoseConfig:
    """Load configuration once, falling back to built-in defaults."""
    path = _config_path()
    if not path:
        return build_config()
    return load_config_from_file(path)


def validate_config_values(config: PoseConfig) -> list[str]:
    """Validate config values and emit warnings for suspicious settings."""
    problems: list[str] = []
    for name, value in (
        ("min_confidence", config.min_confidence),
        ("smoothing_factor", config.smoothing_factor),
    ):
        if not 0.0 <= value <= 1.0:
            problems.append(f"{name}={value} is outside [0,1].")
    if config.target_fps <= 0:
        problems.append(f"target_fps={config.target_fps} must be positive.")
    if config.tolerance_degrees <= 0:
        problems.append(f"tolerance_degrees={config.tolerance_degrees} must be positive.")

    for message in problems:
        warnings.warn(f"{message} Please correct the environment or config.", RuntimeWarning, stacklevel=2)
        logger.warning(message)
    return problems


def config_as_dict(config: Optional[PoseConfig] = None, *, source: str | Path | None = None) -> dict[str, Any]:
    """Return the effective configuration for debug/CLI display."""
    effective = config or get_config()
    payload = asdict(effective)
    payload["source"] = str(source or _config_path() or "defaults")
    return payload


__all__ = [
    "PROCESSING_LOGGER",
    "PoseConfig",
    "DEFAULT_MIN_CONFIDENCE",
    "DEFAULT_SMOOTHING_FACTOR",
    "DEFAULT_TARGET_FPS",
    "DEFAULT_TOLERANCE_DEGREES",
    "build_config",
    "load_config_from_file",
    "load_mapping_file",
    "get_config",
    "validate_config_values",
    "config_as_dict",
]
