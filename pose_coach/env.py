from __future__ import annotations

import os

PREFIX = "POSE_COACH_"


def get_env(name: str, default: str | None = None) -> str | None:
    """
    Resolve configuration environment variables.

    Every setting lives under the `POSE_COACH_` prefix, e.g. `get_env("LOG_LEVEL")`
    reads `POSE_COACH_LOG_LEVEL`.
    """
    value = os.getenv(f"{PREFIX}{name}")
    if value is not None:
        return value
    return default


def get_env_flag(name: str, default: bool) -> bool:
    """Interpret an environment variable as a boolean switch."""
    value = get_env(name)
    if value is None:
        return bool(default)
    return value.strip().lower() not in {"0", "false", "no", "off", ""}
