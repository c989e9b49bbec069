"""Tools for comparing detected joint angles against a reference pose."""

from __future__ import annotations

from typing import Any

__all__ = [
    "joint_credit",
    "score_joints",
    "compare_pose_angles",
    "compare_to_reference",
    "compare_frame",
    "load_reference_pose",
]

_SCORING_EXPORTS = set(__all__)


def __getattr__(name: str) -> Any:  # pragma: no cover - exercised indirectly
    if name in _SCORING_EXPORTS:
        from . import scoring as _scoring

        return getattr(_scoring, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:  # pragma: no cover - trivial
    return sorted(set(list(globals()) + __all__))
