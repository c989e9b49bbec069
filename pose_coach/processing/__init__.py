"""Pose landmark processing: smoothing, joint angles, quality and comparison.

Submodules are imported lazily so lightweight callers (e.g. config display)
do not pay for pandas until they need exports.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "FramePipeline",
    "PoseConfig",
    "PROCESSING_LOGGER",
    "get_config",
    "load_config_from_file",
    "validate_config_values",
    "Keypoint",
    "Joint",
    "BodyRegion",
    "Landmark",
    "LandmarkSet",
    "LandmarkValidationError",
    "JointAngles",
    "ReferencePose",
    "PoseFrame",
    "ComparisonResult",
    "SessionStats",
    "angle_between",
    "distance",
    "calculate_joint_angles",
    "LandmarkSmoother",
    "pose_confidence",
    "is_person_fully_visible",
    "is_body_part_visible",
    "compare_pose_angles",
    "compare_to_reference",
    "compare_frame",
    "load_reference_pose",
    "generate_pose_feedback",
    "batch_export_pose_data",
    "summarize_session",
]

_CONFIG_EXPORTS = {
    "PoseConfig",
    "PROCESSING_LOGGER",
    "get_config",
    "load_config_from_file",
    "validate_config_values",
}
_KEYPOINT_EXPORTS = {"Keypoint", "Joint", "BodyRegion"}
_MODEL_EXPORTS = {
    "Landmark",
    "LandmarkSet",
    "LandmarkValidationError",
    "JointAngles",
    "ReferencePose",
    "PoseFrame",
    "ComparisonResult",
    "SessionStats",
}
_METRICS_EXPORTS = {"angle_between", "distance", "calculate_joint_angles"}
_UTILS_EXPORTS = {"LandmarkSmoother", "pose_confidence", "is_person_fully_visible", "is_body_part_visible"}
_COMPARISON_EXPORTS = {"compare_pose_angles", "compare_to_reference", "compare_frame", "load_reference_pose"}
_FEEDBACK_EXPORTS = {"generate_pose_feedback"}
_EXPORT_EXPORTS = {"batch_export_pose_data", "summarize_session"}


def __getattr__(name: str) -> Any:  # pragma: no cover - exercised indirectly
    if name in _CONFIG_EXPORTS:
        from . import config as _config

        return getattr(_config, name)
    if name in _KEYPOINT_EXPORTS:
        from . import keypoints as _keypoints

        return getattr(_keypoints, name)
    if name in _MODEL_EXPORTS:
        from . import models as _models

        return getattr(_models, name)
    if name in _METRICS_EXPORTS:
        from . import metrics as _metrics

        return getattr(_metrics, name)
    if name in _UTILS_EXPORTS:
        from . import utils as _utils

        return getattr(_utils, name)
    if name in _COMPARISON_EXPORTS:
        from .comparison import scoring as _scoring

        return getattr(_scoring, name)
    if name in _FEEDBACK_EXPORTS:
        from . import feedback as _feedback

        return getattr(_feedback, name)
    if name in _EXPORT_EXPORTS:
        from . import export as _export

        return getattr(_export, name)
    if name == "FramePipeline":
        from .pipeline import FramePipeline

        return FramePipeline
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:  # pragma: no cover - trivial
    return sorted(set(list(globals()) + __all__))
