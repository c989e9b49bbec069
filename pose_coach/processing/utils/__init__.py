"""Utility helpers for smoothing and validating landmark frames."""

from .filtering import LandmarkSmoother, SmootherState, apply_smoothing
from .validation import (
    assess_pose_quality,
    is_body_part_visible,
    is_person_fully_visible,
    pose_confidence,
    sanitize_landmarks,
)

__all__ = [
    "LandmarkSmoother",
    "SmootherState",
    "apply_smoothing",
    "assess_pose_quality",
    "is_body_part_visible",
    "is_person_fully_visible",
    "pose_confidence",
    "sanitize_landmarks",
]
