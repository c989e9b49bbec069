"""Feedback generation utilities for pose correction cues."""

from .generator import SCORE_CUES, describe_score, format_joint_cue, generate_pose_feedback

__all__ = [
    "SCORE_CUES",
    "describe_score",
    "format_joint_cue",
    "generate_pose_feedback",
]
