from __future__ import annotations

import math

import pytest

from pose_coach.processing.feedback import describe_score, format_joint_cue, generate_pose_feedback


def test_feedback_direction_and_magnitude() -> None:
    assert format_joint_cue("Left knee", -30.0) == "Left knee: Increase angle by ~30°"
    assert format_joint_cue("Spine", 12.5) == "Spine: Decrease angle by ~13°"


def test_feedback_only_for_out_of_tolerance_joints() -> None:
    reference = {"left_knee": 90, "right_knee": 90, "spine": 180}
    detected = {"left_knee": 60, "right_knee": 100, "spine": 180}
    assert generate_pose_feedback(detected, reference, 15) == ["Left knee: Increase angle by ~30°"]


def test_feedback_at_exact_tolerance_is_silent() -> None:
    assert generate_pose_feedback({"left_knee": 105}, {"left_knee": 90}, 15) == []


def test_feedback_skips_undetected_joints() -> None:
    assert generate_pose_feedback({}, {"left_knee": 90, "neck": 0}, 15) == []


def test_feedback_follows_reference_order_unless_ranked() -> None:
    reference = {"left_elbow": 90, "left_knee": 90}
    detected = {"left_elbow": 110, "left_knee": 150}

    assert generate_pose_feedback(detected, reference, 15) == [
        "Left elbow: Decrease angle by ~20°",
        "Left knee: Decrease angle by ~60°",
    ]
    assert generate_pose_feedback(detected, reference, 15, rank_by_severity=True) == [
        "Left knee: Decrease angle by ~60°",
        "Left elbow: Decrease angle by ~20°",
    ]


def test_describe_score_bands() -> None:
    assert describe_score(100)["cue"] == "Perfect form! Excellent!"
    assert describe_score(90)["cue"] == "Perfect form! Excellent!"

    good = describe_score(85)
    assert good["cue"] == "Good posture!"
    assert good["is_correct"] is True

    almost = describe_score(79)
    assert almost["cue"] == "Almost there, slight adjustment needed"
    assert almost["is_correct"] is False

    assert describe_score(60)["cue"] == "Adjust your position"
    assert describe_score(0)["cue"] == "Position yourself in frame"


@pytest.mark.parametrize("tolerance", [0, -5, math.nan, math.inf])
def test_feedback_rejects_invalid_tolerance(tolerance) -> None:
    with pytest.raises(ValueError):
        generate_pose_feedback({"left_knee": 90}, {"left_knee": 90}, tolerance)
