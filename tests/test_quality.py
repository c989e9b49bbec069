from __future__ import annotations

import math

import pytest

from pose_coach.processing.keypoints import BodyRegion
from pose_coach.processing.models import LandmarkSet
from pose_coach.processing.utils.validation import (
    assess_pose_quality,
    is_body_part_visible,
    is_person_fully_visible,
    pose_confidence,
    sanitize_landmarks,
)


def _without(records, *names):
    return [record for record in records if record["name"] not in names]


def test_sanitize_drops_only_non_finite_landmarks(standing_records) -> None:
    records = [dict(r) for r in standing_records]
    records[0]["x"] = math.nan
    records[1]["confidence"] = math.inf
    clean, dropped = sanitize_landmarks(records)
    assert dropped == ["nose", "left_eye"]
    assert len(clean) == 15
    assert "nose" not in clean


def test_pose_confidence_uses_visible_landmarks(standing_records) -> None:
    records = [dict(r) for r in standing_records]
    records[0]["confidence"] = 0.1
    records[0]["is_visible"] = False
    assert pose_confidence(records) == pytest.approx(0.9)
    assert pose_confidence([]) == 0.0


def test_full_visibility_needs_five_of_seven_critical_points(standing_records) -> None:
    assert is_person_fully_visible(standing_records)
    assert is_person_fully_visible(_without(standing_records, "nose", "left_knee"))
    assert not is_person_fully_visible(_without(standing_records, "nose", "left_knee", "right_knee"))


def test_full_visibility_respects_confidence_floor(standing_records) -> None:
    assert not is_person_fully_visible(standing_records, min_confidence=0.95)


def test_body_part_visibility(standing_records) -> None:
    assert is_body_part_visible(standing_records, BodyRegion.HEAD)
    assert is_body_part_visible(_without(standing_records, "nose"), "head")
    assert not is_body_part_visible(_without(standing_records, "nose", "left_eye"), "head")
    assert is_body_part_visible(_without(standing_records, "left_ankle", "right_ankle"), "legs")
    with pytest.raises(ValueError):
        is_body_part_visible(standing_records, "tail")


def test_assess_pose_quality_reports_issues(standing_set: LandmarkSet, standing_records) -> None:
    ok = assess_pose_quality(standing_set)
    assert ok["is_person_fully_visible"] is True
    assert ok["issues"] == []
    assert ok["confidence"] == pytest.approx(0.9)

    head_only = [r for r in standing_records if r["name"] in {"nose", "left_eye", "right_eye"}]
    report = assess_pose_quality(head_only)
    assert report["is_person_fully_visible"] is False
    assert report["regions"] == {"head": True, "torso": False, "arms": False, "legs": False}
    assert any("Person not fully in frame" in issue for issue in report["issues"])

    empty = assess_pose_quality([])
    assert "No landmarks detected." in empty["issues"]
