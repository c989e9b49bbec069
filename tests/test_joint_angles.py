from __future__ import annotations

import math

import pytest

from pose_coach.processing.keypoints import Joint
from pose_coach.processing.metrics.angles import calculate_joint_angles, compute_trajectory_angles
from pose_coach.processing.models import JointAngles, LandmarkSet, PoseFrame


def _with(records, name, **changes):
    out = []
    for record in records:
        if record["name"] == name:
            record = {**record, **changes}
        out.append(record)
    return out


def _without(records, *names):
    return [record for record in records if record["name"] not in names]


def test_standing_pose_angles(standing_set: LandmarkSet) -> None:
    angles = calculate_joint_angles(standing_set)

    assert angles[Joint.LEFT_KNEE] == pytest.approx(180.0)
    assert angles[Joint.RIGHT_KNEE] == pytest.approx(180.0)
    assert angles[Joint.LEFT_HIP] == pytest.approx(180.0)
    assert angles[Joint.LEFT_ELBOW] == pytest.approx(180.0)
    assert angles[Joint.LEFT_SHOULDER] == pytest.approx(0.0)
    assert angles[Joint.SPINE] == pytest.approx(180.0)
    assert angles[Joint.NECK] == pytest.approx(0.0)
    assert len(angles) == 10


def test_wrist_and_ankle_are_never_reported(standing_set: LandmarkSet) -> None:
    angles = calculate_joint_angles(standing_set)
    for joint in (Joint.LEFT_WRIST, Joint.RIGHT_WRIST, Joint.LEFT_ANKLE, Joint.RIGHT_ANKLE):
        assert joint not in angles


def test_bent_knee_measures_right_angle(standing_records) -> None:
    records = _with(standing_records, "left_ankle", x=0.60, y=0.80)
    angles = calculate_joint_angles(LandmarkSet(records))
    assert angles[Joint.LEFT_KNEE] == pytest.approx(90.0)
    assert angles[Joint.RIGHT_KNEE] == pytest.approx(180.0)


def test_forward_lean_changes_spine_and_neck(standing_records) -> None:
    records = _with(standing_records, "nose", x=0.70, y=0.10)
    angles = calculate_joint_angles(LandmarkSet(records))
    # Nose 0.2 ahead and 0.2 above the shoulder midpoint.
    assert angles[Joint.NECK] == pytest.approx(45.0)
    assert angles[Joint.SPINE] == pytest.approx(180.0)


def test_low_confidence_landmark_removes_dependent_joints(standing_records) -> None:
    records = _with(standing_records, "left_knee", confidence=0.5)
    angles = calculate_joint_angles(LandmarkSet(records), min_confidence=0.5)
    assert Joint.LEFT_KNEE not in angles
    assert Joint.LEFT_HIP not in angles
    assert Joint.RIGHT_KNEE in angles


def test_invisible_or_missing_landmarks_remove_joints(standing_records) -> None:
    records = _with(standing_records, "nose", is_visible=False)
    records = _without(records, "right_hip")
    angles = calculate_joint_angles(LandmarkSet(records))
    assert Joint.NECK not in angles
    assert Joint.SPINE not in angles
    assert Joint.RIGHT_HIP not in angles
    assert Joint.RIGHT_KNEE not in angles
    assert Joint.LEFT_KNEE in angles


def test_angles_rounded_unless_disabled(standing_records) -> None:
    records = _with(standing_records, "left_ankle", x=0.43, y=0.99)
    rounded = calculate_joint_angles(LandmarkSet(records))
    raw = calculate_joint_angles(LandmarkSet(records), round_degrees=False)
    assert rounded[Joint.LEFT_KNEE] == float(round(rounded[Joint.LEFT_KNEE]))
    assert raw[Joint.LEFT_KNEE] != rounded[Joint.LEFT_KNEE]
    assert abs(raw[Joint.LEFT_KNEE] - rounded[Joint.LEFT_KNEE]) <= 0.5


def test_empty_landmarks_yield_no_angles() -> None:
    assert len(calculate_joint_angles([])) == 0


def test_compute_trajectory_angles_long_form() -> None:
    frames = [
        PoseFrame(
            landmarks=LandmarkSet(),
            angles=JointAngles({"left_knee": 170, "spine": 180}),
            confidence=0.9,
            is_person_detected=True,
            frame_number=idx,
            timestamp=idx * 100.0,
        )
        for idx in range(2)
    ]
    df = compute_trajectory_angles(frames)
    assert list(df.columns) == ["frame", "timestamp_ms", "angle_name", "value_degrees"]
    assert len(df) == 4
    assert df.iloc[0]["angle_name"] == "left_knee"
    assert df.iloc[-1]["timestamp_ms"] == pytest.approx(100.0)
    assert not math.isnan(df["value_degrees"].sum())

    assert compute_trajectory_angles([]).empty
