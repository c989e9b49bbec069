"""Reference-pose scoring helpers (per-joint credit and a 0-100 similarity score).

Every joint in the reference counts toward the denominator. A joint within
`tolerance` degrees earns full credit; beyond that credit falls off linearly
and reaches zero at twice the tolerance. A joint the detector could not
measure earns nothing.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pose_coach.processing.config import DEFAULT_TOLERANCE_DEGREES, load_mapping_file
from pose_coach.processing.feedback.generator import describe_score, generate_pose_feedback
from pose_coach.processing.metrics.geometry import check_tolerance, round_half_up
from pose_coach.processing.models import ComparisonResult, JointAngles, PoseFrame, ReferencePose

AnglesLike = Mapping[Any, Any]


def _as_angles(value: AnglesLike | ReferencePose) -> JointAngles:
    if isinstance(value, ReferencePose):
        return value.angles
    if isinstance(value, JointAngles):
        return value
    return JointAngles(value)


def joint_credit(difference: float, tolerance: float = DEFAULT_TOLERANCE_DEGREES) -> float:
    """Credit in [0, 1] for an absolute angle difference."""
    tol = check_tolerance(tolerance)
    diff = abs(float(difference))
    if diff <= tol:
        return 1.0
    return max(0.0, 1.0 - (diff - tol) / tol)


def score_joints(
    detected: AnglesLike,
    reference: AnglesLike | ReferencePose,
    tolerance_degrees: float = DEFAULT_TOLERANCE_DEGREES,
) -> List[Dict[str, object]]:
    """Per-joint comparison records, in reference order.

    Status:
        - "match" when within tolerance
        - "partial" when some credit remains
        - "miss" when credit is zero
        - "missing" when the joint was not detected
    """
    tol = check_tolerance(tolerance_degrees)
    det = _as_angles(detected)
    ref = _as_angles(reference)

    rows: List[Dict[str, object]] = []
    for joint, ref_angle in ref.items():
        det_angle: Optional[float] = det.get(joint)
        if det_angle is None:
            rows.append(
                {
                    "joint": joint.value,
                    "detected": None,
                    "reference": ref_angle,
                    "difference": None,
                    "credit": 0.0,
                    "status": "missing",
                }
            )
            continue
        difference = det_angle - ref_angle
        credit = joint_credit(difference, tol)
        if abs(difference) <= tol:
            status = "match"
        elif credit > 0.0:
            status = "partial"
        else:
            status = "miss"
        rows.append(
            {
                "joint": joint.value,
                "detected": det_angle,
                "reference": ref_angle,
                "difference": difference,
                "credit": credit,
                "status": status,
            }
        )
    return rows


def _score_from_rows(rows: List[Dict[str, object]]) -> int:
    if not rows:
        return 0
    total = math.fsum(float(row["credit"]) for row in rows)
    return round_half_up(100.0 * total / len(rows))


def compare_pose_angles(
    detected: AnglesLike,
    reference: AnglesLike | ReferencePose,
    tolerance_degrees: float = DEFAULT_TOLERANCE_DEGREES,
) -> int:
    """Similarity score (0-100) of detected angles against a reference.

    An empty reference scores 0 rather than claiming a perfect match.
    """
    return _score_from_rows(score_joints(detected, reference, tolerance_degrees))


def compare_to_reference(
    detected: AnglesLike,
    reference: AnglesLike | ReferencePose,
    tolerance_degrees: float = DEFAULT_TOLERANCE_DEGREES,
    *,
    rank_by_severity: bool = False,
) -> ComparisonResult:
    """Score, per-joint detail, correction feedback and a spoken cue in one call."""
    rows = score_joints(detected, reference, tolerance_degrees)
    score = _score_from_rows(rows)
    feedback = generate_pose_feedback(
        detected, _as_angles(reference), tolerance_degrees, rank_by_severity=rank_by_severity
    )
    verdict = describe_score(score)
    return ComparisonResult(
        score=score,
        feedback=feedback,
        joints=rows,
        cue=str(verdict["cue"]),
        is_correct=bool(verdict["is_correct"]),
    )


def compare_frame(
    frame: PoseFrame,
    reference: AnglesLike | ReferencePose,
    tolerance_degrees: float = DEFAULT_TOLERANCE_DEGREES,
    *,
    rank_by_severity: bool = False,
) -> ComparisonResult:
    """Compare a processed frame; corrections are withheld when the person is not in frame."""
    result = compare_to_reference(frame.angles, reference, tolerance_degrees, rank_by_severity=rank_by_severity)
    if frame.is_person_detected:
        return result
    verdict = describe_score(0)
    return ComparisonResult(
        score=result.score,
        feedback=[],
        joints=result.joints,
        cue=str(verdict["cue"]),
        is_correct=False,
    )


def load_reference_pose(source: Mapping[str, Any] | str | Path, *, name: Optional[str] = None) -> ReferencePose:
    """Load a reference pose from a mapping or a JSON/TOML file."""
    if isinstance(source, Mapping):
        return ReferencePose.from_mapping(source, name=name)
    path = Path(source)
    payload = load_mapping_file(path)
    return ReferencePose.from_mapping(payload, name=name or (None if "name" in payload else path.stem))


__all__ = [
    "joint_credit",
    "score_joints",
    "compare_pose_angles",
    "compare_to_reference",
    "compare_frame",
    "load_reference_pose",
]
