"""Correction cues for a detected pose versus a reference pose.

Each out-of-tolerance joint produces one short, speakable instruction such as
``"Left knee: Increase angle by ~30°"``. Joints the detector could not measure
are skipped: there is nothing to correct without a measurement.

Ordering:
  - Default: the reference pose's own joint order, so a reference author
    controls which cue is spoken first.
  - `rank_by_severity=True`: largest deviation first (stable for ties).
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pose_coach.processing.config import DEFAULT_TOLERANCE_DEGREES
from pose_coach.processing.metrics.geometry import check_tolerance, round_half_up
from pose_coach.processing.models import JointAngles

# (minimum score, cue, counts as correct form); first matching band wins.
SCORE_CUES: tuple[tuple[int, str, bool], ...] = (
    (90, "Perfect form! Excellent!", True),
    (80, "Good posture!", True),
    (70, "Almost there, slight adjustment needed", False),
    (60, "Adjust your position", False),
    (0, "Position yourself in frame", False),
)


def format_joint_cue(joint_name: str, difference: float) -> str:
    """Render the instruction for a signed (detected - reference) difference."""
    verb = "Decrease" if difference > 0 else "Increase"
    return f"{joint_name}: {verb} angle by ~{round_half_up(abs(difference))}°"


def generate_pose_feedback(
    detected: Mapping[Any, Any],
    reference: Mapping[Any, Any],
    tolerance_degrees: float = DEFAULT_TOLERANCE_DEGREES,
    *,
    rank_by_severity: bool = False,
) -> List[str]:
    """Return one instruction per reference joint that is off by more than the tolerance."""
    det = detected if isinstance(detected, JointAngles) else JointAngles(detected)
    ref = reference if isinstance(reference, JointAngles) else JointAngles(reference)
    tolerance = check_tolerance(tolerance_degrees)

    flagged: list[tuple[float, str]] = []
    for joint, ref_angle in ref.items():
        det_angle = det.get(joint)
        if det_angle is None:
            continue
        difference = det_angle - ref_angle
        if abs(difference) > tolerance:
            flagged.append((abs(difference), format_joint_cue(joint.display_name, difference)))

    if rank_by_severity:
        flagged.sort(key=lambda item: item[0], reverse=True)
    return [text for _magnitude, text in flagged]


def describe_score(score: float) -> Dict[str, object]:
    """Map a similarity score to a spoken cue and a pass/fail verdict."""
    for minimum, cue, is_correct in SCORE_CUES:
        if score >= minimum:
            return {"score": score, "cue": cue, "is_correct": is_correct}
    _minimum, cue, is_correct = SCORE_CUES[-1]
    return {"score": score, "cue": cue, "is_correct": is_correct}


__all__ = ["SCORE_CUES", "format_joint_cue", "generate_pose_feedback", "describe_score"]
