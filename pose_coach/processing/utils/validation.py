"""Pose data quality validation utilities."""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from pose_coach.processing.config import DEFAULT_MIN_CONFIDENCE, PROCESSING_LOGGER as logger
from pose_coach.processing.keypoints import CRITICAL_KEYPOINTS, REGION_KEYPOINTS, BodyRegion, Keypoint
from pose_coach.processing.models import Landmark, LandmarkInput, LandmarkSet

FULL_VISIBILITY_RATIO = 0.7
REGION_VISIBILITY_RATIO = 0.5


def _as_set(landmarks: LandmarkSet | Iterable[LandmarkInput]) -> LandmarkSet:
    return landmarks if isinstance(landmarks, LandmarkSet) else LandmarkSet(landmarks)


def _count_reliable(landmarks: LandmarkSet, keypoints: Sequence[Keypoint], min_confidence: float) -> int:
    return sum(1 for k in keypoints if landmarks.reliable(k, min_confidence) is not None)


def sanitize_landmarks(records: Iterable[LandmarkInput]) -> Tuple[LandmarkSet, List[str]]:
    """Validate a frame at the input boundary.

    Landmarks with NaN/inf coordinates or confidence are discarded so they can
    never reach the smoother. Returns the clean set and the dropped labels.
    """
    kept: List[Landmark] = []
    dropped: List[str] = []
    for item in records:
        landmark = item if isinstance(item, Landmark) else Landmark.from_mapping(item)
        if landmark.is_finite():
            kept.append(landmark)
        else:
            dropped.append(landmark.name.label)
    if dropped:
        logger.warning("Discarded non-finite landmarks: %s", ", ".join(dropped))
    return LandmarkSet(kept), dropped


def pose_confidence(landmarks: LandmarkSet | Iterable[LandmarkInput]) -> float:
    """Mean confidence over visible landmarks; 0.0 when none are visible."""
    visible = [lm.confidence for lm in _as_set(landmarks) if lm.is_visible]
    if not visible:
        return 0.0
    return float(math.fsum(visible) / len(visible))


def is_person_fully_visible(
    landmarks: LandmarkSet | Iterable[LandmarkInput],
    *,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> bool:
    """True when at least 70% of the critical points (5 of 7) are usable."""
    lm_set = _as_set(landmarks)
    usable = _count_reliable(lm_set, CRITICAL_KEYPOINTS, min_confidence)
    return usable >= len(CRITICAL_KEYPOINTS) * FULL_VISIBILITY_RATIO


def is_body_part_visible(
    landmarks: LandmarkSet | Iterable[LandmarkInput],
    region: BodyRegion | str,
    *,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> bool:
    """True when at least half of the region's points are usable."""
    keypoints = REGION_KEYPOINTS[BodyRegion.parse(region)]
    usable = _count_reliable(_as_set(landmarks), keypoints, min_confidence)
    return usable >= len(keypoints) * REGION_VISIBILITY_RATIO


def assess_pose_quality(
    landmarks: LandmarkSet | Iterable[LandmarkInput],
    *,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> Dict[str, Any]:
    """Summarise confidence and visibility verdicts with readable issues."""
    lm_set = _as_set(landmarks)
    confidence = pose_confidence(lm_set)
    fully_visible = is_person_fully_visible(lm_set, min_confidence=min_confidence)
    regions = {
        region.value: is_body_part_visible(lm_set, region, min_confidence=min_confidence) for region in BodyRegion
    }

    issues: List[str] = []
    if len(lm_set) == 0:
        issues.append("No landmarks detected.")
    if not fully_visible:
        missing = [k.label for k in CRITICAL_KEYPOINTS if lm_set.reliable(k, min_confidence) is None]
        issues.append(f"Person not fully in frame (unusable: {', '.join(missing)}).")
    for region, ok in regions.items():
        if not ok:
            issues.append(f"{region.capitalize()} not visible.")

    return {
        "confidence": round(confidence, 4),
        "is_person_fully_visible": fully_visible,
        "regions": regions,
        "issues": issues,
    }


__all__ = [
    "sanitize_landmarks",
    "pose_confidence",
    "is_person_fully_visible",
    "is_body_part_visible",
    "assess_pose_quality",
]
