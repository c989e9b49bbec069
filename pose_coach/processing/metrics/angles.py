"""Joint angle computations from a smoothed landmark set."""

from __future__ import annotations

import math
from typing import Dict, Iterable, Optional, Sequence, Tuple

import pandas as pd

from pose_coach.processing.config import DEFAULT_MIN_CONFIDENCE, PROCESSING_LOGGER as logger
from pose_coach.processing.keypoints import Joint, Keypoint
from pose_coach.processing.metrics.geometry import angle_between, midpoint, round_half_up
from pose_coach.processing.models import JointAngles, LandmarkSet, PoseFrame

K = Keypoint

# (proximal, vertex, distal) for joints measured directly between three landmarks.
# Wrists and ankles have no third point in the 17-keypoint vocabulary, so they
# map to None and are never reported.
JOINT_DEFINITIONS: Dict[Joint, Optional[Tuple[Keypoint, Keypoint, Keypoint]]] = {
    Joint.LEFT_SHOULDER: (K.LEFT_ELBOW, K.LEFT_SHOULDER, K.LEFT_HIP),
    Joint.RIGHT_SHOULDER: (K.RIGHT_ELBOW, K.RIGHT_SHOULDER, K.RIGHT_HIP),
    Joint.LEFT_ELBOW: (K.LEFT_SHOULDER, K.LEFT_ELBOW, K.LEFT_WRIST),
    Joint.RIGHT_ELBOW: (K.RIGHT_SHOULDER, K.RIGHT_ELBOW, K.RIGHT_WRIST),
    Joint.LEFT_WRIST: None,
    Joint.RIGHT_WRIST: None,
    Joint.LEFT_HIP: (K.LEFT_SHOULDER, K.LEFT_HIP, K.LEFT_KNEE),
    Joint.RIGHT_HIP: (K.RIGHT_SHOULDER, K.RIGHT_HIP, K.RIGHT_KNEE),
    Joint.LEFT_KNEE: (K.LEFT_HIP, K.LEFT_KNEE, K.LEFT_ANKLE),
    Joint.RIGHT_KNEE: (K.RIGHT_HIP, K.RIGHT_KNEE, K.RIGHT_ANKLE),
    Joint.LEFT_ANKLE: None,
    Joint.RIGHT_ANKLE: None,
}


# Spine and neck are measured at the shoulder midpoint against true vertical.
def _spine_angle(landmarks: LandmarkSet, min_confidence: float) -> Optional[float]:
    points = [
        landmarks.reliable(k, min_confidence)
        for k in (K.LEFT_SHOULDER, K.RIGHT_SHOULDER, K.LEFT_HIP, K.RIGHT_HIP)
    ]
    if any(p is None for p in points):
        return None
    left_shoulder, right_shoulder, left_hip, right_hip = points
    shoulder_mid = midpoint(left_shoulder, right_shoulder)
    hip_mid = midpoint(left_hip, right_hip)
    # Image y grows downwards, so (x, 0) sits straight above the shoulders.
    vertical_ref = (shoulder_mid[0], 0.0)
    return angle_between(vertical_ref, shoulder_mid, hip_mid)


def _neck_angle(landmarks: LandmarkSet, min_confidence: float) -> Optional[float]:
    points = [landmarks.reliable(k, min_confidence) for k in (K.NOSE, K.LEFT_SHOULDER, K.RIGHT_SHOULDER)]
    if any(p is None for p in points):
        return None
    nose, left_shoulder, right_shoulder = points
    shoulder_mid = midpoint(left_shoulder, right_shoulder)
    vertical_ref = (shoulder_mid[0], 0.0)
    return angle_between(vertical_ref, shoulder_mid, nose)


def _triple_angle(
    landmarks: LandmarkSet, triple: Tuple[Keypoint, Keypoint, Keypoint], min_confidence: float
) -> Optional[float]:
    points = [landmarks.reliable(k, min_confidence) for k in triple]
    if any(p is None for p in points):
        return None
    return angle_between(*points)


def calculate_joint_angles(
    landmarks: LandmarkSet | Iterable,
    *,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    round_degrees: bool = True,
) -> JointAngles:
    """Compute every measurable joint angle for one frame.

    A joint is reported only when all landmarks it depends on are present,
    visible and above `min_confidence`; otherwise its key is omitted. Angles
    are rounded to whole degrees unless `round_degrees` is False.
    """
    lm_set = landmarks if isinstance(landmarks, LandmarkSet) else LandmarkSet(landmarks)
    floor = float(min_confidence)

    raw: Dict[Joint, Optional[float]] = {}
    for joint in Joint:
        if joint is Joint.SPINE:
            raw[joint] = _spine_angle(lm_set, floor)
        elif joint is Joint.NECK:
            raw[joint] = _neck_angle(lm_set, floor)
        else:
            triple = JOINT_DEFINITIONS.get(joint)
            raw[joint] = _triple_angle(lm_set, triple, floor) if triple else None

    results: Dict[Joint, float] = {}
    for joint, value in raw.items():
        if value is None:
            continue
        if not math.isfinite(value):
            logger.warning("Dropping non-finite %s angle; check landmarks for NaN input.", joint.value)
            continue
        results[joint] = float(round_half_up(value)) if round_degrees else float(value)
    return JointAngles(results)


def compute_trajectory_angles(frames: Sequence[PoseFrame]) -> pd.DataFrame:
    """Flatten per-frame angles into a long-form DataFrame.

    Output columns:
        frame, timestamp_ms, angle_name, value_degrees
    """
    records: list[dict[str, object]] = []
    for frame in frames:
        for joint, value in frame.angles.items():
            records.append(
                {
                    "frame": int(frame.frame_number),
                    "timestamp_ms": float(frame.timestamp),
                    "angle_name": joint.value,
                    "value_degrees": float(value),
                }
            )

    df = pd.DataFrame.from_records(records, columns=["frame", "timestamp_ms", "angle_name", "value_degrees"])
    if df.empty:
        return df
    return df.sort_values(["frame", "angle_name"]).reset_index(drop=True)


__all__ = [
    "JOINT_DEFINITIONS",
    "calculate_joint_angles",
    "compute_trajectory_angles",
]
