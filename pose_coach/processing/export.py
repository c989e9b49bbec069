"""Serialisable views of processed frames and per-session summaries.

Producing these structures is the package's job; writing them to a file or a
remote store is left to the caller (see `pose_coach.cli` for a JSON/CSV writer).
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from pose_coach.processing.keypoints import JOINT_ORDER
from pose_coach.processing.models import PoseFrame, SessionStats

EXPORT_COLUMNS = ["session_id", "frame_number", "timestamp", "confidence", "is_person_detected"]


def prepare_pose_data_for_export(frame: PoseFrame, session_id: Optional[str] = None) -> Dict[str, Any]:
    """Flatten a frame into a plain dict ready for JSON serialisation."""
    return {
        "session_id": session_id or frame.session_id,
        "timestamp": frame.timestamp,
        "landmarks": [
            {"name": lm.name.label, "x": lm.x, "y": lm.y, "z": lm.z, "confidence": lm.confidence}
            for lm in frame.landmarks
        ],
        "angles": frame.angles.to_dict(),
        "frame_number": frame.frame_number,
        "confidence": frame.confidence,
    }


def batch_export_pose_data(frames: Sequence[PoseFrame], session_id: Optional[str] = None) -> List[Dict[str, Any]]:
    return [prepare_pose_data_for_export(frame, session_id) for frame in frames]


def frames_to_dataframe(frames: Sequence[PoseFrame]) -> pd.DataFrame:
    """One row per frame with the summary fields and one column per joint (NaN when absent)."""
    joint_columns = [joint.value for joint in JOINT_ORDER]
    records: list[dict[str, object]] = []
    for frame in frames:
        row: dict[str, object] = {
            "session_id": frame.session_id,
            "frame_number": int(frame.frame_number),
            "timestamp": float(frame.timestamp),
            "confidence": float(frame.confidence),
            "is_person_detected": bool(frame.is_person_detected),
        }
        angles = frame.angles.to_dict()
        for column in joint_columns:
            row[column] = angles.get(column, math.nan)
        records.append(row)
    return pd.DataFrame.from_records(records, columns=EXPORT_COLUMNS + joint_columns)


def summarize_session(frames: Sequence[PoseFrame]) -> SessionStats:
    """Aggregate frame-level results into session statistics.

    Average angles only include frames where the joint was measured; joints
    never measured are left out.
    """
    if not frames:
        return SessionStats(
            total_frames=0,
            frames_with_person=0,
            avg_confidence=0.0,
            avg_angles={},
            duration_ms=0.0,
            avg_fps=0.0,
        )

    df = frames_to_dataframe(frames)
    joint_columns = [joint.value for joint in JOINT_ORDER]
    means = df[joint_columns].mean(skipna=True)
    avg_angles = {name: round(float(value), 2) for name, value in means.items() if pd.notna(value)}

    duration = float(df["timestamp"].max() - df["timestamp"].min())
    avg_fps = (len(df) - 1) * 1000.0 / duration if duration > 0 else 0.0

    return SessionStats(
        total_frames=int(len(df)),
        frames_with_person=int(df["is_person_detected"].sum()),
        avg_confidence=float(df["confidence"].mean()),
        avg_angles=avg_angles,
        duration_ms=duration,
        avg_fps=float(avg_fps),
    )


__all__ = [
    "prepare_pose_data_for_export",
    "batch_export_pose_data",
    "frames_to_dataframe",
    "summarize_session",
]
