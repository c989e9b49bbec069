from __future__ import annotations

from typing import Any, Dict, List

import pytest

from pose_coach.processing.config import get_config
from pose_coach.processing.models import LandmarkSet

# Upright subject, arms hanging, facing the camera (image y grows downwards).
STANDING_POSE = {
    "nose": (0.50, 0.10),
    "left_eye": (0.48, 0.08),
    "right_eye": (0.52, 0.08),
    "left_ear": (0.46, 0.09),
    "right_ear": (0.54, 0.09),
    "left_shoulder": (0.40, 0.30),
    "right_shoulder": (0.60, 0.30),
    "left_elbow": (0.40, 0.45),
    "right_elbow": (0.60, 0.45),
    "left_wrist": (0.40, 0.60),
    "right_wrist": (0.60, 0.60),
    "left_hip": (0.40, 0.60),
    "right_hip": (0.60, 0.60),
    "left_knee": (0.40, 0.80),
    "right_knee": (0.60, 0.80),
    "left_ankle": (0.40, 1.00),
    "right_ankle": (0.60, 1.00),
}

ENV_KEYS = (
    "MIN_CONFIDENCE",
    "ENABLE_SMOOTHING",
    "SMOOTHING_FACTOR",
    "TARGET_FPS",
    "TOLERANCE_DEGREES",
    "CONFIG",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(f"POSE_COACH_{key}", raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def standing_records() -> List[Dict[str, Any]]:
    return [
        {"name": name, "x": x, "y": y, "confidence": 0.9, "is_visible": True}
        for name, (x, y) in STANDING_POSE.items()
    ]


@pytest.fixture
def standing_set(standing_records: List[Dict[str, Any]]) -> LandmarkSet:
    return LandmarkSet(standing_records)
