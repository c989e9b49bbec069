"""Keypoint and joint vocabulary shared by the processing modules.

The 17 keypoints follow the MoveNet/PoseNet ordering; each member's integer
value is also its slot in a `LandmarkSet`.
"""

from __future__ import annotations

import re
from enum import Enum, IntEnum
from typing import Any, Dict, Tuple


class Keypoint(IntEnum):
    NOSE = 0
    LEFT_EYE = 1
    RIGHT_EYE = 2
    LEFT_EAR = 3
    RIGHT_EAR = 4
    LEFT_SHOULDER = 5
    RIGHT_SHOULDER = 6
    LEFT_ELBOW = 7
    RIGHT_ELBOW = 8
    LEFT_WRIST = 9
    RIGHT_WRIST = 10
    LEFT_HIP = 11
    RIGHT_HIP = 12
    LEFT_KNEE = 13
    RIGHT_KNEE = 14
    LEFT_ANKLE = 15
    RIGHT_ANKLE = 16

    @property
    def label(self) -> str:
        """Wire name used by pose models, e.g. ``left_shoulder``."""
        return self.name.lower()

    @classmethod
    def parse(cls, value: Any) -> "Keypoint":
        """Resolve a keypoint from its label, member name, or index."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Unknown keypoint: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError as exc:
                raise ValueError(f"Unknown keypoint index: {value!r}") from exc
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_").replace(" ", "_")
            if key in cls.__members__:
                return cls.__members__[key]
        raise ValueError(f"Unknown keypoint: {value!r}")


KEYPOINT_COUNT = len(Keypoint)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class Joint(str, Enum):
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    SPINE = "spine"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"
    NECK = "neck"

    @property
    def display_name(self) -> str:
        """Human-readable name, e.g. ``Left knee``."""
        return self.value.replace("_", " ").capitalize()

    @classmethod
    def parse(cls, value: Any) -> "Joint":
        """Resolve a joint from snake_case (``left_knee``) or camelCase (``leftKnee``)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = _CAMEL_BOUNDARY.sub("_", value.strip()).lower().replace("-", "_").replace(" ", "_")
            try:
                return cls(text)
            except ValueError:
                pass
        raise ValueError(f"Unknown joint: {value!r}")


JOINT_ORDER: Tuple[Joint, ...] = tuple(Joint)


class BodyRegion(str, Enum):
    HEAD = "head"
    TORSO = "torso"
    ARMS = "arms"
    LEGS = "legs"

    @classmethod
    def parse(cls, value: Any) -> "BodyRegion":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            valid = ", ".join(region.value for region in cls)
            raise ValueError(f"Unknown body region {value!r}; expected one of: {valid}.") from exc


# Points that must be usable for the subject to count as "in frame".
CRITICAL_KEYPOINTS: Tuple[Keypoint, ...] = (
    Keypoint.NOSE,
    Keypoint.LEFT_SHOULDER,
    Keypoint.RIGHT_SHOULDER,
    Keypoint.LEFT_HIP,
    Keypoint.RIGHT_HIP,
    Keypoint.LEFT_KNEE,
    Keypoint.RIGHT_KNEE,
)

REGION_KEYPOINTS: Dict[BodyRegion, Tuple[Keypoint, ...]] = {
    BodyRegion.HEAD: (Keypoint.NOSE, Keypoint.LEFT_EYE, Keypoint.RIGHT_EYE),
    BodyRegion.TORSO: (
        Keypoint.LEFT_SHOULDER,
        Keypoint.RIGHT_SHOULDER,
        Keypoint.LEFT_HIP,
        Keypoint.RIGHT_HIP,
    ),
    BodyRegion.ARMS: (
        Keypoint.LEFT_ELBOW,
        Keypoint.RIGHT_ELBOW,
        Keypoint.LEFT_WRIST,
        Keypoint.RIGHT_WRIST,
    ),
    BodyRegion.LEGS: (
        Keypoint.LEFT_KNEE,
        Keypoint.RIGHT_KNEE,
        Keypoint.LEFT_ANKLE,
        Keypoint.RIGHT_ANKLE,
    ),
}


__all__ = [
    "Keypoint",
    "KEYPOINT_COUNT",
    "Joint",
    "JOINT_ORDER",
    "BodyRegion",
    "CRITICAL_KEYPOINTS",
    "REGION_KEYPOINTS",
]
