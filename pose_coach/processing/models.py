from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np

from pose_coach.processing.keypoints import JOINT_ORDER, KEYPOINT_COUNT, Joint, Keypoint

__all__ = [
    "LandmarkValidationError",
    "Landmark",
    "LandmarkSet",
    "JointAngles",
    "ReferencePose",
    "PoseFrame",
    "ComparisonResult",
    "SessionStats",
]


class LandmarkValidationError(ValueError):
    """Raised when an external landmark record cannot be normalised safely."""


def _coerce_number(value: Any, *, field: str, allow_empty: bool = False) -> Optional[float]:
    if value is None:
        if allow_empty:
            return None
        raise LandmarkValidationError(f"{field} is required.")
    if isinstance(value, bool):
        raise LandmarkValidationError(f"{field} must be a number; received {value!r}.")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise LandmarkValidationError(f"{field} must be a number; received {value!r}.") from exc


@dataclass(frozen=True)
class Landmark:
    """One detected keypoint in normalized image coordinates."""

    name: Keypoint
    x: float
    y: float
    confidence: float
    is_visible: bool = True
    z: Optional[float] = None

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "Landmark":
        """
        Build a landmark from an external record.

        Accepts `is_visible`/`isVisible` and `confidence`/`score` spellings so
        pose-model keypoints can be passed through without renaming.
        """
        if not isinstance(record, Mapping):
            raise LandmarkValidationError(f"Landmark record must be a mapping; received {record!r}.")
        try:
            name = Keypoint.parse(record.get("name"))
        except ValueError as exc:
            raise LandmarkValidationError(str(exc)) from exc

        confidence = _coerce_number(record.get("confidence", record.get("score")), field=f"{name.label}.confidence")
        # Non-finite values are left for input sanitising to discard.
        if math.isfinite(confidence) and not 0.0 <= confidence <= 1.0:
            raise LandmarkValidationError(f"{name.label}.confidence must be within [0, 1]; received {confidence!r}.")
        visible = record.get("is_visible", record.get("isVisible", True))
        return cls(
            name=name,
            x=_coerce_number(record.get("x"), field=f"{name.label}.x"),
            y=_coerce_number(record.get("y"), field=f"{name.label}.y"),
            z=_coerce_number(record.get("z"), field=f"{name.label}.z", allow_empty=True),
            confidence=confidence,
            is_visible=bool(visible),
        )

    def is_finite(self) -> bool:
        values = [self.x, self.y, self.confidence]
        if self.z is not None:
            values.append(self.z)
        return all(math.isfinite(v) for v in values)

    def is_reliable(self, min_confidence: float) -> bool:
        """True when visible and strictly above the confidence floor."""
        return bool(self.is_visible) and self.confidence > min_confidence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name.label,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "confidence": self.confidence,
            "is_visible": self.is_visible,
        }


LandmarkInput = Union[Landmark, Mapping[str, Any]]


class LandmarkSet:
    """A frame's landmarks stored in fixed slots indexed by `Keypoint`."""

    __slots__ = ("_slots",)

    def __init__(self, landmarks: Iterable[LandmarkInput] = ()) -> None:
        slots: List[Optional[Landmark]] = [None] * KEYPOINT_COUNT
        for item in landmarks:
            landmark = item if isinstance(item, Landmark) else Landmark.from_mapping(item)
            idx = int(landmark.name)
            if slots[idx] is not None:
                raise LandmarkValidationError(f"Duplicate landmark for keypoint {landmark.name.label!r}.")
            slots[idx] = landmark
        self._slots: Tuple[Optional[Landmark], ...] = tuple(slots)

    def __iter__(self) -> Iterator[Landmark]:
        return (lm for lm in self._slots if lm is not None)

    def __len__(self) -> int:
        return sum(1 for lm in self._slots if lm is not None)

    def __contains__(self, keypoint: object) -> bool:
        try:
            return self._slots[int(Keypoint.parse(keypoint))] is not None
        except ValueError:
            return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LandmarkSet):
            return NotImplemented
        return self._slots == other._slots

    def __hash__(self) -> int:
        return hash(self._slots)

    def __repr__(self) -> str:
        names = ", ".join(lm.name.label for lm in self)
        return f"LandmarkSet([{names}])"

    def get(self, keypoint: Any) -> Optional[Landmark]:
        return self._slots[int(Keypoint.parse(keypoint))]

    def reliable(self, keypoint: Keypoint, min_confidence: float) -> Optional[Landmark]:
        """Return the landmark only when it is visible and above the floor."""
        landmark = self._slots[int(keypoint)]
        if landmark is None or not landmark.is_reliable(min_confidence):
            return None
        return landmark

    def to_array(self) -> np.ndarray:
        """Return a (17, 4) array of (x, y, z, confidence); NaN marks absent slots."""
        out = np.full((KEYPOINT_COUNT, 4), np.nan, dtype=float)
        for lm in self:
            out[int(lm.name)] = (lm.x, lm.y, np.nan if lm.z is None else lm.z, lm.confidence)
        return out

    def to_list(self) -> List[Dict[str, Any]]:
        return [lm.to_dict() for lm in self]


class JointAngles(Mapping[Joint, float]):
    """
    Partial mapping of joint -> angle in degrees.

    Absent joints are simply not keys, so `angles.get(Joint.SPINE)` is `None`
    when the spine could not be measured, while a measured 0.0 is kept.
    Keys may be given as `Joint` members or as snake/camelCase strings.
    Insertion order is preserved.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[Any, Any]] = None) -> None:
        parsed: Dict[Joint, float] = {}
        for key, raw in (values or {}).items():
            joint = Joint.parse(key)
            if raw is None:
                continue
            if isinstance(raw, bool):
                raise ValueError(f"Angle for {joint.value} must be a number; received {raw!r}.")
            value = float(raw)
            if not math.isfinite(value):
                raise ValueError(f"Angle for {joint.value} must be finite; received {raw!r}.")
            parsed[joint] = value
        self._values = parsed

    def __getitem__(self, key: Any) -> float:
        return self._values[Joint.parse(key)]

    def __contains__(self, key: object) -> bool:
        try:
            return Joint.parse(key) in self._values
        except ValueError:
            return False

    def __iter__(self) -> Iterator[Joint]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        body = ", ".join(f"{joint.value}={value:g}" for joint, value in self._values.items())
        return f"JointAngles({body})"

    def __eq__(self, other: object) -> bool:
        """Compare by joint and value; plain mappings are parsed first, so snake/camelCase keys match."""
        if isinstance(other, JointAngles):
            return self._values == other._values
        if not isinstance(other, Mapping):
            return NotImplemented
        try:
            parsed = JointAngles(other)
        except (TypeError, ValueError):
            return False
        return self._values == parsed._values

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def presence_mask(self) -> np.ndarray:
        """Boolean mask over `JOINT_ORDER`; True where the joint was measured."""
        return np.array([joint in self._values for joint in JOINT_ORDER], dtype=bool)

    def to_dict(self) -> Dict[str, float]:
        return {joint.value: value for joint, value in self._values.items()}


@dataclass(frozen=True)
class ReferencePose:
    """An externally supplied target posture."""

    name: str
    angles: JointAngles
    description: str = ""

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], *, name: Optional[str] = None) -> "ReferencePose":
        """
        Accept either `{"name": ..., "angles": {...}}` or a bare joint -> angle mapping.
        """
        angles_raw = payload.get("angles")
        if isinstance(angles_raw, Mapping):
            label = name or str(payload.get("name") or "reference")
            return cls(name=label, angles=JointAngles(angles_raw), description=str(payload.get("description") or ""))
        return cls(name=name or "reference", angles=JointAngles(payload))


@dataclass(frozen=True)
class PoseFrame:
    """Packaged, read-only result of processing one frame."""

    landmarks: LandmarkSet
    angles: JointAngles
    confidence: float
    is_person_detected: bool
    frame_number: int
    timestamp: float
    session_id: str = ""


@dataclass(frozen=True)
class ComparisonResult:
    score: int
    feedback: List[str] = field(default_factory=list)
    joints: List[Dict[str, Any]] = field(default_factory=list)
    cue: str = ""
    is_correct: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "feedback": list(self.feedback),
            "joints": [dict(entry) for entry in self.joints],
            "cue": self.cue,
            "is_correct": self.is_correct,
        }


@dataclass(frozen=True)
class SessionStats:
    total_frames: int
    frames_with_person: int
    avg_confidence: float
    avg_angles: Dict[str, float]
    duration_ms: float
    avg_fps: float
