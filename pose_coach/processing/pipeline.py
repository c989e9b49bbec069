"""Per-frame orchestration: validate, smooth, measure, and package landmarks."""

from __future__ import annotations

import threading
import time
import uuid
from typing import Iterable, Iterator, Optional

from pose_coach.processing.config import PROCESSING_LOGGER as logger, PoseConfig, get_config, validate_config_values
from pose_coach.processing.metrics.angles import calculate_joint_angles
from pose_coach.processing.models import LandmarkInput, PoseFrame
from pose_coach.processing.utils.filtering import LandmarkSmoother, apply_smoothing
from pose_coach.processing.utils.validation import is_person_fully_visible, pose_confidence, sanitize_landmarks


def _new_session_id() -> str:
    return uuid.uuid4().hex


class FramePipeline:
    """Turns raw landmark frames from one detection session into `PoseFrame`s.

    Each pipeline owns its smoother state, so concurrent sessions must use
    separate instances. Frames have to be fed in arrival order: the EMA is
    order dependent. Comparison against a reference is left to the caller.
    """

    def __init__(
        self,
        config: Optional[PoseConfig] = None,
        *,
        smoother: Optional[LandmarkSmoother] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.config = config or get_config()
        validate_config_values(self.config)
        self.smoother = smoother or LandmarkSmoother(self.config.smoothing_factor)
        self._session_id = session_id or _new_session_id()
        self._last_frame_number: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def last_frame_number(self) -> Optional[int]:
        return self._last_frame_number

    def _next_frame_number(self, requested: Optional[int]) -> int:
        if requested is None:
            return 0 if self._last_frame_number is None else self._last_frame_number + 1
        number = int(requested)
        if self._last_frame_number is not None and number <= self._last_frame_number:
            raise ValueError(
                f"Frame {number} arrived after frame {self._last_frame_number}; "
                "frames must be processed in order (call reset() to start a new session)."
            )
        return number

    def _timestamp_for(self, frame_number: int) -> float:
        fps = float(self.config.target_fps)
        if fps > 0:
            return frame_number * (1000.0 / fps)
        return time.time() * 1000.0

    def process_frame(
        self,
        landmarks: Iterable[LandmarkInput],
        *,
        timestamp_ms: Optional[float] = None,
        frame_number: Optional[int] = None,
    ) -> PoseFrame:
        """Process one frame of raw landmarks.

        When `timestamp_ms` is omitted it is derived from the frame number and
        the configured target frame rate.
        """
        with self._lock:
            number = self._next_frame_number(frame_number)
            clean, dropped = sanitize_landmarks(landmarks)
            if dropped:
                logger.debug("Frame %s: dropped %d invalid landmark(s).", number, len(dropped))

            smoothed = apply_smoothing(clean, self.config, self.smoother)
            min_confidence = self.config.min_confidence
            angles = calculate_joint_angles(smoothed, min_confidence=min_confidence)
            frame = PoseFrame(
                landmarks=smoothed,
                angles=angles,
                confidence=pose_confidence(smoothed),
                is_person_detected=is_person_fully_visible(smoothed, min_confidence=min_confidence),
                frame_number=number,
                timestamp=float(timestamp_ms) if timestamp_ms is not None else self._timestamp_for(number),
                session_id=self._session_id,
            )
            self._last_frame_number = number

        logger.debug(
            "Frame %s: %d landmarks, %d angles, confidence %.2f, person=%s",
            frame.frame_number,
            len(frame.landmarks),
            len(frame.angles),
            frame.confidence,
            frame.is_person_detected,
        )
        return frame

    def process_frames(self, frames: Iterable[Iterable[LandmarkInput]]) -> Iterator[PoseFrame]:
        """Process frames lazily, in order."""
        for landmarks in frames:
            yield self.process_frame(landmarks)

    def reset(self, session_id: Optional[str] = None) -> None:
        """Start a new detection session: clear smoothing history and frame numbering."""
        with self._lock:
            self.smoother.reset()
            self._last_frame_number = None
            self._session_id = session_id or _new_session_id()
        logger.info("Pose session reset; new session %s", self._session_id)


__all__ = ["FramePipeline"]
