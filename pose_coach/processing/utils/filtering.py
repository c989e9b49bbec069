"""Filtering utilities for smoothing live pose landmarks.

An exponential moving average per keypoint suppresses frame-to-frame jitter
while staying causal, so it can run on each frame as it arrives.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from pose_coach.processing.config import DEFAULT_SMOOTHING_FACTOR, PROCESSING_LOGGER as logger, PoseConfig
from pose_coach.processing.keypoints import KEYPOINT_COUNT
from pose_coach.processing.models import Landmark, LandmarkSet


@dataclass
class SmootherState:
    """Last emitted (smoothed) coordinates per keypoint slot.

    `coords` holds (x, y, z) with NaN z when the keypoint carried no depth;
    `seen` marks which slots have history in the current session.
    """

    coords: np.ndarray = field(default_factory=lambda: np.full((KEYPOINT_COUNT, 3), np.nan, dtype=float))
    seen: np.ndarray = field(default_factory=lambda: np.zeros(KEYPOINT_COUNT, dtype=bool))

    def clear(self) -> None:
        self.coords[:] = np.nan
        self.seen[:] = False


def _clamp_alpha(alpha: float) -> float:
    value = float(alpha)
    if math.isnan(value):
        logger.warning("Smoothing factor is NaN; falling back to %.2f.", DEFAULT_SMOOTHING_FACTOR)
        return DEFAULT_SMOOTHING_FACTOR
    clamped = min(1.0, max(0.0, value))
    if clamped != value:
        logger.warning("Smoothing factor %s is outside [0,1]; clamped to %s.", value, clamped)
    return clamped


class LandmarkSmoother:
    """Exponential moving average over each keypoint's x, y (and z).

    `alpha` is the weight of the newest raw frame: 1.0 follows the raw signal
    exactly, values near 0 lean on history (smoother, but laggier).

    One smoother belongs to one detection session; call `reset()` whenever the
    session restarts so the next frame is not anchored to stale geometry.
    """

    def __init__(self, alpha: float = DEFAULT_SMOOTHING_FACTOR, state: Optional[SmootherState] = None) -> None:
        self.alpha = _clamp_alpha(alpha)
        self.state = state if state is not None else SmootherState()

    def smooth(self, landmarks: LandmarkSet | Iterable[Landmark]) -> LandmarkSet:
        """Smooth one frame and record the result as the new history.

        Keypoints seen for the first time pass through unchanged. Keypoints
        missing from this frame are not synthesized and keep their history.
        """
        current = landmarks if isinstance(landmarks, LandmarkSet) else LandmarkSet(landmarks)
        alpha = self.alpha
        coords = self.state.coords
        seen = self.state.seen
        out: list[Landmark] = []

        for lm in current:
            idx = int(lm.name)
            if not seen[idx]:
                smoothed = lm
            else:
                prev_x, prev_y, prev_z = coords[idx]
                z = lm.z
                if z is not None and not math.isnan(prev_z):
                    z = alpha * z + (1.0 - alpha) * float(prev_z)
                smoothed = Landmark(
                    name=lm.name,
                    x=alpha * lm.x + (1.0 - alpha) * float(prev_x),
                    y=alpha * lm.y + (1.0 - alpha) * float(prev_y),
                    z=z,
                    confidence=lm.confidence,
                    is_visible=lm.is_visible,
                )
            coords[idx] = (smoothed.x, smoothed.y, np.nan if smoothed.z is None else smoothed.z)
            seen[idx] = True
            out.append(smoothed)

        return LandmarkSet(out)

    def reset(self) -> None:
        self.state.clear()


def apply_smoothing(
    landmarks: LandmarkSet,
    config: PoseConfig,
    smoother: LandmarkSmoother,
) -> LandmarkSet:
    """Smooth `landmarks` with `smoother` when smoothing is enabled in `config`."""
    if not config.enable_smoothing:
        return landmarks
    return smoother.smooth(landmarks)


__all__ = ["SmootherState", "LandmarkSmoother", "apply_smoothing"]
