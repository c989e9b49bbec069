from __future__ import annotations

import math

import pytest

from pose_coach.processing.metrics.geometry import (
    angle_between,
    distance,
    midpoint,
    normalize_coordinates,
    round_half_up,
)


def test_angle_between_right_angle_and_collinear() -> None:
    assert angle_between((1.0, 0.0), (0.0, 0.0), (0.0, 1.0)) == pytest.approx(90.0)
    assert angle_between((1.0, 0.0), (0.0, 0.0), (-1.0, 0.0)) == pytest.approx(180.0)
    assert angle_between((1.0, 0.0), (0.0, 0.0), (2.0, 0.0)) == pytest.approx(0.0)


def test_angle_between_folds_reflex_angles() -> None:
    # Polar angles 135 and -90 differ by 225; the interior angle is 135.
    angle = angle_between((-1.0, 1.0), (0.0, 0.0), (0.0, -1.0))
    assert angle == pytest.approx(135.0)
    assert 0.0 <= angle <= 180.0


def test_angle_between_is_symmetric_in_outer_points() -> None:
    a, b, c = (0.2, 0.1), (0.5, 0.5), (0.9, 0.3)
    assert angle_between(a, b, c) == pytest.approx(angle_between(c, b, a))


def test_angle_between_propagates_nan() -> None:
    assert math.isnan(angle_between((math.nan, 0.0), (0.0, 0.0), (1.0, 1.0)))


def test_distance_and_midpoint() -> None:
    assert distance((0.0, 0.0), (3.0, 4.0)) == pytest.approx(5.0)
    assert midpoint((0.0, 0.0), (1.0, 2.0)) == pytest.approx((0.5, 1.0))


def test_normalize_coordinates_rejects_empty_frame() -> None:
    assert normalize_coordinates(320, 240, 640, 480) == pytest.approx((0.5, 0.5))
    with pytest.raises(ValueError):
        normalize_coordinates(10, 10, 0, 480)


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(179.5) == 180
    assert round_half_up(-0.5) == 0
