"""Geometry and joint-angle metrics derived from pose landmarks."""

from .geometry import angle_between, check_tolerance, distance, midpoint, normalize_coordinates, round_half_up
from .angles import JOINT_DEFINITIONS, calculate_joint_angles, compute_trajectory_angles

__all__ = [
    "angle_between",
    "distance",
    "midpoint",
    "normalize_coordinates",
    "check_tolerance",
    "round_half_up",
    "JOINT_DEFINITIONS",
    "calculate_joint_angles",
    "compute_trajectory_angles",
]
