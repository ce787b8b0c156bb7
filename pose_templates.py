"""
pose_templates.py - Reference dimensions and poses.

DEFAULT_POSE is the reference the twist solver compares against: every joint
at zero, so each leg points straight out along its axis with the tibia
hanging down. These values are built once at import and never change.
"""

from __future__ import annotations
import math
from typing import Mapping, Sequence

from kinematics import Dimensions, LegAngles, Pose, POSITION_NAMES_LIST, make_pose

DEFAULT_DIMENSIONS = Dimensions(
    front=100.0,
    side=100.0,
    middle=100.0,
    coxia=100.0,
    femur=100.0,
    tibia=100.0,
)

DEFAULT_POSE: Pose = make_pose({position: LegAngles() for position in POSITION_NAMES_LIST})


def uniform_pose(alpha: float = 0.0, beta: float = 0.0, gamma: float = 0.0) -> Pose:
    """Same joint angles (radians) on all six legs."""
    angles = LegAngles(alpha, beta, gamma)
    return make_pose({position: angles for position in POSITION_NAMES_LIST})


def pose_from_degrees(angles_deg: Mapping[str, Sequence[float]]) -> Pose:
    """
    Build a pose from position -> (alpha, beta, gamma) in degrees.
    Positions not listed keep zero angles.
    """
    pose = dict(DEFAULT_POSE)
    for position, (alpha, beta, gamma) in angles_deg.items():
        if position not in pose:
            raise ValueError(f"Unknown leg position: {position}")
        pose[position] = LegAngles(math.radians(alpha), math.radians(beta), math.radians(gamma))
    return make_pose(pose)


def pose_to_degrees(pose: Pose) -> dict:
    """Inverse of pose_from_degrees(), for display and saving."""
    return {
        position: (math.degrees(a.alpha), math.degrees(a.beta), math.degrees(a.gamma))
        for position, a in pose.items()
    }


def with_leg(pose: Pose, position: str, angles: LegAngles) -> Pose:
    """Copy of `pose` with one leg's angles replaced."""
    if position not in POSITION_NAMES_LIST:
        raise ValueError(f"Unknown leg position: {position}")
    updated = dict(pose)
    updated[position] = angles
    return make_pose(updated)
