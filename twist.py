"""
twist.py - Body twist about the vertical axis.

When legs rotate their alpha joints while their contact points stay planted,
the body turns instead. The twist angle is that body rotation about +Z,
counter-clockwise positive seen from above.

    simple_twist   closed form, exact when every ground leg has the same
                   alpha and the same geometry relative to the center of
                   gravity
    might_twist    True when that assumption does not hold
    complex_twist  least-squares rotation between a reference contact layout
                   and the observed one

All points are compared in the flat body frame; only x and y are used.
"""

from __future__ import annotations
import math
from typing import Sequence

from geometry import Vector, signed_angle_xy, rot_z_matrix
from kinematics import Linkage

# Default tolerance on contact point radii when judging symmetry
DEFAULT_TWIST_TOLERANCE = 1e-6


def _contact_kind(point: Vector) -> str:
    return point.name.rsplit("-", 1)[-1]


def _untwisted_contact_point(leg: Linkage) -> Vector:
    """Contact point of `leg` with its alpha rotation undone about its attachment."""
    point = leg.maybe_ground_contact_point
    origin = leg.body_contact_point
    relative = point.clone_shift(-origin.x, -origin.y, -origin.z)
    return relative.clone_trot(rot_z_matrix(-leg.pose.alpha)).clone_shift(
        origin.x, origin.y, origin.z)


def simple_twist(ground_legs: Sequence[Linkage]) -> float:
    """
    Twist for ground legs that share one alpha.

    Returns 0.0 when there are no ground legs, when their alphas differ or
    when the shared alpha is zero.
    """
    if not ground_legs:
        return 0.0

    first_leg = ground_legs[0]
    alpha = first_leg.pose.alpha
    if alpha == 0 or any(leg.pose.alpha != alpha for leg in ground_legs):
        return 0.0

    return signed_angle_xy(first_leg.maybe_ground_contact_point,
                           _untwisted_contact_point(first_leg))


def might_twist(ground_legs: Sequence[Linkage],
                tolerance: float = DEFAULT_TWIST_TOLERANCE) -> bool:
    """
    True when simple_twist() could be wrong for these ground legs: their
    alphas differ, they touch the ground with different kinds of points, or
    their contact points are not equally far from the center of gravity.
    """
    if len(ground_legs) < 2:
        return False

    alphas = {leg.pose.alpha for leg in ground_legs}
    if len(alphas) > 1:
        return True

    points = [leg.maybe_ground_contact_point for leg in ground_legs]
    if len({_contact_kind(p) for p in points}) > 1:
        return True

    radii = [math.hypot(p.x, p.y) for p in points]
    return max(radii) - min(radii) > tolerance


def complex_twist(old_points: Sequence[Vector], new_points: Sequence[Vector]) -> float:
    """
    Best-fit rotation about +Z that carries `new_points` onto `old_points`.

    Args:
        old_points: reference contact points (default pose), one per ground leg
        new_points: observed contact points, same legs in the same order

    Returns:
        Twist angle in radians, atan2(sum new x old, sum new . old).
    """
    sin_sum = 0.0
    cos_sum = 0.0
    for old, new in zip(old_points, new_points, strict=True):
        sin_sum += new.x * old.y - new.y * old.x
        cos_sum += new.x * old.x + new.y * old.y

    return math.atan2(sin_sum, cos_sum)
