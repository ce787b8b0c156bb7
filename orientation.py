"""
orientation.py - Ground support solver.

Given the six legs built flat (body in the z = 0 plane, no gravity applied),
find the plane the robot would rest on and how high the center of gravity
sits above it.

Theory of Operation:
  A resting body is supported by at least three contact points. For every
  trio of legs the plane through their candidate contact points is a
  candidate ground plane. It is accepted when:
    - the normal can point up (plane not vertical) and the center of
      gravity is strictly above the plane,
    - no point of any leg sits below the plane (the ground is not
      penetrated),
    - the center of gravity projects inside the trio's triangle (the
      support is statically stable).
  Trios are tried in canonical order and the first accepted plane wins. All
  legs whose contact point lies on that plane are ground legs.

If no trio qualifies the pose has no stable support and the solver returns
Unstable; callers fall back to a dangling body.
"""

from __future__ import annotations
import itertools
import logging
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from geometry import (
    EPSILON,
    Vector,
    dot,
    is_point_in_triangle,
    normal_of_three_points,
    scale_vector,
)
from kinematics import Linkage, NUM_LEGS

logger = logging.getLogger(__name__)

# Default distance within which a point counts as lying on the ground plane
DEFAULT_ON_PLANE_TOLERANCE = 1.0

# All 20 three-leg combinations, canonical order
LEG_TRIOS = tuple(itertools.combinations(range(NUM_LEGS), 3))


@dataclass(frozen=True)
class OrientationProperties:
    """Solved ground support, expressed in the flat (unsolved) body frame."""
    n_axis: Vector                      # unit normal of the ground plane, pointing up
    height: float                       # center of gravity distance above the plane
    ground_legs: Tuple[Linkage, ...]    # legs touching the plane, canonical order


@dataclass(frozen=True)
class Unstable:
    """No stable ground support exists for the pose."""
    reason: str


OrientationResult = Union[OrientationProperties, Unstable]


def signed_height(point: Vector, n_axis: Vector, height: float) -> float:
    """Distance of `point` above the plane n . p + height = 0."""
    return dot(n_axis, point) + height


def _all_points_above(legs: Sequence[Linkage], n_axis: Vector, height: float,
                      tolerance: float) -> bool:
    return all(
        signed_height(point, n_axis, height) >= -tolerance
        for leg in legs
        for point in leg.points
    )


def _trio_plane(p0: Vector, p1: Vector, p2: Vector):
    """Upward normal and cog height for a trio, or None if unusable."""
    n_axis = normal_of_three_points(p0, p1, p2, "n-axis")
    if n_axis is None:
        return None
    if n_axis.z < 0:
        n_axis = scale_vector(n_axis, -1.0, "n-axis")
    if n_axis.z < EPSILON:
        return None
    return n_axis, -dot(n_axis, p0)


def compute_orientation_properties(
    legs: Sequence[Linkage],
    tolerance: float = DEFAULT_ON_PLANE_TOLERANCE,
) -> OrientationResult:
    """
    Find the supporting ground plane for six flat-built legs.

    Args:
        legs: six legs in canonical order, built with zero gravity
        tolerance: on-plane / below-plane distance tolerance

    Returns:
        OrientationProperties on success, Unstable otherwise.
    """
    contact_points = [leg.maybe_ground_contact_point for leg in legs]
    cog = Vector(0.0, 0.0, 0.0, "center-of-gravity-point")

    for trio in LEG_TRIOS:
        p0, p1, p2 = (contact_points[i] for i in trio)

        plane = _trio_plane(p0, p1, p2)
        if plane is None:
            continue
        n_axis, height = plane

        if height <= EPSILON:
            continue

        if not _all_points_above(legs, n_axis, height, tolerance):
            continue

        cog_projection = cog.clone_shift(*(-height * n_axis.to_array()))
        if not is_point_in_triangle(cog_projection, p0, p1, p2):
            continue

        ground_legs = tuple(
            leg for leg, point in zip(legs, contact_points)
            if abs(signed_height(point, n_axis, height)) <= tolerance
        )
        logger.debug("Support found on legs %s: height=%.3f, %d ground legs",
                     trio, height, len(ground_legs))
        return OrientationProperties(n_axis, height, ground_legs)

    logger.debug("No stable support among %d leg trios", len(LEG_TRIOS))
    return Unstable("no leg trio gives a stable support plane below the body")
