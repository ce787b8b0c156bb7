"""
kinematics.py - Leg model and forward kinematics for the stance solver.

This module owns the leg position identifiers, the dimension and joint angle
records, and the Linkage (one leg) type. build_leg() is the forward
kinematics: it places a leg's joint points in the body frame from its segment
lengths, its attachment vertex on the body hexagon and its pose angles.

Coordinate System (Body Frame):
    X: Right is positive
    Y: Forward is positive (head side)
    Z: Up is positive (body plane is z = 0 before solving)

Leg Kinematic Chain (points of a Linkage, in this order):
    body_contact: Attachment vertex on the body hexagon (coxia axis).
    coxia       : End of the coxia link, `coxia` from the attachment,
                   always level with the body plane.
    femur       : End of the femur link. Pitched up by beta.
    foot_tip    : End of the tibia. With gamma = 0 the tibia hangs
                   perpendicular to the femur.

    Visualization (side view, alpha = beta = gamma = 0):

        (body_contact)●─────────●(coxia)──────────●(femur)
                           coxia          femur   │
                                                  │ tibia
                                                  │
                                                  ●(foot_tip)

Alpha rotates the whole chain about the vertical axis through the attachment
vertex, on top of the fixed axis angle of the leg position.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Mapping, Tuple

from geometry import Vector, Transform, t_rot_z_matrix, transform_points

# -----------------------------------------------------------------------------
# Leg positions
# -----------------------------------------------------------------------------

NUM_LEGS = 6

# Canonical order used wherever legs are materialized into a sequence
POSITION_NAMES_LIST = (
    "right_middle",
    "right_front",
    "left_front",
    "left_middle",
    "left_back",
    "right_back",
)

POSITION_NAME_TO_ID_MAP = MappingProxyType(
    {position: i for i, position in enumerate(POSITION_NAMES_LIST)}
)

# Direction each leg points out of the body (radians about +Z, 0 = +X)
POSITION_NAME_TO_AXIS_ANGLE_MAP = MappingProxyType({
    "right_middle": 0.0,
    "right_front": math.pi / 4,
    "left_front": 3 * math.pi / 4,
    "left_middle": math.pi,
    "left_back": 5 * math.pi / 4,
    "right_back": 7 * math.pi / 4,
})

LEG_POINT_NAMES = ("body_contact", "coxia", "femur", "foot_tip")


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BodyDimensions:
    """Body hexagon half-extents."""
    front: float
    side: float
    middle: float


@dataclass(frozen=True)
class LegDimensions:
    """Leg segment lengths."""
    coxia: float
    femur: float
    tibia: float

    @property
    def total_length(self) -> float:
        return self.coxia + self.femur + self.tibia


@dataclass(frozen=True)
class Dimensions:
    front: float
    side: float
    middle: float
    coxia: float
    femur: float
    tibia: float

    @property
    def body(self) -> BodyDimensions:
        return BodyDimensions(self.front, self.side, self.middle)

    @property
    def leg(self) -> LegDimensions:
        return LegDimensions(self.coxia, self.femur, self.tibia)


@dataclass(frozen=True)
class LegAngles:
    """Joint angles of one leg in radians."""
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0


# Pose: position name -> LegAngles, exactly one entry per position
Pose = Mapping[str, LegAngles]


def make_pose(angles: Mapping[str, LegAngles]) -> Pose:
    """Freeze a position -> LegAngles mapping into a read-only pose."""
    unknown = set(angles) - set(POSITION_NAMES_LIST)
    if unknown:
        raise ValueError(f"Unknown leg positions: {sorted(unknown)}")
    return MappingProxyType({position: angles[position]
                             for position in POSITION_NAMES_LIST if position in angles})


# -----------------------------------------------------------------------------
# Leg
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Linkage:
    """One leg: its joint points in body/world frame plus the data that built them."""
    dimensions: LegDimensions
    position: str
    pose: LegAngles
    points: Tuple[Vector, ...]

    @property
    def name(self) -> str:
        return f"{self.position}-leg"

    @property
    def id(self) -> int:
        return POSITION_NAME_TO_ID_MAP[self.position]

    @property
    def body_contact_point(self) -> Vector:
        return self.points[0]

    @property
    def coxia_point(self) -> Vector:
        return self.points[1]

    @property
    def femur_point(self) -> Vector:
        return self.points[2]

    @property
    def foot_tip_point(self) -> Vector:
        return self.points[3]

    @property
    def maybe_ground_contact_point(self) -> Vector:
        """
        Lowest of foot tip, femur and coxia points. On a tie the point
        further down the chain wins, so a level foot beats its femur.
        """
        candidates = self.points[:0:-1]  # foot_tip, femur, coxia
        lowest = candidates[0]
        for point in candidates[1:]:
            if point.z < lowest.z:
                lowest = point
        return lowest

    def clone_trot(self, transform: Transform) -> Linkage:
        return replace(self, points=tuple(transform_points(self.points, transform)))

    def clone_shift(self, tx: float, ty: float, tz: float) -> Linkage:
        return replace(self, points=tuple(p.clone_shift(tx, ty, tz) for p in self.points))

    def clone_trot_shift(self, transform: Transform, tx: float, ty: float,
                         tz: float) -> Linkage:
        return self.clone_trot(transform).clone_shift(tx, ty, tz)


def compute_local_leg_points(dimensions: LegDimensions, pose: LegAngles) -> list:
    """
    Joint points in the leg's own frame: x along the leg axis, z up,
    origin at the attachment vertex. Alpha is not applied here.
    """
    a, b, c = dimensions.coxia, dimensions.femur, dimensions.tibia
    beta, gamma = pose.beta, pose.gamma

    femur_x = a + b * math.cos(beta)
    femur_z = b * math.sin(beta)

    # Tibia direction: perpendicular to the femur at gamma = 0, pointing down
    foot_x = femur_x + c * math.sin(beta + gamma)
    foot_z = femur_z - c * math.cos(beta + gamma)

    return [
        (0.0, 0.0, 0.0),
        (a, 0.0, 0.0),
        (femur_x, 0.0, femur_z),
        (foot_x, 0.0, foot_z),
    ]


def build_leg(dimensions: LegDimensions, position: str, origin: Vector,
              pose: LegAngles) -> Linkage:
    """
    Forward kinematics for one leg.

    Args:
        dimensions: coxia/femur/tibia lengths
        position: one of POSITION_NAMES_LIST
        origin: attachment vertex on the body
        pose: joint angles in radians

    Returns:
        Linkage with body_contact, coxia, femur, foot_tip points.
    """
    leg_id = POSITION_NAME_TO_ID_MAP[position]
    z_angle = POSITION_NAME_TO_AXIS_ANGLE_MAP[position] + pose.alpha
    frame = t_rot_z_matrix(z_angle, origin.x, origin.y, origin.z)

    local_points = [
        Vector(x, y, z, f"{position}-{point_name}", f"{leg_id}-{i}")
        for i, ((x, y, z), point_name) in enumerate(
            zip(compute_local_leg_points(dimensions, pose), LEG_POINT_NAMES))
    ]
    points = transform_points(local_points, frame)
    return Linkage(dimensions, position, pose, tuple(points))


def build_legs_list(vertices, pose: Pose, dimensions: LegDimensions) -> Tuple[Linkage, ...]:
    """Build all six legs in canonical order, one per body vertex."""
    return tuple(
        build_leg(dimensions, position, vertices[i], pose[position])
        for i, position in enumerate(POSITION_NAMES_LIST)
    )
