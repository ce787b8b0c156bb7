"""
stance.py - Static stance of a hexapod for a given pose.

HexapodStance turns (dimensions, pose) into a fully placed 3D snapshot:
where the body rests, how high it is, which leg points touch the ground and
how far the body has twisted about its own vertical axis.

Pipeline (constructor):
    1. Build the flat body and six legs with no gravity.
    2. Solve the ground support plane (orientation.py). No stable support,
       or gravity explicitly disabled, leaves a dangling stance.
    3. Rotate the plane normal onto world +Z and lift by the solved height;
       legs, body, contact points and local axes all move together.
    4. If any leg has a nonzero alpha, compute the twist (twist.py) and
       rotate everything about world +Z. A complex twist replaces the
       simple one; it is applied to the untwisted geometry, never on top.

Stance properties:
    dimensions              Dimensions (front, side, middle, coxia, femur, tibia)
    pose                    position -> LegAngles (radians)
    legs                    six Linkage objects in POSITION_NAMES_LIST order
    body                    Hexagon (6 vertices, head, center of gravity)
    local_axes              body frame axes as world unit vectors
    ground_contact_points   points touching the ground; empty when dangling
    twist_angle             body rotation about +Z (radians)

Derived, recomputed on every access:
    distance_from_ground    center of gravity z (None for an empty shell)
    cog_projection          center of gravity dropped onto z = 0
    has_twisted, body_dimensions, leg_dimensions

A stance is never modified after construction. clone_trot() and
clone_shift() return new stances.
"""

from __future__ import annotations
import logging
from dataclasses import asdict, dataclass
from typing import Optional, Sequence, Tuple

from geometry import (
    RotationMatrix,
    Transform,
    Vector,
    identity_matrix,
    matrix_to_align_vector_a_to_b,
    rot_z_matrix,
    transform_points,
)
from hexagon import Hexagon, build_hexagon
from kinematics import (
    BodyDimensions,
    Dimensions,
    LegDimensions,
    Linkage,
    Pose,
    build_legs_list,
)
from orientation import DEFAULT_ON_PLANE_TOLERANCE, Unstable, compute_orientation_properties
from pose_templates import DEFAULT_POSE
from twist import DEFAULT_TWIST_TOLERANCE, complex_twist, might_twist, simple_twist

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Local axes
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LocalAxes:
    x_axis: Vector
    y_axis: Vector
    z_axis: Vector

    def transformed(self, rotation: Transform) -> LocalAxes:
        """Rotate all three axes; only meaningful for pure rotations."""
        return LocalAxes(*transform_points((self.x_axis, self.y_axis, self.z_axis), rotation))

    def to_dict(self) -> dict:
        return {
            "x_axis": self.x_axis.to_marker(),
            "y_axis": self.y_axis.to_marker(),
            "z_axis": self.z_axis.to_marker(),
        }


WORLD_AXES = LocalAxes(
    Vector(1.0, 0.0, 0.0, "world-x-axis"),
    Vector(0.0, 1.0, 0.0, "world-y-axis"),
    Vector(0.0, 0.0, 1.0, "world-z-axis"),
)


def compute_local_axes(transform: RotationMatrix) -> LocalAxes:
    """Body axes after the body frame has been rotated by `transform`."""
    return LocalAxes(
        WORLD_AXES.x_axis.new_trot(transform, "hexapod-x-axis"),
        WORLD_AXES.y_axis.new_trot(transform, "hexapod-y-axis"),
        WORLD_AXES.z_axis.new_trot(transform, "hexapod-z-axis"),
    )


@dataclass(frozen=True)
class StanceFlags:
    no_gravity: bool = False     # skip solving, leave the body dangling
    shifted_up: bool = False     # lift a dangling body by the full leg length
    has_no_points: bool = False  # empty shell, no geometry computed


@dataclass
class SolverConfig:
    on_plane_tolerance: float = DEFAULT_ON_PLANE_TOLERANCE  # ground plane membership (length units)
    twist_tolerance: float = DEFAULT_TWIST_TOLERANCE        # contact radius spread still treated as symmetric


# -----------------------------------------------------------------------------
# Stance
# -----------------------------------------------------------------------------

class HexapodStance:

    def __init__(
        self,
        dimensions: Dimensions,
        pose: Pose,
        flags: StanceFlags = StanceFlags(),
        solver: Optional[SolverConfig] = None,
    ):
        self._dimensions = dimensions
        self._pose = pose
        self._twist_angle = 0.0
        self._legs: Tuple[Linkage, ...] = ()
        self._body: Optional[Hexagon] = None
        self._local_axes = WORLD_AXES
        self._ground_contact_points: Tuple[Vector, ...] = ()

        if flags.has_no_points:
            return

        solver = solver or SolverConfig()

        flat_hexagon = build_hexagon(self.body_dimensions)
        legs_no_gravity = build_legs_list(flat_hexagon.vertices, pose, self.leg_dimensions)

        if flags.no_gravity:
            self._dangling(flat_hexagon, legs_no_gravity, flags.shifted_up)
            return

        # Find the ground plane in the flat frame
        solved = compute_orientation_properties(legs_no_gravity, solver.on_plane_tolerance)

        if isinstance(solved, Unstable):
            logger.debug("Unstable pose, dangling: %s", solved.reason)
            self._dangling(flat_hexagon, legs_no_gravity, flags.shifted_up)
            return

        # Rotate the plane normal onto +Z and lift the body to its height
        transform = matrix_to_align_vector_a_to_b(solved.n_axis, WORLD_AXES.z_axis)
        height = solved.height

        self._legs = tuple(leg.clone_trot_shift(transform, 0, 0, height)
                           for leg in legs_no_gravity)
        self._body = flat_hexagon.clone_trot_shift(transform, 0, 0, height)
        self._local_axes = compute_local_axes(transform)
        self._ground_contact_points = tuple(
            leg.maybe_ground_contact_point.clone_trot_shift(transform, 0, 0, height)
            for leg in solved.ground_legs
        )

        if all(leg.pose.alpha == 0 for leg in self._legs):
            # no leg rotated about its vertical axis, the body cannot twist
            return

        aligned = (self._legs, self._body, self._ground_contact_points, self._local_axes)

        self._twist_angle = simple_twist(solved.ground_legs)
        if self._twist_angle != 0:
            self._twist(aligned)

        if might_twist(solved.ground_legs, solver.twist_tolerance):
            default_legs = build_legs_list(flat_hexagon.vertices, DEFAULT_POSE,
                                           self.leg_dimensions)
            old_points = [default_legs[leg.id].maybe_ground_contact_point
                          for leg in solved.ground_legs]
            new_points = [leg.maybe_ground_contact_point for leg in solved.ground_legs]

            self._twist_angle = complex_twist(old_points, new_points)
            self._twist(aligned)

        logger.debug("Stance solved: height=%.3f, %d ground points, twist=%.6f rad",
                     height, len(self._ground_contact_points), self._twist_angle)

    # -------------------------------------------------------------------------
    # Stored state
    # -------------------------------------------------------------------------

    @property
    def dimensions(self) -> Dimensions:
        return self._dimensions

    @property
    def pose(self) -> Pose:
        return self._pose

    @property
    def twist_angle(self) -> float:
        return self._twist_angle

    @property
    def legs(self) -> Tuple[Linkage, ...]:
        return self._legs

    @property
    def body(self) -> Optional[Hexagon]:
        return self._body

    @property
    def local_axes(self) -> LocalAxes:
        return self._local_axes

    @property
    def ground_contact_points(self) -> Tuple[Vector, ...]:
        return self._ground_contact_points

    # -------------------------------------------------------------------------
    # Derived
    # -------------------------------------------------------------------------

    @property
    def distance_from_ground(self) -> Optional[float]:
        """Center of gravity height; None for an empty shell."""
        if self._body is None:
            return None
        return self._body.cog.z

    @property
    def cog_projection(self) -> Optional[Vector]:
        if self._body is None:
            return None
        cog = self._body.cog
        return Vector(cog.x, cog.y, 0.0, "center-of-gravity-projection-point")

    @property
    def has_twisted(self) -> bool:
        return self._twist_angle != 0

    @property
    def body_dimensions(self) -> BodyDimensions:
        return self._dimensions.body

    @property
    def leg_dimensions(self) -> LegDimensions:
        return self._dimensions.leg

    # -------------------------------------------------------------------------
    # Clones
    # -------------------------------------------------------------------------

    def _shell(self) -> HexapodStance:
        clone = HexapodStance(self._dimensions, self._pose, StanceFlags(has_no_points=True))
        clone._twist_angle = self._twist_angle
        return clone

    def clone_trot(self, rotation: RotationMatrix) -> HexapodStance:
        """New stance with every point rotated by `rotation`."""
        if not isinstance(rotation, RotationMatrix):
            raise TypeError(f"clone_trot needs a RotationMatrix, got {type(rotation).__name__}")
        clone = self._shell()
        if self._body is not None:
            clone._body = self._body.clone_trot(rotation)
        clone._legs = tuple(leg.clone_trot(rotation) for leg in self._legs)
        clone._ground_contact_points = tuple(
            transform_points(self._ground_contact_points, rotation))
        clone._local_axes = self._local_axes.transformed(rotation)
        return clone

    def clone_shift(self, tx: float, ty: float, tz: float) -> HexapodStance:
        """New stance with every point translated; axes are unchanged."""
        clone = self._shell()
        if self._body is not None:
            clone._body = self._body.clone_shift(tx, ty, tz)
        clone._legs = tuple(leg.clone_shift(tx, ty, tz) for leg in self._legs)
        clone._ground_contact_points = tuple(
            point.clone_shift(tx, ty, tz) for point in self._ground_contact_points)
        clone._local_axes = self._local_axes
        return clone

    # -------------------------------------------------------------------------
    # Internal steps
    # -------------------------------------------------------------------------

    def _twist(self, aligned: Sequence) -> None:
        """Rotate the aligned (untwisted) geometry by the current twist angle."""
        legs, body, ground_contact_points, local_axes = aligned
        twist_matrix = rot_z_matrix(self._twist_angle)
        self._legs = tuple(leg.clone_trot(twist_matrix) for leg in legs)
        self._body = body.clone_trot(twist_matrix)
        self._ground_contact_points = tuple(
            transform_points(ground_contact_points, twist_matrix))
        self._local_axes = local_axes.transformed(twist_matrix)

    def _dangling(self, body: Hexagon, legs: Sequence[Linkage], shifted_up: bool) -> None:
        self._local_axes = compute_local_axes(identity_matrix())
        self._ground_contact_points = ()

        if not shifted_up:
            self._body, self._legs = body, tuple(legs)
            return

        height = self.leg_dimensions.total_length
        self._body = body.clone_shift(0, 0, height)
        self._legs = tuple(leg.clone_shift(0, 0, height) for leg in legs)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """JSON-friendly snapshot for visualization tools."""
        body = self._body
        if body is None:
            body_dict = None
        else:
            body_dict = {
                "vertices": [v.to_marker() for v in body.vertices],
                "head": body.head.to_marker(),
                "cog": body.cog.to_marker(),
            }
        cog_projection = self.cog_projection
        return {
            "dimensions": asdict(self._dimensions),
            "pose": {position: asdict(angles) for position, angles in self._pose.items()},
            "twist_angle": self._twist_angle,
            "distance_from_ground": self.distance_from_ground,
            "cog_projection": cog_projection.to_marker() if cog_projection is not None else None,
            "local_axes": self._local_axes.to_dict(),
            "body": body_dict,
            "legs": [
                {"position": leg.position, "points": [p.to_marker() for p in leg.points]}
                for leg in self._legs
            ],
            "ground_contact_points": [p.to_marker() for p in self._ground_contact_points],
        }
