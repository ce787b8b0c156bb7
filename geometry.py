"""
geometry.py - Points, homogeneous transforms and vector helpers.

Every point in the stance model is an immutable Vector. Moving a point never
mutates it; clone_* methods return a new Vector that keeps the original name
and id so a point can be traced from the flat build to the final stance.

Coordinate System (World Frame):
    X: Right is positive
    Y: Forward is positive (towards the head)
    Z: Up is positive (ground plane is z = 0)

Transforms are 4x4 homogeneous matrices. A RotationMatrix is a Transform
whose 3x3 block is orthonormal and whose translation is zero; operations that
are only meaningful for pure rotations take a RotationMatrix.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

# Numerical tolerance used when classifying matrices and degenerate vectors
EPSILON = 1e-9


# -----------------------------------------------------------------------------
# Points
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Vector:
    """3D point or direction with a name and id for tracing."""
    x: float
    y: float
    z: float
    name: str = "no-name-point"
    point_id: str = "no-id-point"

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @staticmethod
    def from_array(a, name: str = "no-name-point", point_id: str = "no-id-point") -> Vector:
        return Vector(float(a[0]), float(a[1]), float(a[2]), name, point_id)

    def new_trot(self, transform: Transform, name: str = "no-name-point",
                 point_id: str = "no-id-point") -> Vector:
        """
        Express this point, given in the frame described by `transform`,
        in world coordinates.
        """
        return Vector.from_array(transform.apply(self.to_array()), name, point_id)

    def clone_trot(self, transform: Transform) -> Vector:
        return self.new_trot(transform, self.name, self.point_id)

    def clone_shift(self, tx: float = 0.0, ty: float = 0.0, tz: float = 0.0) -> Vector:
        return Vector(self.x + tx, self.y + ty, self.z + tz, self.name, self.point_id)

    def clone_trot_shift(self, transform: Transform, tx: float = 0.0,
                         ty: float = 0.0, tz: float = 0.0) -> Vector:
        return self.clone_trot(transform).clone_shift(tx, ty, tz)

    def to_marker(self) -> dict:
        """Plain dict for JSON export and plotting."""
        return {"x": self.x, "y": self.y, "z": self.z,
                "name": self.name, "id": self.point_id}


# -----------------------------------------------------------------------------
# Transforms
# -----------------------------------------------------------------------------

class Transform:
    """Read-only 4x4 homogeneous transform."""

    __slots__ = ("_matrix",)

    def __init__(self, matrix):
        m = np.array(matrix, dtype=float)
        if m.shape != (4, 4):
            raise ValueError(f"Transform needs a 4x4 matrix, got shape {m.shape}")
        m.setflags(write=False)
        self._matrix = m

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    @property
    def rotation(self) -> np.ndarray:
        """Upper-left 3x3 block."""
        return self._matrix[:3, :3]

    @property
    def translation(self) -> np.ndarray:
        return self._matrix[:3, 3]

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Transform a (3,) point or an (N, 3) array of points."""
        return points @ self.rotation.T + self.translation

    def __matmul__(self, other: Transform) -> Transform:
        product = self._matrix @ other.matrix
        if isinstance(self, RotationMatrix) and isinstance(other, RotationMatrix):
            return RotationMatrix(product)
        return Transform(product)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._matrix.tolist()})"


class RotationMatrix(Transform):
    """Transform restricted to a pure rotation (no scale, shear or translation)."""

    __slots__ = ()

    def __init__(self, matrix):
        super().__init__(matrix)
        r = self.rotation
        if not np.allclose(r @ r.T, np.eye(3), atol=1e-6):
            raise ValueError("RotationMatrix block is not orthonormal")
        if np.linalg.det(r) < 0:
            raise ValueError("RotationMatrix block is a reflection")
        if not np.allclose(self.translation, 0.0) or \
           not np.allclose(self._matrix[3], [0.0, 0.0, 0.0, 1.0]):
            raise ValueError("RotationMatrix must not translate")


def _homogeneous(r3: np.ndarray, tx: float = 0.0, ty: float = 0.0,
                 tz: float = 0.0) -> np.ndarray:
    m = np.eye(4)
    m[:3, :3] = r3
    m[:3, 3] = (tx, ty, tz)
    return m


def identity_matrix() -> RotationMatrix:
    return RotationMatrix(np.eye(4))


def rot_x_matrix(theta: float) -> RotationMatrix:
    c, s = math.cos(theta), math.sin(theta)
    return RotationMatrix(_homogeneous(np.array([[1, 0, 0],
                                                 [0, c, -s],
                                                 [0, s, c]])))


def rot_y_matrix(theta: float) -> RotationMatrix:
    c, s = math.cos(theta), math.sin(theta)
    return RotationMatrix(_homogeneous(np.array([[c, 0, s],
                                                 [0, 1, 0],
                                                 [-s, 0, c]])))


def rot_z_matrix(theta: float) -> RotationMatrix:
    c, s = math.cos(theta), math.sin(theta)
    return RotationMatrix(_homogeneous(np.array([[c, -s, 0],
                                                 [s, c, 0],
                                                 [0, 0, 1]])))


def t_rot_z_matrix(theta: float, tx: float = 0.0, ty: float = 0.0,
                   tz: float = 0.0) -> Transform:
    """Rotation about z followed by a translation."""
    return Transform(_homogeneous(rot_z_matrix(theta).rotation, tx, ty, tz))


def skew(v: np.ndarray) -> np.ndarray:
    x, y, z = v
    return np.array([[0, -z, y], [z, 0, -x], [-y, x, 0]])


def matrix_to_align_vector_a_to_b(a: Vector, b: Vector) -> RotationMatrix:
    """
    Rotation that takes the direction of `a` onto the direction of `b`.

    Uses Rodrigues' formula R = I + [v]x + [v]x^2 * (1 - c) / s^2 with
    v = a x b, s = |v|, c = a . b on the unit vectors.
    """
    ua = unit_vector(a).to_array()
    ub = unit_vector(b).to_array()
    v = np.cross(ua, ub)
    s = float(np.linalg.norm(v))
    c = float(np.dot(ua, ub))

    if s < EPSILON:
        if c > 0:
            return identity_matrix()
        # Anti-parallel: half turn about any axis perpendicular to a
        helper = np.array([1.0, 0.0, 0.0]) if abs(ua[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
        k = np.cross(ua, helper)
        k = k / np.linalg.norm(k)
        return RotationMatrix(_homogeneous(2.0 * np.outer(k, k) - np.eye(3)))

    vx = skew(v)
    r3 = np.eye(3) + vx + (vx @ vx) * ((1.0 - c) / (s * s))
    return RotationMatrix(_homogeneous(r3))


# -----------------------------------------------------------------------------
# Vector helpers
# -----------------------------------------------------------------------------

def dot(a: Vector, b: Vector) -> float:
    return a.x * b.x + a.y * b.y + a.z * b.z


def cross(a: Vector, b: Vector) -> Vector:
    return Vector(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


def vector_length(v: Vector) -> float:
    return math.sqrt(dot(v, v))


def scale_vector(v: Vector, d: float, name: str = "no-name-point") -> Vector:
    return Vector(v.x * d, v.y * d, v.z * d, name)


def unit_vector(v: Vector, name: str = "no-name-point") -> Vector:
    length = vector_length(v)
    if length < EPSILON:
        raise ValueError(f"Cannot normalize zero-length vector {v.name}")
    return scale_vector(v, 1.0 / length, name)


def vector_from_to(a: Vector, b: Vector) -> Vector:
    return Vector(b.x - a.x, b.y - a.y, b.z - a.z)


def normal_of_three_points(a: Vector, b: Vector, c: Vector,
                           name: str = "normal-vector") -> Vector | None:
    """Unit normal of the plane through a, b, c; None for collinear points."""
    n = cross(vector_from_to(a, b), vector_from_to(a, c))
    if vector_length(n) < EPSILON:
        return None
    return unit_vector(n, name)


def is_point_in_triangle(p: Vector, a: Vector, b: Vector, c: Vector,
                         tol: float = EPSILON) -> bool:
    """
    Barycentric test for a point assumed to lie in the plane of a, b, c.
    Points on an edge count as inside.
    """
    v0 = vector_from_to(a, c)
    v1 = vector_from_to(a, b)
    v2 = vector_from_to(a, p)

    d00, d01, d02 = dot(v0, v0), dot(v0, v1), dot(v0, v2)
    d11, d12 = dot(v1, v1), dot(v1, v2)

    denom = d00 * d11 - d01 * d01
    if abs(denom) < EPSILON:
        return False
    u = (d11 * d02 - d01 * d12) / denom
    v = (d00 * d12 - d01 * d02) / denom
    return u >= -tol and v >= -tol and (u + v) <= 1.0 + tol


def signed_angle_xy(a: Vector, b: Vector) -> float:
    """
    Angle (radians) that rotates the xy projection of `a` onto that of `b`.
    Counter-clockwise seen from above is positive. 0 for degenerate input.
    """
    if math.hypot(a.x, a.y) < EPSILON or math.hypot(b.x, b.y) < EPSILON:
        return 0.0
    return math.atan2(a.x * b.y - a.y * b.x, a.x * b.x + a.y * b.y)


def points_to_array(points: Iterable[Vector]) -> np.ndarray:
    return np.array([p.to_array() for p in points], dtype=float).reshape(-1, 3)


def transform_points(points: Sequence[Vector], transform: Transform) -> list[Vector]:
    """Apply one transform to many points, keeping names and ids."""
    if not points:
        return []
    moved = transform.apply(points_to_array(points))
    return [Vector.from_array(row, p.name, p.point_id) for row, p in zip(moved, points)]
