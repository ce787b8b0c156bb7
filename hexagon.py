"""
hexagon.py - Flat hexagonal body of the hexapod.

The body is six vertices (one leg attachment per position), a head point
and the center of gravity. build_hexagon() lays it out flat in the z = 0
plane with the center of gravity at the origin:

                 head
      left_front  ●  right_front
            ●-----+-----●
           /      |      \\
    left_middle   cog   right_middle
           \\      |      /
            ●-----+-----●
      left_back     right_back

The clone_* methods move every stored point by the same transform.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Tuple

from geometry import Vector, Transform, transform_points
from kinematics import BodyDimensions, POSITION_NAMES_LIST


@dataclass(frozen=True)
class Hexagon:
    dimensions: BodyDimensions
    vertices: Tuple[Vector, ...]
    head: Vector
    cog: Vector

    @property
    def closed_points(self) -> Tuple[Vector, ...]:
        """Vertices with the first one repeated, for drawing the outline."""
        return self.vertices + (self.vertices[0],)

    @property
    def all_points(self) -> Tuple[Vector, ...]:
        return self.vertices + (self.cog, self.head)

    def clone_trot(self, transform: Transform) -> Hexagon:
        moved = transform_points(self.all_points, transform)
        return replace(self, vertices=tuple(moved[:6]), cog=moved[6], head=moved[7])

    def clone_shift(self, tx: float, ty: float, tz: float) -> Hexagon:
        return replace(
            self,
            vertices=tuple(v.clone_shift(tx, ty, tz) for v in self.vertices),
            cog=self.cog.clone_shift(tx, ty, tz),
            head=self.head.clone_shift(tx, ty, tz),
        )

    def clone_trot_shift(self, transform: Transform, tx: float, ty: float,
                         tz: float) -> Hexagon:
        return self.clone_trot(transform).clone_shift(tx, ty, tz)


def build_hexagon(dimensions: BodyDimensions) -> Hexagon:
    """Flat body for the given front/side/middle half-extents."""
    front, side, middle = dimensions.front, dimensions.side, dimensions.middle

    # Same order as POSITION_NAMES_LIST
    vertex_x = (middle, front, -front, -middle, -front, front)
    vertex_y = (0.0, side, side, 0.0, -side, -side)

    vertices = tuple(
        Vector(x, y, 0.0, f"{position}-vertex", str(i))
        for i, (position, x, y) in enumerate(zip(POSITION_NAMES_LIST, vertex_x, vertex_y))
    )
    cog = Vector(0.0, 0.0, 0.0, "center-of-gravity-point", "6")
    head = Vector(0.0, side, 0.0, "head-point", "7")
    return Hexagon(dimensions, vertices, head, cog)
