"""
Ray class for representing rays in 3D space.

A ray is defined by an origin point and a direction vector.
Ray(t) = origin + t * direction
"""

from __future__ import annotations
import math
from typing import Tuple

from .vec3 import Vec3, Point3


def _reciprocal(value: float) -> float:
    if value == 0.0:
        return math.copysign(math.inf, value)
    return 1.0 / value


class Ray:
    """A ray with origin and direction.

    The parametric form is: P(t) = origin + t * direction
    where t >= 0 represents points along the ray.

    The inverse direction and per-axis sign bits are computed once so that
    repeated bounding box tests against the same ray need no division.
    """

    __slots__ = ('origin', 'direction', 'inv_direction', 'sign')

    def __init__(self, origin: Point3, direction: Vec3):
        """Create a ray with given origin and direction.

        Args:
            origin: The starting point of the ray
            direction: The direction vector (should be normalized for most uses)
        """
        self.origin = origin
        self.direction = direction
        self.inv_direction = Vec3(*(_reciprocal(c) for c in direction))
        # copysign keeps -0.0 on the same side as its -inf reciprocal
        self.sign: Tuple[int, int, int] = tuple(int(math.copysign(1.0, c) < 0.0) for c in direction)

    def at(self, t: float) -> Point3:
        """Get the point along the ray at parameter t.

        Args:
            t: The parameter value (distance if direction is normalized)

        Returns:
            The point at origin + t * direction
        """
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"
