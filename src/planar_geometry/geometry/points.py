# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Point value type and vector helpers.

Points are immutable: every operation returns a new Point. Equality is
exact component-wise comparison, which is what the dual graph relies on
to match shared edges.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np

from ..config import settings
from ..exceptions import InvalidInputError


@dataclass(frozen=True)
class Point:
    """A 3-component coordinate; ``z`` defaults to 0 for planar work."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self):
        # numpy scalars would leak numpy semantics into the predicates
        object.__setattr__(self, 'x', float(self.x))
        object.__setattr__(self, 'y', float(self.y))
        object.__setattr__(self, 'z', float(self.z))

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, k: float) -> 'Point':
        return Point(self.x * k, self.y * k, self.z * k)

    __rmul__ = __mul__

    def __neg__(self) -> 'Point':
        return Point(-self.x, -self.y, -self.z)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __repr__(self):
        return f"Point({self.x:g}, {self.y:g}, {self.z:g})"

    def dot(self, other: 'Point') -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: 'Point') -> 'Point':
        return Point(self.y * other.z - self.z * other.y,
                     self.z * other.x - self.x * other.z,
                     self.x * other.y - self.y * other.x)

    def length_sq(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        return math.sqrt(self.length_sq())

    def distance_to(self, other: 'Point') -> float:
        return (self - other).length()

    def distance_to_sq(self, other: 'Point') -> float:
        return (self - other).length_sq()

    def is_zero(self) -> bool:
        return self.x == 0 and self.y == 0 and self.z == 0

    def midpoint(self, other: 'Point', t: float = 0.5) -> 'Point':
        return self + (other - self) * t

    def is_between(self, a: 'Point', b: 'Point') -> bool:
        """
        Check whether this point lies on the closed segment ``a-b``.

        :param a: Segment start.
        :type a: Point
        :param b: Segment end.
        :type b: Point
        :return: True if collinear with ``a, b`` and inside their box.
        :rtype: bool
        """
        base = b - a
        if base.length() > settings.tolerance_epsilon:
            if base.cross(self - a).length() > settings.tolerance_epsilon:
                return False
        within_x = min(a.x, b.x) <= self.x <= max(a.x, b.x)
        within_y = min(a.y, b.y) <= self.y <= max(a.y, b.y)
        within_z = min(a.z, b.z) <= self.z <= max(a.z, b.z)
        return within_x and within_y and within_z

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_2d(self) -> 'Point':
        return Point(self.x, self.y, 0.0)

    @staticmethod
    def lerp(p0: 'Point', p1: 'Point', t: float) -> 'Point':
        if t < 0 or t > 1:
            raise InvalidInputError("Parameter t outside range 0 to 1 (inclusive)")
        return Point(p0.x + (p1.x - p0.x) * t,
                     p0.y + (p1.y - p0.y) * t,
                     p0.z + (p1.z - p0.z) * t)

    @staticmethod
    def from_array(values: Sequence[float]) -> 'Point':
        values = [float(v) for v in values]
        if len(values) == 2:
            values.append(0.0)
        if len(values) != 3:
            raise InvalidInputError(f"Cannot build a Point from {len(values)} values")
        return Point(*values)


def centroid(points: Iterable[Point]) -> Point:
    """
    Arithmetic mean of a set of points.

    :param points: Input points.
    :type points: Iterable[Point]
    :return: Mean point; the origin for an empty input.
    :rtype: Point
    """
    points = list(points)
    if not points:
        return Point()
    n = len(points)
    return Point(sum(p.x for p in points) / n,
                 sum(p.y for p in points) / n,
                 sum(p.z for p in points) / n)


def to_points(values: Iterable) -> List[Point]:
    """Build Points from ``(x, y[, z])`` rows or pass Points through."""
    return [v if isinstance(v, Point) else Point.from_array(v) for v in values]


def distinct_points(points: Iterable[Point]) -> List[Point]:
    """Drop repeated points, keeping first occurrences in order."""
    return list(dict.fromkeys(points))


def normalize(v: Point) -> Point:
    length = v.length()
    if length == 0:
        raise InvalidInputError("Illegal operation for a zero-length vector")
    return v * (1.0 / length)


def project(u: Point, v: Point) -> Point:
    """Projection of ``u`` onto ``v``."""
    denom = v.length_sq()
    if denom == 0:
        raise InvalidInputError("Illegal operation for a zero-length vector")
    return v * (u.dot(v) / denom)


def angle_between(u: Point, v: Point) -> float:
    """Angle between two vectors in radians, in ``[0, pi]``."""
    cos_theta = normalize(u).dot(normalize(v))
    return math.acos(max(-1.0, min(1.0, cos_theta)))
