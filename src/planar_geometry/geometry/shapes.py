# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Polygon shapes: bounding boxes, undirected edges, polygons and triangles.

A shape carries no global id. Inside a dual graph a shape is identified
by the index of the node that owns it.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from shapely.geometry import Polygon

from ..exceptions import InvalidInputError
from .points import Point, centroid
from .spheres import Sphere, calc_circumcircle


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned 2D box."""

    min_x: float = math.inf
    min_y: float = math.inf
    max_x: float = -math.inf
    max_y: float = -math.inf

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> 'BoundingBox':
        points = list(points)
        if not points:
            return cls()
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))

    @classmethod
    def around(cls, point: Point, half_size: float) -> 'BoundingBox':
        return cls(point.x - half_size, point.y - half_size,
                   point.x + half_size, point.y + half_size)

    def is_empty(self) -> bool:
        return self.min_x > self.max_x or self.min_y > self.max_y

    def intersects(self, other: 'BoundingBox') -> bool:
        return (other.min_x <= self.max_x and other.min_y <= self.max_y
                and other.max_x >= self.min_x and other.max_y >= self.min_y)

    def contains(self, other: 'BoundingBox') -> bool:
        return (self.min_x <= other.min_x and self.min_y <= other.min_y
                and other.max_x <= self.max_x and other.max_y <= self.max_y)

    def contains_point(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def extend(self, other: 'BoundingBox') -> 'BoundingBox':
        return BoundingBox(min(self.min_x, other.min_x), min(self.min_y, other.min_y),
                           max(self.max_x, other.max_x), max(self.max_y, other.max_y))

    def area(self) -> float:
        return (self.max_x - self.min_x) * (self.max_y - self.min_y)

    def margin(self) -> float:
        return (self.max_x - self.min_x) + (self.max_y - self.min_y)

    def enlarged_area(self, other: 'BoundingBox') -> float:
        """Area of the box covering both ``self`` and ``other``."""
        return ((max(other.max_x, self.max_x) - min(other.min_x, self.min_x))
                * (max(other.max_y, self.max_y) - min(other.min_y, self.min_y)))

    def intersection_area(self, other: 'BoundingBox') -> float:
        min_x = max(self.min_x, other.min_x)
        min_y = max(self.min_y, other.min_y)
        max_x = min(self.max_x, other.max_x)
        max_y = min(self.max_y, other.max_y)
        return max(0.0, max_x - min_x) * max(0.0, max_y - min_y)


@dataclass(frozen=True, eq=False)
class PolygonEdge:
    """Undirected edge; equal to its reverse."""

    start: Point
    end: Point

    def __eq__(self, other):
        if not isinstance(other, PolygonEdge):
            return NotImplemented
        return ((self.start == other.start and self.end == other.end)
                or (self.start == other.end and self.end == other.start))

    def __hash__(self):
        return hash(frozenset((self.start, self.end)))

    def connects_to(self, point: Point) -> Optional[Point]:
        """Return the opposite endpoint if ``point`` is one of the ends."""
        if self.start == point:
            return self.end
        if self.end == point:
            return self.start
        return None

    def length(self) -> float:
        return self.start.distance_to(self.end)


def polygon_signed_area(points: Sequence[Point]) -> float:
    """Shoelace signed area in the xy plane; positive when CCW."""
    n = len(points)
    acc = 0.0
    for i in range(n):
        p = points[i]
        q = points[(i + 1) % n]
        acc += p.x * q.y - q.x * p.y
    return acc / 2


def polygon_centroid(points: Sequence[Point]) -> Point:
    """
    Area centroid of a simple polygon in the xy plane.

    Falls back to the vertex mean for polygons with zero area.

    :param points: Polygon vertices.
    :type points: Sequence[Point]
    :return: Centroid.
    :rtype: Point
    """
    n = len(points)
    area = 0.0
    cx = cy = 0.0
    for i in range(n):
        p = points[i]
        q = points[(i + 1) % n]
        cross = p.x * q.y - q.x * p.y
        area += cross
        cx += (p.x + q.x) * cross
        cy += (p.y + q.y) * cross
    if area == 0:
        return centroid(points)
    area *= 3
    return Point(cx / area, cy / area)


class PolygonShape:
    """
    Ordered cyclic sequence of points.

    :param points: Vertices; consecutive duplicates are rejected.
    :type points: Sequence[Point]
    """

    def __init__(self, points: Sequence[Point]):
        points = tuple(points)
        if len(points) < 3:
            raise InvalidInputError(f"A polygon needs at least 3 points, got {len(points)}")
        for i, p in enumerate(points):
            if p == points[(i + 1) % len(points)]:
                raise InvalidInputError(f"Duplicate consecutive vertex {p}")
        self._points = points

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._points

    def __len__(self):
        return len(self._points)

    def __repr__(self):
        return f"{type(self).__name__}({list(self._points)!r})"

    def same_as(self, other: 'PolygonShape') -> bool:
        return self._points == other.points

    def edges(self) -> List[PolygonEdge]:
        n = len(self._points)
        return [PolygonEdge(self._points[i], self._points[(i + 1) % n]) for i in range(n)]

    def shares_edge_with(self, other: 'PolygonShape') -> bool:
        mine = set(self.edges())
        return any(edge in mine for edge in other.edges())

    def edge_index(self, edge: PolygonEdge) -> int:
        """Index of the first vertex of ``edge`` in this shape, or -1."""
        for i, candidate in enumerate(self.edges()):
            if candidate == edge:
                return i
        return -1

    def contains_point(self, x: float, y: float) -> bool:
        """Even-odd ray casting test."""
        inside = False
        pts = self._points
        j = len(pts) - 1
        for i in range(len(pts)):
            xi, yi = pts[i].x, pts[i].y
            xj, yj = pts[j].x, pts[j].y
            if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
                inside = not inside
            j = i
        return inside

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self._points)

    def signed_area(self) -> float:
        return polygon_signed_area(self._points)

    def centroid(self) -> Point:
        return polygon_centroid(self._points)

    def to_shapely(self) -> Polygon:
        return Polygon([(p.x, p.y) for p in self._points])


class Triangle(PolygonShape):
    """Polygon with exactly three points."""

    def __init__(self, points: Sequence[Point]):
        if len(points) != 3:
            raise InvalidInputError(f"A triangle needs exactly 3 points, got {len(points)}")
        super().__init__(points)

    def circumcircle(self) -> Sphere:
        """
        Circle through the three vertices.

        :return: Center and radius.
        :rtype: Sphere
        """
        a, b, c = self._points
        return calc_circumcircle(a, b, c)

    def angles(self) -> Tuple[float, float, float]:
        """Interior angles in degrees, one per vertex."""
        a, b, c = self._points
        la = b.distance_to(c)
        lb = a.distance_to(c)
        lc = a.distance_to(b)

        def _angle(opposite, s1, s2):
            cos_theta = (s1 * s1 + s2 * s2 - opposite * opposite) / (2 * s1 * s2)
            return math.degrees(math.acos(max(-1.0, min(1.0, cos_theta))))

        return _angle(la, lb, lc), _angle(lb, la, lc), _angle(lc, la, lb)
