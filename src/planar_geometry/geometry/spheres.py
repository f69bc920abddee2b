# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Enclosing circles and spheres.

``min_sphere`` is an approximation: it expands a starting sphere until
every point is covered, which does not give the exact minimal sphere
that Welzl's algorithm would. ``enclosing_sphere`` is exact for up to
four points.
"""

from itertools import combinations
from typing import List, NamedTuple, Optional, Sequence

import numpy as np
import structlog

from ..config import settings
from ..exceptions import InvalidInputError
from .hull import are_points_collinear, are_points_coplanar
from .points import Point, centroid, distinct_points

logger = structlog.get_logger()


class Sphere(NamedTuple):
    """Center and radius; a circle when z is 0 throughout."""

    origin: Point
    radius: float


def is_in_sphere(sphere: Sphere, p: Point) -> bool:
    return p.distance_to(sphere.origin) <= sphere.radius


def calc_diameter(a: Point, b: Point) -> Sphere:
    """Smallest sphere through two points."""
    center = a.midpoint(b)
    return Sphere(center, max(center.distance_to(a), center.distance_to(b)))


def calc_circumcircle(a: Point, b: Point, c: Point) -> Sphere:
    """
    Circle through three points, in the plane they span.

    :raises InvalidInputError: When the points are collinear.
    """
    ab = b - a
    ac = c - a
    normal = ab.cross(ac)
    denom = 2 * normal.length_sq()
    if denom == 0 or are_points_collinear([a, b, c]):
        raise InvalidInputError(f"Collinear points have no circumcircle: {a}, {b}, {c}")
    offset = (normal.cross(ab) * ac.length_sq() + ac.cross(normal) * ab.length_sq()) * (1.0 / denom)
    center = a + offset
    return Sphere(center, offset.length())


def calc_circumsphere(a: Point, b: Point, c: Point, d: Point) -> Optional[Sphere]:
    """
    Sphere through four points, or None when they are coplanar.

    :param a: First point.
    :type a: Point
    :param b: Second point.
    :type b: Point
    :param c: Third point.
    :type c: Point
    :param d: Fourth point.
    :type d: Point
    :return: Circumsphere.
    :rtype: Optional[Sphere]
    """
    origin = a.as_array()
    rows = np.array([b.as_array() - origin, c.as_array() - origin, d.as_array() - origin])
    det = np.linalg.det(rows)
    scale = max(np.abs(rows).max(), 1.0) ** 3
    if abs(det) <= settings.tolerance_epsilon * scale:
        return None
    rhs = 0.5 * np.einsum('ij,ij->i', rows, rows)
    offset = np.linalg.solve(rows, rhs)
    center = Point.from_array(origin + offset)
    return Sphere(center, float(np.linalg.norm(offset)))


def min_sphere(points: Sequence[Point]) -> Sphere:
    """
    Approximate minimum enclosing sphere.

    Starts from the diameter sphere between the point farthest from the
    centroid and the point farthest from that one, then for every point
    still outside moves the center toward it and grows the radius by half
    the excess. Passes repeat until no point is outside or
    ``settings.min_sphere_max_passes`` is reached.

    :param points: Input points.
    :type points: Sequence[Point]
    :return: Sphere covering all points.
    :rtype: Sphere
    """
    points = list(points)
    if not points:
        raise InvalidInputError("Cannot enclose an empty point set")
    mean = centroid(points)
    first = max(points, key=mean.distance_to)
    second = max(points, key=first.distance_to)
    center, radius = calc_diameter(first, second)

    for _ in range(settings.min_sphere_max_passes):
        moved = False
        for p in points:
            distance = center.distance_to(p)
            if distance > radius:
                excess = (distance - radius) / 2
                center = center + (p - center) * (excess / distance)
                radius += excess
                moved = True
        if not moved:
            break
    # final guard against rounding
    radius = max(radius, max(center.distance_to(p) for p in points))
    return Sphere(center, radius)


def _covers(sphere: Sphere, points: List[Point]) -> bool:
    limit = sphere.radius * (1 + 1e-12) + settings.tolerance_epsilon
    return all(p.distance_to(sphere.origin) <= limit for p in points)


def enclosing_sphere(points: Sequence[Point]) -> Sphere:
    """
    Enclosing sphere using the exact formula when one applies.

    Up to four distinct points the smallest of the diameter, circumcircle
    and circumsphere candidates covering every point is returned. Larger
    sets and degenerate configurations fall back to :func:`min_sphere`.
    """
    points = distinct_points(points)
    if not points:
        raise InvalidInputError("Cannot enclose an empty point set")
    if len(points) == 1:
        return Sphere(points[0], 0.0)
    if len(points) > 4:
        return min_sphere(points)

    candidates = [calc_diameter(a, b) for a, b in combinations(points, 2)]
    if len(points) >= 3:
        for a, b, c in combinations(points, 3):
            if not are_points_collinear([a, b, c]):
                candidates.append(calc_circumcircle(a, b, c))
    if len(points) == 4 and not are_points_coplanar(points):
        sphere = calc_circumsphere(*points)
        if sphere is not None:
            candidates.append(sphere)

    covering = [s for s in candidates if _covers(s, points)]
    if not covering:
        logger.warning("enclosing_sphere_fallback", points=len(points))
        return min_sphere(points)
    return min(covering, key=lambda s: s.radius)
