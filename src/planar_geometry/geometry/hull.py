# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Convex hull and degeneracy detectors for raw point sets.

These work directly on Points and are independent of the triangulators.
"""

import math
from typing import List, Sequence

import structlog

from ..config import settings
from ..exceptions import InvalidInputError
from .points import Point, centroid, distinct_points
from .predicates import orientation

logger = structlog.get_logger()


def _signed(p: Point, q: Point, r: Point) -> float:
    return orientation(p.x, p.y, q.x, q.y, r.x, r.y)


def are_points_collinear(points: Sequence[Point], tolerance: float = None) -> bool:
    """
    Check whether all points lie on one line.

    Fewer than three distinct points are trivially collinear.

    :param points: Input points (z is taken into account).
    :type points: Sequence[Point]
    :param tolerance: Maximum cross product length; defaults to
        ``settings.tolerance_epsilon``.
    :type tolerance: float
    :return: True if collinear.
    :rtype: bool
    """
    tolerance = settings.tolerance_epsilon if tolerance is None else tolerance
    points = distinct_points(points)
    if len(points) < 3:
        return True
    a, b = points[0], points[1]
    ab = b - a
    return all(ab.cross(p - a).length() <= tolerance for p in points[2:])


def are_points_coplanar(points: Sequence[Point]) -> bool:
    """
    Check whether all points lie on one plane.

    Collinear sets and sets of fewer than four points are coplanar.
    """
    points = distinct_points(points)
    if len(points) < 4 or are_points_collinear(points):
        return True
    a, b = points[0], points[1]
    normal = None
    for c in points[2:]:
        candidate = (b - a).cross(c - a)
        if candidate.length() > settings.tolerance_epsilon:
            normal = candidate * (1.0 / candidate.length())
            break
    if normal is None:
        return True
    extent = max(1.0, max(a.distance_to(p) for p in points))
    limit = settings.degenerate_area_epsilon * extent
    return all(abs(normal.dot(p - a)) <= limit for p in points)


def sort_convex_points_ccw(points: Sequence[Point]) -> List[Point]:
    """Sort points counter-clockwise by their angle around the centroid."""
    center = centroid(points)
    return sorted(points, key=lambda p: math.atan2(p.y - center.y, p.x - center.x))


def _chain(p: Point, q: Point, candidates: List[Point]) -> List[Point]:
    # Hull vertices strictly between p and q; candidates lie right of p->q
    if not candidates:
        return []
    farthest = min(candidates, key=lambda r: _signed(p, q, r))
    right_of_pf = [r for r in candidates if _signed(p, farthest, r) < 0]
    right_of_fq = [r for r in candidates if _signed(farthest, q, r) < 0]
    return _chain(p, farthest, right_of_pf) + [farthest] + _chain(farthest, q, right_of_fq)


def quick_hull(points: Sequence[Point]) -> List[Point]:
    """
    Convex hull of a planar point set.

    Splits the set along the line through the extreme-x points and
    recursively keeps the point farthest from each hull edge.

    :param points: Input points; z is ignored.
    :type points: Sequence[Point]
    :return: Hull vertices counter-clockwise, starting at the minimum-x
        point, with collinear boundary points left out.
    :rtype: List[Point]
    :raises InvalidInputError: With fewer than 3 distinct points or when
        all points are collinear.
    """
    points = distinct_points(points)
    if len(points) < 3:
        raise InvalidInputError(f"Convex hull needs at least 3 distinct points, got {len(points)}")
    if are_points_collinear([p.to_2d() for p in points]):
        raise InvalidInputError("Convex hull of collinear points is degenerate")

    a = min(points, key=lambda p: (p.x, p.y))
    b = max(points, key=lambda p: (p.x, p.y))
    below = [r for r in points if _signed(a, b, r) < 0]
    above = [r for r in points if _signed(b, a, r) < 0]
    hull = [a] + _chain(a, b, below) + [b] + _chain(b, a, above)
    logger.debug("quick_hull", points=len(points), hull=len(hull))
    return hull
