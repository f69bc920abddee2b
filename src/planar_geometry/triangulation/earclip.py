# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Ear-clipping triangulation of simple polygons.

The polygon may be concave and may lie in any plane. It is rotated onto
the z-plane with its normal pointing up, so that its boundary runs
counter-clockwise, and ears are clipped there. Output triangles are
built from the caller's own Points.
"""

from typing import List, Sequence, Tuple

import structlog

from ..exceptions import ComplexPolygonError, InvalidInputError
from ..geometry.affine import polygon_normal, rotate_points, rotation_to_z_plane
from ..geometry.hull import are_points_collinear, are_points_coplanar
from ..geometry.points import Point, distinct_points, to_points
from ..geometry.predicates import orientation
from ..geometry.shapes import Triangle

logger = structlog.get_logger()


def prepare_polygon(polygon: Sequence) -> Tuple[List[Point], List[Point]]:
    """
    Validate a polygon and bring it onto the z-plane.

    A closing duplicate of the first point is dropped, as are repeated
    points.

    :param polygon: Boundary points in order, either winding.
    :type polygon: Sequence
    :return: ``(planar, originals)``: index-aligned lists of the rotated
        counter-clockwise points and the caller's points.
    :rtype: Tuple[List[Point], List[Point]]
    :raises InvalidInputError: With fewer than 3 distinct points, or when
        the points are not coplanar or are all collinear.
    """
    points = to_points(polygon)
    if len(points) > 1 and points[-1] == points[0]:
        points = points[:-1]
    originals = distinct_points(points)
    if len(originals) < 3:
        raise InvalidInputError(f"A polygon needs at least 3 distinct points, got {len(originals)}")
    if not are_points_coplanar(originals):
        raise InvalidInputError("Polygon points are not coplanar")
    if are_points_collinear(originals):
        raise InvalidInputError("Polygon points are collinear")

    normal = polygon_normal(originals)
    if normal.is_zero():
        raise ComplexPolygonError("Polygon has zero signed area; it is self-intersecting")
    rotated = rotate_points(originals, rotation_to_z_plane(normal))
    planar = [Point(p.x, p.y) for p in rotated]
    return planar, originals


def _inside_or_on(p: Point, a: Point, b: Point, c: Point) -> bool:
    return (orientation(a.x, a.y, b.x, b.y, p.x, p.y) >= 0
            and orientation(b.x, b.y, c.x, c.y, p.x, p.y) >= 0
            and orientation(c.x, c.y, a.x, a.y, p.x, p.y) >= 0)


def _is_ear(planar: List[Point], remaining: List[int], k: int) -> bool:
    m = len(remaining)
    i_prev, i_cur, i_next = remaining[k - 1], remaining[k], remaining[(k + 1) % m]
    a, b, c = planar[i_prev], planar[i_cur], planar[i_next]
    if orientation(a.x, a.y, b.x, b.y, c.x, c.y) <= 0:
        return False
    for j in remaining:
        if j in (i_prev, i_cur, i_next):
            continue
        if _inside_or_on(planar[j], a, b, c):
            return False
    return True


def ear_clip_indices(planar: List[Point]) -> List[Tuple[int, int, int]]:
    """
    Clip ears from a counter-clockwise polygon.

    :param planar: Distinct polygon points on the z-plane, counter-clockwise.
    :type planar: List[Point]
    :return: ``n - 2`` index triples, each counter-clockwise.
    :rtype: List[Tuple[int, int, int]]
    :raises ComplexPolygonError: When no ear can be found.
    """
    remaining = list(range(len(planar)))
    triangles = []
    while len(remaining) > 3:
        for k in range(len(remaining)):
            if _is_ear(planar, remaining, k):
                m = len(remaining)
                triangles.append((remaining[k - 1], remaining[k], remaining[(k + 1) % m]))
                del remaining[k]
                break
        else:
            raise ComplexPolygonError(
                f"No ear found with {len(remaining)} points left; the polygon is not simple"
            )

    a, b, c = (planar[i] for i in remaining)
    if orientation(a.x, a.y, b.x, b.y, c.x, c.y) <= 0:
        raise ComplexPolygonError("Last remaining triangle is degenerate or inverted")
    triangles.append(tuple(remaining))
    return triangles


def ear_clipping_triangulation(polygon: Sequence) -> List[Triangle]:
    """
    Triangulate a simple polygon by ear clipping.

    :param polygon: Boundary points in order; Points or ``(x, y[, z])`` rows.
    :type polygon: Sequence
    :return: ``n - 2`` triangles made of the caller's points.
    :rtype: List[Triangle]
    """
    planar, originals = prepare_polygon(polygon)
    indices = ear_clip_indices(planar)
    logger.debug("ear_clipping", points=len(originals), triangles=len(indices))
    return [oriented_triangle(originals[a], originals[b], originals[c]) for a, b, c in indices]


def oriented_triangle(a: Point, b: Point, c: Point) -> Triangle:
    """
    Triangle of ``a, b, c``, reordered counter-clockwise when all three
    lie on the z-plane. A clockwise input polygon is clipped mirrored, so
    its triangles come back clockwise in the caller's frame.
    """
    if a.z == 0 and b.z == 0 and c.z == 0 and orientation(a.x, a.y, b.x, b.y, c.x, c.y) < 0:
        b, c = c, b
    return Triangle([a, b, c])
