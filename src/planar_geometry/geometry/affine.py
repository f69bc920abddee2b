# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Affine helpers: orientation cases, signed areas and volumes, plane
normals and the rotation that brings a planar polygon onto the z-plane.
"""

import math
from enum import IntEnum
from typing import List, Sequence, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from ..exceptions import InvalidInputError
from .points import Point, normalize


class Orientation(IntEnum):
    COLLINEAR = 0
    COUNTER_CLOCKWISE = 1
    CLOCKWISE = -1


def signed_area_2d(p1: Point, p2: Point, p3: Point) -> float:
    """Twice the signed area of the triangle projected on the xy plane."""
    return (p2.x - p1.x) * (p3.y - p1.y) - (p2.y - p1.y) * (p3.x - p1.x)


def signed_volume_3d(p1: Point, p2: Point, p3: Point, p4: Point) -> float:
    """Six times the signed volume of the tetrahedron ``p1..p4``."""
    return (p2 - p1).cross(p3 - p1).dot(p4 - p1)


def _case(value: float) -> Orientation:
    if value == 0:
        return Orientation.COLLINEAR
    return Orientation.COUNTER_CLOCKWISE if value > 0 else Orientation.CLOCKWISE


def orientation_2d(p1: Point, p2: Point, p3: Point) -> Orientation:
    return _case(signed_area_2d(p1, p2, p3))


def orientation_3d(p1: Point, p2: Point, p3: Point, p4: Point) -> Orientation:
    return _case(signed_volume_3d(p1, p2, p3, p4))


def polygon_normal(points: Sequence[Point]) -> Point:
    """
    Newell normal of a closed polygon.

    Works for concave polygons, where the cross product of the first
    three vertices can point the wrong way. The length equals twice the
    polygon's area.

    :param points: Polygon vertices in order.
    :type points: Sequence[Point]
    :return: Unnormalized normal vector.
    :rtype: Point
    """
    nx = ny = nz = 0.0
    n = len(points)
    for i in range(n):
        cur = points[i]
        nxt = points[(i + 1) % n]
        nx += (cur.y - nxt.y) * (cur.z + nxt.z)
        ny += (cur.z - nxt.z) * (cur.x + nxt.x)
        nz += (cur.x - nxt.x) * (cur.y + nxt.y)
    return Point(nx, ny, nz)


def calculate_plane_normal(p1: Point, p2: Point, p3: Point) -> Point:
    """Unit normal of the plane through three points."""
    return normalize((p2 - p1).cross(p3 - p1))


def find_orthonormal_base(n: Point) -> Tuple[Point, Point, Point]:
    """
    Build an orthonormal base ``(u, v, w)`` with ``w`` along ``n``.

    :param n: Non-zero direction.
    :type n: Point
    :return: The three unit vectors.
    :rtype: Tuple[Point, Point, Point]
    """
    w = normalize(n)
    v = w.cross(Point(1.0, 0.0, 0.0))
    # w parallel to the x axis
    if v.is_zero():
        v = w.cross(Point(0.0, 1.0, 0.0))
    v = normalize(v)
    u = normalize(v.cross(w))
    return u, v, w


def rotation_to_z_plane(normal: Point) -> Rotation:
    """
    Rotation that maps ``normal`` onto the positive z axis.

    :param normal: Plane normal, any non-zero length.
    :type normal: Point
    :return: scipy rotation; apply its inverse to go back.
    :rtype: Rotation
    """
    n = normalize(normal).as_array()
    z = np.array([0.0, 0.0, 1.0])
    axis = np.cross(n, z)
    sin_angle = np.linalg.norm(axis)
    cos_angle = float(np.dot(n, z))
    if sin_angle == 0:
        if cos_angle > 0:
            return Rotation.identity()
        return Rotation.from_rotvec([math.pi, 0.0, 0.0])
    angle = math.atan2(sin_angle, cos_angle)
    return Rotation.from_rotvec(axis / sin_angle * angle)


def rotate_points(points: Sequence[Point], rotation: Rotation) -> List[Point]:
    if not points:
        return []
    coords = rotation.apply(np.array([p.as_array() for p in points]))
    return [Point(*row) for row in coords.tolist()]


def rotate_vector(vector: Point, angle: float, axis: Point = Point(0.0, 1.0, 0.0)) -> Point:
    """Rotate ``vector`` by ``angle`` radians around ``axis``."""
    rotvec = normalize(axis).as_array() * angle
    return Point(*Rotation.from_rotvec(rotvec).apply(vector.as_array()).tolist())


def pseudo_angle(dx: float, dy: float) -> float:
    """Monotonic stand-in for ``atan2(dy, dx)`` mapped to ``[0, 1)``."""
    p = dx / (abs(dx) + abs(dy))
    return (3 - p if dy > 0 else 1 + p) / 4


def pseudo_angle_as_square_perimeter(dx: float, dy: float) -> float:
    """
    Pseudo-angle of a 2D vector measured along the perimeter of a square.

    Increases counter-clockwise from the positive x axis, in ``[0, 8)``.

    :param dx: Vector x component.
    :type dx: float
    :param dy: Vector y component.
    :type dy: float
    :return: Pseudo-angle.
    :rtype: float
    """
    if dx == 0 and dy == 0:
        raise InvalidInputError("Illegal operation for a zero-length vector")
    if dy >= 0:
        if dx >= 0:
            acc = 2 * (dy / (dx + dy))
        else:
            acc = 2 + 2 * (-dx / (dy - dx))
    else:
        if dx <= 0:
            acc = 4 + 2 * (-dy / (-dy - dx))
        else:
            acc = 6 + 2 * (dx / (dx - dy))
    return min(max(acc, 0.0), 8.0)


def interpolate_points(points: Sequence[Point], scalars: Sequence[float]) -> Point:
    """Weighted sum of points."""
    if len(points) != len(scalars):
        raise InvalidInputError("Points and scalars must have the same length")
    acc = Point()
    for p, k in zip(points, scalars):
        acc = acc + p * k
    return acc
