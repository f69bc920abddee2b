# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Unit tests for convex hulls, collinearity checks and enclosing spheres."""

import math

import numpy as np
import pytest
from scipy.spatial import ConvexHull

from planar_geometry.exceptions import InvalidInputError
from planar_geometry.geometry.hull import (
    are_points_collinear,
    are_points_coplanar,
    quick_hull,
    sort_convex_points_ccw,
)
from planar_geometry.geometry.points import Point
from planar_geometry.geometry.shapes import polygon_signed_area
from planar_geometry.geometry.spheres import (
    calc_circumcircle,
    calc_circumsphere,
    calc_diameter,
    enclosing_sphere,
    is_in_sphere,
    min_sphere,
)


def _random_points(n, seed=0, scale=5.0):
    rng = np.random.default_rng(seed)
    return [Point(float(x), float(y)) for x, y in rng.uniform(-scale, scale, (n, 2))]


def test_collinear_and_coplanar_checks():
    line = [Point(0, y) for y in range(5)]
    assert are_points_collinear(line)
    assert are_points_collinear([Point(0, 0), Point(1, 1)])
    assert not are_points_collinear(line + [Point(1, 0)])

    flat = [Point(0, 0), Point(1, 0), Point(0, 1), Point(1, 1)]
    assert are_points_coplanar(flat)
    assert not are_points_coplanar([Point(0, 0, 0), Point(1, 0, 0), Point(0, 1, 0), Point(0, 0, 1)])
    tilted = [Point(0, 0, 0), Point(1, 0, 1), Point(1, 1, 1), Point(0, 1, 0), Point(0.5, 0.5, 0.5)]
    assert are_points_coplanar(tilted)


def test_quick_hull_of_square_drops_interior_and_collinear_points():
    points = [Point(0, 0), Point(1, 0), Point(-1, -1), Point(1, -1), Point(1, 1),
              Point(-1, 1), Point(0.5, -0.25)]
    hull = quick_hull(points)
    assert hull == [Point(-1, -1), Point(1, -1), Point(1, 1), Point(-1, 1)]


def test_quick_hull_matches_scipy():
    points = _random_points(200, seed=3)
    hull = quick_hull(points)
    reference = ConvexHull(np.array([(p.x, p.y) for p in points]))
    assert {(p.x, p.y) for p in hull} == {(points[i].x, points[i].y) for i in reference.vertices}
    assert polygon_signed_area(hull) > 0
    assert np.isclose(polygon_signed_area(hull), reference.volume)


def test_quick_hull_rejects_degenerate_input():
    with pytest.raises(InvalidInputError):
        quick_hull([Point(0, 0), Point(1, 1)])
    with pytest.raises(InvalidInputError):
        quick_hull([Point(x, 0) for x in range(5)])
    with pytest.raises(InvalidInputError):
        quick_hull([Point(x, 2 * x) for x in range(5)])


def test_sort_convex_points_ccw():
    square = [Point(1, 1), Point(-1, -1), Point(1, -1), Point(-1, 1)]
    ordered = sort_convex_points_ccw(square)
    assert set(ordered) == set(square)
    assert polygon_signed_area(ordered) > 0


def test_circumcircle_of_right_triangle():
    circle = calc_circumcircle(Point(0, 0), Point(1, 0), Point(0, 1))
    assert np.isclose(circle.origin.x, 0.5)
    assert np.isclose(circle.origin.y, 0.5)
    assert np.isclose(circle.radius, math.sqrt(0.5))


def test_circumcircle_in_3d():
    a, b, c = Point(1, 0, 0), Point(0, 1, 0), Point(0, 0, 1)
    circle = calc_circumcircle(a, b, c)
    assert np.allclose(circle.origin.as_array(), [1 / 3, 1 / 3, 1 / 3])
    for p in (a, b, c):
        assert np.isclose(p.distance_to(circle.origin), circle.radius)


def test_circumcircle_of_collinear_points_raises():
    with pytest.raises(InvalidInputError):
        calc_circumcircle(Point(0, 0), Point(1, 1), Point(2, 2))


def test_circumsphere():
    sphere = calc_circumsphere(Point(1, 0, 0), Point(-1, 0, 0), Point(0, 1, 0), Point(0, 0, 1))
    assert np.allclose(sphere.origin.as_array(), [0, 0, 0])
    assert np.isclose(sphere.radius, 1.0)
    assert calc_circumsphere(Point(0, 0), Point(1, 0), Point(0, 1), Point(1, 1)) is None


def test_diameter_sphere():
    sphere = calc_diameter(Point(0, 0), Point(4, 0))
    assert sphere.origin == Point(2, 0)
    assert sphere.radius == 2
    assert is_in_sphere(sphere, Point(2, 2))
    assert not is_in_sphere(sphere, Point(2, 2.1))


def test_min_sphere_covers_all_points():
    points = _random_points(300, seed=7)
    sphere = min_sphere(points)
    assert all(p.distance_to(sphere.origin) <= sphere.radius for p in points)
    # any enclosing circle is at least half the diameter of the set
    diameter = max(p.distance_to(q) for p in points for q in points)
    assert sphere.radius >= diameter / 2
    assert sphere.radius <= diameter


def test_min_sphere_rejects_empty_input():
    with pytest.raises(InvalidInputError):
        min_sphere([])


def test_enclosing_sphere_small_sets():
    assert enclosing_sphere([Point(3, 4)]).radius == 0

    two = enclosing_sphere([Point(0, 0), Point(4, 0)])
    assert np.allclose(two.origin.as_array(), [2, 0, 0])
    assert np.isclose(two.radius, 2)

    right = enclosing_sphere([Point(0, 0), Point(1, 0), Point(0, 1)])
    assert np.allclose(right.origin.as_array(), [0.5, 0.5, 0])
    assert np.isclose(right.radius, math.sqrt(0.5))

    # obtuse triangle: the longest side is the diameter
    obtuse = enclosing_sphere([Point(0, 0), Point(4, 0), Point(1, 1)])
    assert np.allclose(obtuse.origin.as_array(), [2, 0, 0])
    assert np.isclose(obtuse.radius, 2)
