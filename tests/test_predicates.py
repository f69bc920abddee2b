# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Unit tests for the adaptive exact orientation and incircle predicates.

Signs are checked against exact rational arithmetic on inputs built one
ulp at a time around degenerate configurations, where naive floating
point evaluation gets the sign wrong.
"""

import math
from fractions import Fraction

from planar_geometry.geometry.points import Point
from planar_geometry.geometry.predicates import (
    estimate,
    expansion_sum,
    in_circumcircle,
    incircle,
    orient,
    orientation,
    scale_expansion,
    split,
    two_product,
    two_sum,
)


def _sign(value):
    return (value > 0) - (value < 0)


def _exact_orientation(ax, ay, bx, by, cx, cy):
    ax, ay, bx, by, cx, cy = (Fraction(v) for v in (ax, ay, bx, by, cx, cy))
    return (ax - cx) * (by - cy) - (ay - cy) * (bx - cx)


def _exact_incircle(ax, ay, bx, by, cx, cy, dx, dy):
    ax, ay, bx, by, cx, cy, dx, dy = (Fraction(v) for v in (ax, ay, bx, by, cx, cy, dx, dy))
    adx, ady = ax - dx, ay - dy
    bdx, bdy = bx - dx, by - dy
    cdx, cdy = cx - dx, cy - dy
    alift = adx * adx + ady * ady
    blift = bdx * bdx + bdy * bdy
    clift = cdx * cdx + cdy * cdy
    return (alift * (bdx * cdy - cdx * bdy)
            + blift * (cdx * ady - adx * cdy)
            + clift * (adx * bdy - bdx * ady))


def _ulp_steps(start, count):
    values = [start]
    for _ in range(count - 1):
        values.append(math.nextafter(values[-1], math.inf))
    return values


def test_two_sum_is_exact():
    x, y = two_sum(1.0, 1e-17)
    assert x == 1.0
    assert Fraction(x) + Fraction(y) == Fraction(1.0) + Fraction(1e-17)


def test_two_product_is_exact():
    x, y = two_product(0.1, 0.3)
    assert x == 0.1 * 0.3
    assert Fraction(x) + Fraction(y) == Fraction(0.1) * Fraction(0.3)


def test_split_halves_sum_back():
    for a in (0.1, 3.141592653589793, -12345.678, 1e-300):
        hi, lo = split(a)
        assert hi + lo == a


def test_expansion_sum_and_scale_are_exact():
    e = list(reversed(two_sum(1.0, 1e-20)))
    f = list(reversed(two_sum(3.0, 1e-30)))
    total = expansion_sum(e, f)
    expected = Fraction(1.0) + Fraction(1e-20) + Fraction(3.0) + Fraction(1e-30)
    assert sum(Fraction(v) for v in total) == expected
    assert estimate(total) == 4.0

    scaled = scale_expansion(e, 3.0)
    assert sum(Fraction(v) for v in scaled) == 3 * (Fraction(1.0) + Fraction(1e-20))


def test_orientation_basic_signs():
    assert orientation(0, 0, 1, 0, 0, 1) > 0
    assert orientation(0, 0, 0, 1, 1, 0) < 0
    assert orientation(0, 0, 1, 1, 2, 2) == 0


def test_orientation_near_degenerate_matches_exact_sign():
    # a grid of points one ulp apart around a point on the line y = x
    xs = _ulp_steps(0.5, 24)
    ys = _ulp_steps(0.5, 24)
    for ax in xs:
        for ay in ys:
            got = orientation(ax, ay, 12.0, 12.0, 24.0, 24.0)
            expected = _exact_orientation(ax, ay, 12.0, 12.0, 24.0, 24.0)
            assert _sign(got) == _sign(expected)


def test_incircle_basic_signs():
    # counter-clockwise unit circle points
    assert incircle(1, 0, 0, 1, -1, 0, 0, 0) > 0
    assert incircle(1, 0, 0, 1, -1, 0, 0, -1) == 0
    assert incircle(1, 0, 0, 1, -1, 0, 0, -2) < 0
    # clockwise order flips the sign
    assert incircle(1, 0, -1, 0, 0, 1, 0, 0) < 0


def test_incircle_near_cocircular_matches_exact_sign():
    a = (0.1, 0.1)
    b = (0.3, 0.1)
    c = (0.3, 0.3)
    # (0.1, 0.3) is cocircular in exact arithmetic with the three above
    for dx in _ulp_steps(0.1, 12):
        for dy in _ulp_steps(0.3, 12):
            got = incircle(*a, *b, *c, dx, dy)
            expected = _exact_incircle(*a, *b, *c, dx, dy)
            assert _sign(got) == _sign(expected)


def test_point_wrappers():
    a, b, c = Point(0, 0), Point(1, 0), Point(0, 1)
    assert orient(a, b, c) == 1
    assert orient(a, c, b) == -1
    assert orient(a, b, Point(2, 0)) == 0
    assert in_circumcircle(a, b, c, Point(0.5, 0.5))
    assert not in_circumcircle(a, b, c, Point(1, 1))
    assert not in_circumcircle(a, b, c, Point(2, 2))
