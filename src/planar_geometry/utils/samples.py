# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Sample inputs and random point generation.

The sample polygons are closed (last point repeats the first) so they
also exercise closing-duplicate handling.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..geometry.points import Point
from .helpers import validate_bounds


@dataclass(frozen=True)
class SampleModel:
    """Named point list with a short description."""

    name: str
    description: str
    points: Tuple[Point, ...]


def _sample(name: str, description: str, coords) -> SampleModel:
    return SampleModel(name, description, tuple(Point(*c) for c in coords))


class PointGenerationType(Enum):
    RANDOM_BRUTE_FORCE = 'Random brute force'
    STRATIFIED_SAMPLING = 'Stratified sampling'


def bruteforce_points(n: int, bounds: Sequence[float],
                      rng: Optional[np.random.Generator] = None) -> List[Point]:
    """
    Uniform random points in a rectangle.

    :param n: Number of points.
    :type n: int
    :param bounds: ``(xmin, ymin, xmax, ymax)``.
    :type bounds: Sequence[float]
    :param rng: Random generator; a fresh unseeded one when omitted.
    :type rng: Optional[np.random.Generator]
    :return: Generated points.
    :rtype: List[Point]
    """
    xmin, ymin, xmax, ymax = validate_bounds(bounds)
    rng = rng if rng is not None else np.random.default_rng()
    xs = rng.uniform(xmin, xmax, n)
    ys = rng.uniform(ymin, ymax, n)
    return [Point(float(x), float(y)) for x, y in zip(xs, ys)]


def stratified_points(n: int, bounds: Sequence[float],
                      rng: Optional[np.random.Generator] = None,
                      strata_x: int = 2, strata_y: int = 2) -> List[Point]:
    """
    Random points spread over a grid of strata.

    Each stratum receives ``ceil(n / (strata_x * strata_y))`` points in
    turn until ``n`` points exist, so late strata may get fewer.

    :param strata_x: Number of strata along x.
    :type strata_x: int
    :param strata_y: Number of strata along y.
    :type strata_y: int
    """
    xmin, ymin, xmax, ymax = validate_bounds(bounds)
    rng = rng if rng is not None else np.random.default_rng()
    step_x = (xmax - xmin) / strata_x
    step_y = (ymax - ymin) / strata_y
    per_stratum = math.ceil(n / (strata_x * strata_y)) if n else 0

    points: List[Point] = []
    for i in range(strata_x):
        for j in range(strata_y):
            count = min(per_stratum, n - len(points))
            if count <= 0:
                return points
            xs = rng.uniform(0, step_x, count) + xmin + i * step_x
            ys = rng.uniform(0, step_y, count) + ymin + j * step_y
            points.extend(Point(float(x), float(y)) for x, y in zip(xs, ys))
    return points


def random_points(n: int, bounds: Sequence[float],
                  strategy: PointGenerationType = PointGenerationType.RANDOM_BRUTE_FORCE,
                  rng: Optional[np.random.Generator] = None) -> List[Point]:
    """Generate ``n`` points in ``bounds`` with the given strategy."""
    if strategy is PointGenerationType.STRATIFIED_SAMPLING:
        return stratified_points(n, bounds, rng)
    return bruteforce_points(n, bounds, rng)


def _circle(n: int, r: float) -> List[Tuple[float, float]]:
    return [(round(r * math.cos(2 * math.pi * i / n), 4), round(r * math.sin(2 * math.pi * i / n), 4))
            for i in range(n)]


def _axis(n: int) -> List[Tuple[float, float]]:
    return [(0.0, round(-5 + i * 10 / (n - 1), 2)) for i in range(n)]


def _square_edges(per_side: int) -> List[Tuple[float, float]]:
    steps = [round(-5 + i * 10 / (per_side - 1), 2) for i in range(per_side)]
    return ([(s, -5.0) for s in steps] + [(5.0, s) for s in steps]
            + [(-s, 5.0) for s in steps] + [(-5.0, -s) for s in steps])


SAMPLE_POLYGONS: List[SampleModel] = [
    _sample("Square", "A square with four equal sides.",
            [(-1, 1), (1, 1), (1, -1), (-1, -1), (-1, 1)]),
    _sample("5-Pointed Star", "A 5-pointed star polygon.",
            [(0, 1), (0.2245, 0.309), (0.951, 0.309), (0.363, -0.118), (0.588, -0.809),
             (0, -0.382), (-0.588, -0.809), (-0.363, -0.118), (-0.951, 0.309),
             (-0.2245, 0.309), (0, 1)]),
    _sample("Hexagon", "A regular hexagon with six equal sides.",
            [(0, 1), (0.866, 0.5), (0.866, -0.5), (0, -1), (-0.866, -0.5), (-0.866, 0.5), (0, 1)]),
    _sample("Regular Pentagon", "A regular pentagon with five equal sides.",
            [(0, 1), (0.951, 0.309), (0.588, -0.809), (-0.588, -0.809), (-0.951, 0.309), (0, 1)]),
    _sample("Concave Polygon 1", "A concave polygon with 17 points.",
            [(0, 3), (1, 2.5), (2, 3), (3, 2), (2.5, 1), (3, 0), (2, -1), (1, 0), (0, -1),
             (-1, 0), (-2, -1), (-3, 0), (-2.5, 1), (-3, 2), (-2, 3), (-1, 2.5), (0, 3)]),
    _sample("Concave Polygon 2", "A concave polygon with 21 points.",
            [(2, 4), (2.5, 3.5), (3.5, 3.5), (4, 2.5), (3.5, 2), (4, 1.5), (3.5, 1), (2.5, 1.5),
             (2, 1), (1.5, 1.5), (1, 1), (0.5, 1.5), (0, 1), (-0.5, 1.5), (-1, 1), (-1.5, 2),
             (-2, 3), (-1.5, 3.5), (0, 4), (1.5, 4), (2, 4)]),
    _sample("Concave Polygon 3", "A more complex concave polygon with 19 points.",
            [(0, 3), (1, 2.5), (2, 3), (3, 2), (2.5, 1), (3, 0), (2.5, -1), (2, -2), (1, -3),
             (0, -2.5), (-1, -3), (-2, -2), (-3, -1), (-3, 0), (-2.5, 1), (-3, 2), (-2, 3),
             (-1, 2.5), (0, 3)]),
    _sample("Concave Polygon 4", "A concave polygon with 25 points.",
            [(2, 4), (3, 3.5), (4, 3.2), (5, 3), (5, 2), (4.5, 1), (4, 0.5), (3.5, 0),
             (2.5, -0.5), (1.5, -1), (0.5, -1.5), (-0.5, -1.8), (-1.5, -1.5), (-2.5, -1),
             (-3.5, -0.5), (-4.5, 0), (-4.5, 1), (-4, 1.5), (-3.5, 2), (-2.5, 2.5), (-1.5, 3),
             (-0.5, 3.5), (0.5, 4), (1.5, 4.2), (2, 4)]),
]

SAMPLE_POINT_CLOUDS: List[SampleModel] = [
    _sample("10 points in 2D", "Scattered points.",
            [(-3.2, 2.4), (1.7, -1.9), (-0.8, -3.1), (0.9, 4.5), (-2.5, -0.6), (2.3, 1.8),
             (-3.9, -1.4), (4.8, -4.2), (1.2, 0.3), (-1.6, 3.7)]),
    _sample("10 points, some collinear", "Three points on y = x among scattered ones.",
            [(-5.0, -5.0), (-3.5, -3.5), (-2.0, -2.0), (2.3, -3.6), (-1.4, 2.8), (4.6, -0.9),
             (-0.6, 4.1), (3.8, 1.5), (-2.5, -1.1), (0.3, 4.8)]),
    _sample("50 points on a circle", "Cocircular points, radius 5 around the origin.",
            _circle(50, 5.0)),
    _sample("30 points on the y axis", "Collinear points from y = -5 to y = 5.",
            _axis(30)),
    _sample("30 points on the y axis + 1", "Collinear points plus (5, 0).",
            _axis(30) + [(5.0, 0.0)]),
    _sample("40 points on square edges", "Points along the sides of a 10 x 10 square.",
            _square_edges(10)),
    _sample("5 x 5 grid", "Cocircular grid points with unit spacing.",
            [(float(x), float(y)) for y in range(-2, 3) for x in range(-2, 3)]),
]
