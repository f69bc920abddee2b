# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Tests for ear clipping, edge legalization and convex insertion."""

import numpy as np
import pytest
from scipy.spatial import Delaunay
from shapely.geometry import Polygon
from shapely.ops import unary_union

from planar_geometry.exceptions import (
    ComplexPolygonError,
    InvalidInputError,
    LegalizationError,
)
from planar_geometry.geometry.hull import quick_hull
from planar_geometry.geometry.points import Point
from planar_geometry.geometry.predicates import in_circumcircle, orient
from planar_geometry.geometry.shapes import Triangle
from planar_geometry.topology.dualgraph import DualGraph
from planar_geometry.triangulation.delaunay import (
    PointSet,
    PolygonBoundary,
    delaunay_triangulation,
    delaunay_triangulation_convex,
    insert_point,
    is_illegal,
    legalize,
    triangulate,
)
from planar_geometry.triangulation.earclip import ear_clipping_triangulation
from planar_geometry.utils.samples import SAMPLE_POLYGONS

SQUARE = [(-1, 1), (1, 1), (1, -1), (-1, -1)]


def _area(triangles):
    return sum(abs(t.signed_area()) for t in triangles)


def _union_area(triangles):
    return unary_union([t.to_shapely() for t in triangles]).area


def _random_points(n, seed=0, scale=5.0):
    rng = np.random.default_rng(seed)
    return [Point(float(x), float(y)) for x, y in rng.uniform(-scale, scale, (n, 2))]


def _key(triangle):
    return frozenset((p.x, p.y) for p in triangle.points)


def test_square_needs_no_flips():
    triangles = ear_clipping_triangulation(SQUARE)
    assert len(triangles) == 2
    assert {p for t in triangles for p in t.points} == {Point(x, y) for x, y in SQUARE}
    assert legalize(DualGraph(triangles)) == 0
    assert len(delaunay_triangulation(SQUARE)) == 2


def test_closing_duplicate_is_ignored():
    closed = SQUARE + [SQUARE[0]]
    assert len(ear_clipping_triangulation(closed)) == 2


@pytest.mark.parametrize('sample', SAMPLE_POLYGONS, ids=lambda s: s.name)
def test_sample_polygons_triangulate_to_n_minus_2(sample):
    points = list(sample.points[:-1])
    polygon = Polygon([(p.x, p.y) for p in points])

    clipped = ear_clipping_triangulation(sample.points)
    assert len(clipped) == len(points) - 2
    assert np.isclose(_area(clipped), polygon.area)

    legal = delaunay_triangulation(sample.points)
    assert len(legal) == len(points) - 2
    assert np.isclose(_area(legal), polygon.area)
    assert np.isclose(_union_area(legal), polygon.area)
    assert {p for t in legal for p in t.points} == set(points)


@pytest.mark.parametrize('sample', SAMPLE_POLYGONS, ids=lambda s: s.name)
def test_polygon_triangulation_is_locally_delaunay(sample):
    tri = triangulate(PolygonBoundary(sample.points))
    for a, b, c in tri.triangle_indices():
        assert orient(tri.point(int(a)), tri.point(int(b)), tri.point(int(c))) > 0

    graph = tri.to_dual_graph()
    for node in graph.nodes:
        for h in graph.half_edges(node):
            assert not is_illegal(graph, h)


def test_clockwise_polygon_keeps_caller_frame():
    tri = triangulate(PolygonBoundary(SQUARE))
    assert len(tri) == 2
    assert {tuple(row) for row in tri.coords.tolist()} == {(float(x), float(y)) for x, y in SQUARE}
    hull = [tri.point(int(i)) for i in tri.hull]
    assert Polygon([(p.x, p.y) for p in hull]).exterior.is_ccw


def test_tilted_polygon_reuses_the_original_points():
    square = [Point(0, 0, 0), Point(1, 0, 1), Point(1, 1, 1), Point(0, 1, 0)]
    triangles = delaunay_triangulation(square)
    assert len(triangles) == 2
    assert {p for t in triangles for p in t.points} == set(square)

    tri = triangulate(PolygonBoundary(square))
    assert {tri.point(i) for i in range(len(tri.coords))} == set(square)


def test_invalid_polygons_are_rejected():
    with pytest.raises(InvalidInputError):
        ear_clipping_triangulation([(0, 0), (1, 1)])
    with pytest.raises(InvalidInputError):
        ear_clipping_triangulation([(0, 0), (1, 0), (2, 0), (3, 0)])
    with pytest.raises(InvalidInputError):
        ear_clipping_triangulation([(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)])
    # bow tie: the two lobes cancel out
    with pytest.raises(ComplexPolygonError):
        ear_clipping_triangulation([(0, 0), (1, 1), (1, 0), (0, 1)])


def test_triangulate_requires_a_tagged_input():
    with pytest.raises(InvalidInputError):
        triangulate([(0, 0), (1, 0), (0, 1)])


def test_point_set_goes_through_sweep_hull():
    points = _random_points(30, seed=9)
    tri = triangulate(PointSet(points))
    assert len(tri.coords) == 30
    assert tri.point(0) is points[0]
    assert len(tri) == len(Delaunay(np.array([(p.x, p.y) for p in points])).simplices)


def _thin_quad():
    a, b, c, d = Point(-1, 0), Point(0, -0.2), Point(1, 0), Point(0, 0.2)
    return a, b, c, d, DualGraph([Triangle([a, b, c]), Triangle([a, c, d])])


def test_legalize_flips_an_illegal_diagonal():
    a, b, c, d, graph = _thin_quad()
    assert legalize(graph) == 1
    for shape in graph.shapes:
        assert b in shape.points
        assert d in shape.points
    assert legalize(graph) == 0


def test_legalize_respects_the_flip_ceiling():
    graph = _thin_quad()[-1]
    with pytest.raises(LegalizationError):
        legalize(graph, max_flips=0)


def test_convex_insertion_matches_scipy():
    points = _random_points(40, seed=11)
    triangles = delaunay_triangulation_convex(points)
    reference = Delaunay(np.array([(p.x, p.y) for p in points]))
    expected = {frozenset((points[i].x, points[i].y) for i in simplex)
                for simplex in reference.simplices}
    assert {_key(t) for t in triangles} == expected


def test_convex_insertion_is_delaunay():
    points = _random_points(60, seed=12)
    triangles = delaunay_triangulation_convex(points)
    for t in triangles:
        a, b, c = t.points
        assert orient(a, b, c) > 0
        for p in points:
            if p not in t.points:
                assert not in_circumcircle(a, b, c, p)


def test_convex_insertion_in_bounding_box():
    points = _random_points(25, seed=13)
    triangles = delaunay_triangulation_convex(points, use_bounding_box=True, width=8, height=6)
    corners = {Point(8, 6), Point(-8, 6), Point(-8, -6), Point(8, -6)}
    assert {p for t in triangles for p in t.points} == set(points) | corners
    assert np.isclose(_area(triangles), 16 * 12)
    assert len(triangles) == 2 * (len(points) + 4) - 2 - 4


def test_insert_point_edge_cases():
    graph = DualGraph(ear_clipping_triangulation([(0, 0), (4, 0), (4, 4), (0, 4)]))
    assert not insert_point(graph, Point(0, 0))
    assert not insert_point(graph, Point(10, 10))
    # a point on the shared diagonal splits both triangles
    assert insert_point(graph, Point(2, 2))
    assert len(graph) == 4
    # a point on the hull splits one triangle
    assert insert_point(graph, Point(2, 0))
    assert len(graph) == 5
    assert np.isclose(_area(graph.shapes), 16)


def test_clockwise_square_gives_counter_clockwise_triangles():
    for triangles in (delaunay_triangulation(SQUARE), ear_clipping_triangulation(SQUARE)):
        assert len(triangles) == 2
        for t in triangles:
            assert orient(*t.points) > 0
            others = [Point(x, y) for x, y in SQUARE if Point(x, y) not in t.points]
            assert not any(in_circumcircle(*t.points, p) for p in others)


def test_numpy_backed_points():
    rows = np.random.default_rng(14).uniform(-1, 1, (30, 2))
    points = [Point(*row) for row in rows]

    hull = quick_hull(points)
    for a, b in zip(hull, hull[1:] + hull[:1]):
        assert all(orient(a, b, p) >= 0 for p in points)

    triangles = delaunay_triangulation_convex(points)
    assert all(orient(*t.points) > 0 for t in triangles)
    assert len(triangles) == 2 * len(points) - 2 - len(hull)
    assert np.isclose(_area(triangles), Polygon([(p.x, p.y) for p in hull]).area)
