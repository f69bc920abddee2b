# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Tests for rectangle clipping, clipped Voronoi cells and Lloyd relaxation.

Cells are checked geometrically: they tile the clip rectangle, each one
holds its seed, and every cell vertex is at least as close to its own
seed as to any other.
"""

import numpy as np
import pytest
from shapely.geometry import Polygon
from shapely.ops import unary_union

from planar_geometry.config import settings
from planar_geometry.exceptions import InvalidInputError
from planar_geometry.geometry.points import Point
from planar_geometry.geometry.shapes import polygon_signed_area
from planar_geometry.topology.dualgraph import DualGraph
from planar_geometry.triangulation.delaunay import delaunay_triangulation_convex
from planar_geometry.triangulation.sweephull import SweepHull
from planar_geometry.voronoi.clipping import (
    BOTTOM,
    LEFT,
    RIGHT,
    TOP,
    ClipBox,
    dedupe_consecutive,
    simplify,
)
from planar_geometry.voronoi.diagram import (
    _is_flat,
    VoronoiCell,
    VoronoiDiagram,
    default_bounds,
    lloyd_relaxation,
    voronoi_diagram,
)

BOX = (-8, -8, 8, 8)
BOX_AREA = 256.0


def _random_points(n, seed=0, scale=5.0):
    rng = np.random.default_rng(seed)
    return [Point(float(x), float(y)) for x, y in rng.uniform(-scale, scale, (n, 2))]


def _cell_polygon(cell):
    return Polygon([(p.x, p.y) for p in cell.points])


def _assert_tiles_box(diagram, area=BOX_AREA, tol=1e-6):
    polygons = [_cell_polygon(cell) for cell in diagram.cells]
    total = sum(p.area for p in polygons)
    assert total == pytest.approx(area, rel=tol)
    assert unary_union(polygons).area == pytest.approx(area, rel=tol)


def _assert_nearest_seed(diagram, tol=1e-6):
    seeds = diagram.seeds()
    for cell in diagram.cells:
        for v in cell.points:
            own = v.distance_to(cell.seed)
            nearest = min(v.distance_to(s) for s in seeds)
            assert own <= nearest + tol


# ----------------------------------------------------------------------
# ClipBox
# ----------------------------------------------------------------------

def test_region_and_edge_codes():
    box = ClipBox(BOX)
    assert box.region_code(0, 0) == 0
    assert box.region_code(-9, 0) == LEFT
    assert box.region_code(9, 9) == RIGHT | TOP
    assert box.region_code(0, -9) == BOTTOM
    assert box.edge_code(8, 3) == RIGHT
    assert box.edge_code(8, 8) == RIGHT | TOP
    assert box.edge_code(0, 0) == 0


def test_box_polygon_and_validation():
    box = ClipBox(BOX)
    assert box.center == (0, 0)
    assert polygon_signed_area([Point(x, y) for x, y in box.polygon()]) == BOX_AREA
    with pytest.raises(InvalidInputError):
        ClipBox((1, 0, 0, 1))
    with pytest.raises(InvalidInputError):
        ClipBox((0, 0, 1))


def test_clip_segment():
    box = ClipBox(BOX)
    assert box.clip_segment(-10, 0, 10, 0, LEFT, RIGHT) == (-8, 0, 8, 0)
    assert box.clip_segment(10, 0, -10, 0, RIGHT, LEFT) == (8, 0, -8, 0)
    assert box.clip_segment(0, 0, 4, 4, 0, 0) == (0, 0, 4, 4)
    assert box.clip_segment(-10, 9, 10, 9, LEFT | TOP, RIGHT | TOP) is None
    x0, y0, x1, y1 = box.clip_segment(0, 0, 16, 4, 0, RIGHT)
    assert (x0, y0) == (0, 0)
    assert x1 == 8
    assert y1 == pytest.approx(2)


def test_clip_segment_is_direction_independent():
    box = ClipBox(BOX)
    a = (-12.3, -3.1)
    b = (7.7, 11.9)
    ca, cb = box.region_code(*a), box.region_code(*b)
    forward = box.clip_segment(*a, *b, ca, cb)
    backward = box.clip_segment(*b, *a, cb, ca)
    assert forward[:2] == backward[2:]
    assert forward[2:] == backward[:2]


def test_project():
    box = ClipBox(BOX)
    assert box.project(0, 0, 1, 0) == (8, 0)
    assert box.project(0, 0, 0, -3) == (0, -8)
    assert box.project(0, 0, 1, 1) == (8, 8)
    assert box.project(9, 0, 1, 0) is None


def test_simplify_and_dedupe():
    assert simplify([(0, 0), (1, 0), (2, 0), (2, 2)]) == [(0, 0), (2, 0), (2, 2)]
    assert simplify(None) is None
    assert dedupe_consecutive([(0, 0), (0, 0), (1, 0), (1, 1), (0, 0)]) == [(0, 0), (1, 0), (1, 1)]


# ----------------------------------------------------------------------
# Cells
# ----------------------------------------------------------------------

def test_cell_centroid_snaps_to_a_close_seed():
    square = [Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)]
    near = VoronoiCell(Point(0.505, 0.5), square)
    assert near.centroid() == Point(0.505, 0.5)
    far = VoronoiCell(Point(0.6, 0.5), square)
    assert far.centroid().x == pytest.approx(0.5)
    assert far.centroid().y == pytest.approx(0.5)
    assert far.original


def test_single_site_gets_the_whole_box():
    diagram = voronoi_diagram([(0, 0)])
    assert len(diagram) == 1
    cell = diagram.cells[0]
    assert cell.seed == Point(0, 0)
    assert set(cell.points) == {Point(-8, -8), Point(8, -8), Point(8, 8), Point(-8, 8)}


def test_empty_input_has_no_cells():
    assert len(voronoi_diagram([])) == 0


def test_two_sites_split_the_box():
    diagram = VoronoiDiagram.from_points([(-1, 0), (1, 0)], BOX)
    assert len(diagram) == 2
    for cell in diagram.cells:
        assert _cell_polygon(cell).area == pytest.approx(128)
        assert all(np.sign(p.x) in (0, np.sign(cell.seed.x)) for p in cell.points)
    assert len(diagram.triangulation_edges) == 1


def test_two_sites_on_a_diagonal():
    diagram = VoronoiDiagram.from_points([(-1, -1), (2, 3)], BOX)
    assert len(diagram) == 2
    _assert_tiles_box(diagram)
    _assert_nearest_seed(diagram)


def test_random_sites_tile_the_box():
    points = _random_points(40, seed=21)
    diagram = VoronoiDiagram.from_points(points, BOX)
    assert len(diagram) == len(points)
    _assert_tiles_box(diagram)
    _assert_nearest_seed(diagram)
    for cell in diagram.cells:
        polygon = _cell_polygon(cell)
        assert polygon.exterior.is_ccw
        assert polygon.is_valid
        assert polygon.convex_hull.area == pytest.approx(polygon.area)
        assert cell.contains_point(cell.seed.x, cell.seed.y)


def test_sites_outside_the_box():
    points = [Point(-12, 0), Point(0, 0), Point(3, 1), Point(0, 12)]
    diagram = VoronoiDiagram.from_points(points, BOX)
    _assert_tiles_box(diagram)
    _assert_nearest_seed(diagram)


def test_collinear_sites_are_jittered():
    points = [(-4, 0), (-2, 0), (0, 0), (2, 0), (4, 0)]
    diagram = voronoi_diagram(points)
    assert len(diagram) == 5
    _assert_tiles_box(diagram)
    _assert_nearest_seed(diagram, tol=1e-5)
    # vertical strips: the outer ones reach the box sides
    for cell in diagram.cells:
        width = 2 if abs(cell.seed.x) < 4 else 5
        assert _cell_polygon(cell).area == pytest.approx(16 * width, rel=1e-5)


def test_duplicate_sites_get_one_cell():
    diagram = voronoi_diagram([(0, 0), (0, 0), (3, 1), (-2, 2)])
    assert len(diagram) == 3
    _assert_tiles_box(diagram)


def test_custom_extent():
    diagram = voronoi_diagram([(0, 0), (1, 1), (-1, 2)], width=10, height=5)
    assert diagram.bounds == (-10, -5, 10, 5)
    _assert_tiles_box(diagram, area=200)


def test_default_bounds():
    assert default_bounds() == (-8, -8, 8, 8)


def test_symmetric_sites_are_centroidal():
    points = [(-4, -4), (4, -4), (4, 4), (-4, 4)]
    diagram = voronoi_diagram(points)
    assert diagram.is_centroidal()
    for cell in diagram.cells:
        assert _cell_polygon(cell).area == pytest.approx(64)
        assert len(diagram.neighbors(diagram.find_node_by_shape(cell))) == 2

    relaxed = lloyd_relaxation(points, BOX, iterations=5)
    assert sorted((p.x, p.y) for p in relaxed.seeds()) == sorted(points)


def _mean_offset(diagram):
    return np.mean([c.seed.distance_to(c.centroid()) for c in diagram.cells])


def test_lloyd_relaxation_moves_sites_toward_centroids():
    points = _random_points(30, seed=22, scale=7.0)
    before = VoronoiDiagram.from_points(points, BOX)
    after = lloyd_relaxation(points, BOX, iterations=20)
    assert len(after) == len(points)
    assert _mean_offset(after) < _mean_offset(before)
    _assert_tiles_box(after)


def test_lloyd_relaxation_rejects_bad_bounds():
    with pytest.raises(InvalidInputError):
        lloyd_relaxation([(0, 0), (1, 1)], (5, 5, -5, -5))


def test_diagram_from_dual_graph_flags_added_sites():
    points = _random_points(20, seed=23)
    graph = DualGraph(delaunay_triangulation_convex(points, use_bounding_box=True, width=6, height=6))
    diagram = VoronoiDiagram.from_dual_graph(graph, BOX, sites=points)
    assert len(diagram) == len(points) + 4
    _assert_tiles_box(diagram)
    _assert_nearest_seed(diagram)

    added = [cell for cell in diagram.cells if not cell.original]
    assert {(c.seed.x, c.seed.y) for c in added} == {(6, 6), (-6, 6), (-6, -6), (6, -6)}
    assert len(diagram.lloyd_relaxation_points()) == len(points)


def test_from_triangulation_keeps_delaunay_edges():
    points = _random_points(15, seed=24)
    tri = SweepHull.from_points(points).to_triangulation()
    diagram = VoronoiDiagram.from_triangulation(tri, BOX)
    assert len(diagram.triangulation_edges) == len(tri.edges())
    assert all(cell.original for cell in diagram.cells)


def test_plain_object_round_trip():
    diagram = voronoi_diagram(_random_points(12, seed=25))
    plain = diagram.to_plain_object()
    assert set(plain) == {'shapes', 'edges'}
    assert set(plain['shapes'][0]) == {'seed', 'points'}

    rebuilt = VoronoiDiagram.from_plain_object(plain)
    assert len(rebuilt) == len(diagram)
    assert rebuilt.seeds() == diagram.seeds()
    assert [c.points for c in rebuilt.cells] == [c.points for c in diagram.cells]
    assert len(rebuilt.triangulation_edges) == len(diagram.triangulation_edges)


def test_collinearity_threshold_comes_from_settings(monkeypatch):
    tri = SweepHull([(0, 0), (1, 0), (0, 1e-6), (1, 1e-6)]).to_triangulation()
    assert len(tri) == 2
    assert not _is_flat(tri)
    monkeypatch.setattr(settings, 'collinear_area_epsilon', 1e-3)
    assert _is_flat(tri)
    # the flat path still gives every site a cell
    diagram = VoronoiDiagram.from_triangulation(tri, BOX)
    assert len(diagram) == 4
    _assert_tiles_box(diagram)
