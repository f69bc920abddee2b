# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Delaunay triangulation entry points.

Two strategies share one result type:

- :class:`PointSet` input goes through the sweep-hull triangulator.
- :class:`PolygonBoundary` input is ear clipped, linked into a dual
  graph and legalized by edge flips.

Legalization keeps a worklist of edges that may be illegal instead of
rescanning the whole graph after every flip. It stops once no edge is
illegal, or raises past a flip ceiling.
"""

import functools
from collections import deque
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import structlog

from ..config import settings
from ..exceptions import InvalidInputError, LegalizationError
from ..geometry.hull import quick_hull
from ..geometry.points import Point, distinct_points, to_points
from ..geometry.predicates import incircle, orient
from ..geometry.shapes import Triangle
from ..topology.dualgraph import DualGraph
from ..topology.mesh import Triangulation
from .earclip import ear_clip_indices, ear_clipping_triangulation, oriented_triangle, prepare_polygon
from .sweephull import SweepHull

logger = structlog.get_logger()


@dataclass(frozen=True)
class PointSet:
    """Unordered points to triangulate."""

    points: Tuple

    def __init__(self, points: Sequence):
        object.__setattr__(self, 'points', tuple(points))


@dataclass(frozen=True)
class PolygonBoundary:
    """Ordered boundary of a simple polygon."""

    points: Tuple

    def __init__(self, points: Sequence):
        object.__setattr__(self, 'points', tuple(points))


@functools.singledispatch
def triangulate(source) -> Triangulation:
    """
    Delaunay triangulation of a tagged input.

    :param source: A :class:`PointSet` or a :class:`PolygonBoundary`.
    :return: Flat triangulation.
    :rtype: Triangulation
    """
    raise InvalidInputError(
        f"Cannot triangulate {type(source).__name__}; wrap the points in PointSet or PolygonBoundary"
    )


@triangulate.register
def _(source: PointSet) -> Triangulation:
    return SweepHull.from_points(source.points).to_triangulation()


@triangulate.register
def _(source: PolygonBoundary) -> Triangulation:
    planar, originals = prepare_polygon(source.points)
    graph = _legal_graph(planar)
    lookup = dict(zip(planar, originals))

    if all(p.z == 0 for p in originals):
        # keep the caller's frame; a clockwise input was mirrored by the rotation
        shapes = [oriented_triangle(*(lookup[p] for p in shape.points)) for shape in graph.shapes]
        return DualGraph(shapes).to_triangulation()

    mesh = graph.to_triangulation()
    return Triangulation(mesh.coords, mesh.triangles, mesh.halfedges, mesh.hull,
                         points=[lookup[p] for p in mesh.points])


# ----------------------------------------------------------------------
# Legalization
# ----------------------------------------------------------------------

def is_illegal(graph: DualGraph, h: int) -> bool:
    """
    True when the vertex across ``h`` lies strictly inside the
    circumcircle of the triangle holding ``h``.
    """
    t = graph.twin(h)
    if t == -1:
        return False
    e2 = graph.next(h)
    p1 = graph.vertex(h)
    p2 = graph.vertex(e2)
    p3 = graph.vertex(graph.next(e2))
    q = graph.vertex(graph.next(graph.next(t)))
    return incircle(p1.x, p1.y, p2.x, p2.y, p3.x, p3.y, q.x, q.y) > 0


def legalize(graph: DualGraph, max_flips: Optional[int] = None) -> int:
    """
    Flip illegal edges until the triangle graph is Delaunay.

    Every interior edge starts on the worklist; each flip queues the four
    outer edges of the two triangles it rewrote.

    :param graph: Graph of counter-clockwise triangles.
    :type graph: DualGraph
    :param max_flips: Flip ceiling; defaults to ``settings.max_flip_iterations``.
    :type max_flips: Optional[int]
    :return: Number of flips performed.
    :rtype: int
    :raises LegalizationError: When the ceiling is exceeded.
    """
    max_flips = settings.max_flip_iterations if max_flips is None else max_flips
    queue = deque(h for node in graph.nodes for h in graph.half_edges(node)
                  if graph.twin(h) != -1 and h < graph.twin(h))

    flips = 0
    while queue:
        h = queue.popleft()
        if not graph.is_live(h) or not is_illegal(graph, h):
            continue
        if flips >= max_flips:
            raise LegalizationError(f"Legalization exceeded {max_flips} flips")

        e3 = graph.next(graph.next(h))
        t1 = graph.twin(h)
        t3 = graph.next(graph.next(t1))
        graph.flip_edge(h)
        flips += 1
        queue.extend((h, e3, t1, t3))

    logger.debug("legalize", triangles=len(graph), flips=flips)
    return flips


def _legal_graph(planar: List[Point]) -> DualGraph:
    triangles = [Triangle([planar[a], planar[b], planar[c]]) for a, b, c in ear_clip_indices(planar)]
    graph = DualGraph(triangles)
    legalize(graph)
    return graph


def delaunay_triangulation(polygon: Sequence) -> List[Triangle]:
    """
    Delaunay triangulation of a simple polygon.

    The polygon is ear clipped and its interior edges flipped until no
    triangle's circumcircle holds the vertex across any of its edges.

    :param polygon: Boundary points in order; Points or ``(x, y[, z])`` rows.
    :type polygon: Sequence
    :return: ``n - 2`` triangles made of the caller's points,
        counter-clockwise when the polygon lies on the z-plane.
    :rtype: List[Triangle]
    """
    planar, originals = prepare_polygon(polygon)
    graph = _legal_graph(planar)
    lookup = dict(zip(planar, originals))
    return [oriented_triangle(*(lookup[p] for p in shape.points)) for shape in graph.shapes]


# ----------------------------------------------------------------------
# Convex insertion
# ----------------------------------------------------------------------

def _split_triangle(graph: DualGraph, node: int, p: Point) -> None:
    shape = graph.shape(node)
    a, b, c = shape.points
    graph.remove_shape(shape)
    graph.insert_shape(Triangle([a, b, p]))
    graph.insert_shape(Triangle([b, c, p]))
    graph.insert_shape(Triangle([c, a, p]))


def _split_edge(graph: DualGraph, node: int, p: Point, start: Point, end: Point) -> None:
    h = next(x for x in graph.half_edges(node)
             if graph.vertex(x) == start and graph.vertex(graph.next(x)) == end)
    opposite = graph.vertex(graph.next(graph.next(h)))
    t = graph.twin(h)

    if t != -1:
        twin_opposite = graph.vertex(graph.next(graph.next(t)))
        graph.remove_shape(graph.shape(graph.node(t)))
        graph.remove_shape(graph.shape(node))
        graph.insert_shape(Triangle([opposite, start, p]))
        graph.insert_shape(Triangle([end, opposite, p]))
        graph.insert_shape(Triangle([start, twin_opposite, p]))
        graph.insert_shape(Triangle([twin_opposite, end, p]))
    else:
        graph.remove_shape(graph.shape(node))
        graph.insert_shape(Triangle([opposite, start, p]))
        graph.insert_shape(Triangle([end, opposite, p]))


def insert_point(graph: DualGraph, p: Point) -> bool:
    """
    Insert a point into a triangle graph by splitting what contains it.

    A point strictly inside a triangle splits it in three; a point on an
    edge splits the triangles on both sides in two.

    :return: False when the point is a vertex already or lies outside.
    :rtype: bool
    """
    for node in graph.query_nearby_nodes(p):
        a, b, c = graph.shape(node).points
        o1, o2, o3 = orient(a, b, p), orient(b, c, p), orient(c, a, p)
        if o1 < 0 or o2 < 0 or o3 < 0:
            continue
        if p in (a, b, c):
            logger.warning("duplicate_point_skipped", x=p.x, y=p.y)
            return False
        if o1 > 0 and o2 > 0 and o3 > 0:
            _split_triangle(graph, node, p)
        elif o1 == 0:
            _split_edge(graph, node, p, a, b)
        elif o2 == 0:
            _split_edge(graph, node, p, b, c)
        else:
            _split_edge(graph, node, p, c, a)
        return True
    logger.warning("point_outside_triangulation", x=p.x, y=p.y)
    return False


def delaunay_triangulation_convex(points: Sequence, use_bounding_box: bool = False,
                                  width: Optional[float] = None,
                                  height: Optional[float] = None) -> List[Triangle]:
    """
    Delaunay triangulation of a point set inside its hull or a box.

    The boundary (the convex hull, or the box ``[-width, width] x
    [-height, height]``) is ear clipped, every other point is inserted by
    splitting the triangle or edge holding it, and the result is
    legalized.

    :param points: Input points.
    :type points: Sequence
    :param use_bounding_box: Triangulate inside the box instead of the hull.
    :type use_bounding_box: bool
    :param width: Box half width; defaults to ``settings.default_half_width``.
    :type width: Optional[float]
    :param height: Box half height; defaults to ``settings.default_half_height``.
    :type height: Optional[float]
    :return: Triangles of the final graph.
    :rtype: List[Triangle]
    """
    width = settings.default_half_width if width is None else width
    height = settings.default_half_height if height is None else height

    points = to_points(points)
    if len(points) > 1 and points[-1] == points[0]:
        points = points[:-1]

    if use_bounding_box:
        boundary = [Point(width, height), Point(-width, height),
                    Point(-width, -height), Point(width, -height)]
    else:
        boundary = quick_hull(points)

    graph = DualGraph(ear_clipping_triangulation(boundary))
    on_boundary = set(boundary)
    inserted = sum(1 for p in distinct_points(points)
                   if p not in on_boundary and insert_point(graph, p))
    flips = legalize(graph)
    logger.debug("delaunay_convex", boundary=len(boundary), inserted=inserted, flips=flips)
    return graph.shapes
