# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Flat triangle mesh shared by both triangulators.

Triangle ``t`` is made of half-edges ``3t, 3t + 1, 3t + 2``; half-edge
``e`` starts at point ``triangles[e]``. ``halfedges[e]`` is the opposite
half-edge in the adjacent triangle, or -1 on the hull. Triangles are
counter-clockwise and ``hull`` lists the hull point indices
counter-clockwise.
"""

from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..geometry.points import Point
from ..geometry.shapes import Triangle


def next_half_edge(e: int) -> int:
    return e - 2 if e % 3 == 2 else e + 1


def prev_half_edge(e: int) -> int:
    return e + 2 if e % 3 == 0 else e - 1


class Triangulation:
    """
    Triangles, half-edge adjacency and hull over a coordinate buffer.

    :param coords: ``(N, 2)`` point coordinates.
    :type coords: np.ndarray
    :param triangles: Point index per half-edge, length ``3T``.
    :type triangles: np.ndarray
    :param halfedges: Opposite half-edge per half-edge, -1 on the hull.
    :type halfedges: np.ndarray
    :param hull: Hull point indices, counter-clockwise. When there are no
        triangles (collinear input) this is the order along the line.
    :type hull: np.ndarray
    :param points: Optional caller Points, index-aligned with ``coords``,
        reused by :meth:`triangle_shapes`.
    :type points: Optional[Sequence[Point]]
    """

    def __init__(self, coords: np.ndarray, triangles: np.ndarray, halfedges: np.ndarray,
                 hull: np.ndarray, points: Optional[Sequence[Point]] = None):
        self.coords = np.asarray(coords, dtype=np.float64).reshape(-1, 2)
        self.triangles = np.asarray(triangles, dtype=np.int64)
        self.halfedges = np.asarray(halfedges, dtype=np.int64)
        self.hull = np.asarray(hull, dtype=np.int64)
        self.points = list(points) if points is not None else None

        n = len(self.coords)
        self.hull_index = np.full(n, -1, dtype=np.int64)
        self.hull_index[self.hull] = np.arange(len(self.hull))

        # incoming half-edge per point, hull edges first so that walks
        # around a hull point start on the boundary
        self.inedges = np.full(n, -1, dtype=np.int64)
        triangles_list = self.triangles.tolist()
        halfedges_list = self.halfedges.tolist()
        inedges = self.inedges.tolist()
        for e in range(len(triangles_list)):
            p = triangles_list[next_half_edge(e)]
            if halfedges_list[e] == -1 or inedges[p] == -1:
                inedges[p] = e
        self.inedges[:] = inedges

    def __len__(self):
        return len(self.triangles) // 3

    @property
    def collinear(self) -> bool:
        return len(self.triangles) == 0 and len(self.hull) > 1

    def point(self, i: int) -> Point:
        if self.points is not None:
            return self.points[i]
        x, y = self.coords[i]
        return Point(float(x), float(y))

    def triangle_indices(self) -> np.ndarray:
        return self.triangles.reshape(-1, 3)

    def triangle_shapes(self) -> List[Triangle]:
        return [Triangle([self.point(int(a)), self.point(int(b)), self.point(int(c))])
                for a, b, c in self.triangle_indices()]

    def edges(self) -> List[Tuple[int, int]]:
        """Undirected edges as point index pairs, each listed once."""
        if self.collinear:
            hull = self.hull.tolist()
            return list(zip(hull[:-1], hull[1:]))
        result = []
        triangles = self.triangles.tolist()
        for e, opposite in enumerate(self.halfedges.tolist()):
            if e > opposite:
                result.append((triangles[e], triangles[next_half_edge(e)]))
        return result

    def neighbors(self, i: int) -> Iterator[int]:
        """
        Yield the points sharing an edge with point ``i``.

        Interior points are visited once around; a hull point also yields
        the next hull point, which the walk around ``i`` cannot reach.
        """
        if self.collinear:
            hull = self.hull.tolist()
            if i in hull:
                k = hull.index(i)
                if k > 0:
                    yield hull[k - 1]
                if k < len(hull) - 1:
                    yield hull[k + 1]
            return

        e0 = int(self.inedges[i])
        if e0 == -1:
            return
        e = e0
        while True:
            p0 = int(self.triangles[e])
            yield p0
            e = next_half_edge(e)
            if self.triangles[e] != i:
                return
            e = int(self.halfedges[e])
            if e == -1:
                p = int(self.hull[(self.hull_index[i] + 1) % len(self.hull)])
                if p != p0:
                    yield p
                return
            if e == e0:
                return

    def find(self, x: float, y: float, i: int = 0) -> int:
        """
        Index of the point nearest to ``(x, y)``.

        Walks from point ``i`` toward the query along Delaunay edges.

        :return: Point index, or -1 for a non-finite query or empty mesh.
        :rtype: int
        """
        if not (np.isfinite(x) and np.isfinite(y)) or len(self.coords) == 0:
            return -1
        if len(self.triangles) == 0:
            d = (self.coords[:, 0] - x) ** 2 + (self.coords[:, 1] - y) ** 2
            return int(np.argmin(d))
        i0 = i
        while True:
            c = self.step(i, x, y)
            if c < 0 or c == i or c == i0:
                return c
            i = c

    def step(self, i: int, x: float, y: float) -> int:
        """One greedy step of :meth:`find` from point ``i``."""
        coords = self.coords
        n = len(coords)
        if self.inedges[i] == -1 or not n:
            return (i + 1) % n

        def dist(k):
            return (x - coords[k, 0]) ** 2 + (y - coords[k, 1]) ** 2

        c = i
        dc = dist(i)
        e0 = int(self.inedges[i])
        e = e0
        while True:
            t = int(self.triangles[e])
            dt = dist(t)
            if dt < dc:
                dc = dt
                c = t
            e = next_half_edge(e)
            if self.triangles[e] != i:
                break
            e = int(self.halfedges[e])
            if e == -1:
                h = int(self.hull[(self.hull_index[i] + 1) % len(self.hull)])
                if h != t and dist(h) < dc:
                    return h
                break
            if e == e0:
                break
        return c

    def to_dual_graph(self):
        """
        Dual graph of the triangles, linked through shared edges.

        :rtype: DualGraph
        """
        from .dualgraph import DualGraph
        return DualGraph(self.triangle_shapes())
