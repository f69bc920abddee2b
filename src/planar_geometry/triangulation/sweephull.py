# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Sweep-hull Delaunay triangulation of an unordered point set.

Points are inserted in order of distance from the circumcenter of a
small seed triangle. Each new point lies outside the current convex
hull; it is fanned to every hull edge it can see, and every new
triangle is legalized with edge flips driven by a fixed-size stack.
Visible hull edges are located through a hash of hull vertices keyed
by pseudo-angle around the seed circumcenter.
"""

import math
from typing import Optional, Sequence

import numpy as np
import structlog

from ..config import settings
from ..geometry.affine import pseudo_angle
from ..geometry.points import Point
from ..geometry.predicates import incircle, orientation
from ..topology.mesh import Triangulation
from ..utils.helpers import as_coords

logger = structlog.get_logger()

EPSILON = 2.0 ** -52


def _circumradius_sq(ax, ay, bx, by, cx, cy) -> float:
    dx = bx - ax
    dy = by - ay
    ex = cx - ax
    ey = cy - ay
    cross = dx * ey - dy * ex
    if cross == 0:
        return math.inf
    bl = dx * dx + dy * dy
    cl = ex * ex + ey * ey
    d = 0.5 / cross
    x = (ey * bl - dy * cl) * d
    y = (dx * cl - ex * bl) * d
    return x * x + y * y


def _circumcenter(ax, ay, bx, by, cx, cy):
    dx = bx - ax
    dy = by - ay
    ex = cx - ax
    ey = cy - ay
    bl = dx * dx + dy * dy
    cl = ex * ex + ey * ey
    d = 0.5 / (dx * ey - dy * ex)
    return ax + (ey * bl - dy * cl) * d, ay + (dx * cl - ex * bl) * d


class SweepHull:
    """
    Delaunay triangulation buffers for a flat point set.

    After construction ``triangles``, ``halfedges`` and ``hull`` hold the
    result as numpy arrays. All points collinear (or fewer than three
    distinct points) yields no triangles and a hull listing the distinct
    points in order along the line.

    :param coords: ``(N, 2)`` coordinates or anything :func:`as_coords` accepts.
    :type coords: np.ndarray
    :param edge_stack_size: Capacity of the legalization stack; defaults
        to ``settings.edge_stack_size``.
    :type edge_stack_size: Optional[int]
    """

    def __init__(self, coords, edge_stack_size: Optional[int] = None):
        self.coords = as_coords(coords)
        self.points = None
        self._stack_size = settings.edge_stack_size if edge_stack_size is None else edge_stack_size

        n = len(self.coords)
        max_triangles = max(2 * n - 5, 0)
        self._triangles = [0] * (max_triangles * 3)
        self._halfedges = [0] * (max_triangles * 3)
        self._triangles_len = 0

        self._hash_size = max(1, math.ceil(math.sqrt(n)))
        self._hull_prev = [0] * n
        self._hull_next = [0] * n
        self._hull_tri = [0] * n
        self._hull_hash = [-1] * self._hash_size
        self._hull_start = 0
        self._cx = 0.0
        self._cy = 0.0
        self._stack_overflows = 0

        self._xs = self.coords[:, 0].tolist()
        self._ys = self.coords[:, 1].tolist()
        self._update()

    @classmethod
    def from_points(cls, points: Sequence, edge_stack_size: Optional[int] = None) -> 'SweepHull':
        """Triangulate Points or ``(x, y)`` pairs, keeping Points for later shapes."""
        points = list(points)
        sweep = cls(as_coords(points), edge_stack_size=edge_stack_size)
        if all(isinstance(p, Point) for p in points):
            sweep.points = points
        return sweep

    def to_triangulation(self) -> Triangulation:
        return Triangulation(self.coords, self.triangles, self.halfedges, self.hull,
                             points=self.points)

    def _update(self) -> None:
        xs, ys = self._xs, self._ys
        n = len(xs)
        hull_prev, hull_next, hull_tri = self._hull_prev, self._hull_next, self._hull_tri

        if n == 0:
            self._finish_degenerate([])
            return

        min_x, max_x = min(xs), max(xs)
        min_y, max_y = min(ys), max(ys)
        cx = (min_x + max_x) / 2
        cy = (min_y + max_y) / 2

        # seed point closest to the center
        d_center = (self.coords[:, 0] - cx) ** 2 + (self.coords[:, 1] - cy) ** 2
        i0 = int(np.argmin(d_center))
        i0x, i0y = xs[i0], ys[i0]

        # closest point to the seed
        i1 = -1
        min_dist = math.inf
        for i in range(n):
            if i == i0:
                continue
            d = (xs[i] - i0x) ** 2 + (ys[i] - i0y) ** 2
            if 0 < d < min_dist:
                i1 = i
                min_dist = d

        # third point forming the smallest circumcircle with the first two
        i2 = -1
        min_radius = math.inf
        if i1 != -1:
            i1x, i1y = xs[i1], ys[i1]
            for i in range(n):
                if i == i0 or i == i1:
                    continue
                r = _circumradius_sq(i0x, i0y, i1x, i1y, xs[i], ys[i])
                if r < min_radius:
                    i2 = i
                    min_radius = r

        if min_radius == math.inf:
            # collinear: order along x, or y when all x are equal
            x0, y0 = xs[0], ys[0]
            dists = np.array([(xs[i] - x0) or (ys[i] - y0) for i in range(n)])
            order = np.argsort(dists, kind='stable')
            hull = []
            d0 = -math.inf
            for i in order.tolist():
                if dists[i] > d0:
                    hull.append(i)
                    d0 = dists[i]
            logger.warning("sweep_hull_collinear", points=n, hull=len(hull))
            self._finish_degenerate(hull)
            return

        i1x, i1y = xs[i1], ys[i1]
        i2x, i2y = xs[i2], ys[i2]

        # counter-clockwise seed
        if orientation(i0x, i0y, i1x, i1y, i2x, i2y) < 0:
            i1, i2 = i2, i1
            i1x, i1y, i2x, i2y = i2x, i2y, i1x, i1y

        self._cx, self._cy = _circumcenter(i0x, i0y, i1x, i1y, i2x, i2y)

        dists = (self.coords[:, 0] - self._cx) ** 2 + (self.coords[:, 1] - self._cy) ** 2
        ids = np.argsort(dists, kind='stable').tolist()

        self._hull_start = i0
        hull_size = 3

        hull_next[i0] = hull_prev[i2] = i1
        hull_next[i1] = hull_prev[i0] = i2
        hull_next[i2] = hull_prev[i1] = i0

        hull_tri[i0] = 0
        hull_tri[i1] = 1
        hull_tri[i2] = 2

        hull_hash = self._hull_hash
        hull_hash[self._hash_key(i0x, i0y)] = i0
        hull_hash[self._hash_key(i1x, i1y)] = i1
        hull_hash[self._hash_key(i2x, i2y)] = i2

        self._triangles_len = 0
        self._add_triangle(i0, i1, i2, -1, -1, -1)

        xp = yp = 0.0
        skipped = 0
        for k, i in enumerate(ids):
            x, y = xs[i], ys[i]

            # near-duplicate of the previous point
            if k > 0 and abs(x - xp) <= EPSILON and abs(y - yp) <= EPSILON:
                skipped += 1
                continue
            xp, yp = x, y

            if i == i0 or i == i1 or i == i2:
                continue

            # visible hull edge through the angular hash
            start = 0
            key = self._hash_key(x, y)
            for j in range(self._hash_size):
                start = hull_hash[(key - j) % self._hash_size]
                if start != -1 and start != hull_next[start]:
                    break

            start = hull_prev[start]
            e = start
            while True:
                q = hull_next[e]
                if orientation(x, y, xs[e], ys[e], xs[q], ys[q]) < 0:
                    break
                e = q
                if e == start:
                    e = -1
                    break

            if e == -1:
                # inside the hull within rounding; a near-duplicate
                skipped += 1
                continue

            # first triangle from the point
            t = self._add_triangle(e, i, hull_next[e], -1, -1, hull_tri[e])

            hull_tri[i] = self._legalize(t + 2)
            hull_tri[e] = t
            hull_size += 1

            # walk forward through the hull
            nxt = hull_next[e]
            while True:
                q = hull_next[nxt]
                if orientation(x, y, xs[nxt], ys[nxt], xs[q], ys[q]) >= 0:
                    break
                t = self._add_triangle(nxt, i, q, hull_tri[i], -1, hull_tri[nxt])
                hull_tri[i] = self._legalize(t + 2)
                hull_next[nxt] = nxt  # removed from the hull
                hull_size -= 1
                nxt = q

            # walk backward from the other side
            if e == start:
                while True:
                    q = hull_prev[e]
                    if orientation(x, y, xs[q], ys[q], xs[e], ys[e]) >= 0:
                        break
                    t = self._add_triangle(q, i, e, -1, hull_tri[e], hull_tri[q])
                    self._legalize(t + 2)
                    hull_tri[q] = t
                    hull_next[e] = e  # removed from the hull
                    hull_size -= 1
                    e = q

            self._hull_start = hull_prev[i] = e
            hull_next[e] = hull_prev[nxt] = i
            hull_next[i] = nxt

            hull_hash[self._hash_key(x, y)] = e
            hull_hash[self._hash_key(xs[e], ys[e])] = i

        hull = []
        e = self._hull_start
        for _ in range(hull_size):
            hull.append(e)
            e = hull_next[e]

        self.hull = np.array(hull, dtype=np.int64)
        self.triangles = np.array(self._triangles[:self._triangles_len], dtype=np.int64)
        self.halfedges = np.array(self._halfedges[:self._triangles_len], dtype=np.int64)

        if self._stack_overflows:
            logger.warning("sweep_hull_edge_stack_full", capacity=self._stack_size,
                           overflows=self._stack_overflows)
        logger.debug("sweep_hull", points=n, triangles=len(self.triangles) // 3,
                     hull=hull_size, skipped=skipped)

    def _finish_degenerate(self, hull) -> None:
        self.hull = np.array(hull, dtype=np.int64)
        self.triangles = np.empty(0, dtype=np.int64)
        self.halfedges = np.empty(0, dtype=np.int64)

    def _hash_key(self, x: float, y: float) -> int:
        dx = x - self._cx
        dy = y - self._cy
        if dx == 0 and dy == 0:
            return 0
        return math.floor(pseudo_angle(dx, dy) * self._hash_size) % self._hash_size

    def _legalize(self, a: int) -> int:
        triangles = self._triangles
        halfedges = self._halfedges
        xs, ys = self._xs, self._ys
        stack = []
        ar = 0

        while True:
            b = halfedges[a]

            a0 = a - a % 3
            ar = a0 + (a + 2) % 3

            if b == -1:
                # hull edge
                if not stack:
                    break
                a = stack.pop()
                continue

            b0 = b - b % 3
            al = a0 + (a + 1) % 3
            bl = b0 + (b + 2) % 3

            p0 = triangles[ar]
            pr = triangles[a]
            pl = triangles[al]
            p1 = triangles[bl]

            illegal = incircle(xs[p0], ys[p0], xs[pr], ys[pr],
                               xs[pl], ys[pl], xs[p1], ys[p1]) > 0

            if illegal:
                triangles[a] = p1
                triangles[b] = p0

                hbl = halfedges[bl]

                # flipped edge on the other side of the hull; fix the reference
                if hbl == -1:
                    e = self._hull_start
                    while True:
                        if self._hull_tri[e] == bl:
                            self._hull_tri[e] = a
                            break
                        e = self._hull_prev[e]
                        if e == self._hull_start:
                            break

                self._link(a, hbl)
                self._link(b, halfedges[ar])
                self._link(ar, bl)

                br = b0 + (b + 1) % 3

                if len(stack) < self._stack_size:
                    stack.append(br)
                else:
                    self._stack_overflows += 1
            else:
                if not stack:
                    break
                a = stack.pop()

        return ar

    def _link(self, a: int, b: int) -> None:
        self._halfedges[a] = b
        if b != -1:
            self._halfedges[b] = a

    def _add_triangle(self, i0: int, i1: int, i2: int, a: int, b: int, c: int) -> int:
        t = self._triangles_len
        self._triangles[t] = i0
        self._triangles[t + 1] = i1
        self._triangles[t + 2] = i2
        self._link(t, a)
        self._link(t + 1, b)
        self._link(t + 2, c)
        self._triangles_len += 3
        return t
