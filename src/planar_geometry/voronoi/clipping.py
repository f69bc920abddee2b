# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Clipping of Voronoi cells against a rectangle.

Cells arrive as the clockwise list of their triangles' circumcenters.
Segments are clipped with Liang-Barsky; clipped endpoints are snapped
exactly onto the rectangle side they hit so that edge codes can be
compared with ``==``. Whenever a cell leaves the rectangle on one side
and comes back on another, the rectangle corners in between are spliced
in if they belong to the cell.

Region codes (outside the rectangle) and edge codes (on its sides) share
the same bits.
"""

import math
from typing import Callable, List, Optional, Sequence, Tuple

from ..utils.helpers import validate_bounds

LEFT = 0b0001
RIGHT = 0b0010
TOP = 0b0100
BOTTOM = 0b1000

XY = Tuple[float, float]


class ClipBox:
    """
    Axis-aligned clip rectangle ``(xmin, ymin, xmax, ymax)``.

    :param bounds: Rectangle bounds; ``xmax < xmin`` or ``ymax < ymin``
        raises :class:`InvalidInputError`.
    :type bounds: Sequence[float]
    """

    def __init__(self, bounds: Sequence[float]):
        self.xmin, self.ymin, self.xmax, self.ymax = validate_bounds(bounds)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return self.xmin, self.ymin, self.xmax, self.ymax

    @property
    def center(self) -> XY:
        return (self.xmin + self.xmax) / 2, (self.ymin + self.ymax) / 2

    def polygon(self) -> List[XY]:
        """The rectangle itself, counter-clockwise."""
        return [(self.xmin, self.ymin), (self.xmax, self.ymin),
                (self.xmax, self.ymax), (self.xmin, self.ymax)]

    def region_code(self, x: float, y: float) -> int:
        return ((LEFT if x < self.xmin else RIGHT if x > self.xmax else 0)
                | (TOP if y > self.ymax else BOTTOM if y < self.ymin else 0))

    def edge_code(self, x: float, y: float) -> int:
        return ((LEFT if x == self.xmin else RIGHT if x == self.xmax else 0)
                | (TOP if y == self.ymax else BOTTOM if y == self.ymin else 0))

    # ------------------------------------------------------------------
    # Segments and rays
    # ------------------------------------------------------------------

    def _snap(self, x: float, y: float, side: int) -> XY:
        if side == LEFT:
            x = self.xmin
        elif side == RIGHT:
            x = self.xmax
        elif side == TOP:
            y = self.ymax
        elif side == BOTTOM:
            y = self.ymin
        return min(max(x, self.xmin), self.xmax), min(max(y, self.ymin), self.ymax)

    def clip_segment(self, x0: float, y0: float, x1: float, y1: float,
                     c0: int, c1: int) -> Optional[Tuple[float, float, float, float]]:
        """
        Liang-Barsky clip of the segment ``(x0, y0) - (x1, y1)``.

        The segment is always processed in the same direction whichever
        way it is passed, so two cells sharing an edge get bit-identical
        endpoints.

        :param c0: Region code of the first endpoint.
        :type c0: int
        :param c1: Region code of the second endpoint.
        :type c1: int
        :return: Clipped ``(x0, y0, x1, y1)`` in the caller's direction,
            or None when the segment misses the rectangle.
        :rtype: Optional[Tuple[float, float, float, float]]
        """
        flip = c0 < c1
        if flip:
            x0, y0, x1, y1, c0, c1 = x1, y1, x0, y0, c1, c0
        if c0 & c1:
            return None
        if c0 == 0 and c1 == 0:
            return (x1, y1, x0, y0) if flip else (x0, y0, x1, y1)

        dx = x1 - x0
        dy = y1 - y0
        t0, t1 = 0.0, 1.0
        side0 = side1 = 0
        for p, q, side in ((-dx, x0 - self.xmin, LEFT), (dx, self.xmax - x0, RIGHT),
                           (-dy, y0 - self.ymin, BOTTOM), (dy, self.ymax - y0, TOP)):
            if p == 0:
                if q < 0:
                    return None
                continue
            r = q / p
            if p < 0:
                if r > t1:
                    return None
                if r > t0:
                    t0, side0 = r, side
            else:
                if r < t0:
                    return None
                if r < t1:
                    t1, side1 = r, side

        if c0:
            sx0, sy0 = self._snap(x0 + t0 * dx, y0 + t0 * dy, side0)
        else:
            sx0, sy0 = x0, y0
        if c1:
            sx1, sy1 = self._snap(x0 + t1 * dx, y0 + t1 * dy, side1)
        else:
            sx1, sy1 = x1, y1
        return (sx1, sy1, sx0, sy0) if flip else (sx0, sy0, sx1, sy1)

    def project(self, x0: float, y0: float, vx: float, vy: float) -> Optional[XY]:
        """
        Point where the ray from ``(x0, y0)`` along ``(vx, vy)`` leaves
        the rectangle, or None when it starts outside heading away.
        """
        t = math.inf
        x = y = None
        if vy > 0:
            if y0 >= self.ymax:
                return None
            c = (self.ymax - y0) / vy
            if c < t:
                t = c
                y, x = self.ymax, x0 + c * vx
        elif vy < 0:
            if y0 <= self.ymin:
                return None
            c = (self.ymin - y0) / vy
            if c < t:
                t = c
                y, x = self.ymin, x0 + c * vx
        if vx > 0:
            if x0 >= self.xmax:
                return None
            c = (self.xmax - x0) / vx
            if c < t:
                t = c
                x, y = self.xmax, y0 + c * vy
        elif vx < 0:
            if x0 <= self.xmin:
                return None
            c = (self.xmin - x0) / vx
            if c < t:
                t = c
                x, y = self.xmin, y0 + c * vy
        if x is None:
            return None
        return x, y

    # ------------------------------------------------------------------
    # Cells
    # ------------------------------------------------------------------

    def splice_corners(self, e0: int, e1: int, polygon: List[XY], j: int,
                       contains: Callable[[float, float], bool]) -> int:
        """
        Insert the corners met walking clockwise from side ``e0`` to ``e1``.

        Only corners inside the cell (per ``contains``) are inserted, at
        index ``j``.

        :return: Index after the inserted corners.
        :rtype: int
        """
        while e0 != e1:
            if e0 == TOP | LEFT:
                e0 = TOP
                continue
            if e0 == TOP:
                e0, corner = TOP | RIGHT, (self.xmax, self.ymax)
            elif e0 == TOP | RIGHT:
                e0 = RIGHT
                continue
            elif e0 == RIGHT:
                e0, corner = BOTTOM | RIGHT, (self.xmax, self.ymin)
            elif e0 == BOTTOM | RIGHT:
                e0 = BOTTOM
                continue
            elif e0 == BOTTOM:
                e0, corner = BOTTOM | LEFT, (self.xmin, self.ymin)
            elif e0 == BOTTOM | LEFT:
                e0 = LEFT
                continue
            else:
                e0, corner = TOP | LEFT, (self.xmin, self.ymax)
            if (j >= len(polygon) or polygon[j] != corner) and contains(*corner):
                polygon.insert(j, corner)
                j += 1
        return j

    def clip_finite(self, points: List[XY],
                    contains: Callable[[float, float], bool]) -> Optional[List[XY]]:
        """
        Clip a closed polygon.

        :param points: Polygon vertices, clockwise.
        :type points: List[XY]
        :param contains: Whether a point belongs to the cell.
        :type contains: Callable[[float, float], bool]
        :return: Clipped polygon; the whole rectangle when nothing is left
            but the cell holds the rectangle center; otherwise None.
        :rtype: Optional[List[XY]]
        """
        polygon: List[XY] = []
        x1, y1 = points[-1]
        c1 = self.region_code(x1, y1)
        e1 = 0
        for x, y in points:
            x0, y0, x1, y1 = x1, y1, x, y
            c0, c1 = c1, self.region_code(x1, y1)
            if c0 == 0 and c1 == 0:
                e1 = 0
                polygon.append((x1, y1))
                continue

            if c0 == 0:
                clipped = self.clip_segment(x0, y0, x1, y1, c0, c1)
                if clipped is None:
                    continue
                sx0, sy0, sx1, sy1 = clipped
            else:
                clipped = self.clip_segment(x1, y1, x0, y0, c1, c0)
                if clipped is None:
                    continue
                sx1, sy1, sx0, sy0 = clipped
                e0, e1 = e1, self.edge_code(sx0, sy0)
                if e0 and e1:
                    self.splice_corners(e0, e1, polygon, len(polygon), contains)
                polygon.append((sx0, sy0))

            e0, e1 = e1, self.edge_code(sx1, sy1)
            if e0 and e1:
                self.splice_corners(e0, e1, polygon, len(polygon), contains)
            polygon.append((sx1, sy1))

        if polygon:
            e0, e1 = e1, self.edge_code(*polygon[0])
            if e0 and e1:
                self.splice_corners(e0, e1, polygon, len(polygon), contains)
            return polygon
        if contains(*self.center):
            return self.polygon()
        return None

    def clip_infinite(self, points: List[XY], first_ray: XY, last_ray: XY,
                      contains: Callable[[float, float], bool]) -> Optional[List[XY]]:
        """
        Clip the open cell of a hull site.

        The cell is closed by projecting its first vertex along
        ``first_ray`` and its last vertex along ``last_ray`` onto the
        rectangle before clipping.
        """
        polygon = list(points)
        p = self.project(*polygon[0], *first_ray)
        if p is not None:
            polygon.insert(0, p)
        p = self.project(*polygon[-1], *last_ray)
        if p is not None:
            polygon.append(p)

        polygon = self.clip_finite(polygon, contains)
        if polygon:
            n = len(polygon)
            c1 = self.edge_code(*polygon[-1])
            j = 0
            while j < n:
                c0, c1 = c1, self.edge_code(*polygon[j])
                if c0 and c1:
                    j = self.splice_corners(c0, c1, polygon, j, contains)
                    n = len(polygon)
                j += 1
        elif contains(*self.center):
            polygon = self.polygon()
        return polygon


def simplify(polygon: Optional[List[XY]]) -> Optional[List[XY]]:
    """Drop vertices lying between two neighbors on the same vertical or horizontal line."""
    if polygon and len(polygon) > 2:
        i = 0
        while i < len(polygon):
            j = (i + 1) % len(polygon)
            k = (i + 2) % len(polygon)
            a, b, c = polygon[i], polygon[j], polygon[k]
            if (a[0] == b[0] == c[0]) or (a[1] == b[1] == c[1]):
                del polygon[j]
                continue
            i += 1
        if not polygon:
            return None
    return polygon


def dedupe_consecutive(polygon: List[XY]) -> List[XY]:
    """Remove cyclically consecutive repeated vertices."""
    result: List[XY] = []
    for p in polygon:
        if not result or result[-1] != p:
            result.append(p)
    while len(result) > 1 and result[0] == result[-1]:
        result.pop()
    return result
