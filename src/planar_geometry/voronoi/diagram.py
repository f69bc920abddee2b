# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Voronoi diagrams clipped to a rectangle.

Cells are derived from a Delaunay :class:`Triangulation`. The cell of a
site is the loop of circumcenters of the triangles around it, walked
through the half-edges. Sites on the hull get two exterior rays (the
outward normals of their hull edges) so their open cell can be closed
against the rectangle. Every cell is clipped with :class:`ClipBox` and
stored counter-clockwise in a :class:`VoronoiDiagram`, which is a
:class:`DualGraph` linking cells through their shared edges.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from ..config import settings
from ..geometry.points import Point, to_points
from ..geometry.shapes import PolygonEdge, PolygonShape, polygon_centroid, polygon_signed_area
from ..topology.dualgraph import DualGraph
from ..topology.mesh import Triangulation, next_half_edge
from ..triangulation.sweephull import SweepHull
from .clipping import ClipBox, dedupe_consecutive, simplify

logger = structlog.get_logger()


class VoronoiCell(PolygonShape):
    """
    Convex cell of one site.

    :param seed: Generating site.
    :type seed: Point
    :param points: Cell vertices, counter-clockwise.
    :type points: Sequence[Point]
    :param original: False when the site was added by the algorithm
        rather than supplied by the caller.
    :type original: bool
    """

    def __init__(self, seed: Point, points: Sequence[Point], original: bool = True):
        super().__init__(points)
        self.seed = seed
        self.original = original
        center = polygon_centroid(self.points)
        if center.distance_to_sq(seed) < settings.convergence_threshold:
            center = seed
        self._centroid = center

    def centroid(self) -> Point:
        """Area centroid, or the seed itself once they are close enough."""
        return self._centroid

    def __repr__(self):
        return f"VoronoiCell(seed={self.seed!r}, points={list(self.points)!r})"


class VoronoiDiagram(DualGraph):
    """
    Voronoi cells linked through shared edges.

    :param cells: Cells to insert.
    :type cells: Optional[Iterable[VoronoiCell]]
    :param triangulation_edges: Delaunay edges the diagram was built from.
    :type triangulation_edges: Optional[Iterable[PolygonEdge]]
    :param bounds: Clip rectangle ``(xmin, ymin, xmax, ymax)``.
    :type bounds: Optional[Tuple[float, float, float, float]]
    """

    def __init__(self, cells: Optional[Iterable[VoronoiCell]] = None,
                 triangulation_edges: Optional[Iterable[PolygonEdge]] = None,
                 bounds: Optional[Tuple[float, float, float, float]] = None):
        super().__init__(cells)
        self.triangulation_edges: List[PolygonEdge] = list(dict.fromkeys(triangulation_edges or []))
        self.bounds = bounds

    @property
    def cells(self) -> List[VoronoiCell]:
        return self.shapes

    def seeds(self) -> List[Point]:
        return [cell.seed for cell in self.shapes]

    def is_centroidal(self) -> bool:
        """True when every caller-supplied site sits on its cell centroid."""
        return all(cell.seed == cell.centroid() for cell in self.shapes if cell.original)

    def lloyd_relaxation_points(self) -> List[Point]:
        """Centroids of the caller-supplied cells, the sites of the next Lloyd step."""
        return [cell.centroid() for cell in self.shapes if cell.original]

    def to_plain_object(self) -> dict:
        """
        Nested dicts with ``shapes`` (seed and points per cell) and
        ``edges`` (start and end per Delaunay edge).
        """
        return {
            'shapes': [
                {
                    'seed': {'x': cell.seed.x, 'y': cell.seed.y},
                    'points': [{'x': p.x, 'y': p.y} for p in cell.points],
                }
                for cell in self.shapes
            ],
            'edges': [
                {
                    'start': {'x': edge.start.x, 'y': edge.start.y},
                    'end': {'x': edge.end.x, 'y': edge.end.y},
                }
                for edge in self.triangulation_edges
            ],
        }

    @classmethod
    def from_plain_object(cls, plain: dict) -> 'VoronoiDiagram':
        """Rebuild a diagram from :meth:`to_plain_object` output; all cells are original."""
        cells = [
            VoronoiCell(Point(shape['seed']['x'], shape['seed']['y']),
                        [Point(p['x'], p['y']) for p in shape['points']])
            for shape in plain.get('shapes', [])
        ]
        edges = [
            PolygonEdge(Point(edge['start']['x'], edge['start']['y']),
                        Point(edge['end']['x'], edge['end']['y']))
            for edge in plain.get('edges', [])
        ]
        return cls(cells, edges)

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    @classmethod
    def from_triangulation(cls, tri: Triangulation,
                           bounds: Optional[Sequence[float]] = None,
                           sites: Optional[Iterable] = None) -> 'VoronoiDiagram':
        """
        Clipped Voronoi diagram of the points of a triangulation.

        :param tri: Delaunay triangulation of the sites.
        :type tri: Triangulation
        :param bounds: Clip rectangle; defaults to the settings half extents
            around the origin.
        :type bounds: Optional[Sequence[float]]
        :param sites: Caller-supplied sites. Cells of other points are
            flagged as not original. All cells are original when omitted.
        :type sites: Optional[Iterable]
        :return: The diagram; duplicate points get no cell.
        :rtype: VoronoiDiagram
        """
        box = ClipBox(default_bounds() if bounds is None else bounds)
        originals = None if sites is None else {(p.x, p.y) for p in to_points(sites)}
        n = len(tri.coords)
        seeds = [tri.point(i) for i in range(n)]
        edges = [PolygonEdge(seeds[a], seeds[b]) for a, b in tri.edges()]

        polygons = _clipped_cells(tri, box)

        cells = []
        for i, polygon in polygons.items():
            seed = seeds[i]
            original = originals is None or (seed.x, seed.y) in originals
            cells.append(VoronoiCell(seed, [Point(x, y) for x, y in polygon], original))

        logger.debug("voronoi_diagram", sites=n, cells=len(cells), triangles=len(tri))
        return cls(cells, edges, box.bounds)

    @classmethod
    def from_points(cls, points: Sequence,
                    bounds: Optional[Sequence[float]] = None) -> 'VoronoiDiagram':
        """Sweep-hull triangulation of ``points`` followed by :meth:`from_triangulation`."""
        tri = SweepHull.from_points(to_points(points)).to_triangulation()
        return cls.from_triangulation(tri, bounds)

    @classmethod
    def from_dual_graph(cls, graph: DualGraph,
                        bounds: Optional[Sequence[float]] = None,
                        sites: Optional[Iterable] = None) -> 'VoronoiDiagram':
        """Diagram of a triangle graph, e.g. one built by ear clipping and flips."""
        return cls.from_triangulation(graph.to_triangulation(), bounds, sites)


def default_bounds() -> Tuple[float, float, float, float]:
    w = settings.default_half_width
    h = settings.default_half_height
    return -w, -h, w, h


# ----------------------------------------------------------------------
# Cell construction
# ----------------------------------------------------------------------

def _is_flat(tri: Triangulation) -> bool:
    coords = tri.coords
    for a, b, c in tri.triangle_indices():
        cross = ((coords[b, 0] - coords[a, 0]) * (coords[c, 1] - coords[a, 1])
                 - (coords[b, 1] - coords[a, 1]) * (coords[c, 0] - coords[a, 0]))
        if cross > settings.collinear_area_epsilon:
            return False
    return True


def _jitter(coords: np.ndarray) -> np.ndarray:
    """Nudge every point by a deterministic ``1e-8 * extent`` so they stop being collinear."""
    order = np.lexsort((coords[:, 1], coords[:, 0]))
    first = coords[order[0]]
    last = coords[order[-1]]
    r = 1e-8 * np.hypot(last[1] - first[1], last[0] - first[0])
    x = coords[:, 0]
    y = coords[:, 1]
    return np.column_stack((x + np.sin(x + y) * r, y + np.cos(x - y) * r))


def _prepare(tri: Triangulation) -> Triangulation:
    """
    Triangulation the cell walk can run on.

    Collinear inputs are jittered and triangulated again. Two distinct
    points get one flat triangle so that both sites have an incident
    half-edge.
    """
    if len(tri.hull) > 2 and _is_flat(tri):
        logger.warning("voronoi_collinear_sites", sites=len(tri.coords))
        return SweepHull(_jitter(tri.coords)).to_triangulation()
    if len(tri.hull) == 2 and len(tri) == 0:
        h0, h1 = (int(h) for h in tri.hull)
        return Triangulation(tri.coords, [h0, h1, h1], [-1, -1, -1], tri.hull)
    return tri


def _circumcenters(tri: Triangulation) -> np.ndarray:
    """
    Circumcenter per triangle.

    A flat triangle has its circumcenter pushed far out along the normal
    of its edge, on the side away from the hull barycenter.
    """
    coords = tri.coords
    idx = tri.triangle_indices()
    if not len(idx):
        return np.empty((0, 2))
    p1 = coords[idx[:, 0]]
    p2 = coords[idx[:, 1]]
    p3 = coords[idx[:, 2]]
    dx, dy = (p2 - p1).T
    ex, ey = (p3 - p1).T
    ab = (dx * ey - dy * ex) * 2
    flat = np.abs(ab) < settings.degenerate_area_epsilon

    with np.errstate(divide='ignore', invalid='ignore'):
        d = 1 / ab
        bl = dx * dx + dy * dy
        cl = ex * ex + ey * ey
        x = p1[:, 0] + (ey * bl - dy * cl) * d
        y = p1[:, 1] + (dx * cl - ex * bl) * d

    if flat.any():
        bx, by = coords[tri.hull].mean(axis=0)
        a = settings.far_circumcenter_scale * np.sign((bx - p1[:, 0]) * ey - (by - p1[:, 1]) * ex)
        x = np.where(flat, (p1[:, 0] + p3[:, 0]) / 2 - a * ey, x)
        y = np.where(flat, (p1[:, 1] + p3[:, 1]) / 2 + a * ex, y)
    return np.column_stack((x, y))


def _hull_rays(tri: Triangulation) -> np.ndarray:
    """
    Exterior rays per point: ``[vx0, vy0, vxn, vyn]``, the outward normals
    of the hull edges entering and leaving the point; zero inside.
    """
    coords = tri.coords
    rays = np.zeros((len(coords), 4))
    hull = tri.hull.tolist()
    if not hull:
        return rays
    h1 = hull[-1]
    x1, y1 = coords[h1]
    for h in hull:
        h0, x0, y0 = h1, x1, y1
        h1 = h
        x1, y1 = coords[h1]
        rays[h0, 2] = rays[h1, 0] = y1 - y0
        rays[h0, 3] = rays[h1, 1] = x0 - x1
    return rays


def _cell(tri: Triangulation, centers: np.ndarray, i: int) -> Optional[List[Tuple[float, float]]]:
    """Circumcenters of the triangles around point ``i``, clockwise."""
    e0 = int(tri.inedges[i])
    if e0 == -1:
        return None
    triangles = tri.triangles
    halfedges = tri.halfedges
    points = []
    e = e0
    while True:
        x, y = centers[e // 3]
        points.append((float(x), float(y)))
        e = next_half_edge(e)
        if triangles[e] != i:
            break
        e = int(halfedges[e])
        if e == e0 or e == -1:
            break
    return points


def _clipped_cells(tri: Triangulation, box: ClipBox) -> Dict[int, List[Tuple[float, float]]]:
    """
    Clipped counter-clockwise polygon per point index.

    Points without a cell (duplicates, or cells entirely outside the
    rectangle) are left out.
    """
    if len(tri.coords) == 0:
        return {}
    if len(tri.hull) == 1 and len(tri) == 0:
        return {int(tri.hull[0]): box.polygon()}

    mesh = _prepare(tri)
    centers = _circumcenters(mesh)
    rays = _hull_rays(mesh)

    result = {}
    for i in range(len(mesh.coords)):
        points = _cell(mesh, centers, i)
        if points is None:
            continue

        def contains(x, y, i=i):
            return mesh.step(i, x, y) == i

        vx0, vy0, vxn, vyn = rays[i]
        if vx0 or vy0:
            polygon = box.clip_infinite(points, (vx0, vy0), (vxn, vyn), contains)
        else:
            polygon = box.clip_finite(points, contains)
        polygon = simplify(polygon)
        if not polygon:
            continue
        polygon = dedupe_consecutive(polygon)
        if len(polygon) < 3:
            logger.debug("voronoi_cell_degenerate", site=i, vertices=len(polygon))
            continue
        if polygon_signed_area([Point(x, y) for x, y in polygon]) < 0:
            polygon.reverse()
        result[i] = polygon
    return result


# ----------------------------------------------------------------------
# Convenience entry points
# ----------------------------------------------------------------------

def voronoi_diagram(points: Sequence, width: Optional[float] = None,
                    height: Optional[float] = None) -> VoronoiDiagram:
    """
    Voronoi diagram of ``points`` clipped to ``[-width, width] x [-height, height]``.

    :param points: Sites.
    :type points: Sequence
    :param width: Half width; defaults to ``settings.default_half_width``.
    :type width: Optional[float]
    :param height: Half height; defaults to ``settings.default_half_height``.
    :type height: Optional[float]
    :rtype: VoronoiDiagram
    """
    width = settings.default_half_width if width is None else width
    height = settings.default_half_height if height is None else height
    return VoronoiDiagram.from_points(points, (-width, -height, width, height))


def lloyd_relaxation(points: Sequence, bounds: Optional[Sequence[float]] = None,
                     iterations: int = 1) -> VoronoiDiagram:
    """
    Run Lloyd relaxation: move every site to its cell centroid and rebuild.

    Stops early once the diagram is centroidal.

    :param points: Initial sites.
    :type points: Sequence
    :param bounds: Clip rectangle.
    :type bounds: Optional[Sequence[float]]
    :param iterations: Maximum number of relaxation steps.
    :type iterations: int
    :return: Diagram of the last sites.
    :rtype: VoronoiDiagram
    """
    diagram = VoronoiDiagram.from_points(points, bounds)
    for step in range(iterations):
        if diagram.is_centroidal():
            logger.debug("lloyd_converged", step=step)
            break
        diagram = VoronoiDiagram.from_points(diagram.lloyd_relaxation_points(), bounds)
    return diagram
