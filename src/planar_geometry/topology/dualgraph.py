# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Half-edge dual graph over polygon shapes.

The graph is an arena: half-edges and nodes are integer handles into
flat lists. Half-edge ``h`` starts at ``vertex(h)``, continues with
``next(h)`` inside its shape, belongs to node ``node(h)`` and is paired
with ``twin(h)`` (-1 when no other shape shares the edge). Two nodes are
adjacent exactly when one of their half-edges are twins; there is no
separate adjacency list.

Node handles are assigned sequentially per graph and never reused, so a
removed node leaves a hole in :attr:`nodes`.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import structlog

from ..exceptions import HullEdgeFlipError, ShapeNotFoundError, TopologyError
from ..geometry.points import Point, centroid
from ..geometry.shapes import BoundingBox, PolygonShape, Triangle
from .mesh import Triangulation
from .rtree import RTree

logger = structlog.get_logger()


@dataclass
class GraphNode:
    """One shape in the graph with its first half-edge and cached centroid."""

    shape: PolygonShape
    first: int
    center: Point


class DualGraph:
    """
    Shapes linked through shared edges.

    :param shapes: Shapes to insert, in order.
    :type shapes: Optional[Iterable[PolygonShape]]
    """

    def __init__(self, shapes: Optional[Iterable[PolygonShape]] = None):
        self._vertex: List[Point] = []
        self._next: List[int] = []
        self._twin: List[int] = []
        self._node: List[int] = []
        self._nodes: List[Optional[GraphNode]] = []
        self._index = RTree(to_bbox=self._node_bbox)
        for shape in shapes or []:
            self.insert_shape(shape)

    # ------------------------------------------------------------------
    # Half-edge accessors
    # ------------------------------------------------------------------

    def vertex(self, h: int) -> Point:
        return self._vertex[h]

    def next(self, h: int) -> int:
        return self._next[h]

    def twin(self, h: int) -> int:
        return self._twin[h]

    def node(self, h: int) -> int:
        return self._node[h]

    def is_live(self, h: int) -> bool:
        return self._nodes[self._node[h]] is not None

    @property
    def half_edge_count(self) -> int:
        return len(self._vertex)

    # ------------------------------------------------------------------
    # Nodes and shapes
    # ------------------------------------------------------------------

    def __len__(self):
        return len(self.nodes)

    @property
    def nodes(self) -> List[int]:
        """Live node handles in insertion order."""
        return [i for i, n in enumerate(self._nodes) if n is not None]

    @property
    def shapes(self) -> List[PolygonShape]:
        return [n.shape for n in self._nodes if n is not None]

    def shape(self, node: int) -> PolygonShape:
        return self._get(node).shape

    def center(self, node: int) -> Point:
        return self._get(node).center

    def first_half_edge(self, node: int) -> int:
        return self._get(node).first

    def _get(self, node: int) -> GraphNode:
        entry = self._nodes[node] if 0 <= node < len(self._nodes) else None
        if entry is None:
            raise ShapeNotFoundError(f"Node {node} is not in the graph")
        return entry

    def _node_bbox(self, node: int) -> BoundingBox:
        return self._nodes[node].shape.bounding_box()

    def half_edges(self, node: int) -> List[int]:
        """Half-edges of a node in shape order."""
        first = self._get(node).first
        result = [first]
        h = self._next[first]
        while h != first:
            result.append(h)
            h = self._next[h]
        return result

    def neighbors(self, node: int) -> List[int]:
        """Nodes sharing an edge with ``node``, in half-edge order."""
        return [self._node[self._twin[h]] for h in self.half_edges(node) if self._twin[h] != -1]

    def find_node_by_shape(self, shape: PolygonShape) -> int:
        """
        Handle of the node holding ``shape``.

        The shape object itself is matched first, then any shape with the
        same point cycle.

        :raises ShapeNotFoundError: When no node holds the shape.
        """
        for i, entry in enumerate(self._nodes):
            if entry is not None and entry.shape is shape:
                return i
        for i, entry in enumerate(self._nodes):
            if entry is not None and entry.shape.same_as(shape):
                return i
        raise ShapeNotFoundError(f"Shape {shape!r} not found in graph")

    def query_nearby_shapes(self, point: Point, radius: float = 0.0) -> List[PolygonShape]:
        """Shapes whose bounding box meets the square of half-size ``radius`` around ``point``."""
        found = self._index.search(BoundingBox.around(point, radius))
        return [self._nodes[i].shape for i in sorted(found)]

    def query_nearby_nodes(self, point: Point, radius: float = 0.0) -> List[int]:
        return sorted(self._index.search(BoundingBox.around(point, radius)))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def build_node(self, shape: PolygonShape) -> int:
        """
        Create a node and its half-edge cycle without linking any twins.

        :param shape: Shape to wrap.
        :type shape: PolygonShape
        :return: New node handle.
        :rtype: int
        """
        node = len(self._nodes)
        first = len(self._vertex)
        count = len(shape.points)
        for k, p in enumerate(shape.points):
            self._vertex.append(p)
            self._next.append(first + (k + 1) % count)
            self._twin.append(-1)
            self._node.append(node)
        self._nodes.append(GraphNode(shape, first, centroid(shape.points)))
        self._index.insert(node)
        return node

    def connect(self, a: int, b: int) -> bool:
        """
        Link the half-edges of nodes ``a`` and ``b`` that share an edge.

        :return: True if at least one pair was linked.
        :rtype: bool
        """
        linked = False
        edges_b = [(h, self._vertex[h], self._vertex[self._next[h]]) for h in self.half_edges(b)]
        for ha in self.half_edges(a):
            start = self._vertex[ha]
            end = self._vertex[self._next[ha]]
            for hb, other_start, other_end in edges_b:
                if ((start == other_end and end == other_start)
                        or (start == other_start and end == other_end)):
                    self._twin[ha] = hb
                    self._twin[hb] = ha
                    linked = True
        return linked

    def insert_shape(self, shape: PolygonShape) -> int:
        """
        Add a shape and link it to every node it shares an edge with.

        Candidates come from the R-tree; linking stops early once every
        edge of the new shape has found its twin.

        :param shape: Shape to insert.
        :type shape: PolygonShape
        :return: New node handle.
        :rtype: int
        """
        node = self.build_node(shape)
        total = len(shape.points)
        own = self.half_edges(node)
        for other in sorted(self._index.search(shape.bounding_box())):
            if other == node:
                continue
            if self.connect(other, node):
                if sum(1 for h in own if self._twin[h] != -1) >= total:
                    break
        return node

    def remove_shape(self, shape: PolygonShape) -> int:
        """
        Remove a shape's node, clearing every twin that points into it.

        :raises ShapeNotFoundError: When the shape is not in the graph.
        :return: Handle of the removed node.
        :rtype: int
        """
        node = self.find_node_by_shape(shape)
        for h in self.half_edges(node):
            t = self._twin[h]
            if t != -1:
                self._twin[t] = -1
                self._twin[h] = -1
        self._index.mark_removed(node)
        self._nodes[node] = None
        return node

    # ------------------------------------------------------------------
    # Traversal and mutation
    # ------------------------------------------------------------------

    def traverse_ordered(self, start: Optional[int] = None) -> List[int]:
        """
        Depth-first walk across twin links.

        Visits every node reachable from ``start`` (default: the first
        live node) once, in the order a recursive walk over each node's
        half-edges would.

        :return: Node handles in visiting order; empty for an empty graph.
        :rtype: List[int]
        """
        live = self.nodes
        if not live:
            return []
        start = live[0] if start is None else start
        self._get(start)

        visited = {start}
        order = [start]
        stack = [iter(self.half_edges(start))]
        while stack:
            for h in stack[-1]:
                t = self._twin[h]
                if t == -1:
                    continue
                other = self._node[t]
                if other not in visited:
                    visited.add(other)
                    order.append(other)
                    stack.append(iter(self.half_edges(other)))
                    break
            else:
                stack.pop()
        return order

    def flip_edge(self, h: int) -> Tuple[int, int]:
        """
        Flip the diagonal shared by the two triangles around ``h``.

        With ``h`` running ``p1 -> p2`` in triangle ``(p1, p2, p3)`` and its
        twin in ``(p2, p1, q)``, the triangles become ``(p1, q, p3)`` and
        ``(p2, p3, q)``. Outer twins are relinked, shapes, centroids and
        the spatial index are refreshed. Half-edge handles stay valid.

        :param h: Interior half-edge of a triangle.
        :type h: int
        :return: The two node handles.
        :rtype: Tuple[int, int]
        :raises HullEdgeFlipError: When ``h`` has no twin.
        """
        t1 = self._twin[h]
        if t1 == -1:
            raise HullEdgeFlipError(f"Half-edge {h} lies on the hull and cannot be flipped")

        e1 = h
        e2 = self._next[e1]
        e3 = self._next[e2]
        t2 = self._next[t1]
        t3 = self._next[t2]
        if self._next[e3] != e1 or self._next[t3] != t1:
            raise TopologyError(f"Half-edge {h} does not separate two triangles")

        node_a = self._node[e1]
        node_b = self._node[t1]
        p3 = self._vertex[e3]
        q = self._vertex[t3]

        self._index.remove(node_a)
        self._index.remove(node_b)

        self._vertex[e2] = q
        self._vertex[t2] = p3

        old_e2_twin = self._twin[e2]
        old_t2_twin = self._twin[t2]
        self._link(e1, old_t2_twin)
        self._link(t1, old_e2_twin)
        self._link(e2, t2)

        for n in (node_a, node_b):
            entry = self._nodes[n]
            points = [self._vertex[x] for x in self.half_edges(n)]
            entry.shape = Triangle(points)
            entry.center = centroid(points)
            self._index.insert(n)
        return node_a, node_b

    def _link(self, a: int, b: int) -> None:
        self._twin[a] = b
        if b != -1:
            self._twin[b] = a

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_triangulation(self) -> Triangulation:
        """
        Flat mesh of a triangle graph.

        Points are deduplicated, twins become the ``halfedges`` buffer and
        the boundary loop becomes the hull.

        :raises TopologyError: When a live shape is not a triangle.
        """
        index: Dict[Point, int] = {}
        points: List[Point] = []
        triangles: List[int] = []
        flat: Dict[int, int] = {}

        for node in self.nodes:
            hs = self.half_edges(node)
            if len(hs) != 3:
                raise TopologyError(f"Node {node} is not a triangle")
            for h in hs:
                p = self._vertex[h]
                if p not in index:
                    index[p] = len(points)
                    points.append(p)
                flat[h] = len(triangles)
                triangles.append(index[p])

        halfedges = [-1] * len(triangles)
        hull_next: Dict[int, int] = {}
        for h, e in flat.items():
            t = self._twin[h]
            if t != -1:
                halfedges[e] = flat[t]
            else:
                hull_next[index[self._vertex[h]]] = index[self._vertex[self._next[h]]]

        hull: List[int] = []
        if hull_next:
            start = min(hull_next)
            p = start
            while True:
                hull.append(p)
                p = hull_next[p]
                if p == start or len(hull) > len(hull_next):
                    break
            if len(hull) != len(hull_next):
                logger.warning("dual_graph_boundary_loops", boundary=len(hull_next), hull=len(hull))

        coords = np.array([(p.x, p.y) for p in points], dtype=np.float64).reshape(-1, 2)
        return Triangulation(coords, triangles, halfedges, hull, points=points)
