# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Topology module for the half-edge dual graph, flat meshes and the R-tree."""

from .rtree import RTree

from .mesh import (
    Triangulation,
    next_half_edge,
    prev_half_edge
)

from .dualgraph import (
    GraphNode,
    DualGraph
)

__all__ = [
    # Spatial index
    'RTree',
    # Flat mesh
    'Triangulation',
    'next_half_edge',
    'prev_half_edge',
    # Dual graph
    'GraphNode',
    'DualGraph',
]
