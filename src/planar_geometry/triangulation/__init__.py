# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Triangulation module for ear clipping, sweep-hull and Delaunay legalization."""

from .earclip import (
    prepare_polygon,
    ear_clip_indices,
    ear_clipping_triangulation,
    oriented_triangle
)

from .sweephull import SweepHull

from .delaunay import (
    PointSet,
    PolygonBoundary,
    triangulate,
    is_illegal,
    legalize,
    delaunay_triangulation,
    insert_point,
    delaunay_triangulation_convex
)

__all__ = [
    # Ear clipping
    'prepare_polygon',
    'ear_clip_indices',
    'ear_clipping_triangulation',
    'oriented_triangle',
    # Sweep-hull
    'SweepHull',
    # Delaunay
    'PointSet',
    'PolygonBoundary',
    'triangulate',
    'is_illegal',
    'legalize',
    'delaunay_triangulation',
    'insert_point',
    'delaunay_triangulation_convex',
]
