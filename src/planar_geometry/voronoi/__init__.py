# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Voronoi module for clipped diagrams and Lloyd relaxation."""

from .clipping import ClipBox

from .diagram import (
    VoronoiCell,
    VoronoiDiagram,
    default_bounds,
    voronoi_diagram,
    lloyd_relaxation
)

__all__ = [
    'ClipBox',
    'VoronoiCell',
    'VoronoiDiagram',
    'default_bounds',
    'voronoi_diagram',
    'lloyd_relaxation',
]
