# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Planar Geometry Package

A computational-geometry kernel for 2D point sets and simple polygons:
robust orientation and in-circle predicates, Delaunay triangulation
(ear clipping with edge flips, and sweep-hull), clipped Voronoi
diagrams, a half-edge dual graph, an R-tree, convex hulls and enclosing
spheres.

Modules:
--------
- geometry: Points, predicates, polygons, hulls and spheres
- topology: Half-edge dual graph, flat triangle mesh and R-tree
- triangulation: Ear clipping, sweep-hull and Delaunay legalization
- voronoi: Voronoi cells clipped to a rectangle, Lloyd relaxation
- io: Plain records and JSON persistence
- utils: Logging setup, sample inputs and random points

Example Usage:
--------------
    import planar_geometry as pg

    pg.utils.configure_logging()

    tri = pg.triangulation.triangulate(pg.triangulation.PointSet(points))
    diagram = pg.voronoi.VoronoiDiagram.from_triangulation(tri, (-8, -8, 8, 8))
    pg.io.save_diagram(diagram, 'output/diagram.json')
"""

__version__ = '0.1.0'
__author__ = 'Rami Ardati'

from . import config
from . import exceptions
from . import geometry
from . import topology
from . import triangulation
from . import voronoi
from . import io
from . import utils

from .config import Settings, settings
from .exceptions import (
    GeometryError,
    InvalidInputError,
    ComplexPolygonError,
    TopologyError,
    HullEdgeFlipError,
    ShapeNotFoundError,
    LegalizationError
)

__all__ = [
    'config',
    'exceptions',
    'geometry',
    'topology',
    'triangulation',
    'voronoi',
    'io',
    'utils',
    'Settings',
    'settings',
    'GeometryError',
    'InvalidInputError',
    'ComplexPolygonError',
    'TopologyError',
    'HullEdgeFlipError',
    'ShapeNotFoundError',
    'LegalizationError',
]
