# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""I/O module for plain records and diagram persistence."""

from .records import (
    PointRecord,
    Point3Record,
    CellRecord,
    EdgeRecord,
    DiagramRecord,
    TriangleRecord,
    SphereRecord,
    save_diagram,
    load_diagram
)

__all__ = [
    'PointRecord',
    'Point3Record',
    'CellRecord',
    'EdgeRecord',
    'DiagramRecord',
    'TriangleRecord',
    'SphereRecord',
    'save_diagram',
    'load_diagram',
]
