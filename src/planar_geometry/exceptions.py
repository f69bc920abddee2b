# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Exception hierarchy for the geometry kernel.

Input-validity errors derive from ``ValueError`` and structural errors
from ``RuntimeError`` so callers can catch either the kernel-specific
class or the builtin one.
"""


class GeometryError(Exception):
    """Base class for every error raised by the kernel."""


class InvalidInputError(GeometryError, ValueError):
    """Input does not satisfy the preconditions of an operation."""


class ComplexPolygonError(InvalidInputError):
    """Ear clipping found no ear: the polygon is not simple."""


class TopologyError(GeometryError, RuntimeError):
    """A graph or mesh operation was used against its contract."""


class HullEdgeFlipError(TopologyError):
    """A flip was requested on a half-edge without a twin."""


class ShapeNotFoundError(TopologyError, KeyError):
    """A shape lookup in a dual graph failed."""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ''


class LegalizationError(TopologyError):
    """Edge legalization exceeded its iteration ceiling."""
