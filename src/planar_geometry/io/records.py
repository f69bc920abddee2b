# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Plain records exchanged with callers.

This module provides pydantic models for the nested dict form of
diagrams, triangles and spheres, and JSON persistence for diagrams.
Unknown keys are ignored when records are read back.
"""

import os
from typing import List

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import InvalidInputError
from ..geometry.points import Point
from ..geometry.shapes import Triangle
from ..geometry.spheres import Sphere
from ..utils.helpers import ensure_dir_exists
from ..voronoi.diagram import VoronoiDiagram

logger = structlog.get_logger()


class PointRecord(BaseModel):
    """Planar point."""

    model_config = ConfigDict(extra='ignore')

    x: float
    y: float

    @classmethod
    def from_point(cls, point: Point) -> 'PointRecord':
        return cls(x=point.x, y=point.y)

    def to_point(self) -> Point:
        return Point(self.x, self.y)


class Point3Record(PointRecord):
    """Point with a z coordinate, used by sphere records."""

    z: float = 0.0

    @classmethod
    def from_point(cls, point: Point) -> 'Point3Record':
        return cls(x=point.x, y=point.y, z=point.z)

    def to_point(self) -> Point:
        return Point(self.x, self.y, self.z)


class CellRecord(BaseModel):
    """Voronoi cell: generating seed and polygon vertices."""

    model_config = ConfigDict(extra='ignore')

    seed: PointRecord
    points: List[PointRecord] = Field(default_factory=list)


class EdgeRecord(BaseModel):
    """Delaunay edge."""

    model_config = ConfigDict(extra='ignore')

    start: PointRecord
    end: PointRecord


class DiagramRecord(BaseModel):
    """Voronoi diagram: cells under ``shapes``, Delaunay edges under ``edges``."""

    model_config = ConfigDict(extra='ignore')

    shapes: List[CellRecord] = Field(default_factory=list)
    edges: List[EdgeRecord] = Field(default_factory=list)

    @classmethod
    def from_diagram(cls, diagram: VoronoiDiagram) -> 'DiagramRecord':
        return cls.model_validate(diagram.to_plain_object())

    def to_diagram(self) -> VoronoiDiagram:
        return VoronoiDiagram.from_plain_object(self.model_dump())


class TriangleRecord(BaseModel):
    """Triangle as its three vertices."""

    model_config = ConfigDict(extra='ignore')

    points: List[PointRecord] = Field(min_length=3, max_length=3)

    @classmethod
    def from_triangle(cls, triangle: Triangle) -> 'TriangleRecord':
        return cls(points=[PointRecord.from_point(p) for p in triangle.points])

    def to_triangle(self) -> Triangle:
        return Triangle([p.to_point() for p in self.points])


class SphereRecord(BaseModel):
    """Sphere, or circle when ``origin.z`` is zero."""

    model_config = ConfigDict(extra='ignore')

    origin: Point3Record
    radius: float = Field(ge=0)

    @classmethod
    def from_sphere(cls, sphere: Sphere) -> 'SphereRecord':
        return cls(origin=Point3Record.from_point(sphere.origin), radius=sphere.radius)

    def to_sphere(self) -> Sphere:
        return Sphere(self.origin.to_point(), self.radius)


def save_diagram(diagram: VoronoiDiagram, path: str) -> None:
    """
    Write a diagram as JSON.

    :param diagram: Diagram to save.
    :type diagram: VoronoiDiagram
    :param path: Output file path; missing parent directories are created.
    :type path: str
    """
    ensure_dir_exists(os.path.dirname(path))
    record = DiagramRecord.from_diagram(diagram)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(record.model_dump_json(indent=2))
    logger.info("diagram_saved", path=path, cells=len(record.shapes), edges=len(record.edges))


def load_diagram(path: str) -> VoronoiDiagram:
    """
    Read a diagram written by :func:`save_diagram`.

    :param path: JSON file path.
    :type path: str
    :return: Rebuilt diagram; every cell is flagged original.
    :rtype: VoronoiDiagram
    :raises FileNotFoundError: If the file does not exist.
    :raises InvalidInputError: If the file is not a valid diagram record.
    """
    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()
    try:
        record = DiagramRecord.model_validate_json(content)
    except ValueError as e:
        raise InvalidInputError(f"Invalid diagram record in {path}: {e}") from e
    return record.to_diagram()
