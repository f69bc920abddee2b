# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Tests for the pydantic records and JSON persistence of diagrams."""

import json

import pytest
from pydantic import ValidationError

from planar_geometry.exceptions import InvalidInputError
from planar_geometry.geometry.points import Point
from planar_geometry.geometry.shapes import Triangle
from planar_geometry.geometry.spheres import Sphere
from planar_geometry.io.records import (
    DiagramRecord,
    SphereRecord,
    TriangleRecord,
    load_diagram,
    save_diagram,
)
from planar_geometry.voronoi.diagram import voronoi_diagram

SITES = [(-3.2, 2.4), (1.7, -1.9), (-0.8, -3.1), (0.9, 4.5), (-2.5, -0.6), (2.3, 1.8)]


def test_save_and_load_diagram(tmp_path):
    diagram = voronoi_diagram(SITES)
    path = tmp_path / 'nested' / 'diagram.json'
    save_diagram(diagram, str(path))
    assert path.exists()

    loaded = load_diagram(str(path))
    assert len(loaded) == len(diagram)
    assert loaded.seeds() == diagram.seeds()
    assert [c.points for c in loaded.cells] == [c.points for c in diagram.cells]
    assert set(loaded.triangulation_edges) == set(diagram.triangulation_edges)


def test_record_matches_plain_object():
    diagram = voronoi_diagram(SITES)
    record = DiagramRecord.from_diagram(diagram)
    assert record.model_dump() == diagram.to_plain_object()


def test_unknown_keys_are_ignored():
    plain = {
        'version': 2,
        'shapes': [{'seed': {'x': 0, 'y': 0, 'label': 'a'},
                    'points': [{'x': 0, 'y': 0}, {'x': 1, 'y': 0}, {'x': 0, 'y': 1}],
                    'color': 'red'}],
        'edges': [],
    }
    diagram = DiagramRecord.model_validate(plain).to_diagram()
    assert len(diagram) == 1
    assert diagram.cells[0].seed == Point(0, 0)
    assert diagram.cells[0].original


def test_load_rejects_invalid_records(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text(json.dumps({'shapes': [{'points': []}]}))
    with pytest.raises(InvalidInputError):
        load_diagram(str(path))

    path.write_text('not json')
    with pytest.raises(InvalidInputError):
        load_diagram(str(path))


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_diagram(str(tmp_path / 'missing.json'))


def test_triangle_record():
    triangle = Triangle([Point(0, 0), Point(1, 0), Point(0, 1)])
    record = TriangleRecord.from_triangle(triangle)
    assert record.to_triangle().points == triangle.points
    with pytest.raises(ValidationError):
        TriangleRecord(points=[{'x': 0, 'y': 0}, {'x': 1, 'y': 0}])


def test_sphere_record():
    record = SphereRecord.from_sphere(Sphere(Point(1, 2, 3), 4.0))
    assert record.origin.z == 3
    sphere = record.to_sphere()
    assert sphere.origin == Point(1, 2, 3)
    assert sphere.radius == 4.0
    assert SphereRecord.model_validate({'origin': {'x': 0, 'y': 0}, 'radius': 1}).origin.z == 0
    with pytest.raises(ValidationError):
        SphereRecord(origin={'x': 0, 'y': 0}, radius=-1)
