# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Tests for sample inputs, point generation, bounds validation and settings."""

import numpy as np
import pytest
import structlog
from shapely.geometry import Polygon

from planar_geometry.config import Settings, settings
from planar_geometry.exceptions import InvalidInputError
from planar_geometry.geometry.points import distinct_points
from planar_geometry.utils.helpers import as_coords, configure_logging, validate_bounds
from planar_geometry.utils.samples import (
    SAMPLE_POINT_CLOUDS,
    PointGenerationType,
    bruteforce_points,
    random_points,
    stratified_points,
)
from planar_geometry.voronoi.diagram import voronoi_diagram

BOUNDS = (-8, -8, 8, 8)


@pytest.mark.parametrize('sample', SAMPLE_POINT_CLOUDS, ids=lambda s: s.name)
def test_sample_clouds_give_one_cell_per_distinct_point(sample):
    diagram = voronoi_diagram(sample.points)
    assert len(diagram) == len(distinct_points(sample.points))
    total = sum(Polygon([(p.x, p.y) for p in cell.points]).area for cell in diagram.cells)
    assert total == pytest.approx(256, rel=1e-5)


@pytest.mark.parametrize('strategy', list(PointGenerationType))
def test_random_points_stay_in_bounds(strategy):
    rng = np.random.default_rng(0)
    points = random_points(37, (-2, -1, 3, 4), strategy=strategy, rng=rng)
    assert len(points) == 37
    assert all(-2 <= p.x <= 3 and -1 <= p.y <= 4 for p in points)


def test_generators_are_reproducible_with_a_seed():
    a = bruteforce_points(10, BOUNDS, np.random.default_rng(5))
    b = bruteforce_points(10, BOUNDS, np.random.default_rng(5))
    assert a == b


def test_stratified_points_fill_every_stratum():
    points = stratified_points(40, (0, 0, 4, 4), np.random.default_rng(1), strata_x=2, strata_y=2)
    assert len(points) == 40
    quadrants = {(p.x >= 2, p.y >= 2) for p in points}
    assert len(quadrants) == 4
    assert stratified_points(0, BOUNDS) == []


def test_validate_bounds():
    assert validate_bounds([0, 1, 2, 3]) == (0.0, 1.0, 2.0, 3.0)
    assert validate_bounds((1, 1, 1, 1)) == (1.0, 1.0, 1.0, 1.0)
    with pytest.raises(InvalidInputError):
        validate_bounds((0, 0, 1))
    with pytest.raises(InvalidInputError):
        validate_bounds((2, 0, 1, 1))
    with pytest.raises(InvalidInputError):
        bruteforce_points(3, (0, 2, 1, 1))


def test_as_coords():
    assert as_coords([(1, 2, 3), (4, 5, 6)]).tolist() == [[1, 2], [4, 5]]
    assert as_coords([]).shape == (0, 2)
    assert as_coords(np.array([0.0, 1.0, 2.0, 3.0])).shape == (2, 2)
    with pytest.raises(InvalidInputError):
        as_coords([(0, np.inf)])


def test_configure_logging_accepts_both_renderers():
    configure_logging('DEBUG', json=True)
    structlog.get_logger().debug("test_event", value=1)
    configure_logging('WARNING', json=False)
    structlog.get_logger().warning("test_event", value=2)


def test_settings_defaults_and_environment(monkeypatch):
    assert settings.max_flip_iterations > 0
    assert settings.rtree_max_entries >= 4
    assert (settings.default_half_width, settings.default_half_height) == (8.0, 8.0)

    monkeypatch.setenv('PLANAR_GEOMETRY_EDGE_STACK_SIZE', '64')
    monkeypatch.setenv('PLANAR_GEOMETRY_LOG_JSON', 'true')
    overridden = Settings()
    assert overridden.edge_stack_size == 64
    assert overridden.log_json is True
