# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Utils module for helper functions, sample inputs and random points."""

from .helpers import (
    configure_logging,
    as_coords,
    validate_bounds,
    ensure_dir_exists
)

from .samples import (
    SampleModel,
    PointGenerationType,
    bruteforce_points,
    stratified_points,
    random_points,
    SAMPLE_POLYGONS,
    SAMPLE_POINT_CLOUDS
)

__all__ = [
    'configure_logging',
    'as_coords',
    'validate_bounds',
    'ensure_dir_exists',
    'SampleModel',
    'PointGenerationType',
    'bruteforce_points',
    'stratified_points',
    'random_points',
    'SAMPLE_POLYGONS',
    'SAMPLE_POINT_CLOUDS',
]
