# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Utility functions and helpers.

This module contains logging setup and small conversions shared by the
triangulators and the Voronoi constructor.
"""

import logging
import os
import sys
from typing import Iterable, Optional, Sequence

import numpy as np
import structlog

from ..config import settings
from ..exceptions import InvalidInputError


def configure_logging(level: Optional[str] = None, json: Optional[bool] = None) -> None:
    """
    Configure structlog on top of the standard library logging module.

    :param level: Log level name; defaults to ``settings.log_level``.
    :type level: Optional[str]
    :param json: Render events as JSON instead of console lines;
        defaults to ``settings.log_json``.
    :type json: Optional[bool]
    """
    level = (level or settings.log_level).upper()
    json = settings.log_json if json is None else json

    logging.basicConfig(format='%(message)s', stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)

    renderer = (structlog.processors.JSONRenderer() if json
                else structlog.dev.ConsoleRenderer())
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt='iso'),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def as_coords(points: Iterable) -> np.ndarray:
    """
    Convert points to a float64 ``(N, 2)`` coordinate array.

    Accepts objects with ``x``/``y`` attributes, ``(x, y[, z])`` sequences
    or an existing array; any z component is dropped.

    :param points: Input points.
    :type points: Iterable
    :return: ``(N, 2)`` array of coordinates.
    :rtype: np.ndarray
    """
    if isinstance(points, np.ndarray):
        arr = np.asarray(points, dtype=np.float64)
    else:
        rows = [(p.x, p.y) if hasattr(p, 'x') else tuple(p)[:2] for p in points]
        arr = np.asarray(rows, dtype=np.float64).reshape(-1, 2) if rows else np.empty((0, 2))
    if arr.ndim == 1 and arr.size % 2 == 0:
        arr = arr.reshape(-1, 2)
    if arr.ndim != 2 or arr.shape[1] < 2:
        raise InvalidInputError(f"Expected (N, 2) coordinates, got shape {arr.shape}")
    arr = arr[:, :2]
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError("Coordinates must be finite numbers")
    return np.ascontiguousarray(arr)


def validate_bounds(bounds: Sequence[float]) -> tuple:
    """
    Validate a clip rectangle given as ``(xmin, ymin, xmax, ymax)``.

    :param bounds: Rectangle bounds.
    :type bounds: Sequence[float]
    :return: Bounds as a tuple of floats.
    :rtype: tuple
    """
    if len(bounds) != 4:
        raise InvalidInputError("Bounds must be (xmin, ymin, xmax, ymax)")
    xmin, ymin, xmax, ymax = (float(b) for b in bounds)
    if not (xmax >= xmin and ymax >= ymin):
        raise InvalidInputError(f"Invalid bounds {bounds}")
    return xmin, ymin, xmax, ymax


def ensure_dir_exists(path: str) -> None:
    """
    Ensure directory exists, create if necessary.

    :param path: Directory path.
    :type path: str
    """
    if path:
        os.makedirs(path, exist_ok=True)
