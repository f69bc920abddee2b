# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Kernel settings, overridable through ``PLANAR_GEOMETRY_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix='PLANAR_GEOMETRY_',
        env_file='.env',
        extra='ignore',
    )

    # Logging
    log_level: str = Field(default='INFO', description='Log level')
    log_json: bool = Field(default=False, description='Render log events as JSON')

    # Numerical tolerances
    tolerance_epsilon: float = Field(
        default=1e-14, description='Tolerance for collinearity detection'
    )
    degenerate_area_epsilon: float = Field(
        default=1e-9,
        description='Twice-area below which a triangle has its circumcenter at infinity',
    )
    far_circumcenter_scale: float = Field(
        default=1e9, description='Offset used for circumcenters at infinity'
    )
    collinear_area_epsilon: float = Field(
        default=1e-10,
        description='Twice-area a triangle must exceed for Voronoi sites not to count as collinear',
    )
    convergence_threshold: float = Field(
        default=1e-4,
        description='Squared distance under which a cell centroid snaps to its seed',
    )

    # Triangulation
    edge_stack_size: int = Field(
        default=512, description='Capacity of the sweep-hull legalization stack'
    )
    max_flip_iterations: int = Field(
        default=100_000, description='Ceiling on edge flips during legalization'
    )

    # Spatial index
    rtree_max_entries: int = Field(default=9, description='Maximum entries per R-tree node')
    rtree_compaction_ratio: float = Field(
        default=0.25,
        description='Share of removed entries that triggers R-tree compaction',
    )

    # Spheres
    min_sphere_max_passes: int = Field(
        default=64, description='Maximum passes of the expanding sphere approximation'
    )

    # Default Voronoi clip rectangle (half extents around the origin)
    default_half_width: float = Field(default=8.0, description='Default clip half width')
    default_half_height: float = Field(default=8.0, description='Default clip half height')


settings = Settings()
