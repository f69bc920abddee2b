# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Geometry module for points, predicates, polygons, hulls and spheres."""

from .points import (
    Point,
    centroid,
    to_points,
    distinct_points,
    normalize,
    project,
    angle_between
)

from .predicates import (
    two_sum,
    two_product,
    split,
    expansion_sum,
    scale_expansion,
    estimate,
    orientation,
    incircle,
    orient,
    in_circumcircle
)

from .affine import (
    Orientation,
    signed_area_2d,
    signed_volume_3d,
    orientation_2d,
    orientation_3d,
    polygon_normal,
    calculate_plane_normal,
    find_orthonormal_base,
    rotation_to_z_plane,
    rotate_points,
    rotate_vector,
    pseudo_angle,
    pseudo_angle_as_square_perimeter,
    interpolate_points
)

from .shapes import (
    BoundingBox,
    PolygonEdge,
    PolygonShape,
    Triangle,
    polygon_signed_area,
    polygon_centroid
)

from .hull import (
    are_points_collinear,
    are_points_coplanar,
    sort_convex_points_ccw,
    quick_hull
)

from .spheres import (
    Sphere,
    is_in_sphere,
    calc_diameter,
    calc_circumcircle,
    calc_circumsphere,
    min_sphere,
    enclosing_sphere
)

__all__ = [
    # Points
    'Point',
    'centroid',
    'to_points',
    'distinct_points',
    'normalize',
    'project',
    'angle_between',
    # Predicates
    'two_sum',
    'two_product',
    'split',
    'expansion_sum',
    'scale_expansion',
    'estimate',
    'orientation',
    'incircle',
    'orient',
    'in_circumcircle',
    # Affine
    'Orientation',
    'signed_area_2d',
    'signed_volume_3d',
    'orientation_2d',
    'orientation_3d',
    'polygon_normal',
    'calculate_plane_normal',
    'find_orthonormal_base',
    'rotation_to_z_plane',
    'rotate_points',
    'rotate_vector',
    'pseudo_angle',
    'pseudo_angle_as_square_perimeter',
    'interpolate_points',
    # Shapes
    'BoundingBox',
    'PolygonEdge',
    'PolygonShape',
    'Triangle',
    'polygon_signed_area',
    'polygon_centroid',
    # Hull
    'are_points_collinear',
    'are_points_coplanar',
    'sort_convex_points_ccw',
    'quick_hull',
    # Spheres
    'Sphere',
    'is_in_sphere',
    'calc_diameter',
    'calc_circumcircle',
    'calc_circumsphere',
    'min_sphere',
    'enclosing_sphere',
]
