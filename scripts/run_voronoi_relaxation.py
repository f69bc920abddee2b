#!/usr/bin/env python3
"""
Lloyd relaxation script.

This script generates random sites in a rectangle, relaxes them with
Lloyd's algorithm over clipped Voronoi diagrams and writes the final
diagram as a plain-record JSON file.
"""

import argparse
import os

import numpy as np
import structlog

import planar_geometry as pg

logger = structlog.get_logger()


def main(argv=None):
    """Main entry point for Lloyd relaxation."""
    parser = argparse.ArgumentParser(
        description='Lloyd relaxation of random sites over clipped Voronoi diagrams'
    )
    parser.add_argument(
        '--points',
        type=int,
        default=100,
        help='Number of random sites (default: 100)'
    )
    parser.add_argument(
        '--width',
        type=float,
        default=pg.settings.default_half_width,
        help='Half width of the clip rectangle (default: %(default)s)'
    )
    parser.add_argument(
        '--height',
        type=float,
        default=pg.settings.default_half_height,
        help='Half height of the clip rectangle (default: %(default)s)'
    )
    parser.add_argument(
        '--iterations',
        type=int,
        default=50,
        help='Maximum relaxation steps (default: 50)'
    )
    parser.add_argument(
        '--strategy',
        choices=[t.name.lower() for t in pg.utils.PointGenerationType],
        default='random_brute_force',
        help='Point generation strategy (default: random_brute_force)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed (default: none)'
    )
    parser.add_argument(
        '--output',
        type=str,
        default='Results_voronoi',
        help='Output directory (default: Results_voronoi)'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        help='Log level (default: from settings)'
    )

    args = parser.parse_args(argv)

    pg.utils.configure_logging(args.log_level)
    pg.utils.ensure_dir_exists(args.output)

    bounds = (-args.width, -args.height, args.width, args.height)
    rng = np.random.default_rng(args.seed)
    strategy = pg.utils.PointGenerationType[args.strategy.upper()]
    sites = pg.utils.random_points(args.points, bounds, strategy, rng)
    logger.info("sites_generated", count=len(sites), strategy=strategy.value)

    diagram = pg.voronoi.lloyd_relaxation(sites, bounds, args.iterations)
    logger.info("relaxation_done", cells=len(diagram), centroidal=diagram.is_centroidal())

    path = os.path.join(args.output, 'voronoi_diagram.json')
    pg.io.save_diagram(diagram, path)

    print(f"Diagram saved to: {path}")


if __name__ == '__main__':
    main()
