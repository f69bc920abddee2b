# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""Tests for the command-line scripts."""

import importlib.util
import os

from planar_geometry.io.records import load_diagram

SCRIPTS_DIR = os.path.join(os.path.dirname(__file__), '..', 'scripts')


def _load_script(name):
    spec = importlib.util.spec_from_file_location(name, os.path.join(SCRIPTS_DIR, f'{name}.py'))
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_run_voronoi_relaxation_writes_a_diagram(tmp_path):
    script = _load_script('run_voronoi_relaxation')
    script.main([
        '--points', '12',
        '--iterations', '3',
        '--seed', '4',
        '--strategy', 'stratified_sampling',
        '--output', str(tmp_path),
        '--log-level', 'WARNING',
    ])
    diagram = load_diagram(str(tmp_path / 'voronoi_diagram.json'))
    assert len(diagram) == 12
