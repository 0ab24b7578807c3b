"""
Tests for TerrainTile, the headless engine binding, TerrainWorld and
build_tile_grid.

Runs under pytest or standalone: python tests/test_terrain_tile.py
"""

import os
import sys
import traceback

import numpy as np

# Ensure the project root is on the path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from terrain_builder import build_tile_grid
from terrain_builder.errors import InvalidArgumentError
from terrain_builder.terrain_tile import (HeadlessTerrainEngine, TerrainEngine,
                                          TerrainTile)
from terrain_builder.tile_geometry import Axis, Direction
from terrain_builder.validators.seam_validator import measure_seam
from terrain_builder.world import TerrainWorld


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PASSED = 0
_FAILED = 0
_ERRORS = []


def _test(name, fn):
    """Run a test function, track pass/fail."""
    global _PASSED, _FAILED
    try:
        fn()
        _PASSED += 1
        print("  PASS  {}".format(name))
    except Exception as e:
        _FAILED += 1
        _ERRORS.append((name, e))
        print("  FAIL  {} -- {}".format(name, e))
        traceback.print_exc()


def _assert_raises(exc_type, fn, *args, **kwargs):
    try:
        fn(*args, **kwargs)
    except exc_type:
        return
    raise AssertionError("{} not raised".format(exc_type.__name__))


class _RecordingEngine(TerrainEngine):
    """Engine binding that only implements the per-sample interface."""

    def __init__(self):
        self.resolution = None
        self.size = (0.0, 0.0, 0.0)
        self.writes = {}

    def set_grid_resolution(self, resolution):
        self.resolution = resolution

    def write_sample(self, i, j, value):
        self.writes[(i, j)] = value

    def set_physical_size(self, length, height, width):
        self.size = (length, height, width)

    def get_physical_size(self):
        return self.size


_RAMP = [[0, 0], [10, 10]]


# ---------------------------------------------------------------------------
# TerrainTile
# ---------------------------------------------------------------------------

def test_create_pushes_to_engine():
    tile = TerrainTile.create(10, 10, 10, _RAMP)
    engine = tile.engine

    assert isinstance(engine, HeadlessTerrainEngine)
    assert engine.resolution == 33
    assert engine.size == (10.0, 10.0, 10.0)
    assert np.allclose(engine.heights, tile.get_heights() / 10.0, atol=1e-6)
    assert tile.geometry.size == (10.0, 10.0, 10.0)


def test_default_write_samples_loops_over_write_sample():
    engine = _RecordingEngine()
    TerrainTile.create(10, 10, 10, _RAMP, engine=engine)
    assert engine.resolution == 33
    assert len(engine.writes) == 33 * 33
    assert engine.writes[(32, 0)] == 1.5


def test_get_heights_returns_copy():
    tile = TerrainTile.create(10, 10, 10, _RAMP)
    heights = tile.get_heights()
    heights[:] = 99.0
    assert tile.get_height(0, 0) == 0.0


def test_set_height_pushes_single_sample():
    tile = TerrainTile.create(10, 10, 10, _RAMP)
    writes_before = tile.engine.sample_writes

    assert tile.set_height(1, 2, 5.0) is True
    assert tile.get_height(1, 2) == 5.0
    assert abs(tile.engine.heights[1, 2] - 0.5) < 1e-6
    assert tile.engine.sample_writes == writes_before + 1

    assert tile.set_height(40, 0, 5.0) is False
    assert tile.get_height(40, 0) == 0.0
    assert tile.engine.sample_writes == writes_before + 1


def test_set_heights_invalid_leaves_tile_unchanged():
    tile = TerrainTile.create(10, 10, 10, _RAMP)
    before = tile.get_heights()

    _assert_raises(InvalidArgumentError, tile.set_heights, 0, 10, 10, _RAMP)
    _assert_raises(InvalidArgumentError, tile.set_heights, 10, 10, 10, None)

    assert np.array_equal(tile.get_heights(), before)
    assert tile.span_x == 10.0


def test_set_heights_resizes():
    tile = TerrainTile.create(10, 10, 10, _RAMP)
    tile.set_heights(100, 50, 20, np.zeros((4, 4)))
    assert tile.resolution == 129
    assert tile.engine.resolution == 129
    assert tile.engine.size == (100.0, 20.0, 50.0)


def test_set_height_scale_repushes():
    tile = TerrainTile.create(10, 10, 10, _RAMP)
    tile.set_height_scale(20)
    assert tile.engine.size == (10.0, 20.0, 10.0)
    assert np.allclose(tile.engine.heights, tile.get_heights() / 20.0,
                       atol=1e-6)


def test_create_stitches_against_neighbors():
    west = TerrainTile.create(10, 10, 10, np.zeros((2, 2)))
    east = TerrainTile.create(10, 10, 10, np.full((2, 2), 10.0),
                              position=(10, 0, 0), stitching_enabled=True,
                              neighbors=[west])

    # east is 15 everywhere after resample; its west edge averages with 0
    assert np.all(east.field.samples[0, :] == 7.5)
    assert np.all(east.field.samples[1:, :] == 15.0)
    assert np.all(west.field.samples == 0.0)
    assert abs(east.engine.heights[0, 0] - 0.75) < 1e-6


def test_stitch_with_adjacent_returns_entries():
    west = TerrainTile.create(10, 10, 10, np.zeros((2, 2)),
                              stitching_enabled=True)
    east = TerrainTile.create(10, 10, 10, np.full((2, 2), 10.0),
                              position=(10, 0, 0))

    stitched = west.stitch_with_adjacent([west, east])

    assert len(stitched) == 1
    assert stitched[0].tile is east
    assert stitched[0].axis is Axis.X
    assert stitched[0].direction is Direction.POSITIVE
    assert np.all(west.field.samples[32, :] == 7.5)


def test_stitching_disabled_is_noop():
    west = TerrainTile.create(10, 10, 10, np.zeros((2, 2)))
    east = TerrainTile.create(10, 10, 10, np.full((2, 2), 10.0),
                              position=(10, 0, 0))
    assert west.stitch_with_adjacent([east]) == []
    assert np.all(west.field.samples == 0.0)

    # Enabling does not stitch by itself
    west.set_stitching_enabled(True)
    assert west.get_stitching_enabled() is True
    assert np.all(west.field.samples == 0.0)


# ---------------------------------------------------------------------------
# TerrainWorld
# ---------------------------------------------------------------------------

def test_world_registry():
    world = TerrainWorld("registry")
    tile = world.create_tile(10, 10, 10, _RAMP, tile_id="a")

    assert len(world) == 1
    assert world.get_tile("a") is tile
    assert tile in world
    _assert_raises(ValueError, world.add_tile, tile)

    assert world.remove_tile(tile) is True
    assert world.remove_tile(tile) is False
    assert world.get_tile("a") is None


def test_world_stitch_all_two_sided():
    world = TerrainWorld("pair", stitching_enabled=True)
    west = world.create_tile(10, 10, 10, np.zeros((2, 2)))
    east = world.create_tile(10, 10, 10, np.full((2, 2), 10.0),
                             position=(10, 0, 0))

    # Creation stitched east against west only
    assert np.all(east.field.samples[0, :] == 7.5)
    assert measure_seam(west.field, east.field, Axis.X,
                        Direction.POSITIVE) == 7.5

    assert world.stitch_all() == 2
    # west: (0 + 7.5) / 2, then east: (7.5 + 3.75) / 2
    assert np.all(west.field.samples[32, :] == 3.75)
    assert np.all(east.field.samples[0, :] == 5.625)
    assert measure_seam(west.field, east.field, Axis.X,
                        Direction.POSITIVE) == 1.875

    _assert_raises(ValueError, world.stitch_all, 0)


def test_world_engine_factory():
    engines = []

    def factory():
        engines.append(HeadlessTerrainEngine())
        return engines[-1]

    world = TerrainWorld("factory", engine_factory=factory)
    tile = world.create_tile(10, 10, 10, _RAMP)
    flat = world.create_flat_tile(10, 10, 10, value=2.0, position=(10, 0, 0))

    assert len(engines) == 2
    assert tile.engine is engines[0]
    assert flat.engine is engines[1]
    assert np.all(flat.get_heights() == 2.0)
    assert len(world.find_adjacent(tile)) == 1


def test_world_duplicate_id_builds_no_engine():
    engines = []

    def factory():
        engines.append(HeadlessTerrainEngine())
        return engines[-1]

    world = TerrainWorld("dupes", engine_factory=factory)
    world.create_tile(10, 10, 10, _RAMP, tile_id="a")
    writes = engines[0].sample_writes

    _assert_raises(ValueError, world.create_tile, 10, 10, 10, _RAMP,
                   tile_id="a")
    _assert_raises(ValueError, world.create_flat_tile, 10, 10, 10,
                   tile_id="a")

    assert len(engines) == 1
    assert len(world) == 1
    assert engines[0].sample_writes == writes


# ---------------------------------------------------------------------------
# build_tile_grid
# ---------------------------------------------------------------------------

def test_build_tile_grid_layout():
    world = build_tile_grid({
        'name': 'Demo Grid',
        'grid_size': (2, 2),
        'tile_span': (64, 64),
        'height_scale': 50,
        'origin': (100, 0, 200),
        'default_height': 5.0,
    })

    assert len(world) == 4
    tile = world.get_tile('demo-grid_1_1')
    assert tile is not None
    assert tile.position == (164.0, 0.0, 264.0)
    assert tile.resolution == 65
    # Equal flat tiles stay exactly flat through stitching
    for t in world:
        assert np.all(t.get_heights() == 5.0)
    # Each tile has two grid neighbours
    for t in world:
        assert len(world.find_adjacent(t)) == 2


def test_build_tile_grid_heightmaps_and_stitching():
    world = build_tile_grid({
        'name': 'ridge',
        'grid_size': (2, 1),
        'tile_span': (32, 32),
        'height_scale': 100,
        'stitch_passes': 3,
        'heightmaps': {(1, 0): np.full((8, 8), 20.0)},
    })

    west = world.get_tile('ridge_0_0')
    east = world.get_tile('ridge_1_0')
    assert np.all(west.field.samples[:32, :] == 0.0)
    gap = measure_seam(west.field, east.field, Axis.X, Direction.POSITIVE)
    assert 0.0 < gap < 30.0


def test_build_tile_grid_rejects_empty_grid():
    _assert_raises(InvalidArgumentError, build_tile_grid, {'grid_size': (0, 1)})


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    print("=" * 70)
    print("terrain_builder TerrainTile Test Suite")
    print("=" * 70)

    print("\n--- TerrainTile ---")
    _test("create pushes", test_create_pushes_to_engine)
    _test("default write_samples",
          test_default_write_samples_loops_over_write_sample)
    _test("get_heights copy", test_get_heights_returns_copy)
    _test("set_height single push", test_set_height_pushes_single_sample)
    _test("set_heights invalid", test_set_heights_invalid_leaves_tile_unchanged)
    _test("set_heights resizes", test_set_heights_resizes)
    _test("set_height_scale", test_set_height_scale_repushes)
    _test("create stitches", test_create_stitches_against_neighbors)
    _test("stitch_with_adjacent", test_stitch_with_adjacent_returns_entries)
    _test("stitching disabled", test_stitching_disabled_is_noop)

    print("\n--- TerrainWorld ---")
    _test("registry", test_world_registry)
    _test("stitch_all", test_world_stitch_all_two_sided)
    _test("engine factory", test_world_engine_factory)
    _test("duplicate id", test_world_duplicate_id_builds_no_engine)

    print("\n--- build_tile_grid ---")
    _test("layout", test_build_tile_grid_layout)
    _test("heightmaps and stitching",
          test_build_tile_grid_heightmaps_and_stitching)
    _test("empty grid", test_build_tile_grid_rejects_empty_grid)

    print("\n" + "=" * 70)
    print("Results: {} passed, {} failed".format(_PASSED, _FAILED))
    print("=" * 70)
    return 0 if _FAILED == 0 else 1


if __name__ == '__main__':
    sys.exit(main())
