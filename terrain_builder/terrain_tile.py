"""
TerrainTile facade and engine bindings.

A TerrainTile composes a HeightField, its placement in the world and a
stitching flag, and keeps an engine-side terrain object in sync with it.
The engine is reached only through the TerrainEngine binding:

    set_grid_resolution(n)          - activate an n x n heightmap
    write_sample(i, j, value)       - write one normalized sample
    write_samples(grid)             - write a full normalized grid
    set_physical_size(l, h, w)      - physical size (length, height, width)
    get_physical_size()             - read the physical size back

Heights are never read back from the engine; the HeightField is the only
source of truth for height queries and stitching.

Usage:
    from terrain_builder.terrain_tile import TerrainTile

    west = TerrainTile.create(64, 64, 100, west_heights)
    east = TerrainTile.create(64, 64, 100, east_heights, position=(64, 0, 0),
                              stitching_enabled=True, neighbors=[west])
"""

import logging
import uuid

import numpy as np

from .adjacency import DEFAULT_ADJACENCY_TOLERANCE, find_adjacent
from .edge_stitcher import stitch_edge
from .height_field import HeightField
from .tile_geometry import TileGeometry

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine bindings
# ---------------------------------------------------------------------------

class TerrainEngine(object):
    """
    Interface to an engine-side terrain object.

    Subclasses must implement set_grid_resolution, write_sample,
    set_physical_size and get_physical_size.  write_samples falls back to
    one write_sample call per cell; override it when the engine supports
    bulk uploads.
    """

    def set_grid_resolution(self, resolution):
        raise NotImplementedError

    def write_sample(self, i, j, value):
        raise NotImplementedError

    def set_physical_size(self, length, height, width):
        raise NotImplementedError

    def get_physical_size(self):
        """Return (length, height, width) in world units."""
        raise NotImplementedError

    def write_samples(self, grid):
        rows, cols = grid.shape
        for i in range(rows):
            for j in range(cols):
                self.write_sample(i, j, float(grid[i, j]))


class HeadlessTerrainEngine(TerrainEngine):
    """
    In-memory engine binding for tools and tests.

    Stores normalized samples as float32, like a GPU heightmap would, so
    the engine copy is lossy compared to the HeightField.
    """

    def __init__(self):
        self.resolution = None
        self.heights = None
        self.size = (0.0, 0.0, 0.0)
        self.sample_writes = 0

    def set_grid_resolution(self, resolution):
        self.resolution = int(resolution)
        self.heights = np.zeros((self.resolution, self.resolution),
                                dtype=np.float32)

    def write_sample(self, i, j, value):
        self.heights[i, j] = value
        self.sample_writes += 1

    def write_samples(self, grid):
        self.heights[:, :] = grid
        self.sample_writes += grid.size

    def set_physical_size(self, length, height, width):
        self.size = (float(length), float(height), float(width))

    def get_physical_size(self):
        return self.size


# ---------------------------------------------------------------------------
# TerrainTile
# ---------------------------------------------------------------------------

class TerrainTile(object):
    """
    One terrain tile: height data, placement, stitching flag, engine binding.

    Prefer TerrainTile.create(), which resamples the input and pushes it to
    the engine.  The constructor wraps an existing HeightField and does not
    push anything.
    """

    def __init__(self, field, span_x, span_z, position=(0.0, 0.0, 0.0),
                 engine=None, stitching_enabled=False, tile_id=None):
        self.id = tile_id or str(uuid.uuid4())
        self.engine = engine if engine is not None else HeadlessTerrainEngine()
        self._field = field
        self._span_x = float(span_x)
        self._span_z = float(span_z)
        self._position = tuple(float(v) for v in position)
        self._stitching_enabled = bool(stitching_enabled)

    @classmethod
    def create(cls, span_x, span_z, height_scale, heights,
               stitching_enabled=False, position=(0.0, 0.0, 0.0),
               engine=None, neighbors=None, tile_id=None,
               tolerance=DEFAULT_ADJACENCY_TOLERANCE):
        """
        Build a tile from an arbitrary height grid.

        Args:
            span_x:            Tile length in world units (>= 1).
            span_z:            Tile width in world units (>= 1).
            height_scale:      Vertical span in world units (>= 1).
            heights:           2D grid of absolute heights (see
                               HeightField.resample).
            stitching_enabled: Stitch with *neighbors* right away.
            position:          (x, y, z) tile origin.
            engine:            TerrainEngine binding (headless by default).
            neighbors:         Tiles to consider for the initial stitch.
                               Tiles created later are not stitched
                               retroactively.
            tile_id:           Optional identifier (random UUID otherwise).
            tolerance:         Adjacency tolerance for the initial stitch.

        Returns:
            TerrainTile

        Raises:
            InvalidArgumentError: On invalid spans, scale or heights.
        """
        field = HeightField.resample(heights, span_x, span_z, height_scale)
        tile = cls(field, span_x, span_z, position=position, engine=engine,
                   stitching_enabled=stitching_enabled, tile_id=tile_id)
        tile.push()

        if stitching_enabled:
            tile.stitch_with_adjacent(neighbors or [], tolerance)

        return tile

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def field(self):
        return self._field

    @property
    def resolution(self):
        return self._field.resolution

    @property
    def height_scale(self):
        return self._field.height_scale

    @property
    def span_x(self):
        return self._span_x

    @property
    def span_z(self):
        return self._span_z

    @property
    def position(self):
        return self._position

    def set_position(self, position):
        self._position = tuple(float(v) for v in position)

    @property
    def geometry(self):
        """Current TileGeometry, using the size reported by the engine."""
        return TileGeometry(self._position, self.engine.get_physical_size())

    # ------------------------------------------------------------------
    # Heights
    # ------------------------------------------------------------------

    def set_heights(self, span_x, span_z, height_scale, heights):
        """
        Replace the tile's heights and size, then push to the engine.

        The new field is built before anything is assigned, so invalid
        input raises InvalidArgumentError and leaves the tile unchanged.
        """
        field = HeightField.resample(heights, span_x, span_z, height_scale)
        self._field = field
        self._span_x = float(span_x)
        self._span_z = float(span_z)
        self.push()

    def get_heights(self):
        """Return a copy of the N x N sample grid in world units."""
        return self._field.samples.copy()

    def get_height(self, i, j):
        """Height at (i, j); 0.0 with a warning when out of range."""
        return self._field.get_height(i, j)

    def set_height(self, i, j, value):
        """
        Set one height and push that single normalized sample.

        Returns:
            bool: False when the index is out of range (nothing written).
        """
        if not self._field.set_height(i, j, value):
            return False
        self.engine.write_sample(i, j, float(value) / self._field.height_scale)
        return True

    def set_height_scale(self, height_scale):
        """Change the vertical span and re-push every normalized sample."""
        self._field.set_height_scale(height_scale)
        self.push()

    def push(self):
        """Write resolution, physical size and all normalized samples."""
        field = self._field
        self.engine.set_grid_resolution(field.resolution)
        self.engine.set_physical_size(self._span_x, field.height_scale,
                                      self._span_z)
        self.engine.write_samples(field.normalized())

    # ------------------------------------------------------------------
    # Stitching
    # ------------------------------------------------------------------

    def get_stitching_enabled(self):
        return self._stitching_enabled

    def set_stitching_enabled(self, enabled):
        """Toggle stitching.  Does not stitch; call stitch_with_adjacent()."""
        self._stitching_enabled = bool(enabled)

    def find_adjacent(self, all_tiles, tolerance=DEFAULT_ADJACENCY_TOLERANCE):
        """Tiles from *all_tiles* lying beside this one."""
        return find_adjacent(self, all_tiles, tolerance)

    def stitch_with_adjacent(self, all_tiles,
                             tolerance=DEFAULT_ADJACENCY_TOLERANCE):
        """
        Average this tile's edges with every adjacent tile's facing edge.

        Only this tile's heights change.  Does nothing when stitching is
        disabled.

        Args:
            all_tiles: Candidate tiles (this tile may be among them).
            tolerance: Adjacency tolerance in world units.

        Returns:
            list[AdjacentTile]: The neighbours that were stitched.
        """
        if not self._stitching_enabled:
            log.debug("Tile %s: stitching disabled", self.id)
            return []

        stitched = []
        for entry in self.find_adjacent(all_tiles, tolerance):
            other_field = getattr(entry.tile, 'field', None)
            if other_field is None:
                log.warning("Tile %s: neighbour %r has no height field",
                            self.id, entry.tile)
                continue
            if stitch_edge(self._field, other_field, entry.axis,
                           entry.direction):
                stitched.append(entry)

        if stitched:
            self.push()
            log.debug("Tile %s: stitched %d edge(s)", self.id, len(stitched))

        return stitched

    def __repr__(self):
        return "TerrainTile(id={!r}, resolution={}, position={})".format(
            self.id, self.resolution, self._position)
