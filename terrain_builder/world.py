"""
Registry of the terrain tiles that make up one world.

TerrainWorld is the explicit candidate list used for adjacency and
stitching.  Tiles only see each other through a world (or a list passed to
TerrainTile.stitch_with_adjacent), never through a global scan.
"""

import logging

from .adjacency import DEFAULT_ADJACENCY_TOLERANCE, find_adjacent
from .height_field import HeightField, validate_resample_args
from .resolution import select_resolution
from .terrain_tile import TerrainTile

log = logging.getLogger(__name__)


class TerrainWorld(object):
    """
    Ordered collection of TerrainTile objects.

    Args:
        name:              World name (used for persistence).
        engine_factory:    Callable returning a new TerrainEngine for each
                           tile built by create_tile().  Headless if None.
        stitching_enabled: Default stitching flag for create_tile().
        tolerance:         Adjacency tolerance in world units.
    """

    def __init__(self, name="world", engine_factory=None,
                 stitching_enabled=False,
                 tolerance=DEFAULT_ADJACENCY_TOLERANCE):
        self.name = name
        self.engine_factory = engine_factory
        self.stitching_enabled = stitching_enabled
        self.tolerance = tolerance
        self._tiles = []

    @property
    def tiles(self):
        return list(self._tiles)

    def add_tile(self, tile):
        """
        Register an existing tile.

        Raises:
            ValueError: If a tile with the same id is already registered.
        """
        self._check_new_id(tile.id)
        self._tiles.append(tile)
        return tile

    def _check_new_id(self, tile_id):
        if tile_id is not None and self.get_tile(tile_id) is not None:
            raise ValueError("Tile {!r} is already in world {!r}".format(
                tile_id, self.name))

    def remove_tile(self, tile):
        """Unregister *tile*.  Returns False if it was not registered."""
        for index, existing in enumerate(self._tiles):
            if existing is tile:
                del self._tiles[index]
                return True
        return False

    def get_tile(self, tile_id):
        for tile in self._tiles:
            if tile.id == tile_id:
                return tile
        return None

    def create_tile(self, span_x, span_z, height_scale, heights,
                    position=(0.0, 0.0, 0.0), stitching_enabled=None,
                    tile_id=None):
        """
        Build a tile and register it.

        The tiles already in the world are the stitch candidates, so a new
        stitching tile blends its edges into existing neighbours.  Existing
        tiles are left untouched; use stitch_all() for two-sided seams.

        Returns:
            TerrainTile
        """
        self._check_new_id(tile_id)
        if stitching_enabled is None:
            stitching_enabled = self.stitching_enabled
        engine = self.engine_factory() if self.engine_factory else None

        tile = TerrainTile.create(
            span_x, span_z, height_scale, heights,
            stitching_enabled=stitching_enabled,
            position=position,
            engine=engine,
            neighbors=self._tiles,
            tile_id=tile_id,
            tolerance=self.tolerance,
        )
        return self.add_tile(tile)

    def create_flat_tile(self, span_x, span_z, height_scale, value=0.0,
                         position=(0.0, 0.0, 0.0), stitching_enabled=None,
                         tile_id=None):
        """
        Build and register a tile whose samples all equal *value*.

        Unlike create_tile() with a constant grid, no resample blend is
        applied, so the stored samples are exactly *value*.
        """
        validate_resample_args(span_x, span_z, height_scale)
        self._check_new_id(tile_id)
        if stitching_enabled is None:
            stitching_enabled = self.stitching_enabled
        engine = self.engine_factory() if self.engine_factory else None

        field = HeightField.flat(select_resolution(max(span_x, span_z)),
                                 height_scale, value)
        tile = TerrainTile(field, span_x, span_z, position=position,
                           engine=engine, stitching_enabled=stitching_enabled,
                           tile_id=tile_id)
        tile.push()
        if stitching_enabled:
            tile.stitch_with_adjacent(self._tiles, self.tolerance)
        return self.add_tile(tile)

    def find_adjacent(self, tile, tolerance=None):
        """Registered tiles lying beside *tile*."""
        if tolerance is None:
            tolerance = self.tolerance
        return find_adjacent(tile, self._tiles, tolerance)

    def stitch_all(self, passes=1):
        """
        Stitch every stitching-enabled tile against its neighbours.

        Each pass visits the tiles in registration order.  Repeated passes
        keep narrowing the gap between fields of different resolution.

        Returns:
            int: Total number of edges stitched.
        """
        if passes < 1:
            raise ValueError("passes must be at least 1, got {}".format(passes))

        count = 0
        for pass_index in range(passes):
            for tile in self._tiles:
                count += len(tile.stitch_with_adjacent(self._tiles,
                                                       self.tolerance))
            log.debug("World %s: stitch pass %d done", self.name, pass_index + 1)

        log.info("World %s: stitched %d edge(s) over %d pass(es)",
                 self.name, count, passes)
        return count

    def __len__(self):
        return len(self._tiles)

    def __iter__(self):
        return iter(list(self._tiles))

    def __contains__(self, tile):
        return any(existing is tile for existing in self._tiles)

    def __repr__(self):
        return "TerrainWorld(name={!r}, tiles={})".format(
            self.name, len(self._tiles))
