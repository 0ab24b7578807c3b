"""
Terrain Builder - heightmap tiles for engine terrain objects

Resamples arbitrary height grids onto the engine's canonical square
heightmap sizes, keeps a lossless copy of every tile's heights, detects
neighbouring tiles and stitches their shared edges so adjacent terrains
meet without cracks.

Includes JSON/PNG persistence for tiles and worlds and QA checks for tile
data and seams.
"""

from .errors import InvalidArgumentError
from .resolution import CANONICAL_RESOLUTIONS, select_resolution
from .tile_geometry import Axis, Direction, TileGeometry
from .height_field import HeightField
from .adjacency import DEFAULT_ADJACENCY_TOLERANCE, AdjacentTile, find_adjacent
from .edge_stitcher import stitch_edge
from .terrain_tile import HeadlessTerrainEngine, TerrainEngine, TerrainTile
from .world import TerrainWorld
from .tile_format import load_tile, load_world, save_tile, save_world, slugify
from .qa_validator import DEFAULT_SEAM_TOLERANCE, TerrainValidator
from .qa_report import QAReport


def build_tile_grid(grid_def, engine_factory=None):
    """
    High-level API to build a rectangular grid of tiles.

    Tiles are created row by row and placed edge to edge starting at the
    origin.  With stitching on, every tile blends into the tiles created
    before it, then stitch_all() runs so each seam is stitched from both
    sides.

    Args:
        grid_def: Dict describing the grid:
            name:           World name (default "world").
            grid_size:      (cols, rows).  Default (1, 1).
            tile_span:      (span_x, span_z) per tile.  Default (64, 64).
            height_scale:   Vertical span of every tile.  Default 100.
            origin:         (x, y, z) of tile (0, 0).  Default (0, 0, 0).
            stitching:      Stitch seams.  Default True.
            stitch_passes:  Passes of stitch_all().  Default 1.
            heightmaps:     {(col, row): 2D heights}.  Missing entries get
                            a flat grid of default_height.
            default_height: Height for tiles without a heightmap.  Default 0.
        engine_factory: Optional callable returning a TerrainEngine per tile.

    Returns:
        TerrainWorld: Tiles have ids "<slug>_<col>_<row>".
    """
    name = grid_def.get('name', 'world')
    cols, rows = grid_def.get('grid_size', (1, 1))
    span_x, span_z = grid_def.get('tile_span', (64, 64))
    height_scale = grid_def.get('height_scale', 100)
    ox, oy, oz = grid_def.get('origin', (0.0, 0.0, 0.0))
    stitching = grid_def.get('stitching', True)
    passes = grid_def.get('stitch_passes', 1)
    heightmaps = grid_def.get('heightmaps', {})
    default_height = grid_def.get('default_height', 0.0)

    if cols < 1 or rows < 1:
        raise InvalidArgumentError(
            "grid_size must be at least (1, 1), got ({}, {})".format(cols, rows))

    world = TerrainWorld(name=name, engine_factory=engine_factory,
                         stitching_enabled=stitching)
    prefix = slugify(name) or 'tile'

    for row in range(rows):
        for col in range(cols):
            position = (ox + col * span_x, oy, oz + row * span_z)
            tile_id = "{}_{}_{}".format(prefix, col, row)
            heights = heightmaps.get((col, row))
            if heights is None:
                world.create_flat_tile(span_x, span_z, height_scale,
                                       value=default_height,
                                       position=position, tile_id=tile_id)
            else:
                world.create_tile(span_x, span_z, height_scale, heights,
                                  position=position, tile_id=tile_id)

    if stitching:
        world.stitch_all(passes=passes)

    return world
