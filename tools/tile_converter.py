#!/usr/bin/env python
"""
Terrain tile converter and world maintenance tool.

Converts grayscale heightmap PNGs to tile JSON and back, stitches the seams
of a saved world and runs QA validation over it.

Usage:
  python tile_converter.py png2tile <input.png> --span-x 64 --span-z 64
                                    --height-scale 200 [-o output.json]
  python tile_converter.py tile2png <input.json> [-o output.png]
  python tile_converter.py stitch <world_dir> [--passes N] [--enable]
  python tile_converter.py validate <world_dir> [--report out.md]
"""

import os
import sys
import argparse

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from terrain_builder.qa_validator import DEFAULT_SEAM_TOLERANCE, TerrainValidator
from terrain_builder.terrain_tile import TerrainTile
from terrain_builder.tile_format import (load_tile, load_world,
                                         read_heightmap_png, save_tile,
                                         save_world, write_heightmap_png)


def png_to_tile(input_path, output_path, span_x, span_z, height_scale,
                height_min=0.0, height_range=None, tile_id=None):
    """
    Build a tile from a heightmap PNG and save it as JSON.

    Pixel values map to heights through height_min/height_range; by
    default the full pixel range maps to [0, height_scale].
    """
    if height_range is None:
        height_range = height_scale
    heights = read_heightmap_png(input_path, height_min, height_range)
    tile = TerrainTile.create(span_x, span_z, height_scale, heights,
                              tile_id=tile_id)
    save_tile(output_path, tile)
    return tile


def tile_to_png(input_path, output_path):
    """Export a tile JSON file as a 16-bit PNG.  Returns (min, range)."""
    tile = load_tile(input_path)
    return write_heightmap_png(output_path, tile.field)


def main():
    parser = argparse.ArgumentParser(
        description='Terrain tile converter and world maintenance tool')
    subparsers = parser.add_subparsers(dest='command')

    # -- png2tile -------------------------------------------------------
    p_p2t = subparsers.add_parser('png2tile', help='Convert PNG to tile JSON')
    p_p2t.add_argument('input', help='Input grayscale .png file')
    p_p2t.add_argument('-o', '--output', help='Output .json file')
    p_p2t.add_argument('--span-x', type=float, required=True,
                       help='Tile length in world units')
    p_p2t.add_argument('--span-z', type=float, required=True,
                       help='Tile width in world units')
    p_p2t.add_argument('--height-scale', type=float, required=True,
                       help='Vertical span in world units')
    p_p2t.add_argument('--height-min', type=float, default=0.0,
                       help='Height of a black pixel (default 0)')
    p_p2t.add_argument('--height-range', type=float,
                       help='Black-to-white height difference '
                            '(default: height scale)')
    p_p2t.add_argument('--id', help='Tile id (default: input file name)')

    # -- tile2png -------------------------------------------------------
    p_t2p = subparsers.add_parser('tile2png', help='Convert tile JSON to PNG')
    p_t2p.add_argument('input', help='Input tile .json file')
    p_t2p.add_argument('-o', '--output', help='Output .png file')

    # -- stitch ---------------------------------------------------------
    p_st = subparsers.add_parser('stitch', help='Stitch seams of a saved world')
    p_st.add_argument('world_dir', help='World directory (manifest.json)')
    p_st.add_argument('--passes', type=int, default=1,
                      help='Number of stitch passes (default 1)')
    p_st.add_argument('--enable', action='store_true',
                      help='Enable stitching on every tile first')

    # -- validate -------------------------------------------------------
    p_va = subparsers.add_parser('validate', help='Run QA checks on a world')
    p_va.add_argument('world_dir', help='World directory (manifest.json)')
    p_va.add_argument('--report', help='Write a Markdown report to this path')
    p_va.add_argument('--tolerance', type=float,
                      default=DEFAULT_SEAM_TOLERANCE,
                      help='Seam gap tolerance (default {})'.format(
                          DEFAULT_SEAM_TOLERANCE))

    args = parser.parse_args()

    if args.command == 'png2tile':
        output = args.output or os.path.splitext(args.input)[0] + '.json'
        tile_id = args.id or os.path.splitext(os.path.basename(args.input))[0]
        tile = png_to_tile(args.input, output, args.span_x, args.span_z,
                           args.height_scale, args.height_min,
                           args.height_range, tile_id=tile_id)
        print("{} -> {} ({}x{} samples)".format(
            args.input, output, tile.resolution, tile.resolution))

    elif args.command == 'tile2png':
        output = args.output or os.path.splitext(args.input)[0] + '.png'
        height_min, height_range = tile_to_png(args.input, output)
        print("{} -> {} (height_min={:.3f}, height_range={:.3f})".format(
            args.input, output, height_min, height_range))

    elif args.command == 'stitch':
        world = load_world(args.world_dir)
        if args.enable:
            for tile in world:
                tile.set_stitching_enabled(True)
        count = world.stitch_all(passes=args.passes)
        save_world(world, args.world_dir)
        print("{}: {} edges stitched over {} pass(es)".format(
            world.name, count, args.passes))

    elif args.command == 'validate':
        world = load_world(args.world_dir)
        report = TerrainValidator(world, args.tolerance).run_full_validation()
        report.print_summary()
        if args.report:
            report.write_report(args.report)
            print("Report written to {}".format(args.report))
        sys.exit(1 if report.has_errors() else 0)

    else:
        parser.print_help()


if __name__ == '__main__':
    main()
