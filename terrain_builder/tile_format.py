"""
JSON and PNG persistence for terrain tiles and worlds.

A tile is stored as one JSON document holding its absolute samples, so
save/load is lossless and never resamples.  A world is a directory:

    <world_dir>/
        manifest.json
        tiles/<index>-<tile slug>.json

Manifest layout (manifest.json):
    format_version    - semver string ("1.0.0")
    name              - display name
    slug              - filesystem-safe identifier
    stitching_enabled - default stitching flag for new tiles
    tolerance         - adjacency tolerance in world units
    tiles             - list of {id, file} tile references

Tile layout (one file per tile):
    format_version, id, resolution, height_scale, span_x, span_z,
    position, stitching_enabled, samples (resolution x resolution list)

Heightmaps can also be exchanged as grayscale PNG images.  16-bit images
are written; 8-bit and 16-bit images are read.
"""

import os
import json
import re
import logging

import numpy as np
from PIL import Image

from .errors import InvalidArgumentError
from .height_field import HeightField
from .resolution import is_canonical
from .terrain_tile import TerrainTile
from .world import TerrainWorld

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Schema version
# ---------------------------------------------------------------------------

FORMAT_VERSION = "1.0.0"

MANIFEST_FILE = "manifest.json"
TILES_DIR = "tiles"


# ---------------------------------------------------------------------------
# Slug generation
# ---------------------------------------------------------------------------

def slugify(name):
    """
    Convert a display name to a filesystem-safe slug.

    Examples:
        slugify("Northern Ridge")  -> "northern-ridge"
        slugify("--Tile  0,1!--")  -> "tile-0-1"
    """
    slug = re.sub(r'[^a-z0-9]+', '-', name.lower())
    return slug.strip('-')


# ---------------------------------------------------------------------------
# JSON I/O helpers
# ---------------------------------------------------------------------------

def load_json(filepath):
    """Load and parse a JSON file."""
    with open(filepath, 'r') as f:
        return json.load(f)


def save_json(filepath, data, indent=2):
    """
    Write *data* to a JSON file, creating parent directories as needed.

    Args:
        filepath: Destination file path.
        data: Dict (or list) to serialize.
        indent: JSON indentation level (default 2).
    """
    parent = os.path.dirname(filepath)
    if parent and not os.path.exists(parent):
        os.makedirs(parent)
    with open(filepath, 'w') as f:
        json.dump(data, f, indent=indent)


# ---------------------------------------------------------------------------
# Tile documents
# ---------------------------------------------------------------------------

def validate_tile_data(data):
    """
    Validate a tile dict.

    Returns a list of error strings.  An empty list means the tile is valid.
    """
    errors = []

    if not isinstance(data, dict):
        return ["Tile data must be a dict"]

    required = ["id", "resolution", "height_scale", "span_x", "span_z",
                "samples"]
    for field in required:
        if field not in data:
            errors.append("Missing required field: {}".format(field))

    if errors:
        return errors

    resolution = data["resolution"]
    if not is_canonical(resolution):
        errors.append("resolution {} is not canonical".format(resolution))

    for key in ("height_scale", "span_x", "span_z"):
        value = data[key]
        if not isinstance(value, (int, float)) or not value >= 1:
            errors.append("{} must be a number >= 1, got {!r}".format(key, value))

    position = data.get("position", [0.0, 0.0, 0.0])
    if not isinstance(position, (list, tuple)) or len(position) != 3:
        errors.append("position must be a list of 3 numbers")

    samples = data["samples"]
    if not isinstance(samples, list) or len(samples) != resolution:
        errors.append("samples must be a list of {} rows".format(resolution))
    else:
        for i, row in enumerate(samples):
            if not isinstance(row, list) or len(row) != resolution:
                errors.append("samples[{}] must have {} values".format(
                    i, resolution))
                break

    return errors


def tile_to_dict(tile):
    """Serialize a TerrainTile to a JSON-compatible dict."""
    return {
        "format_version": FORMAT_VERSION,
        "id": tile.id,
        "resolution": tile.resolution,
        "height_scale": tile.height_scale,
        "span_x": tile.span_x,
        "span_z": tile.span_z,
        "position": list(tile.position),
        "stitching_enabled": tile.get_stitching_enabled(),
        "samples": tile.field.samples.tolist(),
    }


def tile_from_dict(data, engine=None):
    """
    Rebuild a TerrainTile from a dict produced by tile_to_dict().

    The stored samples are used as-is and pushed to *engine*.

    Raises:
        InvalidArgumentError: If the data fails validate_tile_data().
    """
    errors = validate_tile_data(data)
    if errors:
        raise InvalidArgumentError(
            "Invalid tile data: {}".format("; ".join(errors)))

    field = HeightField(data["samples"], data["height_scale"])
    tile = TerrainTile(
        field, data["span_x"], data["span_z"],
        position=data.get("position", (0.0, 0.0, 0.0)),
        engine=engine,
        stitching_enabled=data.get("stitching_enabled", False),
        tile_id=data["id"],
    )
    tile.push()
    return tile


def save_tile(filepath, tile):
    save_json(filepath, tile_to_dict(tile))
    log.debug("Saved tile %s to %s", tile.id, filepath)


def load_tile(filepath, engine=None):
    """
    Load a tile JSON file.

    Raises:
        FileNotFoundError: If *filepath* does not exist.
        InvalidArgumentError: If the file content is not a valid tile.
    """
    if not os.path.isfile(filepath):
        raise FileNotFoundError("Tile file not found: {}".format(filepath))
    return tile_from_dict(load_json(filepath), engine=engine)


# ---------------------------------------------------------------------------
# Heightmap PNG
# ---------------------------------------------------------------------------

def write_heightmap_png(filepath, field):
    """
    Write a field's samples as a 16-bit grayscale PNG.

    Image row r holds samples[r, :].  Samples are normalised to the field's
    own min/max so the full 16-bit range is used.

    Args:
        filepath: Destination PNG path.
        field: HeightField to export.

    Returns:
        tuple: (height_min, height_range) needed to restore absolute heights
               with read_heightmap_png().
    """
    samples = field.samples
    height_min = float(samples.min())
    height_range = float(samples.max()) - height_min
    if height_range < 1e-6:
        height_range = 1.0

    normalised = (samples - height_min) / height_range
    pixels = np.clip(np.rint(normalised * 65535.0), 0, 65535).astype(np.uint16)

    parent = os.path.dirname(filepath)
    if parent and not os.path.exists(parent):
        os.makedirs(parent)

    Image.fromarray(pixels).save(filepath)
    return height_min, height_range


def read_heightmap_png(filepath, height_min=0.0, height_range=None):
    """
    Read a grayscale PNG as a 2D height grid.

    height = pixel / max_pixel * height_range + height_min, where max_pixel
    is 255 for 8-bit images and 65535 for 16-bit ones.

    Args:
        filepath: Source PNG path.
        height_min: Height of a black pixel.
        height_range: Height difference between black and white pixels.
                      Defaults to 1.0 (normalised output).

    Returns:
        numpy.ndarray: rows x cols float64 heights.

    Raises:
        FileNotFoundError: If *filepath* does not exist.
    """
    if not os.path.isfile(filepath):
        raise FileNotFoundError("Heightmap PNG not found: {}".format(filepath))
    if height_range is None:
        height_range = 1.0

    img = Image.open(filepath)
    if img.mode in ('I', 'I;16', 'I;16B', 'I;16L'):
        pixels = np.asarray(img, dtype=np.float64)
        max_pixel = 65535.0
    else:
        pixels = np.asarray(img.convert('L'), dtype=np.float64)
        max_pixel = 255.0

    return pixels / max_pixel * height_range + height_min


# ---------------------------------------------------------------------------
# Worlds
# ---------------------------------------------------------------------------

def validate_manifest(data):
    """
    Validate a manifest.json dict.

    Returns a list of error strings.  An empty list means the manifest is valid.
    """
    errors = []

    required = ["format_version", "name", "slug", "tiles"]
    for field in required:
        if field not in data:
            errors.append("Missing required field: {}".format(field))

    if errors:
        return errors

    if not isinstance(data["tiles"], list):
        errors.append("tiles must be a list")
    else:
        for i, entry in enumerate(data["tiles"]):
            if not isinstance(entry, dict):
                errors.append("tiles[{}] must be a dict".format(i))
            else:
                for key in ("id", "file"):
                    if key not in entry:
                        errors.append("tiles[{}] missing key '{}'".format(i, key))

    return errors


def save_world(world, output_dir):
    """
    Write a TerrainWorld to *output_dir*.

    Returns:
        str: Path of the written manifest.
    """
    entries = []
    for index, tile in enumerate(world):
        rel_path = "{}/{:04d}-{}.json".format(TILES_DIR, index,
                                             slugify(tile.id) or "tile")
        save_tile(os.path.join(output_dir, rel_path), tile)
        entries.append({"id": tile.id, "file": rel_path})

    manifest = {
        "format_version": FORMAT_VERSION,
        "name": world.name,
        "slug": slugify(world.name),
        "stitching_enabled": world.stitching_enabled,
        "tolerance": world.tolerance,
        "tiles": entries,
    }
    manifest_path = os.path.join(output_dir, MANIFEST_FILE)
    save_json(manifest_path, manifest)
    log.info("Saved world %s (%d tiles) to %s", world.name, len(entries),
             output_dir)
    return manifest_path


def load_world(input_dir, engine_factory=None):
    """
    Load a world directory written by save_world().

    Args:
        input_dir: Directory containing manifest.json.
        engine_factory: Optional callable returning a TerrainEngine per tile.

    Returns:
        TerrainWorld

    Raises:
        FileNotFoundError: If the manifest or a tile file is missing.
        InvalidArgumentError: If the manifest or a tile is malformed.
    """
    manifest_path = os.path.join(input_dir, MANIFEST_FILE)
    if not os.path.isfile(manifest_path):
        raise FileNotFoundError("Manifest not found: {}".format(manifest_path))

    manifest = load_json(manifest_path)
    errors = validate_manifest(manifest)
    if errors:
        raise InvalidArgumentError(
            "Invalid manifest: {}".format("; ".join(errors)))

    kwargs = {}
    if "tolerance" in manifest:
        kwargs["tolerance"] = manifest["tolerance"]
    world = TerrainWorld(
        name=manifest["name"],
        engine_factory=engine_factory,
        stitching_enabled=manifest.get("stitching_enabled", False),
        **kwargs
    )

    for entry in manifest["tiles"]:
        engine = engine_factory() if engine_factory else None
        tile = load_tile(os.path.join(input_dir, entry["file"]), engine=engine)
        world.add_tile(tile)

    log.info("Loaded world %s (%d tiles) from %s", world.name, len(world),
             input_dir)
    return world
