"""
Adjacent tile detection.

Two tiles are treated as neighbours when the distance between their bounds
centres matches, within a tolerance, the distance they would have if they
were touching along X or along Z.  This is a centre-distance heuristic, not
an exact edge-contact test:

  - a diagonal neighbour whose centre distance happens to equal one of the
    expected distances is reported as adjacent;
  - tiles separated by a gap wider than the tolerance are not reported.

Both outcomes are accepted behaviour.
"""

import logging
from collections import namedtuple

from .tile_geometry import Axis, Direction, TileGeometry

log = logging.getLogger(__name__)

DEFAULT_ADJACENCY_TOLERANCE = 0.1


AdjacentTile = namedtuple('AdjacentTile', ['tile', 'axis', 'direction'])
AdjacentTile.__doc__ = """\
One adjacency hit.

Fields:
    tile:      The candidate object as passed to find_adjacent().
    axis:      Axis.X or Axis.Z.
    direction: Direction.POSITIVE if the neighbour lies towards +axis.
"""


def geometry_of(obj):
    """
    Return the TileGeometry for *obj*.

    Accepts a TileGeometry or any object with a ``geometry`` attribute
    (TerrainTile).  Returns None if no geometry is available.
    """
    if obj is None:
        return None
    if isinstance(obj, TileGeometry):
        return obj
    return getattr(obj, 'geometry', None)


def classify_neighbor(geometry, other):
    """
    Determine which edge of *geometry* faces *other*.

    The dominant horizontal component of the origin-to-origin delta picks
    the axis (X wins only when strictly larger); its sign picks the
    direction.

    Returns:
        tuple: (Axis, Direction)
    """
    dx, _dy, dz = geometry.position_delta(other)
    if abs(dx) > abs(dz):
        return Axis.X, Direction.POSITIVE if dx > 0 else Direction.NEGATIVE
    return Axis.Z, Direction.POSITIVE if dz > 0 else Direction.NEGATIVE


def find_adjacent(tile, candidates, tolerance=DEFAULT_ADJACENCY_TOLERANCE):
    """
    Find the candidates lying immediately beside *tile*.

    Args:
        tile:       TileGeometry, or an object exposing ``geometry``.
        candidates: Iterable of TileGeometry objects or objects exposing
                    ``geometry``.  *tile* itself may be included; it is
                    skipped by identity.
        tolerance:  Allowed deviation between measured and expected centre
                    distance, in world units.

    Returns:
        list[AdjacentTile]: In candidate order, one entry per match.
    """
    own = geometry_of(tile)
    if own is None:
        log.warning("find_adjacent: tile %r has no geometry", tile)
        return []

    result = []
    for candidate in candidates:
        if candidate is tile:
            continue
        other = geometry_of(candidate)
        if other is None or other is own:
            continue

        distance = own.center_distance(other)
        expected_x = (own.size_x + other.size_x) * 0.5
        expected_z = (own.size_z + other.size_z) * 0.5

        if (abs(distance - expected_x) <= tolerance or
                abs(distance - expected_z) <= tolerance):
            axis, direction = classify_neighbor(own, other)
            result.append(AdjacentTile(candidate, axis, direction))

    log.debug("find_adjacent: %d adjacent tile(s)", len(result))
    return result
