"""
World-space footprint of a terrain tile.

TileGeometry is a read-only snapshot of a tile's origin and physical size
as reported by the engine binding.  Y is vertical; adjacency reasoning is
done in the XZ plane using the bounds centre.
"""

import math
from enum import Enum


class Axis(Enum):
    """Horizontal axis along which two tiles touch."""
    X = "x"
    Z = "z"


class Direction(Enum):
    """Side of the tile, along an Axis, on which a neighbour lies."""
    POSITIVE = 1
    NEGATIVE = -1

    @property
    def opposite(self):
        if self is Direction.POSITIVE:
            return Direction.NEGATIVE
        return Direction.POSITIVE


class TileGeometry(object):
    """
    Position and physical size of one tile.

    Args:
        position: (x, y, z) origin of the tile (its minimum corner).
        size:     (length, height, width) in world units.
    """

    __slots__ = ('_position', '_size')

    def __init__(self, position, size):
        self._position = tuple(float(v) for v in position)
        self._size = tuple(float(v) for v in size)
        if len(self._position) != 3 or len(self._size) != 3:
            raise ValueError(
                "TileGeometry needs 3-component position and size, got "
                "{!r} and {!r}".format(position, size)
            )

    @property
    def position(self):
        return self._position

    @property
    def size(self):
        return self._size

    @property
    def size_x(self):
        """Tile length (X extent)."""
        return self._size[0]

    @property
    def size_y(self):
        """Tile height (vertical span)."""
        return self._size[1]

    @property
    def size_z(self):
        """Tile width (Z extent)."""
        return self._size[2]

    @property
    def bounds_center(self):
        """Centre of the tile's bounding box: position + size * 0.5."""
        return tuple(p + s * 0.5 for p, s in zip(self._position, self._size))

    def center_distance(self, other):
        """Euclidean distance between this tile's and *other*'s bounds centres."""
        return math.sqrt(sum(
            (a - b) ** 2
            for a, b in zip(self.bounds_center, other.bounds_center)
        ))

    def position_delta(self, other):
        """Vector from this tile's origin to *other*'s origin."""
        return tuple(b - a for a, b in zip(self._position, other.position))

    def __eq__(self, other):
        if not isinstance(other, TileGeometry):
            return NotImplemented
        return self._position == other.position and self._size == other.size

    def __hash__(self):
        return hash((self._position, self._size))

    def __repr__(self):
        return "TileGeometry(position={}, size={})".format(
            self._position, self._size)
