"""
Edge stitching between two height fields.

stitch_edge() averages one boundary of a field with the facing boundary of
a neighbour.  Only the first field is written; the neighbour is read from a
snapshot.  Seamless two-sided results therefore need one call from each
tile's side, which is what TerrainTile.stitch_with_adjacent() and
TerrainWorld.stitch_all() do.

Fields of different resolution are matched by integer ratio remapping:

    neighbor_index = k * (M - 1) // (N - 1)

for k in range(min(N, M)), where N and M are the own and neighbour edge
lengths.  When the own field is the larger one only its first M edge
samples are rewritten.
"""

import logging

import numpy as np

log = logging.getLogger(__name__)


def edge_indices(own_len, neighbor_len):
    """
    Own/neighbour index pairs along a shared edge.

    Returns:
        tuple: (own_indices, neighbor_indices) integer arrays.  A 1-long own
            edge maps everything to neighbour index 0.
    """
    count = min(own_len, neighbor_len)
    own = np.arange(count, dtype=np.intp)
    if own_len > 1:
        neighbor = own * (neighbor_len - 1) // (own_len - 1)
    else:
        neighbor = np.zeros(count, dtype=np.intp)
    return own, neighbor


def stitch_edge(field, neighbor, axis, direction):
    """
    Average *field*'s edge facing *neighbor* with the neighbour's facing edge.

    Args:
        field:     HeightField to modify in place.
        neighbor:  HeightField to read (never modified).
        axis:      Axis.X or Axis.Z.
        direction: Direction.POSITIVE if *neighbor* lies towards +axis.

    Returns:
        int: Number of samples written.
    """
    if field is neighbor:
        log.warning("stitch_edge: refusing to stitch a field with itself")
        return 0

    own_edge = field.edge(axis, direction)
    # Snapshot: the neighbour must not observe our writes.
    other_edge = np.array(neighbor.edge(axis, direction.opposite))

    own_idx, other_idx = edge_indices(len(own_edge), len(other_edge))
    own_edge[own_idx] = (own_edge[own_idx] + other_edge[other_idx]) * 0.5

    log.debug("Stitched %d samples on %s/%s edge (%d vs %d)",
              len(own_idx), axis.value, direction.name,
              len(own_edge), len(other_edge))
    return len(own_idx)
