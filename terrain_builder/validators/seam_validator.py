"""
Seam validator.

Validates:
- SEAM-001: the height gap across every adjacent tile pair is within
  tolerance

Edges of different resolution are compared with the same index remapping
the stitcher uses, so a freshly two-sided-stitched pair of equal-resolution
tiles measures exactly zero.
"""

import numpy as np

from ..edge_stitcher import edge_indices
from ..qa_validator import ValidationResult, ValidationSeverity


def measure_seam(field, neighbor, axis, direction):
    """
    Largest absolute height difference across a shared edge.

    Args:
        field:     HeightField on one side.
        neighbor:  HeightField on the other side.
        axis:      Axis.X or Axis.Z.
        direction: Direction.POSITIVE if *neighbor* lies towards +axis.

    Returns:
        float: max |field_edge[k] - neighbor_edge[nk]| over the shared samples.
    """
    own_edge = field.edge(axis, direction)
    other_edge = neighbor.edge(axis, direction.opposite)
    own_idx, other_idx = edge_indices(len(own_edge), len(other_edge))
    if len(own_idx) == 0:
        return 0.0
    return float(np.max(np.abs(own_edge[own_idx] - other_edge[other_idx])))


def measure_pair_seam(field, neighbor, axis, direction):
    """
    Seam gap measured from both sides of the edge.

    When the resolutions differ each side samples a different subset of the
    other edge, so the larger of the two readings is returned.
    """
    return max(measure_seam(field, neighbor, axis, direction),
               measure_seam(neighbor, field, axis, direction.opposite))


def validate_seams(world, tolerance):
    """Run SEAM-001 once per unordered adjacent tile pair in *world*."""
    results = []
    seen = set()

    for tile in world:
        for entry in world.find_adjacent(tile):
            other = entry.tile
            pair = frozenset((tile.id, other.id))
            if pair in seen:
                continue
            seen.add(pair)

            gap = measure_pair_seam(tile.field, other.field, entry.axis,
                                    entry.direction)
            label = "seam {} / {} ({}{})".format(
                tile.id, other.id,
                '+' if entry.direction.value > 0 else '-', entry.axis.value)

            if gap <= tolerance:
                results.append(ValidationResult(
                    check_id='SEAM-001',
                    severity=ValidationSeverity.WARNING,
                    passed=True,
                    message="{} gap {:.4f} within tolerance".format(label, gap),
                ))
            else:
                results.append(ValidationResult(
                    check_id='SEAM-001',
                    severity=ValidationSeverity.WARNING,
                    passed=False,
                    message="{} gap {:.4f} exceeds {:.4f}".format(
                        label, gap, tolerance),
                    details="Visible crack between neighbouring tiles",
                    fix_suggestion="Enable stitching on both tiles and run "
                                   "stitch_all() with more passes",
                ))

    if not results:
        results.append(ValidationResult(
            check_id='SEAM-001',
            severity=ValidationSeverity.SKIP,
            passed=True,
            message="No adjacent tile pairs",
        ))
    return results
