"""
Per-tile height field validator.

Validates:
- TILE-001: resolution is canonical
- TILE-002: sample array shape is resolution x resolution
- TILE-003: all samples are finite
- TILE-004: normalized samples lie within [0, 1]
"""

import numpy as np

from ..qa_validator import ValidationResult, ValidationSeverity
from ..resolution import CANONICAL_RESOLUTIONS, is_canonical


def _label(tile):
    return "tile {}".format(tile.id)


def validate_tile(tile):
    """Run TILE-001..TILE-004 on one tile.  Returns a list of results."""
    results = []
    label = _label(tile)
    samples = tile.field.samples
    resolution = tile.resolution

    # TILE-001
    if is_canonical(resolution):
        results.append(ValidationResult(
            check_id='TILE-001',
            severity=ValidationSeverity.ERROR,
            passed=True,
            message="{} resolution {} is canonical".format(label, resolution),
        ))
    else:
        results.append(ValidationResult(
            check_id='TILE-001',
            severity=ValidationSeverity.ERROR,
            passed=False,
            message="{} resolution {} is not canonical".format(
                label, resolution),
            details="Supported sizes: {}".format(
                ", ".join(str(r) for r in CANONICAL_RESOLUTIONS)),
            fix_suggestion="Rebuild the tile with HeightField.resample()",
        ))

    # TILE-002
    expected = (resolution, resolution)
    shape_ok = samples.shape == expected
    results.append(ValidationResult(
        check_id='TILE-002',
        severity=ValidationSeverity.ERROR,
        passed=shape_ok,
        message="{} samples shape {} (expected {})".format(
            label, samples.shape, expected),
    ))

    # TILE-003
    bad = int(np.count_nonzero(~np.isfinite(samples)))
    if bad == 0:
        results.append(ValidationResult(
            check_id='TILE-003',
            severity=ValidationSeverity.ERROR,
            passed=True,
            message="{} all samples finite".format(label),
        ))
    else:
        results.append(ValidationResult(
            check_id='TILE-003',
            severity=ValidationSeverity.ERROR,
            passed=False,
            message="{} has {} non-finite samples".format(label, bad),
            fix_suggestion="Check the source heightmap for NaN/inf values",
        ))

    # TILE-004
    normalized = tile.field.normalized()
    finite = normalized[np.isfinite(normalized)]
    outside = int(np.count_nonzero((finite < 0.0) | (finite > 1.0)))
    if outside == 0:
        results.append(ValidationResult(
            check_id='TILE-004',
            severity=ValidationSeverity.WARNING,
            passed=True,
            message="{} normalized heights within [0, 1]".format(label),
        ))
    else:
        results.append(ValidationResult(
            check_id='TILE-004',
            severity=ValidationSeverity.WARNING,
            passed=False,
            message="{} has {} samples outside the height scale".format(
                label, outside),
            details="Engines clip normalized heights to [0, 1]",
            fix_suggestion="Raise height_scale to at least {:.2f}".format(
                float(finite.max()) * tile.height_scale if finite.size else 1.0),
        ))

    return results


def validate_tiles(world):
    """Run the tile checks for every tile in *world*."""
    results = []
    for tile in world:
        results.extend(validate_tile(tile))

    if not results:
        results.append(ValidationResult(
            check_id='TILE-000',
            severity=ValidationSeverity.SKIP,
            passed=True,
            message="World has no tiles",
        ))
    return results
