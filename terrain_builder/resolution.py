"""
Canonical heightmap resolution selection.

The rendering engine only accepts square heightmaps whose side is
2^k + 1 samples for k = 5..12.  select_resolution() maps a requested
physical span (in world units) to the smallest canonical size that can hold
one sample per unit, clamping out-of-range spans with a warning instead of
failing.
"""

import logging

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# 2^k + 1 for k = 5..12
CANONICAL_RESOLUTIONS = (33, 65, 129, 257, 513, 1025, 2049, 4097)

MIN_RESOLUTION = CANONICAL_RESOLUTIONS[0]
MAX_RESOLUTION = CANONICAL_RESOLUTIONS[-1]


def is_canonical(resolution):
    """Return True if *resolution* is one of the supported grid sizes."""
    return resolution in CANONICAL_RESOLUTIONS


def select_resolution(span):
    """
    Pick the canonical grid size for a tile span.

    Args:
        span: The larger of the tile's length and width, in world units.

    Returns:
        int: Smallest canonical resolution >= span.  Spans below 1 return
            the minimum (33) and spans above 4097 return the maximum (4097);
            both cases log a warning.
    """
    if span < 1:
        log.warning("Span %s too small, using minimum resolution %d",
                    span, MIN_RESOLUTION)
        return MIN_RESOLUTION

    for resolution in CANONICAL_RESOLUTIONS:
        if span <= resolution:
            return resolution

    log.warning("Span %s too large, clamping to resolution %d",
                span, MAX_RESOLUTION)
    return MAX_RESOLUTION
