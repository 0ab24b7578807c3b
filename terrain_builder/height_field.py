"""
Authoritative per-tile elevation grid.

A HeightField owns one tile's samples in absolute world units on a square
canonical grid (see resolution.py).  The engine only ever receives
normalized values (sample / height_scale); the samples kept here are the
lossless record used for every height query and for edge stitching.

Samples are indexed samples[i, j], where i runs along the tile's X axis
(length) and j along its Z axis (width).

Resampling rule
---------------
An arbitrary L x W input grid is fitted onto the N x N canonical grid by
blending along each axis independently from the lower bracketing sample:

    x_interp = h[lx, lz] + fx * (h[ux, lz] - h[lx, lz])
    z_interp = h[lx, lz] + fz * (h[lx, uz] - h[lx, lz])
    sample   = x_interp + z_interp / 2

This is not bilinear interpolation.  It is the rule existing authored
terrains were built with, so it is reproduced as-is.
"""

import logging
import numbers

import numpy as np

from .errors import InvalidArgumentError
from .resolution import MAX_RESOLUTION, is_canonical, select_resolution
from .tile_geometry import Axis, Direction

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def _coerce_heights(heights):
    """
    Copy *heights* into a float64 2D array, validating its dimensions.

    Raises:
        InvalidArgumentError: If the grid is missing, ragged, not 2D, or has
            a dimension outside [1, 4097].
    """
    if heights is None:
        raise InvalidArgumentError("Invalid heights array: None")

    try:
        grid = np.array(heights, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError("Invalid heights array: {}".format(e))

    if grid.ndim != 2:
        raise InvalidArgumentError(
            "Heights must be a 2D grid, got {} dimension(s)".format(grid.ndim)
        )

    rows, cols = grid.shape
    if not (1 <= rows <= MAX_RESOLUTION and 1 <= cols <= MAX_RESOLUTION):
        raise InvalidArgumentError(
            "Heights cannot contain less than 1 or more than {} elements "
            "in any direction, got {}x{}".format(MAX_RESOLUTION, rows, cols)
        )
    return grid


def validate_resample_args(span_x, span_z, height_scale):
    """
    Check the physical parameters of a resample.

    Raises:
        InvalidArgumentError: If a span or the height scale is below 1.
    """
    # Written as "not >=" so NaN is rejected too.
    if not (span_x >= 1 and span_z >= 1 and height_scale >= 1):
        raise InvalidArgumentError(
            "Span X, span Z and height scale must be at least 1, got "
            "{}, {}, {}".format(span_x, span_z, height_scale)
        )


def _fit_axis(source_len, resolution):
    """
    Bracketing indices and blend fractions for one axis.

    Returns:
        tuple: (lower, upper, fraction) arrays of length *resolution*.
    """
    ratio = source_len / float(resolution)
    pos = np.arange(resolution, dtype=np.float64) * ratio
    lower = np.floor(pos).astype(np.intp)
    upper = np.minimum(np.floor(pos + 1.0).astype(np.intp), source_len - 1)
    fraction = np.where(lower == upper, 0.0, pos - lower)
    return lower, upper, fraction


# ---------------------------------------------------------------------------
# HeightField
# ---------------------------------------------------------------------------

class HeightField(object):
    """
    Square grid of absolute elevations for one terrain tile.

    Args:
        samples:      N x N grid (nested lists or ndarray), N canonical.
                      The data is copied; the field owns its array.
        height_scale: Vertical span in world units mapped to the engine's
                      normalized [0, 1] range.  Must be >= 1.

    Raises:
        InvalidArgumentError: If the grid is not square and canonical or
            the height scale is below 1.
    """

    def __init__(self, samples, height_scale=1.0):
        grid = _coerce_heights(samples)
        rows, cols = grid.shape
        if rows != cols or not is_canonical(rows):
            raise InvalidArgumentError(
                "HeightField samples must be a canonical square grid, "
                "got {}x{}".format(rows, cols)
            )
        if not height_scale >= 1:
            raise InvalidArgumentError(
                "Height scale must be at least 1, got {}".format(height_scale)
            )

        self._samples = np.ascontiguousarray(grid)
        self._height_scale = float(height_scale)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def resample(cls, heights, span_x, span_z, height_scale):
        """
        Fit an arbitrary height grid onto the canonical grid for a tile.

        Args:
            heights:      L x W grid of absolute heights, 1 <= L, W <= 4097.
                          Axis 0 maps to the tile's X (length) axis.
            span_x:       Tile length in world units (>= 1).
            span_z:       Tile width in world units (>= 1).
            height_scale: Vertical span in world units (>= 1).

        Returns:
            HeightField: New field at select_resolution(max(span_x, span_z)).

        Raises:
            InvalidArgumentError: On any invalid argument.  Nothing is built
                in that case.
        """
        validate_resample_args(span_x, span_z, height_scale)
        source = _coerce_heights(heights)

        resolution = select_resolution(max(span_x, span_z))
        source_len, source_width = source.shape

        lx, ux, fx = _fit_axis(source_len, resolution)
        lz, uz, fz = _fit_axis(source_width, resolution)

        base = source[np.ix_(lx, lz)]
        x_interp = base + fx[:, np.newaxis] * (source[np.ix_(ux, lz)] - base)
        z_interp = base + fz[np.newaxis, :] * (source[np.ix_(lx, uz)] - base)

        log.debug("Resampled %dx%d heights to %dx%d (scale %.2f)",
                  source_len, source_width, resolution, resolution,
                  height_scale)

        return cls(x_interp + z_interp / 2.0, height_scale)

    @classmethod
    def flat(cls, resolution, height_scale=1.0, value=0.0):
        """Return a field of *resolution* filled with a constant height."""
        if not is_canonical(resolution):
            raise InvalidArgumentError(
                "Resolution {} is not canonical".format(resolution)
            )
        return cls(np.full((resolution, resolution), float(value)),
                   height_scale)

    def copy(self):
        """Return an independent copy of this field."""
        return HeightField(self._samples, self._height_scale)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def resolution(self):
        return self._samples.shape[0]

    @property
    def samples(self):
        """The N x N sample array (absolute world units).  Mutable in place."""
        return self._samples

    @property
    def height_scale(self):
        return self._height_scale

    def set_height_scale(self, height_scale):
        """
        Change the vertical span.  Samples keep their absolute values; only
        the normalized view changes.

        Raises:
            InvalidArgumentError: If *height_scale* is below 1.
        """
        if not height_scale >= 1:
            raise InvalidArgumentError(
                "Height scale must be at least 1, got {}".format(height_scale)
            )
        self._height_scale = float(height_scale)

    def normalized(self):
        """Return samples / height_scale as a new array (engine format)."""
        return self._samples / self._height_scale

    # ------------------------------------------------------------------
    # Single-cell access
    # ------------------------------------------------------------------

    def in_bounds(self, i, j):
        """True for integer indices inside the grid."""
        if not (isinstance(i, numbers.Integral) and
                isinstance(j, numbers.Integral)):
            return False
        n = self.resolution
        return 0 <= i < n and 0 <= j < n

    def get_height(self, i, j):
        """
        Height at (i, j) in world units.

        Out-of-range indices log a warning and return 0.0.
        """
        if not self.in_bounds(i, j):
            log.warning("get_height: invalid index (%s, %s) for %dx%d field",
                        i, j, self.resolution, self.resolution)
            return 0.0
        return float(self._samples[i, j])

    def set_height(self, i, j, value):
        """
        Set the height at (i, j) in world units.

        Returns:
            bool: False (and a logged warning) if the index is out of range.
        """
        if not self.in_bounds(i, j):
            log.warning("set_height: invalid index (%s, %s) for %dx%d field",
                        i, j, self.resolution, self.resolution)
            return False
        self._samples[i, j] = float(value)
        return True

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def edge(self, axis, direction):
        """
        Writable view of one boundary row/column.

        Axis.X selects a column of constant i (POSITIVE: i = N - 1,
        NEGATIVE: i = 0); Axis.Z selects a row of constant j.
        """
        last = self.resolution - 1
        index = last if direction is Direction.POSITIVE else 0
        if axis is Axis.X:
            return self._samples[index, :]
        return self._samples[:, index]

    def __repr__(self):
        return "HeightField(resolution={}, height_scale={})".format(
            self.resolution, self._height_scale)
