"""
Exception types raised by terrain_builder.

Only programmer errors (bad spans, bad height scales, malformed height grids
or persisted tile data) are raised.  Runtime data problems such as
out-of-range sample indices are logged and recovered locally.
"""


class InvalidArgumentError(ValueError):
    """Raised when a resample, tile creation or tile load gets bad input."""
