"""Placement consistency guard - the only writer of the mosaic."""

from mosaic.placements.guard import PlacementGuard, validate_rect
from mosaic.placements.locks import RegionLocks

__all__ = [
    "PlacementGuard",
    "RegionLocks",
    "validate_rect",
]
