"""Snapping engine module - turns imprecise gestures into exact edge alignment."""

from mosaic.snapping.engine import (
    MIN_SIZE_OFFSET,
    SNAP_THRESHOLD,
    PositionSnap,
    SizeSnap,
    SnappingEngine,
    can_submit,
    nearest_edge,
    snap_position,
    snap_size,
)

__all__ = [
    "MIN_SIZE_OFFSET",
    "SNAP_THRESHOLD",
    "PositionSnap",
    "SizeSnap",
    "SnappingEngine",
    "can_submit",
    "nearest_edge",
    "snap_position",
    "snap_size",
]
