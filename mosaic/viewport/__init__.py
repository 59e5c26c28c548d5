"""Viewport controller - pan, zoom and framing of the mosaic canvas."""

from mosaic.viewport.controller import (
    DEFAULT_PADDING,
    MAX_SCALE,
    MIN_SCALE,
    ZOOM_STEP,
    Viewport,
    ViewportController,
    clamp_scale,
)

__all__ = [
    "DEFAULT_PADDING",
    "MAX_SCALE",
    "MIN_SCALE",
    "ZOOM_STEP",
    "Viewport",
    "ViewportController",
    "clamp_scale",
]
