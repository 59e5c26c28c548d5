"""Geometry kernel - rectangles and the predicates placement relies on."""

from mosaic.geometry.predicates import (
    DEFAULT_TOLERANCE,
    Edges,
    bounding_box,
    edges_of,
    is_adjacent,
    is_adjacent_to_any,
    overlaps,
    overlaps_any,
    touches,
    touches_x,
    touches_y,
)
from mosaic.geometry.rect import Point, Rect, Size, parse_rect

__all__ = [
    # Types
    "Point",
    "Rect",
    "Size",
    "parse_rect",
    # Predicates
    "DEFAULT_TOLERANCE",
    "Edges",
    "bounding_box",
    "edges_of",
    "is_adjacent",
    "is_adjacent_to_any",
    "overlaps",
    "overlaps_any",
    "touches",
    "touches_x",
    "touches_y",
]
