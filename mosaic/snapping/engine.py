"""Magnetic edge snapping for tiles being dragged or resized.

Snapping only ever aligns an edge of the moving rectangle with an edge of a
settled rectangle. It never produces a position that overlaps the settled
set; when no safe snap exists the input comes back unchanged.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from mosaic.events import EngineEvent, EventBus
from mosaic.geometry import (
    DEFAULT_TOLERANCE,
    Rect,
    edges_of,
    is_adjacent_to_any,
    overlaps,
    parse_rect,
)

SNAP_THRESHOLD = 80.0
MIN_SIZE_OFFSET = 50.0


@dataclass
class PositionSnap:
    """Result of snapping a dragged rectangle."""

    x: float
    y: float
    original_x: float
    original_y: float
    snapped: bool
    snapped_x: bool = False
    snapped_y: bool = False
    rejected_overlap: bool = False  # a snap existed but would have collided


@dataclass
class SizeSnap:
    """Result of snapping a resized rectangle."""

    w: float
    h: float
    original_w: float
    original_h: float
    snapped: bool
    edge: str | None = None  # "right" or "bottom"


def nearest_edge(value: float, targets: Sequence[float], threshold: float) -> float | None:
    """Find the target closest to ``value``, strictly within ``threshold``.

    Among equidistant targets the first one in ``targets`` wins.
    """
    best = None
    best_dist = threshold
    for target in targets:
        dist = abs(value - target)
        if dist < best_dist:
            best = target
            best_dist = dist
    return best


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _pick_axis(
    start: float,
    length: float,
    targets: Sequence[float],
    threshold: float,
) -> float | None:
    """Snap one axis: the leading edge wins ties against the trailing edge.

    Returns:
        New start coordinate, or None when neither edge has a candidate.
    """
    lead = nearest_edge(start, targets, threshold)
    trail = nearest_edge(start + length, targets, threshold)
    d_lead = abs(start - lead) if lead is not None else math.inf
    d_trail = abs(start + length - trail) if trail is not None else math.inf

    if lead is not None and d_lead <= d_trail:
        return lead
    if trail is not None:
        return trail - length
    return None


@dataclass
class SnappingEngine:
    """Corrects drag and resize gestures against the settled tiles."""

    threshold: float = SNAP_THRESHOLD
    tolerance: float = DEFAULT_TOLERANCE
    min_size_offset: float = MIN_SIZE_OFFSET
    events: EventBus | None = None

    def snap_position(self, rect: Rect, settled: Iterable[Rect]) -> PositionSnap:
        """Align the dragged rectangle's edges with nearby settled edges.

        Each axis is handled independently. The snapped rectangle is then
        checked against every settled tile; if it would overlap one, the
        whole snap is discarded and the release position is kept.

        Args:
            rect: The rectangle being dragged.
            settled: Currently committed rectangles.

        Returns:
            PositionSnap with the corrected (or original) position.
        """
        settled = list(settled)
        result = PositionSnap(
            x=rect.x,
            y=rect.y,
            original_x=rect.x,
            original_y=rect.y,
            snapped=False,
        )
        if not settled:
            return result

        edges = edges_of(settled)
        new_x = _pick_axis(rect.x, rect.w, edges.xs, self.threshold)
        new_y = _pick_axis(rect.y, rect.h, edges.ys, self.threshold)
        if new_x is None and new_y is None:
            return result

        candidate = rect.moved_to(
            new_x if new_x is not None else rect.x,
            new_y if new_y is not None else rect.y,
        )
        if any(overlaps(candidate, other, self.tolerance) for other in settled):
            result.rejected_overlap = True
            return result

        result.x = candidate.x
        result.y = candidate.y
        result.snapped_x = candidate.x != rect.x
        result.snapped_y = candidate.y != rect.y
        result.snapped = result.snapped_x or result.snapped_y

        if result.snapped:
            self._notify("position", rect, candidate)
        return result

    def snap_size(self, rect: Rect, settled: Iterable[Rect]) -> SizeSnap:
        """Grow or shrink a rectangle so its right or bottom edge meets a settled edge.

        The top-left corner stays fixed and the aspect ratio is preserved.
        No overlap check is made; resize previews may overlap until commit.

        Args:
            rect: The rectangle being resized.
            settled: Currently committed rectangles.

        Returns:
            SizeSnap with the corrected (or original) size.
        """
        settled = list(settled)
        result = SizeSnap(
            w=rect.w,
            h=rect.h,
            original_w=rect.w,
            original_h=rect.h,
            snapped=False,
        )
        if not settled:
            return result

        edges = edges_of(settled)
        ratio = rect.aspect_ratio

        right = nearest_edge(rect.right, edges.xs, self.threshold)
        if right is not None and not right > rect.x + self.min_size_offset:
            right = None
        bottom = nearest_edge(rect.bottom, edges.ys, self.threshold)
        if bottom is not None and not bottom > rect.y + self.min_size_offset:
            bottom = None

        d_right = abs(rect.right - right) if right is not None else math.inf
        d_bottom = abs(rect.bottom - bottom) if bottom is not None else math.inf

        if right is not None and d_right <= d_bottom:
            new_w = right - rect.x
            new_h = round_half_up(new_w / ratio)
            edge = "right"
        elif bottom is not None:
            new_h = bottom - rect.y
            new_w = round_half_up(new_h * ratio)
            edge = "bottom"
        else:
            return result

        # A very wide or very tall tile can round its other side to nothing.
        if new_w < 1 or new_h < 1:
            return result

        result.w = new_w
        result.h = new_h
        result.edge = edge
        result.snapped = new_w != rect.w or new_h != rect.h

        if result.snapped:
            self._notify("size", rect, rect.resized(new_w, new_h))
        return result

    def can_submit(self, ghost: Rect, settled: Iterable[Rect]) -> bool:
        """Admission gate for a ghost tile.

        The first tile may go anywhere; every later tile must share an edge
        with an existing one. Advisory only, the commit path does not check it.
        """
        settled = list(settled)
        return not settled or is_adjacent_to_any(ghost, settled, self.tolerance)

    def _notify(self, kind: str, before: Rect, after: Rect) -> None:
        if self.events is None:
            return
        self.events.emit(
            EngineEvent.SNAP_APPLIED,
            {
                "kind": kind,
                "from": before.model_dump(),
                "to": after.model_dump(),
            },
        )


def snap_position(
    x: float,
    y: float,
    w: float,
    h: float,
    settled: Iterable[Rect],
    threshold: float = SNAP_THRESHOLD,
) -> tuple[float, float]:
    """Convenience function to snap a dragged tile.

    Returns:
        Tuple of (x, y).

    Raises:
        InvalidGeometry: If the dragged rectangle is not finite and positive.
    """
    engine = SnappingEngine(threshold=threshold)
    result = engine.snap_position(parse_rect(x, y, w, h), settled)
    return result.x, result.y


def snap_size(
    x: float,
    y: float,
    w: float,
    h: float,
    settled: Iterable[Rect],
    threshold: float = SNAP_THRESHOLD,
) -> tuple[float, float]:
    """Convenience function to snap a resized tile.

    Returns:
        Tuple of (w, h).

    Raises:
        InvalidGeometry: If the resized rectangle is not finite and positive.
    """
    engine = SnappingEngine(threshold=threshold)
    result = engine.snap_size(parse_rect(x, y, w, h), settled)
    return result.w, result.h


def can_submit(ghost: Rect, settled: Iterable[Rect], tol: float = DEFAULT_TOLERANCE) -> bool:
    """Convenience wrapper around :meth:`SnappingEngine.can_submit`."""
    return SnappingEngine(tolerance=tol).can_submit(ghost, settled)
