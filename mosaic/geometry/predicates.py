"""Overlap and adjacency predicates over axis-aligned rectangles.

Every predicate takes a tolerance so that tiles which merely touch are not
reported as overlapping because of rounding noise.
"""

from typing import Iterable, NamedTuple

from mosaic.geometry.rect import Rect

DEFAULT_TOLERANCE = 2.0


class Edges(NamedTuple):
    """Candidate snap targets on each axis, ascending and de-duplicated."""

    xs: tuple[float, ...]
    ys: tuple[float, ...]


def overlaps(a: Rect, b: Rect, tol: float = DEFAULT_TOLERANCE) -> bool:
    """Check whether the interiors of two rectangles intersect.

    Each rectangle is effectively shrunk by ``tol`` on every side, so edges
    closer than the tolerance count as touching, not overlapping.
    """
    return (
        a.x < b.right - tol
        and a.right > b.x + tol
        and a.y < b.bottom - tol
        and a.bottom > b.y + tol
    )


def overlaps_any(rect: Rect, rects: Iterable[Rect], tol: float = DEFAULT_TOLERANCE) -> bool:
    return any(overlaps(rect, other, tol) for other in rects)


def touches_x(a: Rect, b: Rect, tol: float = DEFAULT_TOLERANCE) -> bool:
    """Right of one lies on left of the other."""
    return abs(a.right - b.x) < tol or abs(b.right - a.x) < tol


def touches_y(a: Rect, b: Rect, tol: float = DEFAULT_TOLERANCE) -> bool:
    """Bottom of one lies on top of the other."""
    return abs(a.bottom - b.y) < tol or abs(b.bottom - a.y) < tol


def touches(a: Rect, b: Rect, tol: float = DEFAULT_TOLERANCE) -> bool:
    """Check whether any edge of ``a`` lies on the opposite edge of ``b``."""
    return touches_x(a, b, tol) or touches_y(a, b, tol)


def _spans_overlap(start_a: float, end_a: float, start_b: float, end_b: float) -> bool:
    return start_a < end_b and end_a > start_b


def is_adjacent(a: Rect, b: Rect, tol: float = DEFAULT_TOLERANCE) -> bool:
    """Check whether two rectangles share a stretch of edge.

    They must touch on one axis and their spans must overlap on the other.
    Rectangles that meet only at a corner are not adjacent.
    """
    if touches_x(a, b, tol) and _spans_overlap(a.y, a.bottom, b.y, b.bottom):
        return True
    return touches_y(a, b, tol) and _spans_overlap(a.x, a.right, b.x, b.right)


def is_adjacent_to_any(rect: Rect, rects: Iterable[Rect], tol: float = DEFAULT_TOLERANCE) -> bool:
    return any(is_adjacent(rect, other, tol) for other in rects)


def edges_of(rects: Iterable[Rect]) -> Edges:
    """Collect every left/right x and top/bottom y of a rectangle collection."""
    xs: set[float] = set()
    ys: set[float] = set()
    for r in rects:
        xs.update((r.x, r.right))
        ys.update((r.y, r.bottom))
    return Edges(xs=tuple(sorted(xs)), ys=tuple(sorted(ys)))


def bounding_box(rects: Iterable[Rect]) -> Rect | None:
    """Smallest rectangle containing all of ``rects``, or None if empty."""
    rects = list(rects)
    if not rects:
        return None
    left = min(r.x for r in rects)
    top = min(r.y for r in rects)
    right = max(r.right for r in rects)
    bottom = max(r.bottom for r in rects)
    return Rect(x=left, y=top, w=right - left, h=bottom - top)
