"""Region locks serializing commits whose rectangles could overlap.

The plane is cut into square cells and every cell maps onto one of a fixed
number of lock stripes. Two rectangles whose interiors intersect share at
least one cell, hence at least one stripe, so their commits serialize.
Rectangles in different parts of the wall usually map to different stripes
and commit in parallel.
"""

import math
import threading
from contextlib import contextmanager
from typing import Iterator

from mosaic.geometry import Rect

# Keeps advisory lock keys clear of other users of pg_advisory locks.
ADVISORY_KEY_BASE = 0x4D05_0000


class RegionLocks:
    """Striped locks over a grid of world cells."""

    def __init__(self, cell_size: float = 256.0, stripes: int = 64):
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        if stripes < 1:
            raise ValueError("stripes must be at least 1")
        self.cell_size = cell_size
        self.stripe_count = stripes
        self._locks = [threading.Lock() for _ in range(stripes)]

    def _cell_span(self, start: float, end: float) -> tuple[int, int]:
        """First cell index and number of cells covering ``[start, end]``."""
        first = math.floor(start / self.cell_size)
        return first, math.floor(end / self.cell_size) - first + 1

    def _stripe(self, cx: int, cy: int) -> int:
        return ((cx * 73856093) ^ (cy * 19349663)) % self.stripe_count

    def stripes_for(self, rect: Rect) -> list[int]:
        """Stripe indices guarding ``rect``, ascending.

        A rectangle covering at least as many cells as there are stripes
        takes every stripe; cell counts may exceed any ``range`` length.
        """
        x0, nx = self._cell_span(rect.x, rect.right)
        y0, ny = self._cell_span(rect.y, rect.bottom)
        if nx * ny >= self.stripe_count:
            return list(range(self.stripe_count))
        return sorted({
            self._stripe(cx, cy)
            for cx in range(x0, x0 + nx)
            for cy in range(y0, y0 + ny)
        })

    @contextmanager
    def hold(self, rect: Rect) -> Iterator[list[int]]:
        """Hold every stripe covering ``rect``.

        Stripes are always taken in ascending order, so concurrent holders
        cannot deadlock.

        Yields:
            The stripe indices held.
        """
        stripes = self.stripes_for(rect)
        acquired: list[threading.Lock] = []
        try:
            for index in stripes:
                lock = self._locks[index]
                lock.acquire()
                acquired.append(lock)
            yield stripes
        finally:
            for lock in reversed(acquired):
                lock.release()

    @staticmethod
    def advisory_key(stripe: int) -> int:
        """Database advisory lock key for a stripe."""
        return ADVISORY_KEY_BASE + stripe
