"""Pan/zoom state and the world <-> screen transform.

``screen = world * scale + pan`` on both axes. The viewport only affects how
the mosaic is projected; it plays no part in placement correctness.
"""

from dataclasses import dataclass
from typing import Iterable

from mosaic.geometry import Point, Rect, Size, bounding_box

MIN_SCALE = 0.05
MAX_SCALE = 5.0
ZOOM_STEP = 1.1
DEFAULT_PADDING = 40.0


def clamp_scale(scale: float) -> float:
    """Clamp a zoom factor to the supported range."""
    return max(MIN_SCALE, min(MAX_SCALE, scale))


@dataclass
class Viewport:
    """Presentation state of the canvas."""

    scale: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    screen_w: float = 1280.0
    screen_h: float = 720.0

    @property
    def pan(self) -> Point:
        return Point(self.pan_x, self.pan_y)

    @property
    def screen_size(self) -> Size:
        return Size(self.screen_w, self.screen_h)

    @property
    def screen_center(self) -> Point:
        return Point(self.screen_w / 2, self.screen_h / 2)


class ViewportController:
    """Drives a Viewport from user input.

    There is no terminal state: every operation leaves a valid viewport
    with the scale inside ``[MIN_SCALE, MAX_SCALE]``.
    """

    def __init__(self, viewport: Viewport | None = None) -> None:
        self.viewport = viewport or Viewport()
        self.viewport.scale = clamp_scale(self.viewport.scale)

    @property
    def scale(self) -> float:
        return self.viewport.scale

    @property
    def pan(self) -> Point:
        return self.viewport.pan

    @property
    def zoom_percent(self) -> int:
        """Zoom level for status display, e.g. 110 for 1.1x."""
        return round(self.viewport.scale * 100)

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def world_to_screen(self, point: Point) -> Point:
        vp = self.viewport
        return Point(point.x * vp.scale + vp.pan_x, point.y * vp.scale + vp.pan_y)

    def screen_to_world(self, point: Point) -> Point:
        vp = self.viewport
        return Point((point.x - vp.pan_x) / vp.scale, (point.y - vp.pan_y) / vp.scale)

    def rect_to_screen(self, rect: Rect) -> Rect:
        """Project a world rectangle onto the screen."""
        origin = self.world_to_screen(rect.origin)
        return Rect(
            x=origin.x,
            y=origin.y,
            w=rect.w * self.viewport.scale,
            h=rect.h * self.viewport.scale,
        )

    def visible_world_rect(self) -> Rect:
        """The part of the world currently on screen."""
        top_left = self.screen_to_world(Point(0.0, 0.0))
        return Rect(
            x=top_left.x,
            y=top_left.y,
            w=self.viewport.screen_w / self.viewport.scale,
            h=self.viewport.screen_h / self.viewport.scale,
        )

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def zoom_at_point(self, new_scale: float, pointer: Point) -> None:
        """Zoom so the world point under ``pointer`` stays under it.

        Args:
            new_scale: Requested scale, clamped to the supported range.
            pointer: Pointer position in screen coordinates.
        """
        world = self.screen_to_world(pointer)
        scale = clamp_scale(new_scale)
        self.viewport.scale = scale
        self.viewport.pan_x = pointer.x - world.x * scale
        self.viewport.pan_y = pointer.y - world.y * scale

    def zoom_in(self, pointer: Point | None = None) -> None:
        """One zoom step in, about the pointer or the screen center."""
        self.zoom_at_point(self.viewport.scale * ZOOM_STEP, pointer or self.viewport.screen_center)

    def zoom_out(self, pointer: Point | None = None) -> None:
        """One zoom step out, about the pointer or the screen center."""
        self.zoom_at_point(self.viewport.scale / ZOOM_STEP, pointer or self.viewport.screen_center)

    def zoom_by_wheel(self, delta_y: float, pointer: Point) -> None:
        """Mouse wheel zoom. Scrolling up (negative delta) zooms in."""
        if delta_y < 0:
            self.zoom_in(pointer)
        elif delta_y > 0:
            self.zoom_out(pointer)

    def pan_by(self, dx: float, dy: float) -> None:
        """Drag the canvas by a screen-space offset."""
        self.viewport.pan_x += dx
        self.viewport.pan_y += dy

    def resize(self, screen_w: float, screen_h: float) -> None:
        if screen_w <= 0 or screen_h <= 0:
            raise ValueError(f"Screen size must be positive, got {screen_w}x{screen_h}")
        self.viewport.screen_w = screen_w
        self.viewport.screen_h = screen_h

    # ------------------------------------------------------------------
    # Framing
    # ------------------------------------------------------------------

    def default_view(self) -> None:
        """Scale 1 with the world origin at the center of the screen."""
        center = self.viewport.screen_center
        self.viewport.scale = 1.0
        self.viewport.pan_x = center.x
        self.viewport.pan_y = center.y

    def fit_to_content(
        self,
        rects: Iterable[Rect],
        screen: Size | None = None,
        padding: float = DEFAULT_PADDING,
    ) -> None:
        """Frame all tiles, padded on every side, in the middle of the screen.

        Args:
            rects: Tiles to frame.
            screen: New screen size, if it changed.
            padding: World units added around the content.
        """
        if screen is not None:
            self.resize(screen.w, screen.h)

        bbox = bounding_box(rects)
        if bbox is None:
            self.default_view()
            return

        padded = bbox.expanded(padding) if padding > 0 else bbox
        vp = self.viewport
        scale = clamp_scale(min(vp.screen_w / padded.w, vp.screen_h / padded.h))
        vp.scale = scale
        vp.pan_x = vp.screen_w / 2 - padded.center_x * scale
        vp.pan_y = vp.screen_h / 2 - padded.center_y * scale

    def reset_view(self, rects: Iterable[Rect] = ()) -> None:
        """Fit to the tiles if there are any, otherwise the default view."""
        rects = list(rects)
        if rects:
            self.fit_to_content(rects)
        else:
            self.default_view()
