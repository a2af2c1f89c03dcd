from typing import Optional

from ..config import settings
from ..state import UIState
from ..types import FileMetadata, OverlayState, Point, Size
from ..utils.logger import app_logger


def clamp_position(cursor: Point, overlay: Size, viewport: Size,
                   offset: float = 10, margin: float = 10) -> Point:
    """Place an overlay next to the cursor without leaving the viewport.

    The overlay sits ``offset`` right of and below the cursor. When that would
    overflow the right or bottom edge it is shifted left or up so that it ends
    ``margin`` inside the edge. It never goes past the left or top edge.
    """
    left = cursor.x + offset
    top = cursor.y + offset

    if left + overlay.width > viewport.width:
        left = viewport.width - overlay.width - margin
    if top + overlay.height > viewport.height:
        top = viewport.height - overlay.height - margin

    return Point(max(0, left), max(0, top))


class TooltipOverlay:
    """The metadata overlay. At most one is visible at a time."""

    def __init__(self, state: UIState, surface, viewport: Optional[Size] = None,
                 size: Optional[Size] = None, offset: Optional[float] = None,
                 margin: Optional[float] = None):
        self.logger = app_logger.bind(component="tooltip_overlay")
        self.state = state
        self.surface = surface
        self.viewport = viewport or Size(settings.viewport_width, settings.viewport_height)
        self.size = size or Size(settings.overlay_width, settings.overlay_height)
        self.offset = settings.overlay_offset if offset is None else offset
        self.margin = settings.overlay_margin if margin is None else margin
        self.current: Optional[OverlayState] = None

    @property
    def visible(self) -> bool:
        return self.current is not None

    def show(self, anchor: Point, target: str, metadata: Optional[FileMetadata],
             size: Optional[Size] = None) -> OverlayState:
        """Show the overlay for ``target`` at ``anchor``, replacing any other."""
        size = size or self.size
        position = clamp_position(anchor, size, self.viewport, self.offset, self.margin)
        self.current = OverlayState(
            target=target,
            metadata=metadata,
            left=position.x,
            top=position.y,
            width=size.width,
            height=size.height,
        )
        self.state.tooltip_target = target
        self.surface.render_overlay(self.current)
        return self.current

    def reposition(self, cursor: Point) -> Optional[OverlayState]:
        """Follow the cursor. Does nothing while hidden."""
        if self.current is None:
            return None
        size = Size(self.current.width, self.current.height)
        return self.show(cursor, self.current.target, self.current.metadata, size)

    def hide(self):
        if self.current is None:
            return
        self.current = None
        self.state.tooltip_target = None
        self.surface.hide_overlay()

    def resize_viewport(self, viewport: Size):
        self.viewport = viewport
