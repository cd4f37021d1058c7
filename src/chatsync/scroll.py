"""
ScrollAnchor — decides whether new content should scroll into view.

``at_bottom`` tracks whether the viewport sits at the live edge. New
entries auto-scroll only if the anchor was at the bottom right before the
list changed; a reader who scrolled up into history stays where they are.
"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 100.0
DYNAMIC_MIN_THRESHOLD = 200.0
DYNAMIC_PADDING = 50.0


@dataclass(frozen=True)
class Viewport:
    scroll_top: float
    scroll_height: float
    client_height: float

    @property
    def distance_from_bottom(self) -> float:
        return self.scroll_height - self.scroll_top - self.client_height


def dynamic_threshold(last_height: float, second_last_height: float) -> float:
    """Threshold covering the last two rendered entries, never below 200."""
    return max(last_height + second_last_height + DYNAMIC_PADDING, DYNAMIC_MIN_THRESHOLD)


class ScrollAnchor:
    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        self.threshold = threshold
        self.at_bottom = True
        self._was_at_bottom: Optional[bool] = None

    def is_near_bottom(self, viewport: Viewport) -> bool:
        return viewport.distance_from_bottom <= self.threshold

    def on_scroll(self, viewport: Viewport) -> bool:
        self.at_bottom = self.is_near_bottom(viewport)
        return self.at_bottom

    def widen_for(self, last_height: float, second_last_height: float) -> float:
        self.threshold = dynamic_threshold(last_height, second_last_height)
        return self.threshold

    def begin_mutation(self) -> bool:
        self._was_at_bottom = self.at_bottom
        return self._was_at_bottom

    def end_mutation(self, viewport: Optional[Viewport] = None, has_new_entries: bool = True) -> bool:
        """Return True when the host should scroll to the latest entry."""
        was_at_bottom = self.at_bottom if self._was_at_bottom is None else self._was_at_bottom
        self._was_at_bottom = None
        if was_at_bottom and has_new_entries:
            self.at_bottom = True
            return True
        if viewport is not None:
            self.on_scroll(viewport)
        return False

    def jump_to_latest(self) -> None:
        self.at_bottom = True

    def reset(self) -> None:
        self.at_bottom = True
        self._was_at_bottom = None
