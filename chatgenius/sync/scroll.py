"""
Scroll Coordinator

Decides whether the message viewport should follow new messages. Works on
plain scroll metrics so any front end can feed it.
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_SCROLL_THRESHOLD = 100


@dataclass(frozen=True)
class ScrollMetrics:
    scroll_height: float
    scroll_top: float
    client_height: float

    @property
    def distance_from_bottom(self) -> float:
        return self.scroll_height - self.scroll_top - self.client_height

    @property
    def bottom_offset(self) -> float:
        """scroll_top value that shows the newest message."""
        return max(self.scroll_height - self.client_height, 0)


def is_pinned_to_bottom(metrics: ScrollMetrics, threshold: float = DEFAULT_SCROLL_THRESHOLD) -> bool:
    return metrics.distance_from_bottom <= threshold


class ScrollCoordinator:
    """
    Tracks whether the viewport is pinned to the newest message.

    Usage around every message-list mutation:
        coordinator.before_mutation(metrics_before)
        ...apply mutation, let the view lay out...
        target = coordinator.after_mutation(metrics_after)
        if target is not None: scroll to target
    """

    def __init__(self, threshold: float = DEFAULT_SCROLL_THRESHOLD):
        self.threshold = threshold
        self.is_at_bottom = True
        self.has_new_messages = False

    def reset(self) -> None:
        """Forget the viewport state, e.g. when another context is shown."""
        self.is_at_bottom = True
        self.has_new_messages = False

    def on_scroll(self, metrics: ScrollMetrics) -> None:
        self.is_at_bottom = is_pinned_to_bottom(metrics, self.threshold)
        if self.is_at_bottom:
            self.has_new_messages = False

    def before_mutation(self, metrics: Optional[ScrollMetrics]) -> bool:
        """Capture the pinned state before the list changes."""
        if metrics is not None:
            self.is_at_bottom = is_pinned_to_bottom(metrics, self.threshold)
        return self.is_at_bottom

    def after_mutation(self, metrics: ScrollMetrics) -> Optional[float]:
        """
        Returns:
            The scroll_top to re-pin to, or None to leave the position alone
        """
        if self.is_at_bottom:
            self.has_new_messages = False
            return metrics.bottom_offset

        self.has_new_messages = True
        return None
