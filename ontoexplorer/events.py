"""
Observables connecting the pipeline to the view layer.

Each event type is an explicit ``Observable`` owned by the component that
publishes it. ``results_updated`` and ``element_selected`` fan out to any
number of subscribers. ``term_activated`` is single-consumer: the navigation
loop is its only subscriber, and a second subscription is refused.
"""
from typing import Any, Callable, List

from .utils.logger import app_logger


class Observable:
    """A named event with an explicit subscriber list."""

    def __init__(self, name: str, single_consumer: bool = False):
        self.logger = app_logger.bind(component="events")
        self.name = name
        self.single_consumer = single_consumer
        self._subscribers: List[Callable[..., Any]] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[..., Any]) -> Callable[[], None]:
        """Register a callback. Returns a function that unsubscribes it."""
        if self.single_consumer and self._subscribers:
            raise RuntimeError(f"Event '{self.name}' already has its consumer")
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, *args: Any):
        for callback in list(self._subscribers):
            try:
                callback(*args)
            except Exception as e:
                self.logger.error(f"Subscriber of '{self.name}' failed: {e}")
