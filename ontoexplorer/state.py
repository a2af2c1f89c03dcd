"""
Session-scoped UI state.

One ``UIState`` exists per ``ExplorerSession``. The query controller, the
detail coordinator and the navigation loop each own disjoint fields; the
loading counter is shared and goes through ``LoadingTracker``.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .types import Query
from .utils.logger import app_logger


class ViewState(Enum):
    """Coarse view state of the explorer."""
    IDLE = "idle"
    SEARCHING = "searching"
    RESULTS = "results"
    LOADING_DETAIL = "loading_detail"
    DETAIL_SHOWN = "detail_shown"
    ERROR = "error"


# States the machine falls back to after an error
STABLE_STATES = (ViewState.IDLE, ViewState.RESULTS, ViewState.DETAIL_SHOWN)


@dataclass
class UIState:
    """Mutable view state shared by the pipeline components."""
    current_query: Optional[Query] = None
    pending_request_token: int = 0
    selected_element_name: Optional[str] = None
    loading_count: int = 0
    tooltip_target: Optional[str] = None
    last_error: Optional[str] = None
    view_state: ViewState = ViewState.IDLE
    stable_state: ViewState = ViewState.IDLE

    @property
    def is_loading(self) -> bool:
        return self.loading_count > 0

    def enter(self, view_state: ViewState):
        """Move the state machine; stable states are remembered for error recovery."""
        self.view_state = view_state
        if view_state in STABLE_STATES:
            self.stable_state = view_state

    def fail(self, message: str):
        self.last_error = message
        self.view_state = ViewState.ERROR

    def dismiss_error(self) -> ViewState:
        """Leave the error state for the last stable one."""
        self.last_error = None
        if self.view_state is ViewState.ERROR:
            self.view_state = self.stable_state
        return self.view_state

    def reset(self):
        """Back to idle, as on a fresh load.

        The loading count and the latest request token belong to requests that
        may still be in flight, so they are left for those requests to settle.
        """
        self.current_query = None
        self.selected_element_name = None
        self.tooltip_target = None
        self.last_error = None
        self.view_state = ViewState.IDLE
        self.stable_state = ViewState.IDLE


class LoadingTracker:
    """Reference-counted loading indicator.

    Every in-flight operation holds the indicator; it is shown on the first
    acquire and hidden only when the last holder releases it.
    """

    def __init__(self, state: UIState, surface):
        self.logger = app_logger.bind(component="loading_tracker")
        self.state = state
        self.surface = surface

    def acquire(self):
        self.state.loading_count += 1
        if self.state.loading_count == 1:
            self.surface.show_loading()

    def release(self):
        if self.state.loading_count == 0:
            self.logger.warning("Loading indicator released more often than acquired")
            return
        self.state.loading_count -= 1
        if self.state.loading_count == 0:
            self.surface.hide_loading()

    @contextmanager
    def hold(self):
        """Hold the indicator for the duration of the block, whatever happens."""
        self.acquire()
        try:
            yield
        finally:
            self.release()
