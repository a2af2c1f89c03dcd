import asyncio
from enum import Enum
from typing import List, Optional, Sequence

from ..errors import ValidationError
from ..events import Observable
from ..state import UIState, ViewState
from ..types import SearchResult
from ..utils.logger import app_logger


class ResultsStatus(Enum):
    NOT_SEARCHED = "not_searched"
    EMPTY = "empty"
    POPULATED = "populated"


class ResultsViewModel:
    """The visible result list and its single selection."""

    def __init__(self, state: UIState, surface, detail_coordinator=None):
        self.logger = app_logger.bind(component="results_view")
        self.state = state
        self.surface = surface
        self.detail_coordinator = detail_coordinator
        self.status = ResultsStatus.NOT_SEARCHED
        self._results: List[SearchResult] = []
        self.results_updated = Observable("results_updated")
        self.element_selected = Observable("element_selected")

    @property
    def results(self) -> List[SearchResult]:
        return list(self._results)

    @property
    def selected(self) -> Optional[SearchResult]:
        name = self.state.selected_element_name
        return next((r for r in self._results if r.element_name == name), None)

    def set_results(self, results: Sequence[SearchResult]):
        """Replace the whole visible set. Clears the selection."""
        self._results = list(results)
        self.status = ResultsStatus.POPULATED if self._results else ResultsStatus.EMPTY
        self.state.selected_element_name = None
        self.state.enter(ViewState.RESULTS)
        self.surface.render_results(self.results, self.status.value)
        self.results_updated.publish(self.results)

    def clear(self):
        self.set_results([])

    def select(self, element_name: str) -> Optional[asyncio.Task]:
        """Select one result and load its detail."""
        if not any(r.element_name == element_name for r in self._results):
            raise ValidationError(f"'{element_name}' is not in the current results")

        self.state.selected_element_name = element_name
        self.surface.mark_selected(element_name)
        self.element_selected.publish(element_name)

        if self.detail_coordinator is None:
            self.logger.warning("No detail coordinator attached, selection not loaded")
            return None
        return self.detail_coordinator.load(element_name)

    def select_index(self, index: int) -> Optional[asyncio.Task]:
        """Select by 1-based position, as the result list numbers them."""
        if not 1 <= index <= len(self._results):
            raise ValidationError(f"No result number {index}")
        return self.select(self._results[index - 1].element_name)
