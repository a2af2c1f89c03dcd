"""
Explorer session: one user's browsing loop.

The session owns the ``UIState`` and wires the components together:

    input -> QueryController -> ResultsViewModel -> DetailCoordinator
          -> GraphModelBuilder -> surface -> NavigationLoop -> QueryController
"""
import asyncio
from typing import Optional

from .catalog.ontologies import OntologyCatalog
from .errors import ExplorerError
from .detail.coordinator import DetailCoordinator
from .graph.builder import GraphModelBuilder
from .navigation.loop import NavigationLoop
from .overlay.tooltip import TooltipOverlay
from .query.controller import QueryController
from .results.view_model import ResultsViewModel
from .state import LoadingTracker, UIState, ViewState
from .types import ElementType, Point, Query
from .utils.logger import app_logger


class ExplorerSession:
    """Wires the search, detail, graph and navigation components around one UIState."""

    def __init__(self, api, surface, debounce_seconds: Optional[float] = None):
        self.logger = app_logger.bind(component="explorer_session")
        self.api = api
        self.surface = surface
        self.state = UIState()
        self.loading = LoadingTracker(self.state, surface)

        self.detail = DetailCoordinator(api, self.state, surface, self.loading, GraphModelBuilder())
        self.results = ResultsViewModel(self.state, surface, self.detail)
        self.queries = QueryController(api, self.state, surface, self.results, self.loading,
                                       debounce_seconds=debounce_seconds)
        self.navigation = NavigationLoop(self.queries, self.state, surface)
        self.tooltip = TooltipOverlay(self.state, surface)
        self.catalog = OntologyCatalog(api, surface)

        self.ontology_filter: Optional[str] = None
        self.type_filter: Optional[ElementType] = None

    # Observables for the view layer
    @property
    def results_updated(self):
        return self.results.results_updated

    @property
    def element_selected(self):
        return self.results.element_selected

    @property
    def term_activated(self):
        return self.navigation.term_activated

    @property
    def view_state(self) -> ViewState:
        return self.state.view_state

    async def start(self):
        """Reset to idle and load the ontology filter list."""
        self.state.reset()
        try:
            await self.catalog.refresh()
        except ExplorerError as e:
            self.logger.error(f"Error loading ontologies: {e}")
            self.surface.show_error("Unable to load the list of ontologies.")

    def _query(self, text: str) -> Query:
        return Query(text=text, ontology_filter=self.ontology_filter, type_filter=self.type_filter)

    def set_filters(self, ontology_id: Optional[str] = None, element_type: Optional[ElementType] = None):
        """Change the filters and re-run the current text, debounced like typing."""
        self.ontology_filter = ontology_id or None
        self.type_filter = element_type
        current = self.state.current_query
        if current is not None:
            self.on_input(current.text)

    def on_input(self, text: str):
        """Keystroke in the query input: debounced search."""
        self.queries.submit(self._query(text))

    def perform_search(self, text: str) -> asyncio.Task:
        """Search right away, as the search button or a 'jump to element' link does."""
        self.surface.set_query_text(text)
        return self.queries.submit_now(self._query(text))

    def select(self, element_name: str) -> Optional[asyncio.Task]:
        return self.results.select(element_name)

    def activate_term(self, raw_text: str):
        """A highlighted context term or a node label was clicked."""
        self.term_activated.publish(raw_text)

    def click_node(self, node_id: str) -> Optional[asyncio.Task]:
        graph = self.detail.current_graph
        if graph is None:
            self.logger.warning(f"Node {node_id} clicked with no graph shown")
            return None
        return self.navigation.on_node_clicked(node_id, graph)

    def hover_result(self, element_name: str, cursor: Point):
        """Show the provenance overlay of a result under the cursor."""
        result = next((r for r in self.results.results if r.element_name == element_name), None)
        if result is None or result.source_metadata is None:
            self.tooltip.hide()
            return
        self.tooltip.show(cursor, element_name, result.source_metadata)

    def dismiss_error(self) -> ViewState:
        return self.state.dismiss_error()

    async def settle(self):
        """Wait until no search or detail load is pending."""
        while True:
            await self.queries.flush()
            await self.detail.await_idle()
            if not self.queries.timer.pending and not self.state.is_loading:
                return
