import asyncio
from typing import List, Optional, Set

from ..errors import ExplorerError
from ..graph.builder import GraphModelBuilder
from ..state import LoadingTracker, UIState, ViewState
from ..types import ElementDetail, GraphModel, Relation
from ..utils.logger import app_logger
from .contexts import highlight_contexts

DETAIL_ERROR_MESSAGE = "Unable to load the element details."


class DetailCoordinator:
    """Loads an element's detail and relations and shows them together.

    Both requests run concurrently and nothing is rendered until both have
    settled, so the detail pane and the graph always describe the same
    element. A load superseded by a newer one is dropped when it settles.
    """

    def __init__(self, api, state: UIState, surface, loading: LoadingTracker,
                 graph_builder: Optional[GraphModelBuilder] = None):
        self.logger = app_logger.bind(component="detail_coordinator")
        self.api = api
        self.state = state
        self.surface = surface
        self.loading = loading
        self.graph_builder = graph_builder or GraphModelBuilder()
        self.current_detail: Optional[ElementDetail] = None
        self.current_graph: Optional[GraphModel] = None
        self._token = 0
        self._in_flight: Set[asyncio.Task] = set()

    def load(self, element_name: str) -> asyncio.Task:
        """Start loading ``element_name``, superseding any load in flight."""
        self._token += 1
        task = asyncio.ensure_future(self._load(element_name, self._token))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def await_idle(self):
        """Wait for every load in flight."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def _is_latest(self, token: int) -> bool:
        return token == self._token

    async def _fetch_relations(self, element_name: str) -> List[Relation]:
        try:
            return await self.api.get_element_relations(element_name)
        except ExplorerError as e:
            self.logger.warning(f"Relations of {element_name} unavailable, showing none: {e}")
            return []

    async def _load(self, element_name: str, token: int):
        with self.loading.hold():
            self.state.enter(ViewState.LOADING_DETAIL)
            detail, relations = await asyncio.gather(
                self.api.get_element_details(element_name),
                self._fetch_relations(element_name),
                return_exceptions=True,
            )

            if not self._is_latest(token):
                self.logger.debug(f"Discarding stale detail load #{token} for {element_name}")
                return

            if isinstance(detail, ExplorerError):
                self.logger.error(f"Error getting details of {element_name}: {detail}")
                self.state.fail(DETAIL_ERROR_MESSAGE)
                self.surface.show_error(DETAIL_ERROR_MESSAGE)
                return
            if isinstance(detail, BaseException):
                raise detail
            if isinstance(relations, BaseException):
                raise relations

            graph = self.graph_builder.build(detail, relations)
            self.current_detail = detail
            self.current_graph = graph

            self.surface.render_detail(detail)
            self.surface.render_contexts(highlight_contexts(detail.contexts, detail.name))
            self.surface.render_graph(graph)
            self.state.enter(ViewState.DETAIL_SHOWN)
            self.logger.info(f"Showing {element_name}: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
