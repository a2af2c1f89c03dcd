import asyncio
from dataclasses import replace
from typing import Optional, Set

from ..config import settings
from ..errors import ExplorerError
from ..state import LoadingTracker, UIState, ViewState
from ..types import Query
from ..utils.logger import app_logger
from ..utils.timer import DebounceTimer

SEARCH_ERROR_MESSAGE = "An error occurred during the search."
EMPTY_QUERY_PROMPT = "Type a term to search."


class QueryController:
    """Debounces queries, dispatches searches and drops stale responses.

    Every dispatch takes the next token. A response is applied only while its
    token is still the latest one dispatched, so a slow reply to an old query
    can never replace the results of a newer one.
    """

    def __init__(self, api, state: UIState, surface, results_view, loading: LoadingTracker,
                 debounce_seconds: Optional[float] = None):
        self.logger = app_logger.bind(component="query_controller")
        self.api = api
        self.state = state
        self.surface = surface
        self.results_view = results_view
        self.loading = loading
        delay = settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        self.timer = DebounceTimer(delay)
        self._token = 0
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def latest_token(self) -> int:
        return self._token

    def submit(self, query: Query):
        """Queue ``query``; it runs once input has been quiet for the debounce interval."""
        self.state.current_query = query
        self.timer.schedule(self._dispatch, query)

    def submit_now(self, query: Query) -> asyncio.Task:
        """Run ``query`` immediately, superseding anything pending or in flight."""
        self.timer.cancel()
        self.state.current_query = query
        return self._dispatch(query)

    def next_page(self) -> Optional[asyncio.Task]:
        query = self.state.current_query
        if query is None or query.is_blank:
            return None
        return self.submit_now(replace(query, page=query.page + 1))

    def previous_page(self) -> Optional[asyncio.Task]:
        query = self.state.current_query
        if query is None or query.is_blank or query.page <= 1:
            return None
        return self.submit_now(replace(query, page=query.page - 1))

    async def flush(self):
        """Wait for the pending debounced query and every search in flight."""
        await self.timer.wait()
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    def _dispatch(self, query: Query) -> asyncio.Task:
        self._token += 1
        token = self._token
        self.state.pending_request_token = token
        task = asyncio.ensure_future(self._run(query, token))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def _is_latest(self, token: int) -> bool:
        return token == self._token

    async def _run(self, query: Query, token: int):
        if query.is_blank:
            self.logger.debug("Blank query, not contacting the backend")
            self.surface.show_prompt(EMPTY_QUERY_PROMPT)
            self.results_view.set_results([])
            return

        with self.loading.hold():
            self.state.enter(ViewState.SEARCHING)
            try:
                results = await self.api.search(query)
            except ExplorerError as e:
                if not self._is_latest(token):
                    self.logger.debug(f"Ignoring failure of superseded search #{token}: {e}")
                    return
                self.logger.error(f"Search for '{query.text}' failed: {e}")
                self.results_view.clear()
                self.state.fail(SEARCH_ERROR_MESSAGE)
                self.surface.show_error(SEARCH_ERROR_MESSAGE)
                return

            if not self._is_latest(token):
                self.logger.debug(f"Discarding stale results of search #{token} ('{query.text}')")
                return

            self.logger.info(f"Search '{query.text}' returned {len(results)} results")
            self.results_view.set_results(results)
