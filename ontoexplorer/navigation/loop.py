import asyncio
import re
from dataclasses import replace
from typing import Optional

from ..events import Observable
from ..types import GraphModel, Query
from ..utils.logger import app_logger

_TAG = re.compile(r"<[^>]*>")


def extract_element_name(raw_text: str) -> str:
    """Clean element name from an activated label.

    Markup is stripped, then only the first line and the first token of it are
    kept: node labels carry the element name first, extra detail after.
    """
    text = _TAG.sub(" ", raw_text or "")
    for line in text.splitlines():
        tokens = line.split()
        if tokens:
            return tokens[0]
    return ""


class NavigationLoop:
    """Turns activated graph nodes and context terms into new searches."""

    def __init__(self, query_controller, state, surface):
        self.logger = app_logger.bind(component="navigation_loop")
        self.query_controller = query_controller
        self.state = state
        self.surface = surface
        self.term_activated = Observable("term_activated", single_consumer=True)
        self.term_activated.subscribe(self.on_term_activated)

    def on_term_activated(self, raw_text: str) -> Optional[asyncio.Task]:
        name = extract_element_name(raw_text)
        if not name:
            self.logger.debug(f"Nothing to search in activated text {raw_text!r}")
            return None
        return self.navigate_to(name)

    def on_node_clicked(self, node_id: str, graph: GraphModel) -> Optional[asyncio.Task]:
        """Search for the element behind a graph node, by its exact name."""
        name = graph.name_for(node_id)
        if not name:
            self.logger.warning(f"Clicked node {node_id} is not in the graph")
            return None
        return self.navigate_to(name)

    def navigate_to(self, name: str) -> asyncio.Task:
        """Show ``name`` in the query input and search for it right away."""
        self.logger.info(f"Navigating to '{name}'")
        self.surface.set_query_text(name)
        current = self.state.current_query
        if current is None:
            query = Query(text=name)
        else:
            query = replace(current, text=name, page=1)
        return self.query_controller.submit_now(query)
