from typing import Dict, List, Optional, Protocol, Sequence

from .detail.contexts import HighlightedContext
from .types import ElementDetail, GraphModel, Ontology, OverlayState, SearchResult
from .utils.logger import app_logger


class RenderingSurface(Protocol):
    """What the pipeline needs from a view layer."""

    def render_results(self, results: Sequence[SearchResult], status: str) -> None:
        """Replace the result list. ``status`` is one of not_searched, empty, populated."""
        ...

    def mark_selected(self, element_name: Optional[str]) -> None:
        ...

    def render_detail(self, detail: ElementDetail) -> None:
        ...

    def render_contexts(self, contexts: Sequence[HighlightedContext]) -> None:
        ...

    def render_graph(self, graph: GraphModel) -> None:
        ...

    def show_loading(self) -> None:
        ...

    def hide_loading(self) -> None:
        ...

    def show_error(self, message: str) -> None:
        ...

    def show_prompt(self, message: str) -> None:
        """Inline hint, not an alert."""
        ...

    def set_query_text(self, text: str) -> None:
        ...

    def render_overlay(self, overlay: OverlayState) -> None:
        ...

    def hide_overlay(self) -> None:
        ...

    def render_ontologies(self, groups: Dict[str, List[Ontology]]) -> None:
        ...


class ConsoleSurface:
    """Plain-text surface used by the console front-end."""

    def __init__(self, out=None):
        self.logger = app_logger.bind(component="console_surface")
        self.out = out

    def _write(self, text: str = ""):
        print(text, file=self.out)

    def render_results(self, results: Sequence[SearchResult], status: str) -> None:
        if status == "empty":
            self._write("No results.")
            return
        for index, result in enumerate(results, start=1):
            line = f"{index:>3}. {result.element_name}"
            if result.element_type:
                line += f" [{result.element_type}]"
            if result.description:
                line += f" - {result.description}"
            self._write(line)

    def mark_selected(self, element_name: Optional[str]) -> None:
        if element_name:
            self._write(f"> {element_name}")

    def render_detail(self, detail: ElementDetail) -> None:
        self._write(f"== {detail.name} ({detail.type or 'unknown type'})")
        if detail.description:
            self._write(detail.description)
        if detail.positions:
            self._write("Positions: " + ", ".join(str(p) for p in detail.positions))

    def render_contexts(self, contexts: Sequence[HighlightedContext]) -> None:
        if not contexts:
            self._write("No context available.")
            return
        for index, context in enumerate(contexts, start=1):
            self._write(f"-- Context {index} (position {context.position})")
            self._write("   " + context.to_text())

    def render_graph(self, graph: GraphModel) -> None:
        if not graph.edges:
            self._write("No relations available for this element.")
            return
        for edge in graph.edges:
            source = graph.name_for(edge.source_id)
            target = graph.name_for(edge.target_id)
            self._write(f"   {source} --{edge.label}--> {target}")

    def show_loading(self) -> None:
        self.logger.debug("Loading...")

    def hide_loading(self) -> None:
        self.logger.debug("Loading finished")

    def show_error(self, message: str) -> None:
        self._write(f"! {message}")

    def show_prompt(self, message: str) -> None:
        self._write(message)

    def set_query_text(self, text: str) -> None:
        self._write(f"search: {text}")

    def render_overlay(self, overlay: OverlayState) -> None:
        metadata = overlay.metadata
        if metadata is not None:
            self._write(f"[{overlay.target}] {metadata.source_file} sha256={metadata.sha256_hash}")

    def hide_overlay(self) -> None:
        pass

    def render_ontologies(self, groups: Dict[str, List[Ontology]]) -> None:
        if not groups:
            self._write("No ontologies loaded.")
            return
        for source_file, ontologies in groups.items():
            names = ", ".join(ontology.name for ontology in ontologies)
            self._write(f"{source_file}: {names}")
