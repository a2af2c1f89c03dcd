import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from ontoexplorer.errors import NotFound
from ontoexplorer.session import ExplorerSession
from ontoexplorer.types import (
    Context,
    ElementDetail,
    FileMetadata,
    Ontology,
    Relation,
    SearchResult,
)


class FakeOntologyAPI:
    """In-memory stand-in for OntologyAPIClient.

    Any call can be held back with ``hold(kind, key)`` until the returned
    event is set, which lets tests settle requests in any order.
    """

    def __init__(self):
        self.search_results: Dict[str, List[SearchResult]] = {}
        self.details: Dict[str, ElementDetail] = {}
        self.relations: Dict[str, List[Relation]] = {}
        self.errors: Dict[Tuple[str, str], BaseException] = {}
        self.ontologies: List[Ontology] = []
        self.metadata: Dict[str, FileMetadata] = {}
        self.uploads: List[Tuple[Any, Any, Any]] = []
        self.calls: List[Tuple[str, Any]] = []
        self._gates: Dict[Tuple[str, str], asyncio.Event] = {}

    def hold(self, kind: str, key: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[(kind, key)] = gate
        return gate

    def fail(self, kind: str, key: str, error: BaseException):
        self.errors[(kind, key)] = error

    def calls_of(self, kind: str) -> List[Any]:
        return [argument for name, argument in self.calls if name == kind]

    async def _settle(self, kind: str, key: str):
        gate = self._gates.get((kind, key))
        if gate is not None:
            await gate.wait()
        error = self.errors.get((kind, key))
        if error is not None:
            raise error

    async def search(self, query):
        self.calls.append(("search", query))
        await self._settle("search", query.text)
        return list(self.search_results.get(query.text, []))

    async def get_element_details(self, element_name: str) -> ElementDetail:
        self.calls.append(("detail", element_name))
        await self._settle("detail", element_name)
        if element_name not in self.details:
            raise NotFound(f"{element_name} not found")
        return self.details[element_name]

    async def get_element_relations(self, element_name: str) -> List[Relation]:
        self.calls.append(("relations", element_name))
        await self._settle("relations", element_name)
        return list(self.relations.get(element_name, []))

    async def list_ontologies(self) -> List[Ontology]:
        self.calls.append(("ontologies", None))
        await self._settle("ontologies", "")
        return list(self.ontologies)

    async def get_ontology_metadata(self, ontology_id: str) -> Optional[FileMetadata]:
        self.calls.append(("metadata", ontology_id))
        await self._settle("metadata", ontology_id)
        if ontology_id not in self.metadata:
            raise NotFound(f"no metadata for {ontology_id}")
        return self.metadata[ontology_id]

    async def upload_ontology(self, ontology_file, metadata_file, context_file=None):
        self.calls.append(("upload", ontology_file))
        await self._settle("upload", str(ontology_file))
        self.uploads.append((ontology_file, metadata_file, context_file))
        self.ontologies.append(Ontology(id=f"uploaded-{len(self.uploads)}", name=str(ontology_file)))
        return {"message": "Ontology loaded successfully"}


class RecordingSurface:
    """Rendering surface that remembers what it was asked to show."""

    def __init__(self):
        self.events: List[Tuple[str, Any]] = []
        self.results: Optional[List[SearchResult]] = None
        self.status: Optional[str] = None
        self.selected: Optional[str] = None
        self.detail: Optional[ElementDetail] = None
        self.contexts = None
        self.graph = None
        self.errors: List[str] = []
        self.prompts: List[str] = []
        self.query_text: Optional[str] = None
        self.loading_visible = False
        self.loading_shown = 0
        self.overlay = None
        self.ontology_groups = None

    def render_results(self, results, status):
        self.events.append(("results", status))
        self.results = list(results)
        self.status = status

    def mark_selected(self, element_name):
        self.events.append(("selected", element_name))
        self.selected = element_name

    def render_detail(self, detail):
        self.events.append(("detail", detail.name))
        self.detail = detail

    def render_contexts(self, contexts):
        self.events.append(("contexts", len(contexts)))
        self.contexts = list(contexts)

    def render_graph(self, graph):
        self.events.append(("graph", graph.focus.name if graph.focus else None))
        self.graph = graph

    def show_loading(self):
        self.events.append(("loading", True))
        self.loading_visible = True
        self.loading_shown += 1

    def hide_loading(self):
        self.events.append(("loading", False))
        self.loading_visible = False

    def show_error(self, message):
        self.events.append(("error", message))
        self.errors.append(message)

    def show_prompt(self, message):
        self.events.append(("prompt", message))
        self.prompts.append(message)

    def set_query_text(self, text):
        self.events.append(("query_text", text))
        self.query_text = text

    def render_overlay(self, overlay):
        self.events.append(("overlay", overlay.target))
        self.overlay = overlay

    def hide_overlay(self):
        self.events.append(("overlay", None))
        self.overlay = None

    def render_ontologies(self, groups):
        self.events.append(("ontologies", len(groups)))
        self.ontology_groups = groups

    @property
    def result_names(self) -> List[str]:
        return [r.element_name for r in self.results or []]


@pytest.fixture
def sample_metadata() -> FileMetadata:
    """Sample provenance metadata."""
    return FileMetadata(
        source_file="genes.owl",
        directory="/data/ontologies",
        file_date="2024-03-01T10:00:00Z",
        sha256_hash="9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
        ontology_file="genes.tsv",
        context_file="genes_context.json",
        processing_date="2024-03-02T08:30:00Z",
    )


@pytest.fixture
def fake_api(sample_metadata) -> FakeOntologyAPI:
    """Fake backend preloaded with a small gene ontology."""
    api = FakeOntologyAPI()
    api.search_results["gene"] = [
        SearchResult(element_name="Gene", description="A unit of heredity", element_type="Concept",
                     ontology_id="onto-1", source_metadata=sample_metadata),
        SearchResult(element_name="GeneExpression", description="Process of making a gene product",
                     element_type="Concept", ontology_id="onto-1"),
        SearchResult(element_name="GeneFamily", description="Set of related genes", element_type="Concept",
                     ontology_id="onto-1"),
    ]
    api.search_results["protein"] = [
        SearchResult(element_name="Protein", description="A macromolecule", element_type="Concept"),
    ]
    api.details["Gene"] = ElementDetail(name="Gene", type="Concept", description="A unit of heredity",
                                        positions=[12, 40])
    api.details["GeneExpression"] = ElementDetail(
        name="GeneExpression",
        type="Concept",
        description="Process of making a gene product",
        positions=[3],
        contexts=[Context(before_tokens=["regulated", "geneexpression", "drives"], after_tokens=["of", "Protein"],
                          element_text="GeneExpression", position=3)],
    )
    api.details["GeneFamily"] = ElementDetail(name="GeneFamily", type="Concept")
    api.details["Protein"] = ElementDetail(name="Protein", type="Concept")
    api.relations["GeneExpression"] = [
        Relation("GeneExpression", "is_a", "Process"),
        Relation("GeneExpression", "part_of", "Transcription"),
        Relation("Process", "is_a", "Transcription"),
    ]
    api.ontologies = [
        Ontology(id="onto-1", name="Genes"),
        Ontology(id="onto-2", name="Proteins"),
    ]
    api.metadata["onto-1"] = sample_metadata
    return api


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def explorer(fake_api, surface) -> ExplorerSession:
    """Session with a short debounce so tests stay fast."""
    return ExplorerSession(fake_api, surface, debounce_seconds=0.05)
