from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from enum import Enum

from .config import settings


class ElementType(Enum):
    """Element type enumeration."""
    CONCEPT = "Concept"
    RELATION = "Relation"
    INSTANCE = "Instance"


def _text(value: Any) -> str:
    """Coerce a wire value to a string, never None."""
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class FileMetadata:
    """Provenance of an ontology or element: where it was loaded from."""
    source_file: str = ""
    directory: str = ""
    file_date: str = ""
    sha256_hash: str = ""
    ontology_file: str = ""
    context_file: str = ""
    processing_date: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["FileMetadata"]:
        """Build from a backend record. Returns None when there is nothing to build."""
        if not isinstance(data, dict):
            return None
        return cls(
            source_file=_text(data.get("source_file")),
            directory=_text(data.get("directory")),
            file_date=_text(data.get("file_date")),
            sha256_hash=_text(data.get("sha256_hash")),
            ontology_file=_text(data.get("ontology_file")),
            context_file=_text(data.get("context_file")),
            processing_date=_text(data.get("processing_date")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_file": self.source_file,
            "directory": self.directory,
            "file_date": self.file_date,
            "sha256_hash": self.sha256_hash,
            "ontology_file": self.ontology_file,
            "context_file": self.context_file,
            "processing_date": self.processing_date,
        }


@dataclass(frozen=True)
class Query:
    """A search request as typed by the user."""
    text: str
    ontology_filter: Optional[str] = None
    type_filter: Optional[ElementType] = None
    page: int = 1
    per_page: int = settings.results_per_page

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    def to_params(self) -> Dict[str, str]:
        """Query string parameters for the search endpoint."""
        params = {"q": self.text.strip()}
        if self.ontology_filter:
            params["ontology_id"] = self.ontology_filter
        if self.type_filter is not None:
            params["element_type"] = self.type_filter.value
        params["page"] = str(self.page)
        params["per_page"] = str(self.per_page)
        return params


@dataclass(frozen=True)
class SearchResult:
    """Represents a search result."""
    element_name: str
    description: str = ""
    element_type: str = ""
    ontology_id: str = ""
    source_metadata: Optional[FileMetadata] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResult":
        return cls(
            element_name=_text(data.get("ElementName")),
            description=_text(data.get("Description")),
            element_type=_text(data.get("ElementType")),
            ontology_id=_text(data.get("OntologyID")),
            source_metadata=FileMetadata.from_dict(data.get("Source")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "element_name": self.element_name,
            "description": self.description,
            "element_type": self.element_type,
            "ontology_id": self.ontology_id,
            "source_metadata": self.source_metadata.to_dict() if self.source_metadata else None,
        }


@dataclass(frozen=True)
class Context:
    """A textual excerpt around one occurrence of an element."""
    before_tokens: List[str] = field(default_factory=list)
    after_tokens: List[str] = field(default_factory=list)
    element_text: str = ""
    position: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Context":
        return cls(
            before_tokens=[_text(token) for token in data.get("before") or []],
            after_tokens=[_text(token) for token in data.get("after") or []],
            element_text=_text(data.get("element")),
            position=int(data.get("position") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "before": list(self.before_tokens),
            "after": list(self.after_tokens),
            "element": self.element_text,
            "position": self.position,
        }


@dataclass(frozen=True)
class ElementDetail:
    """Full description of one element."""
    name: str
    type: str = ""
    description: str = ""
    positions: List[int] = field(default_factory=list)
    contexts: List[Context] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementDetail":
        contexts = data.get("Contexts") or []
        return cls(
            name=_text(data.get("Name")),
            type=_text(data.get("Type")),
            description=_text(data.get("Description")),
            positions=[int(position) for position in data.get("Positions") or []],
            contexts=[Context.from_dict(ctx) for ctx in contexts if isinstance(ctx, dict)],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "positions": list(self.positions),
            "contexts": [ctx.to_dict() for ctx in self.contexts],
        }


@dataclass(frozen=True)
class Relation:
    """A directed, typed edge between two elements, joined by name."""
    source: str
    type: str
    target: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Relation":
        return cls(
            source=_text(data.get("Source")),
            type=_text(data.get("Type")),
            target=_text(data.get("Target")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"source": self.source, "type": self.type, "target": self.target}


@dataclass(frozen=True)
class Ontology:
    """An ontology known to the backend."""
    id: str
    name: str
    source: Optional[FileMetadata] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ontology":
        return cls(
            id=_text(data.get("id", data.get("ID"))),
            name=_text(data.get("name", data.get("Name"))),
            source=FileMetadata.from_dict(data.get("Source")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source.to_dict() if self.source else None,
        }


@dataclass(frozen=True)
class GraphNode:
    """Represents a node in the relation graph."""
    id: str
    name: str
    is_focus: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"id": self.id, "name": self.name, "group": 1 if self.is_focus else 2}


@dataclass(frozen=True)
class GraphEdge:
    """Represents an edge in the relation graph."""
    source_id: str
    target_id: str
    label: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"source": self.source_id, "target": self.target_id, "type": self.label}


@dataclass
class GraphModel:
    """Nodes and edges ready for a rendering surface."""
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    def name_for(self, node_id: str) -> Optional[str]:
        """Reverse lookup from node id to element name."""
        for node in self.nodes:
            if node.id == node_id:
                return node.name
        return None

    def node_for_name(self, name: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    @property
    def focus(self) -> Optional[GraphNode]:
        return next((node for node in self.nodes if node.is_focus), None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the node/link shape force-directed renderers consume."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [edge.to_dict() for edge in self.edges],
        }


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class OverlayState:
    """Where the metadata overlay is and what it shows."""
    target: str
    metadata: Optional[FileMetadata]
    left: float
    top: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "target": self.target,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "left": self.left,
            "top": self.top,
            "width": self.width,
            "height": self.height,
        }
