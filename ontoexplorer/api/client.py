import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union
from urllib.parse import quote, urlencode

import aiohttp

from ..config import settings
from ..errors import NotFound, ProtocolError, TransportError, ValidationError
from ..types import ElementDetail, FileMetadata, Ontology, Query, Relation, SearchResult
from ..utils.logger import app_logger

T = TypeVar("T")


class OntologyAPIClient:
    """Async client for the ontology backend.

    Failures come out as the explorer's error types: ``TransportError`` for
    network/HTTP trouble and timeouts, ``NotFound`` for 404, ``ProtocolError``
    for payloads of the wrong shape.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        self.logger = app_logger.bind(component="api_client")
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={
                    'Accept': 'application/json',
                    'User-Agent': 'ontoexplorer'
                }
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _require_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("OntologyAPIClient used outside 'async with'")
        return self.session

    async def _request_json(self, method: str, path: str, **kwargs) -> Any:
        """Send a request and decode the JSON body, mapping failures to explorer errors."""
        url = self._url(path)
        session = self._require_session()
        try:
            async with session.request(method, url, **kwargs) as response:
                if response.status == 404:
                    raise NotFound(f"{method} {path} not found", status=404)
                if response.status >= 400:
                    raise TransportError(f"{method} {path} failed with HTTP {response.status}",
                                         status=response.status)
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ProtocolError(f"{method} {path} returned invalid JSON: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"Request {method} {path} failed: {e!r}")
            raise TransportError(f"{method} {path} failed: {e!r}") from e

    async def _get_list(self, path: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        data = await self._request_json("GET", path, params=params)
        if not isinstance(data, list):
            self.logger.error(f"Expected an array from {path}, got {type(data).__name__}")
            raise ProtocolError(f"Unexpected response format from {path}")
        if not all(isinstance(item, dict) for item in data):
            raise ProtocolError(f"Unexpected item in array from {path}")
        return data

    def _parse(self, what: str, build: Callable[[], T]) -> T:
        """Run a wire-to-record conversion, reporting malformed fields as protocol errors."""
        try:
            return build()
        except (TypeError, ValueError, AttributeError) as e:
            self.logger.error(f"Malformed payload for {what}: {e}")
            raise ProtocolError(f"Malformed payload for {what}: {e}") from e

    async def list_ontologies(self) -> List[Ontology]:
        """List ontologies known to the backend."""
        data = await self._get_list("/ontologies")
        return self._parse("/ontologies", lambda: [Ontology.from_dict(item) for item in data])

    async def get_ontology_metadata(self, ontology_id: str) -> Optional[FileMetadata]:
        """Fetch the source metadata of one ontology."""
        data = await self._request_json("GET", f"/ontologies/{quote(ontology_id, safe='')}/metadata")
        if not isinstance(data, dict):
            raise ProtocolError(f"Unexpected metadata format for ontology {ontology_id}")
        return self._parse(f"metadata of ontology {ontology_id}", lambda: FileMetadata.from_dict(data))

    async def search(self, query: Query) -> List[SearchResult]:
        """Run a search. The result order is the backend's relevance order."""
        self.logger.debug(f"Searching for '{query.text}' (page {query.page})")
        data = await self._get_list("/search", params=query.to_params())
        return self._parse("/search", lambda: [SearchResult.from_dict(item) for item in data])

    async def get_element_details(self, element_name: str) -> ElementDetail:
        data = await self._request_json("GET", f"/elements/details/{quote(element_name, safe='')}")
        if not isinstance(data, dict):
            raise ProtocolError(f"Unexpected detail format for element {element_name}")
        detail = self._parse(f"details of element {element_name}", lambda: ElementDetail.from_dict(data))
        if not detail.name:
            return ElementDetail(
                name=element_name,
                type=detail.type,
                description=detail.description,
                positions=detail.positions,
                contexts=detail.contexts,
            )
        return detail

    async def get_element_relations(self, element_name: str) -> List[Relation]:
        """Relations of an element. A 404 means the element has none."""
        try:
            data = await self._get_list(f"/elements/relations/{quote(element_name, safe='')}")
        except NotFound:
            self.logger.debug(f"No relations found for element {element_name}")
            return []
        return self._parse(f"relations of element {element_name}", lambda: [Relation.from_dict(item) for item in data])

    async def upload_ontology(self, ontology_file: Union[str, Path], metadata_file: Union[str, Path],
                              context_file: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """Upload an ontology with its metadata and, optionally, its context file."""
        files = {"ontologyFile": ontology_file, "metadataFile": metadata_file}
        if context_file is not None:
            files["contextFile"] = context_file

        form = aiohttp.FormData()
        for field_name, file_path in files.items():
            if not file_path:
                raise ValidationError(f"Missing required file: {field_name}")
            path = Path(file_path)
            if not path.is_file():
                raise ValidationError(f"File not found for {field_name}: {path}")
            form.add_field(field_name, path.read_bytes(), filename=path.name,
                           content_type="application/octet-stream")

        self.logger.info(f"Uploading ontology {Path(ontology_file).name}")
        data = await self._request_json("POST", "/ontologies/load", data=form)
        if not isinstance(data, dict):
            return {"message": str(data)}
        return data

    def view_source_url(self, path: str) -> str:
        """URL of the source document viewer for ``path``."""
        return f"{self._url('/view-source')}?{urlencode({'path': path})}"
