import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..errors import ExplorerError, ValidationError
from ..types import ElementType, Ontology
from ..utils.logger import app_logger

UNKNOWN_SOURCE = "(unknown source)"


def group_by_source(ontologies: List[Ontology]) -> Dict[str, List[Ontology]]:
    """Group ontologies by the file they were loaded from, in first-seen order."""
    groups: Dict[str, List[Ontology]] = {}
    for ontology in ontologies:
        source_file = ontology.source.source_file if ontology.source and ontology.source.source_file else UNKNOWN_SOURCE
        groups.setdefault(source_file, []).append(ontology)
    return groups


class OntologyCatalog:
    """The ontology list offered as a search filter, and ontology uploads."""

    def __init__(self, api, surface=None):
        self.logger = app_logger.bind(component="ontology_catalog")
        self.api = api
        self.surface = surface
        self.ontologies: List[Ontology] = []

    @staticmethod
    def element_types() -> List[str]:
        """Element types offered as a search filter."""
        return [element_type.value for element_type in ElementType]

    async def _enrich(self, ontology: Ontology) -> Ontology:
        if ontology.source is not None:
            return ontology
        try:
            metadata = await self.api.get_ontology_metadata(ontology.id)
        except ExplorerError as e:
            self.logger.debug(f"No metadata for ontology {ontology.id}: {e}")
            return ontology
        return replace(ontology, source=metadata)

    async def refresh(self, enrich: bool = True) -> List[Ontology]:
        """Reload the ontology list from the backend."""
        ontologies = await self.api.list_ontologies()
        if enrich:
            ontologies = list(await asyncio.gather(*(self._enrich(o) for o in ontologies)))
        self.ontologies = ontologies
        self.logger.info(f"Loaded {len(ontologies)} ontologies")
        if self.surface is not None:
            self.surface.render_ontologies(self.groups())
        return ontologies

    def groups(self) -> Dict[str, List[Ontology]]:
        return group_by_source(self.ontologies)

    def find(self, ontology_id: str) -> Optional[Ontology]:
        return next((o for o in self.ontologies if o.id == ontology_id), None)

    async def upload(self, ontology_file: Union[str, Path], metadata_file: Union[str, Path],
                     context_file: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """Upload an ontology, then reload the list so it shows up."""
        if not ontology_file or not metadata_file:
            raise ValidationError("An ontology file and a metadata file are required")

        response = await self.api.upload_ontology(ontology_file, metadata_file, context_file)
        self.logger.info(f"Ontology uploaded: {response.get('message', response)}")
        await self.refresh()
        return response
