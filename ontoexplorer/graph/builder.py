"""
Builds the relation graph of a focus element.
"""
import re
from typing import Dict, List, Sequence, Set

from ..types import ElementDetail, GraphEdge, GraphModel, GraphNode, Relation
from ..utils.logger import app_logger

_UNSAFE_CHARS = re.compile(r"[^0-9A-Za-z]")


class NodeIdAllocator:
    """Maps element names to node ids.

    Ids are readable slugs of the name. Two distinct names that fold to the
    same slug get distinct ids: the later one takes a numeric suffix. The same
    name always maps to the same id within one allocator.
    """

    def __init__(self):
        self._ids: Dict[str, str] = {}
        self._taken: Set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._ids

    def id_for(self, name: str) -> str:
        node_id = self._ids.get(name)
        if node_id is not None:
            return node_id

        base = "node_" + _UNSAFE_CHARS.sub("_", name)
        node_id = base
        suffix = 1
        while node_id in self._taken:
            suffix += 1
            node_id = f"{base}_{suffix}"

        self._ids[name] = node_id
        self._taken.add(node_id)
        return node_id


class GraphModelBuilder:
    """Parses relations and builds a graph representation."""

    def __init__(self):
        self.logger = app_logger.bind(component="graph_builder")

    def build(self, focus: ElementDetail, relations: Sequence[Relation]) -> GraphModel:
        """
        Builds the graph around ``focus``.

        The focus node comes first, then every other name in the order it is
        first seen, source before target. Each relation becomes one edge, so
        parallel edges with different labels are all kept.
        """
        allocator = NodeIdAllocator()
        nodes: List[GraphNode] = [GraphNode(id=allocator.id_for(focus.name), name=focus.name, is_focus=True)]
        edges: List[GraphEdge] = []

        for relation in relations:
            endpoint_ids = []
            for name in (relation.source, relation.target):
                if name not in allocator:
                    nodes.append(GraphNode(id=allocator.id_for(name), name=name))
                endpoint_ids.append(allocator.id_for(name))
            edges.append(GraphEdge(source_id=endpoint_ids[0], target_id=endpoint_ids[1], label=relation.type))

        self.logger.debug(f"Built graph for {focus.name}: {len(nodes)} nodes, {len(edges)} edges")
        return GraphModel(nodes=nodes, edges=edges)
