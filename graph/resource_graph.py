"""
In-memory resource graph built from ontology relationships.

Nodes are discovered resources, edges are the relationships returned by
``ontology.related``. Nothing is persisted; the graph is rebuilt from the
resources on every discovery run.
"""

import logging
from collections import Counter
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List

from ontology import IsResource, related, resource_types


@dataclass(frozen=True)
class GraphEdge:
    """Directed edge from a resource to a resource it references"""
    id: str
    source: str
    target: str
    type: str


class ResourceGraph:
    """Graph of discovered resources and their relationships"""

    def __init__(self):
        self.logger = logging.getLogger('cloud_discovery.graph')
        self.nodes: Dict[str, List[str]] = {}
        self.edges: List[GraphEdge] = []
        self._edge_ids = set()

    @classmethod
    def build(cls, resources: Iterable[IsResource]) -> 'ResourceGraph':
        """
        Build a graph from resources.

        Args:
            resources: Resources to add as nodes, in discovery order

        Returns:
            The populated graph
        """
        graph = cls()
        for resource in resources:
            graph.add_resource(resource)
        return graph

    def add_resource(self, resource: IsResource):
        """
        Add a resource as node and its relationships as edges.

        The edge id is ``"<source>-<target>"``; an edge whose id is already
        known is skipped. Targets do not have to be nodes of the graph.

        Args:
            resource: Resource to add
        """
        source = resource.get_id()
        self.nodes[source] = resource_types(resource)

        for relationship in related(resource):
            edge = GraphEdge(
                id=f"{source}-{relationship.value}",
                source=source,
                target=relationship.value,
                type=relationship.property,
            )

            if edge.id in self._edge_ids:
                continue

            self._edge_ids.add(edge.id)
            self.edges.append(edge)

    def dangling_edges(self) -> List[GraphEdge]:
        """Get edges whose target was not discovered, e.g. resources of a filtered out type"""
        return [e for e in self.edges if e.target not in self.nodes]

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get graph statistics.

        Returns:
            Dictionary with node, edge and dangling edge counts and the edge
            counts per relationship property
        """
        return {
            'nodes': len(self.nodes),
            'edges': len(self.edges),
            'dangling_edges': len(self.dangling_edges()),
            'edges_by_type': dict(Counter(e.type for e in self.edges))
        }

    def log_statistics(self):
        """Log graph statistics"""
        stats = self.get_statistics()

        self.logger.info("🕸️  Resource Graph:")
        self.logger.info(f"   Nodes: {stats['nodes']}")
        self.logger.info(f"   Edges: {stats['edges']}")

        if stats['dangling_edges'] > 0:
            self.logger.info(f"   Edges to undiscovered resources: {stats['dangling_edges']}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert the graph to a JSON-compatible dictionary"""
        return {
            'nodes': [{'id': node_id, 'type': types} for node_id, types in self.nodes.items()],
            'edges': [asdict(edge) for edge in self.edges]
        }
