"""NetworkX conversion and summary statistics for built graphs."""

import logging
from typing import Any, Dict

import networkx as nx

from ..models import NetworkGraph, NodeType

logger = logging.getLogger(__name__)


def to_networkx(graph: NetworkGraph) -> nx.Graph:
    """Convert a NetworkGraph to an undirected weighted networkx graph.

    Node attributes mirror the renderer payload; link values become the
    ``weight`` edge attribute.
    """
    g = nx.Graph()

    for node in graph.nodes:
        g.add_node(
            node.id,
            name=node.name,
            category=node.category,
            group=node.group,
            node_type=node.node_type,
            member_count=node.member_count,
        )

    for link in graph.links:
        if not g.has_node(link.source) or not g.has_node(link.target):
            logger.warning(f"Skipping link with unknown endpoint: {link.source} -> {link.target}")
            continue
        g.add_edge(link.source, link.target, weight=link.value)

    return g


def graph_summary(graph: NetworkGraph) -> Dict[str, Any]:
    """Counts per node kind, link count and connected components."""
    g = to_networkx(graph)
    return {
        "nodes": {kind.value: len(graph.nodes_of_type(kind)) for kind in NodeType},
        "links": len(graph.links),
        "components": nx.number_connected_components(g) if len(g) else 0,
    }
