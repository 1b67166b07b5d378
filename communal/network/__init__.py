"""Person/category network graph synthesis."""

from .graph_builder import NetworkGraphBuilder, build_network_data
from .export import graph_summary, to_networkx

__all__ = [
    "NetworkGraphBuilder",
    "build_network_data",
    "graph_summary",
    "to_networkx",
]
