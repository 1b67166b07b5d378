"""
Communal Networks

Catalog the people a community knows, tag them with groups, keep the roster
free of duplicates and visualize the resulting person/group network.

Usage:
    from communal import DuplicateDetector, build_network_data

    suggestions = DuplicateDetector().detect(connections, users)
    graph = build_network_data(connections, current_user)
"""

from .models import (
    Confidence,
    Connection,
    DuplicateSuggestion,
    NetworkGraph,
    NetworkLink,
    NetworkNode,
    NodeType,
    User,
)
from .categories import assign_category_colors, connection_categories, normalize_category
from .deduplication import DuplicateDetector, find_duplicate_suggestions, similarity
from .network import NetworkGraphBuilder, build_network_data

__all__ = [
    "Confidence",
    "Connection",
    "DuplicateSuggestion",
    "NetworkGraph",
    "NetworkLink",
    "NetworkNode",
    "NodeType",
    "User",
    "assign_category_colors",
    "connection_categories",
    "normalize_category",
    "DuplicateDetector",
    "find_duplicate_suggestions",
    "similarity",
    "NetworkGraphBuilder",
    "build_network_data",
]

__version__ = "1.0.0"
