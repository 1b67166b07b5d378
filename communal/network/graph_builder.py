"""
Network Graph Builder

Turns flat connection records into the node/link graph drawn by the
force-directed renderer. Besides one node per connection, the graph holds a
synthetic root node for the whole community, one node per category and,
optionally, a node for the viewing user.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from ..categories import connection_categories
from ..models import (
    Connection,
    NetworkConfig,
    NetworkGraph,
    NetworkLink,
    NetworkNode,
    NodeType,
    User,
)

logger = logging.getLogger(__name__)

ROOT_GROUP = -2
USER_GROUP = -1

CATEGORY_ROOT_WEIGHT = 3.0
PERSON_CATEGORY_WEIGHT = 2.0
USER_CATEGORY_WEIGHT = 2.5
USER_ROOT_WEIGHT = 2.0
MUTUAL_WEIGHT = 1.0


def category_node_id(category: str) -> str:
    return f"category:{category}"


def user_node_id(user_id: str) -> str:
    return f"user:{user_id}"


class NetworkGraphBuilder:
    """Builds a fresh NetworkGraph from each connection snapshot."""

    def __init__(self, config: Optional[NetworkConfig] = None):
        self.config = config or NetworkConfig()

    def build(
        self, connections: List[Connection], current_user: Optional[User] = None
    ) -> NetworkGraph:
        """
        Build the graph for a snapshot.

        Args:
            connections: Every stored connection, in display order
            current_user: Viewer to anchor in the graph, if any

        Returns:
            NetworkGraph with root, category, person and user nodes in that order
        """
        normalized = [(c, connection_categories(c)) for c in connections]

        # Category indices follow first appearance across the input order.
        category_index: Dict[str, int] = {}
        member_counts: Dict[str, int] = {}
        for _connection, categories in normalized:
            for category in categories:
                if category not in category_index:
                    category_index[category] = len(category_index)
                member_counts[category] = member_counts.get(category, 0) + 1

        nodes: Dict[str, NetworkNode] = {}
        links: List[NetworkLink] = []
        root_id = self.config.root_id

        if member_counts:
            nodes[root_id] = NetworkNode(
                id=root_id,
                name=self.config.root_label,
                category=self.config.root_label,
                group=ROOT_GROUP,
                node_type=NodeType.ROOT,
            )

        for category, count in member_counts.items():
            node_id = category_node_id(category)
            nodes[node_id] = NetworkNode(
                id=node_id,
                name=category,
                category=category,
                group=category_index[category],
                node_type=NodeType.CATEGORY,
                member_count=count,
            )
            if root_id in nodes:
                links.append(
                    NetworkLink(source=node_id, target=root_id, value=CATEGORY_ROOT_WEIGHT)
                )

        for connection, categories in normalized:
            primary = categories[0]

            nodes[connection.id] = NetworkNode(
                id=connection.id,
                name=connection.name,
                category=primary,
                categories=categories,
                user_id=connection.user_id,
                user_name=connection.user_name,
                group=category_index[primary],
                node_type=NodeType.PERSON,
            )

            for category in categories:
                links.append(
                    NetworkLink(
                        source=connection.id,
                        target=category_node_id(category),
                        value=PERSON_CATEGORY_WEIGHT,
                    )
                )

        links.extend(self._mutual_links(connections))

        if current_user:
            links.extend(self._add_user(nodes, normalized, current_user))

        graph = NetworkGraph(nodes=list(nodes.values()), links=links)
        logger.debug(
            f"Built network graph: {len(graph.nodes)} nodes, {len(graph.links)} links"
        )
        return graph

    def _mutual_links(self, connections: List[Connection]) -> List[NetworkLink]:
        """One link per unordered pair of connections that name each other.

        Mutual connections are stored as names, so a name shared by several
        connections links to all of them.
        """
        by_name: Dict[str, List[Connection]] = {}
        for connection in connections:
            by_name.setdefault(connection.name, []).append(connection)

        seen: Set[Tuple[str, str]] = set()
        links = []
        for connection in connections:
            for mutual_name in connection.mutual_connections:
                for other in by_name.get(mutual_name, []):
                    if other.id == connection.id:
                        continue
                    key = tuple(sorted((connection.id, other.id)))
                    if key in seen:
                        continue
                    seen.add(key)
                    links.append(
                        NetworkLink(
                            source=connection.id, target=other.id, value=MUTUAL_WEIGHT
                        )
                    )
        return links

    def _add_user(
        self,
        nodes: Dict[str, NetworkNode],
        normalized: List[Tuple[Connection, List[str]]],
        user: User,
    ) -> List[NetworkLink]:
        touched: List[str] = []
        for connection, categories in normalized:
            if connection.user_id != user.id:
                continue
            for category in categories:
                if category not in touched:
                    touched.append(category)

        if not touched:
            return []

        node_id = user_node_id(user.id)
        nodes[node_id] = NetworkNode(
            id=node_id,
            name=user.name,
            category="Current User",
            user_id=user.id,
            user_name=user.name,
            group=USER_GROUP,
            node_type=NodeType.USER,
            is_current_user=True,
        )

        links = [
            NetworkLink(
                source=node_id,
                target=category_node_id(category),
                value=USER_CATEGORY_WEIGHT,
            )
            for category in touched
        ]
        if self.config.root_id in nodes:
            links.append(
                NetworkLink(source=node_id, target=self.config.root_id, value=USER_ROOT_WEIGHT)
            )
        return links


def build_network_data(
    connections: List[Connection],
    current_user: Optional[User] = None,
    config: Optional[NetworkConfig] = None,
) -> NetworkGraph:
    """Build the network graph once."""
    return NetworkGraphBuilder(config).build(connections, current_user)
