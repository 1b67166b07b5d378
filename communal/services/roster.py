"""Roster service: the add/merge/visualize flows over the record store."""

import logging
import re
from typing import Dict, Iterable, List, Optional, Set

from ..categories import assign_category_colors, category_options, normalize_category
from ..deduplication import (
    DuplicateDetector,
    MatchThresholds,
    MergeExecutor,
    MergeResult,
    create_merge_proposal,
)
from ..errors import ValidationError
from ..logging_config import Timer, log_context, log_performance
from ..models import Config, Connection, DuplicateSuggestion, NetworkGraph, User
from ..network import NetworkGraphBuilder

logger = logging.getLogger(__name__)

_BULK_SPLIT_RE = re.compile(r"[\n,]")


def parse_bulk_names(text: str) -> List[str]:
    """Split pasted names on newlines and commas, dropping blanks."""
    if not text or not text.strip():
        return []
    return [name.strip() for name in _BULK_SPLIT_RE.split(text) if name.strip()]


def _clean_categories(categories: Iterable[str]) -> List[str]:
    cleaned: List[str] = []
    for category in categories:
        if not category or not category.strip():
            continue
        value = normalize_category(category)
        if value not in cleaned:
            cleaned.append(value)
    return cleaned


class RosterService:
    """
    Orchestrates roster operations.

    Every read recomputes derived data (suggestions, graph) from a fresh
    snapshot of the store; nothing is patched incrementally.
    """

    def __init__(self, store, config: Optional[Config] = None):
        """Initialize the service.

        Args:
            store: Record store exposing ``connections`` and ``users`` repositories
            config: Loaded configuration; defaults when omitted
        """
        self.store = store
        self.config = config or Config()

        detection = self.config.detection
        self.detector = DuplicateDetector(
            MatchThresholds(
                fuzzy_cutoff=detection.fuzzy_cutoff,
                min_match_length=detection.min_match_length,
                similar_ratio=detection.similar_ratio,
                length_tolerance=detection.length_tolerance,
            )
        )
        self.graph_builder = NetworkGraphBuilder(self.config.network)
        self.merge_executor = MergeExecutor(self.store.connections)

        self._dismissed: Set[str] = set()

    def _on_change(self) -> None:
        # Dismissals only last until the data changes.
        self._dismissed.clear()

    # Users

    def list_users(self) -> List[User]:
        return self.store.users.list_all()

    def create_user(self, name: str) -> User:
        """Create a user and make them the current user."""
        if not name or not name.strip():
            raise ValidationError("User name cannot be empty", field="name", value=name)

        user = self.store.users.create({"name": name.strip()})
        self.store.set_current_user(user)
        self._on_change()
        logger.info(f"Created user {user.name} ({user.id})")
        return user

    def select_user(self, user: Optional[User]) -> None:
        self.store.set_current_user(user)

    def current_user(self) -> Optional[User]:
        """The remembered user, refreshed from the stored users.

        A remembered user that no longer exists is forgotten.
        """
        remembered = self.store.get_current_user()
        if remembered is None:
            return None

        match = next((u for u in self.list_users() if u.id == remembered.id), None)
        if match is None:
            return None
        if match.name != remembered.name:
            self.store.set_current_user(match)
        return match

    def _require_user(self) -> User:
        user = self.current_user()
        if user is None:
            raise ValidationError("Please select or create a user first", field="user")
        return user

    # Connections

    def list_connections(self) -> List[Connection]:
        return self.store.connections.list_all()

    def add_connection(self, name: str, categories: List[str]) -> Connection:
        """Add one connection authored by the current user."""
        user = self._require_user()
        categories = _clean_categories(categories)

        if not name or not name.strip() or not categories:
            raise ValidationError(
                "Please enter a name and select at least one category",
                field="name" if categories else "categories",
            )

        connection = self.store.connections.create(
            {
                "name": name.strip(),
                "category": categories[0],
                "categories": categories,
                "mutual_connections": [],
                "user_id": user.id,
                "user_name": user.name,
            }
        )
        self._on_change()
        return connection

    def bulk_add(self, text: str, categories: List[str]) -> List[Connection]:
        """Add every name in a pasted block with the same categories."""
        user = self._require_user()
        categories = _clean_categories(categories)
        if not categories:
            raise ValidationError(
                "Please select at least one category for all names", field="categories"
            )

        names = parse_bulk_names(text)
        if not names:
            raise ValidationError("Please enter at least one name", field="names")

        created = [
            self.store.connections.create(
                {
                    "name": name,
                    "category": categories[0],
                    "categories": categories,
                    "mutual_connections": [],
                    "user_id": user.id,
                    "user_name": user.name,
                }
            )
            for name in names
        ]
        self._on_change()
        logger.info(f"Bulk added {len(created)} connection(s) for {user.name}")
        return created

    def delete_connection(self, connection_id: str) -> None:
        self.store.connections.delete(connection_id)
        self._on_change()

    # Duplicates

    def suggestions(self) -> List[DuplicateSuggestion]:
        """Current duplicate suggestions, minus dismissed ones."""
        connections = self.list_connections()
        users = self.list_users()

        with Timer() as timer:
            suggestions = self.detector.detect(connections, users)
        log_performance(
            logger, "duplicate detection", timer.duration_ms,
            connections=len(connections), suggestions=len(suggestions),
        )

        return [s for s in suggestions if s.name not in self._dismissed]

    def dismiss(self, suggestion_name: str) -> None:
        self._dismissed.add(suggestion_name)

    def merge(self, suggestion: DuplicateSuggestion, primary_id: str) -> MergeResult:
        """Merge a suggestion's matches into the chosen record."""
        if not suggestion.matches:
            return MergeResult(success=False, errors=["Nothing to merge"])

        user = self.current_user()
        with log_context(user_id=user.id if user else None, suggestion=suggestion.name):
            proposal = create_merge_proposal(suggestion, primary_id)
            result = self.merge_executor.execute(proposal)

        if result.success:
            self._on_change()
        return result

    # Graph and categories

    def network(self) -> NetworkGraph:
        return self.graph_builder.build(self.list_connections(), self.current_user())

    def category_options(self, extra: Iterable[str] = ()) -> List[str]:
        return category_options(self.list_connections(), extra)

    def category_colors(self) -> Dict[str, str]:
        return assign_category_colors(self.category_options())
