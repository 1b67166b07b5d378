"""
Merge Proposals and Execution

Turns a duplicate suggestion into a concrete merge (which record survives,
which categories and mutual connections it ends up with) and applies it to
the record store.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from ..categories import connection_categories
from ..errors import StorageError
from ..models import Connection, DuplicateSuggestion

logger = logging.getLogger(__name__)


@dataclass
class MergeProposal:
    """The outcome a merge would produce, before anything is written."""

    primary: Connection
    remove_ids: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    mutual_connections: List[str] = field(default_factory=list)

    @property
    def primary_category(self) -> str:
        return self.categories[0] if self.categories else self.primary.category


@dataclass
class MergeResult:
    """Result of a merge operation."""

    success: bool
    merged: Optional[Connection] = None
    removed_ids: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def create_merge_proposal(
    matches: Union[DuplicateSuggestion, Sequence[Connection]], primary_id: str
) -> MergeProposal:
    """
    Plan a merge of duplicate connections into one record.

    Args:
        matches: A suggestion or the connections to merge
        primary_id: Id of the record to keep; falls back to the first match

    Returns:
        MergeProposal describing the surviving record
    """
    if isinstance(matches, DuplicateSuggestion):
        matches = matches.matches
    matches = list(matches)
    if not matches:
        raise ValueError("Cannot merge an empty group of connections")

    primary = next((m for m in matches if m.id == primary_id), matches[0])

    categories: List[str] = []
    for match in matches:
        for category in connection_categories(match):
            if category not in categories:
                categories.append(category)

    mutuals = {
        name
        for match in matches
        for name in match.mutual_connections
        if name and name != primary.name
    }

    return MergeProposal(
        primary=primary,
        remove_ids=[m.id for m in matches if m.id != primary.id],
        categories=categories,
        mutual_connections=sorted(mutuals, key=lambda n: (n.casefold(), n)),
    )


class MergeExecutor:
    """Applies merge proposals to a connection repository."""

    def __init__(self, repository):
        """Initialize the executor.

        Args:
            repository: Connection repository to write through
        """
        self.repository = repository
        self.stats = {"successful_merges": 0, "failed_merges": 0}

    def execute(self, proposal: MergeProposal) -> MergeResult:
        """Update the surviving record, then delete the others.

        A proposal whose records are no longer all stored is rejected before
        anything is written. Store failures come back as a failed result.
        """
        primary = proposal.primary
        try:
            missing = [
                connection_id
                for connection_id in [primary.id, *proposal.remove_ids]
                if not self.repository.exists(connection_id)
            ]
            if missing:
                self.stats["failed_merges"] += 1
                logger.warning(f"Stale merge for {primary.name}: missing {missing}")
                return MergeResult(
                    success=False,
                    errors=[f"Connection no longer exists: {i}" for i in missing],
                )

            merged = self.repository.update(
                primary.id,
                {
                    "category": proposal.primary_category,
                    "categories": proposal.categories,
                    "mutual_connections": proposal.mutual_connections,
                },
            )
            for connection_id in proposal.remove_ids:
                self.repository.delete(connection_id)
        except StorageError as e:
            self.stats["failed_merges"] += 1
            logger.error(f"Failed to merge duplicates for {primary.name}: {e}")
            return MergeResult(success=False, errors=[str(e)])

        self.stats["successful_merges"] += 1
        logger.info(
            f"Merged {len(proposal.remove_ids)} duplicate(s) into {primary.name} "
            f"({primary.id})"
        )
        return MergeResult(
            success=True, merged=merged, removed_ids=list(proposal.remove_ids)
        )
