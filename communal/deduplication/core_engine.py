"""
Duplicate Detection Engine

Finds groups of connections that probably describe the same person. Three
passes run in priority order over the same snapshot:

1. exact duplicates: connections whose normalized names are equal
2. user-name matches: same-name connections that also match a user's name
3. fuzzy matches: names within a small edit distance of each other

A normalized name claimed by an earlier pass is never reported again.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from ..models import Confidence, Connection, DuplicateSuggestion, User
from .similarity_scoring import (
    FuzzyNameMatcher,
    MatchThresholds,
    normalize_name,
    strip_whitespace,
)

logger = logging.getLogger(__name__)


def _unique_by_id(records: Iterable) -> List:
    """Keep the first record for each id, in order."""
    seen: Dict[str, object] = {}
    for record in records:
        if record.id not in seen:
            seen[record.id] = record
    return list(seen.values())


class DuplicateDetector:
    """
    Duplicate suggestion engine.

    Stateless apart from its thresholds; ``detect`` is a pure function of
    the snapshot it is given.
    """

    def __init__(self, thresholds: Optional[MatchThresholds] = None):
        """Initialize the detector."""
        self.thresholds = thresholds or MatchThresholds()
        self.matcher = FuzzyNameMatcher(self.thresholds)

    def detect(
        self, connections: List[Connection], users: Optional[List[User]] = None
    ) -> List[DuplicateSuggestion]:
        """
        Build duplicate suggestions for a full snapshot.

        Args:
            connections: Every connection currently stored
            users: Every known user

        Returns:
            Exact groups first, then user-name groups, then fuzzy groups
        """
        if not connections:
            return []

        users = users or []
        processed: Set[str] = set()
        user_map = self._group_users(users)
        groups = self._group_connections(connections)

        suggestions = self._exact_duplicates(groups, user_map, processed)
        exact_count = len(suggestions)

        suggestions.extend(
            self._user_name_matches(connections, user_map, processed)
        )
        user_count = len(suggestions) - exact_count

        suggestions.extend(self._fuzzy_matches(connections, user_map, processed))

        logger.debug(
            f"Duplicate detection over {len(connections)} connections: "
            f"{exact_count} exact, {user_count} user-name, "
            f"{len(suggestions) - exact_count - user_count} fuzzy"
        )

        return suggestions

    def _group_users(self, users: List[User]) -> Dict[str, List[User]]:
        user_map: Dict[str, List[User]] = {}
        for user in users:
            user_map.setdefault(normalize_name(user.name), []).append(user)
        return user_map

    def _group_connections(
        self, connections: List[Connection]
    ) -> Dict[str, List[Connection]]:
        groups: Dict[str, List[Connection]] = {}
        for connection in connections:
            groups.setdefault(normalize_name(connection.name), []).append(connection)
        return groups

    def _exact_duplicates(
        self,
        groups: Dict[str, List[Connection]],
        user_map: Dict[str, List[User]],
        processed: Set[str],
    ) -> List[DuplicateSuggestion]:
        suggestions = []

        for normalized, group in groups.items():
            if normalized in processed or len(group) < 2:
                continue

            unique = _unique_by_id(group)
            if len(unique) < 2:
                continue

            matching_users = user_map.get(normalized, [])
            display_name = unique[0].name
            if matching_users:
                reason = (
                    f'Multiple connections named "{display_name}" and '
                    f"{len(matching_users)} user(s) with the same name exist."
                )
            else:
                reason = f'Multiple connections named "{display_name}" found.'

            suggestions.append(
                DuplicateSuggestion(
                    name=display_name,
                    matches=unique,
                    matching_users=matching_users,
                    confidence=Confidence.HIGH,
                    reason=reason,
                )
            )
            processed.add(normalized)

        return suggestions

    def _user_name_matches(
        self,
        connections: List[Connection],
        user_map: Dict[str, List[User]],
        processed: Set[str],
    ) -> List[DuplicateSuggestion]:
        suggestions = []

        for connection in connections:
            normalized = normalize_name(connection.name)
            if normalized in processed:
                continue

            matching_users = user_map.get(normalized)
            if not matching_users:
                continue

            same_name = [
                c for c in connections if normalize_name(c.name) == normalized
            ]
            # A single connection that happens to share a user's name is
            # not a duplicate on its own.
            if len(same_name) < 2:
                continue

            suggestions.append(
                DuplicateSuggestion(
                    name=connection.name,
                    matches=same_name,
                    matching_users=matching_users,
                    confidence=Confidence.HIGH,
                    reason=(
                        f'Multiple connections named "{connection.name}" match '
                        f"{len(matching_users)} user name(s). "
                        "This might be the same person."
                    ),
                )
            )
            processed.add(normalized)

        return suggestions

    def _fuzzy_matches(
        self,
        connections: List[Connection],
        user_map: Dict[str, List[User]],
        processed: Set[str],
    ) -> List[DuplicateSuggestion]:
        suggestions = []

        for connection in connections:
            normalized = normalize_name(connection.name)
            if normalized in processed:
                continue

            candidates = []
            for match, _score in self.matcher.search(connection.name, connections):
                match_name = normalize_name(match.name)
                if match_name != normalized and match_name not in processed:
                    candidates.append(match)

            if not candidates:
                continue

            members = _unique_by_id([connection] + candidates)
            if len(members) < 2:
                continue

            matching_users = _unique_by_id(
                user
                for member in members
                for user in user_map.get(normalize_name(member.name), [])
            )

            suggestions.append(
                DuplicateSuggestion(
                    name=connection.name,
                    matches=members,
                    matching_users=matching_users,
                    confidence=self._fuzzy_confidence(normalized, members),
                    reason=(
                        f"Similar names found that match {len(matching_users)} user(s)."
                        if matching_users
                        else "Similar names found that might be the same person."
                    ),
                )
            )

            for member in members:
                processed.add(normalize_name(member.name))

        return suggestions

    def _fuzzy_confidence(
        self, normalized: str, members: List[Connection]
    ) -> Confidence:
        """High when every member differs from the source only in spacing."""
        compact = strip_whitespace(normalized)
        if all(
            strip_whitespace(normalize_name(m.name)) == compact for m in members
        ):
            return Confidence.HIGH
        if len(members) == 2:
            return Confidence.MEDIUM
        return Confidence.LOW


def find_duplicate_suggestions(
    connections: List[Connection],
    users: Optional[List[User]] = None,
    thresholds: Optional[MatchThresholds] = None,
) -> List[DuplicateSuggestion]:
    """Run duplicate detection once with the given thresholds."""
    return DuplicateDetector(thresholds).detect(connections, users)
