"""
Duplicate Detection for the Connection Roster

Suggests groups of connections that probably describe the same person and
merges them once a user picks the record to keep.

Components:
- Core Engine: three-pass detection (exact, user-name, fuzzy)
- Similarity Scoring: name normalization and edit-distance similarity
- Merge Proposals: merge planning and execution against the record store

Usage:
    from communal.deduplication import DuplicateDetector

    detector = DuplicateDetector()
    suggestions = detector.detect(connections, users)
"""

from .core_engine import DuplicateDetector, find_duplicate_suggestions
from .similarity_scoring import (
    FuzzyNameMatcher,
    MatchThresholds,
    are_names_similar,
    contains_name,
    normalize_name,
    similarity,
)
from .merge_proposals import (
    MergeExecutor,
    MergeProposal,
    MergeResult,
    create_merge_proposal,
)

__all__ = [
    # Core engine
    "DuplicateDetector",
    "find_duplicate_suggestions",
    # Similarity scoring
    "FuzzyNameMatcher",
    "MatchThresholds",
    "are_names_similar",
    "contains_name",
    "normalize_name",
    "similarity",
    # Merge execution
    "MergeExecutor",
    "MergeProposal",
    "MergeResult",
    "create_merge_proposal",
]
