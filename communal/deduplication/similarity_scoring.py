"""
Similarity Scoring

Name normalization and the edit-distance similarity primitive shared by the
fuzzy detection pass and the standalone name-similarity helpers.
"""

import re
import math
from dataclasses import dataclass
from typing import Iterable, List, Tuple, TypeVar

import jellyfish


_WHITESPACE_RE = re.compile(r"\s+")

T = TypeVar("T")


@dataclass
class MatchThresholds:
    """Thresholds for name matching.

    ``fuzzy_cutoff`` is a dissimilarity cutoff on a 0 (identical) to 1
    (completely different) scale; a pair matches when its score is strictly
    below it.
    """

    fuzzy_cutoff: float = 0.3
    min_match_length: int = 3
    similar_ratio: float = 0.7
    length_tolerance: float = 0.3


def normalize_name(name: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return _WHITESPACE_RE.sub(" ", name.lower().strip())


def strip_whitespace(name: str) -> str:
    return _WHITESPACE_RE.sub("", name)


def levenshtein(a: str, b: str) -> int:
    return jellyfish.levenshtein_distance(a, b)


def similarity(a: str, b: str) -> float:
    """Normalized edit similarity in [0, 1]; 1.0 means identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(a, b)) / longest


def dissimilarity(a: str, b: str) -> float:
    """Edit distance over the longer length; 0.0 means identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return levenshtein(a, b) / longest


def are_names_similar(
    name_a: str, name_b: str, thresholds: MatchThresholds = None
) -> bool:
    """Loose check used when suggesting a name while typing.

    Names are similar when they normalize to the same string, when one
    contains the other, or when their lengths are close and their edit
    similarity clears ``similar_ratio``.
    """
    thresholds = thresholds or MatchThresholds()
    norm_a = normalize_name(name_a)
    norm_b = normalize_name(name_b)

    if norm_a == norm_b:
        return True

    if norm_a in norm_b or norm_b in norm_a:
        return True

    shorter, longer = sorted((norm_a, norm_b), key=len)
    max_distance = math.floor(len(shorter) * thresholds.length_tolerance)
    if len(longer) - len(shorter) > max_distance:
        return False

    return similarity(norm_a, norm_b) > thresholds.similar_ratio


def contains_name(name_a: str, name_b: str) -> bool:
    """True when either normalized name is a substring of the other."""
    norm_a = normalize_name(name_a)
    norm_b = normalize_name(name_b)
    return norm_a in norm_b or norm_b in norm_a


class FuzzyNameMatcher:
    """
    Fuzzy search over a fixed collection keyed by a name.

    Scores are dissimilarities on normalized names. Names shorter than
    ``min_match_length`` never match anything, including themselves.
    """

    def __init__(self, thresholds: MatchThresholds = None):
        self.thresholds = thresholds or MatchThresholds()

    def score(self, name_a: str, name_b: str) -> float:
        return dissimilarity(normalize_name(name_a), normalize_name(name_b))

    def is_match(self, name_a: str, name_b: str) -> bool:
        norm_a = normalize_name(name_a)
        norm_b = normalize_name(name_b)

        minimum = self.thresholds.min_match_length
        if len(norm_a) < minimum or len(norm_b) < minimum:
            return False

        return dissimilarity(norm_a, norm_b) < self.thresholds.fuzzy_cutoff

    def search(
        self, query: str, items: Iterable[T], key=lambda item: item.name
    ) -> List[Tuple[T, float]]:
        """Items whose key fuzzy-matches ``query``, best score first.

        Ties keep input order.
        """
        results = []
        for item in items:
            candidate = key(item)
            if self.is_match(query, candidate):
                results.append((item, self.score(query, candidate)))

        results.sort(key=lambda pair: pair[1])
        return results
