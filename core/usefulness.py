"""Heuristic that demotes uninformative terms when ranking corpus vocabulary."""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional, Sequence

from core.vocabulary import Vocabulary, load_vocabulary

_NON_ALPHA = re.compile(r"[^a-zA-Z]")

RANKED_LIST_SIZE = 20
MULTI_SERIES_SIZE = 10


def is_useful(term: str, vocabulary: Optional[Vocabulary] = None) -> int:
    """Return 1 for a term worth surfacing, 0 otherwise."""
    if len(term) <= 1:
        return 0
    if _NON_ALPHA.search(term):
        return 0
    stopwords = (vocabulary or load_vocabulary()).stopwords
    if term.lower() in stopwords:
        return 0
    return 1


def rank_key(term: str, scores: Sequence[float], vocabulary: Optional[Vocabulary] = None) -> float:
    return is_useful(term, vocabulary) * -float(sum(scores))


def rank_terms(
    scores: Mapping[str, Sequence[float]],
    limit: int,
    vocabulary: Optional[Vocabulary] = None,
) -> List[str]:
    """Order terms useful-first, then by descending summed score; keep ``limit``."""
    vocabulary = vocabulary or load_vocabulary()
    ordered = sorted(scores, key=lambda term: rank_key(term, scores[term], vocabulary))
    return ordered[:limit]


def count_useful_words(words: Sequence[str], vocabulary: Optional[Vocabulary] = None) -> Dict[str, int]:
    vocabulary = vocabulary or load_vocabulary()
    counts: Dict[str, int] = {}
    for word in words:
        if is_useful(word, vocabulary):
            counts[word] = counts.get(word, 0) + 1
    return counts


__all__ = [
    "RANKED_LIST_SIZE",
    "MULTI_SERIES_SIZE",
    "is_useful",
    "rank_key",
    "rank_terms",
    "count_useful_words",
]
