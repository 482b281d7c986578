"""Tokenisation and corpus-wide term statistics (TF, document existence, TF-IDF)."""

from __future__ import annotations

import re
from collections import Counter
from functools import cached_property
from typing import Dict, Iterable, List, Tuple

import numpy as np

from core.errors import EmptyResultError

_SPLIT_PATTERN = re.compile(r"\W+", re.ASCII)


def tokenize(text: str) -> List[str]:
    """Split on runs of non-word characters. Case is preserved."""
    if not text:
        return []
    return [token for token in _SPLIT_PATTERN.split(text) if token]


def term_count(text: str) -> Counter:
    return Counter(tokenize(text))


def _read_only(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


class Corpus:
    """An ordered sequence of texts with statistics computed once on first access.

    Terms keep the order in which they first appear across the texts, which makes
    rankings built on top of these statistics reproducible.
    """

    def __init__(self, texts: Iterable[str]) -> None:
        self.texts: Tuple[str, ...] = tuple(text or "" for text in texts)
        if not self.texts:
            raise EmptyResultError("an empty corpus")

    def __len__(self) -> int:
        return len(self.texts)

    # ------------------------------------------------------------------
    @cached_property
    def _term_counts(self) -> Tuple[Counter, ...]:
        return tuple(term_count(text) for text in self.texts)

    @cached_property
    def terms(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for counts in self._term_counts:
            for term in counts:
                seen.setdefault(term, None)
        return tuple(seen)

    @cached_property
    def _term_index(self) -> Dict[str, int]:
        return {term: idx for idx, term in enumerate(self.terms)}

    @cached_property
    def _count_matrix(self) -> np.ndarray:
        matrix = np.zeros((len(self.terms), len(self.texts)), dtype=float)
        for col, counts in enumerate(self._term_counts):
            for term, count in counts.items():
                matrix[self._term_index[term], col] = count
        return _read_only(matrix)

    @cached_property
    def _doc_totals(self) -> np.ndarray:
        return _read_only(self._count_matrix.sum(axis=0))

    @cached_property
    def _existence(self) -> np.ndarray:
        return _read_only((self._count_matrix > 0).sum(axis=1))

    @cached_property
    def _tf_matrix(self) -> np.ndarray:
        totals = self._doc_totals
        tf = np.divide(
            self._count_matrix,
            totals,
            out=np.zeros_like(self._count_matrix),
            where=totals > 0,
        )
        return _read_only(tf)

    @cached_property
    def _idf_vector(self) -> np.ndarray:
        return _read_only(np.log(len(self.texts) / self._existence))

    @cached_property
    def _tfidf_matrix(self) -> np.ndarray:
        return _read_only(self._tf_matrix * self._idf_vector[:, np.newaxis])

    # ------------------------------------------------------------------
    def term_counts_per_doc(self) -> List[Dict[str, int]]:
        return [dict(counts) for counts in self._term_counts]

    def total_count_per_term(self) -> Dict[str, int]:
        totals = self._count_matrix.sum(axis=1)
        return {term: int(totals[idx]) for idx, term in enumerate(self.terms)}

    def total_terms(self) -> List[int]:
        return [int(total) for total in self._doc_totals]

    def doc_existence(self) -> Dict[str, int]:
        return {term: int(self._existence[idx]) for idx, term in enumerate(self.terms)}

    def term_frequency(self) -> Dict[str, List[float]]:
        return self._as_mapping(self._tf_matrix)

    def idf(self) -> Dict[str, float]:
        return {term: float(self._idf_vector[idx]) for idx, term in enumerate(self.terms)}

    def tf_idf(self) -> Dict[str, List[float]]:
        return self._as_mapping(self._tfidf_matrix)

    def _as_mapping(self, matrix: np.ndarray) -> Dict[str, List[float]]:
        return {term: matrix[idx].tolist() for idx, term in enumerate(self.terms)}


__all__ = ["tokenize", "term_count", "Corpus"]
