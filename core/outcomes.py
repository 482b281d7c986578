"""Words that co-occur with a keyword in the dated entries of every record."""

from __future__ import annotations

from typing import Iterable, List, Optional

from core.records import Document
from core.usefulness import count_useful_words
from core.vocabulary import Vocabulary, load_vocabulary

OUTCOME_LIST_SIZE = 5


def keyword_sentences(documents: Iterable[Document], keyword: str) -> Iterable[str]:
    for document in documents:
        for entry in document.dated_entries:
            for sentence in (entry.text or "").split("."):
                if keyword in sentence:
                    yield sentence


def co_occurring_terms(
    documents: Iterable[Document],
    keyword: str,
    limit: int = OUTCOME_LIST_SIZE,
    vocabulary: Optional[Vocabulary] = None,
) -> List[str]:
    words = [
        word
        for sentence in keyword_sentences(documents, keyword)
        for word in sentence.split()
        if word != keyword
    ]
    counts = count_useful_words(words, vocabulary or load_vocabulary())
    ranked = sorted(counts, key=lambda word: -counts[word])
    return ranked[:limit]


def describe_outcomes(keyword: str, terms: List[str]) -> str:
    if not terms:
        return f"I could not find anything relating to the keyword {keyword}."
    return f"These things might occur as result, relating to the keyword {keyword}: " + ", ".join(terms) + "."


__all__ = ["OUTCOME_LIST_SIZE", "keyword_sentences", "co_occurring_terms", "describe_outcomes"]
