"""Split a filtered record set into labelled sub-corpora for multi-series charts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from core.records import AgeRange, Document, RecordFilter, SEXES

MAX_DATE_POSITIONS = 10
MAX_AGE_BUCKETS = 10

# Returns the texts selected by a filter (keyword scoping included).
TextSelector = Callable[[RecordFilter], List[str]]


@dataclass(frozen=True)
class Bucket:
    label: str
    text: str


def mentions_keyword(text: str, keyword: Optional[str]) -> bool:
    if not keyword:
        return True
    return re.search(re.escape(keyword), text or "", re.IGNORECASE) is not None


def aligned_entry_texts(document: Document, keyword: Optional[str] = None) -> List[str]:
    """Entry texts in chronological order, blanking entries that miss the keyword."""
    ordered = sorted(document.dated_entries, key=lambda entry: entry.sort_key)
    return [entry.text if mentions_keyword(entry.text, keyword) else "" for entry in ordered]


def bucket_by_date(
    documents: Sequence[Document],
    keyword: Optional[str] = None,
    max_positions: int = MAX_DATE_POSITIONS,
) -> List[Bucket]:
    """One bucket per timeline position; position n joins every record's n-th entry."""

    sequences = [aligned_entry_texts(document, keyword) for document in documents]
    if not sequences:
        return []
    width = min(max_positions, max(len(sequence) for sequence in sequences))
    padded = [(sequence + [""] * width)[:width] for sequence in sequences]
    return [
        Bucket(label=str(position + 1), text=" ".join(row[position] for row in padded))
        for position in range(width)
    ]


def bucket_by_sex(select_texts: TextSelector, record_filter: RecordFilter) -> List[Bucket]:
    return [
        Bucket(label=sex, text=" ".join(select_texts(record_filter.with_sex(sex))))
        for sex in SEXES
    ]


def age_sub_ranges(age_range: AgeRange, max_buckets: int = MAX_AGE_BUCKETS) -> List[AgeRange]:
    gap = max(1, age_range.size // max_buckets)
    count = -(-age_range.size // gap)
    ranges = []
    for index in range(count):
        low = age_range.low + index * gap
        ranges.append(AgeRange(low, min(low + gap - 1, age_range.high)))
    return ranges


def bucket_by_age(select_texts: TextSelector, record_filter: RecordFilter) -> List[Bucket]:
    return [
        Bucket(label=f"{sub_range.low}~", text=" ".join(select_texts(record_filter.with_age(sub_range))))
        for sub_range in age_sub_ranges(record_filter.age)
    ]


__all__ = [
    "MAX_DATE_POSITIONS",
    "MAX_AGE_BUCKETS",
    "Bucket",
    "TextSelector",
    "mentions_keyword",
    "aligned_entry_texts",
    "bucket_by_date",
    "bucket_by_sex",
    "age_sub_ranges",
    "bucket_by_age",
]
