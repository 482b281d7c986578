"""Assemble chart payloads (title, x labels, rows) from ranked corpus vocabulary."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple, Type

import pandas as pd

from core.bucketing import Bucket, bucket_by_age, bucket_by_date, bucket_by_sex, mentions_keyword
from core.errors import EmptyResultError, UserInputError
from core.records import Document, RecordFilter
from core.text_stats import Corpus
from core.usefulness import MULTI_SERIES_SIZE, RANKED_LIST_SIZE, rank_terms
from core.vocabulary import Vocabulary, load_vocabulary


class ChartKind(str, Enum):
    PIE = "pie"
    TABLE = "table"
    LINE = "line"
    BAR = "bar"

    @property
    def multi_series(self) -> bool:
        return self in (ChartKind.LINE, ChartKind.BAR)


@dataclass(frozen=True)
class ChartPayload:
    kind: ChartKind
    title: str
    x_labels: Tuple[str, ...]
    rows: Tuple[Tuple[str, Any], ...]
    header: Tuple[str, ...] = ()

    def to_frame(self) -> pd.DataFrame:
        if self.kind.multi_series:
            records = [[term, *values] for term, values in self.rows]
            return pd.DataFrame(records, columns=["term", *self.x_labels])
        return pd.DataFrame(list(self.rows), columns=["term", "count"])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "x_labels": list(self.x_labels),
            "rows": [[term, list(value) if isinstance(value, tuple) else value] for term, value in self.rows],
        }


class DocumentSource(Protocol):
    def find(self, record_filter: RecordFilter) -> List[Document]:
        ...

    def find_all(self) -> List[Document]:
        ...


def select_texts(store: DocumentSource, record_filter: RecordFilter) -> List[str]:
    """Main texts of the records matching the filter whose text mentions the keyword."""
    return [
        document.text
        for document in store.find(record_filter)
        if mentions_keyword(document.text, record_filter.keyword)
    ]


class ChartBuilder(ABC):
    kind: ChartKind

    def __init__(self, store: DocumentSource, vocabulary: Optional[Vocabulary] = None) -> None:
        self.store = store
        self.vocabulary = vocabulary or load_vocabulary()

    @abstractmethod
    def build_payload(self, record_filter: RecordFilter, grouping: Optional[str] = None) -> ChartPayload:
        ...


class RankedListBuilder(ChartBuilder):
    """Top terms of the filtered records, shown with their raw occurrence counts."""

    title_prefix = "Term count"

    def build_payload(self, record_filter: RecordFilter, grouping: Optional[str] = None) -> ChartPayload:
        del grouping  # ranked lists have no x-axis
        texts = select_texts(self.store, record_filter)
        if not texts:
            raise EmptyResultError(record_filter.describe())
        corpus = Corpus(texts)
        counts = corpus.total_count_per_term()
        top_terms = rank_terms(corpus.tf_idf(), RANKED_LIST_SIZE, self.vocabulary)
        rows = self._order_rows([(term, counts[term]) for term in top_terms])
        title = f"{self.title_prefix} with {record_filter.describe()}"
        return ChartPayload(
            kind=self.kind,
            title=title,
            x_labels=(),
            rows=tuple(rows),
            header=self._header(title),
        )

    def _order_rows(self, rows: List[Tuple[str, int]]) -> List[Tuple[str, int]]:
        return rows

    def _header(self, title: str) -> Tuple[str, ...]:
        return ()


class PieChartBuilder(RankedListBuilder):
    kind = ChartKind.PIE


class TableChartBuilder(RankedListBuilder):
    kind = ChartKind.TABLE
    title_prefix = "Words"

    def _order_rows(self, rows: List[Tuple[str, int]]) -> List[Tuple[str, int]]:
        return sorted(rows, key=lambda row: -row[1])

    def _header(self, title: str) -> Tuple[str, ...]:
        return (title, "Times")


class SeriesChartBuilder(ChartBuilder):
    """Term frequency per bucket for the top terms across the bucket corpus."""

    groupings: Tuple[str, ...] = ()
    missing_grouping_message = ""

    def build_payload(self, record_filter: RecordFilter, grouping: Optional[str] = None) -> ChartPayload:
        if grouping not in self.groupings:
            raise UserInputError(self.missing_grouping_message)
        buckets = self._buckets(record_filter, grouping)
        if not buckets or not any(bucket.text.strip() for bucket in buckets):
            raise EmptyResultError(record_filter.describe())
        corpus = Corpus(bucket.text for bucket in buckets)
        tf = corpus.term_frequency()
        top_terms = rank_terms(corpus.tf_idf(), MULTI_SERIES_SIZE, self.vocabulary)
        return ChartPayload(
            kind=self.kind,
            title=f"TF over {grouping} with {record_filter.describe()}",
            x_labels=tuple(bucket.label for bucket in buckets),
            rows=tuple((term, tuple(tf[term])) for term in top_terms),
        )

    def _buckets(self, record_filter: RecordFilter, grouping: str) -> List[Bucket]:
        def selector(pinned: RecordFilter) -> List[str]:
            return select_texts(self.store, pinned)

        if grouping == "date":
            documents = self.store.find(record_filter)
            if not documents:
                raise EmptyResultError(record_filter.describe())
            return bucket_by_date(documents, record_filter.keyword)
        if grouping == "sex":
            return bucket_by_sex(selector, record_filter)
        if grouping == "age":
            return bucket_by_age(selector, record_filter)
        raise UserInputError(self.missing_grouping_message)


class LineChartBuilder(SeriesChartBuilder):
    kind = ChartKind.LINE
    groupings = ("date", "sex")
    missing_grouping_message = (
        "If you want to render a line graph, please also tell me which attribute the x-axis "
        "will be around. Note that for now only x for date or sex is available."
    )


class BarChartBuilder(SeriesChartBuilder):
    kind = ChartKind.BAR
    groupings = ("sex", "age")
    missing_grouping_message = (
        "If you want to render a bar graph, please also tell me which attribute you want to "
        "categorize on. Note that for now only grouping by sex or age is available."
    )


CHART_BUILDERS: Dict[ChartKind, Type[ChartBuilder]] = {
    ChartKind.PIE: PieChartBuilder,
    ChartKind.TABLE: TableChartBuilder,
    ChartKind.LINE: LineChartBuilder,
    ChartKind.BAR: BarChartBuilder,
}


def builder_for(
    kind: ChartKind,
    store: DocumentSource,
    vocabulary: Optional[Vocabulary] = None,
) -> ChartBuilder:
    return CHART_BUILDERS[kind](store, vocabulary)


def build_payload(
    kind: ChartKind,
    store: DocumentSource,
    record_filter: RecordFilter,
    grouping: Optional[str] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> ChartPayload:
    return builder_for(kind, store, vocabulary).build_payload(record_filter, grouping)


__all__ = [
    "ChartKind",
    "ChartPayload",
    "DocumentSource",
    "select_texts",
    "ChartBuilder",
    "PieChartBuilder",
    "TableChartBuilder",
    "LineChartBuilder",
    "BarChartBuilder",
    "CHART_BUILDERS",
    "builder_for",
    "build_payload",
]
