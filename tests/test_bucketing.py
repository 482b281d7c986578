from typing import List

import pytest

from core.bucketing import (
    age_sub_ranges,
    aligned_entry_texts,
    bucket_by_age,
    bucket_by_date,
    bucket_by_sex,
    mentions_keyword,
)
from core.records import AgeRange, DatedEntry, Document, RecordFilter


def _document(doc_id: int, texts: List[str]) -> Document:
    entries = tuple(DatedEntry(2020, 1, day + 1, text) for day, text in enumerate(texts))
    return Document(id=doc_id, sex="female", age=60, text="", dated_entries=entries)


def test_entries_follow_chronological_order() -> None:
    document = Document(
        id=1,
        sex="male",
        age=50,
        dated_entries=(
            DatedEntry(2020, 2, 1, "second"),
            DatedEntry(2019, 12, 31, "first"),
            DatedEntry(2020, 2, 14, "third"),
        ),
    )
    assert aligned_entry_texts(document) == ["first", "second", "third"]


def test_entries_missing_the_keyword_are_blanked() -> None:
    document = _document(1, ["Fever started", "cough only", "fever resolved"])
    assert aligned_entry_texts(document, "FEVER") == ["Fever started", "", "fever resolved"]


def test_keyword_is_matched_literally() -> None:
    assert mentions_keyword("dose was 2+3 mg", "2+3")
    assert not mentions_keyword("dose was 23 mg", "2+3")
    assert mentions_keyword("anything", None)


def test_date_buckets_are_capped_at_ten_positions() -> None:
    long_doc = _document(1, [f"a{i}" for i in range(1, 13)])
    short_doc = _document(2, ["b1", "b2", "b3"])
    buckets = bucket_by_date([long_doc, short_doc])

    assert [bucket.label for bucket in buckets] == [str(i) for i in range(1, 11)]
    assert buckets[0].text == "a1 b1"
    assert buckets[3].text == "a4 "
    assert all("a11" not in bucket.text and "a12" not in bucket.text for bucket in buckets)


def test_date_buckets_use_the_longest_timeline_when_short() -> None:
    buckets = bucket_by_date([_document(1, ["x1", "x2"]), _document(2, ["y1", "y2", "y3"])])
    assert [bucket.text for bucket in buckets] == ["x1 y1", "x2 y2", " y3"]


def test_date_buckets_for_no_documents() -> None:
    assert bucket_by_date([]) == []


@pytest.mark.parametrize(
    "age_range, expected_count, first, last",
    [
        (AgeRange(0, 120), 11, AgeRange(0, 11), AgeRange(120, 120)),
        (AgeRange(60, 70), 11, AgeRange(60, 60), AgeRange(70, 70)),
        (AgeRange(20, 39), 10, AgeRange(20, 21), AgeRange(38, 39)),
        (AgeRange(45, 45), 1, AgeRange(45, 45), AgeRange(45, 45)),
    ],
)
def test_age_sub_ranges(age_range: AgeRange, expected_count: int, first: AgeRange, last: AgeRange) -> None:
    ranges = age_sub_ranges(age_range)
    assert len(ranges) == expected_count
    assert ranges[0] == first
    assert ranges[-1] == last
    for previous, current in zip(ranges, ranges[1:]):
        assert current.low == previous.high + 1
    assert all(sub_range.high <= age_range.high for sub_range in ranges)


def test_sex_buckets_pin_the_sex() -> None:
    seen: List[RecordFilter] = []

    def selector(record_filter: RecordFilter) -> List[str]:
        seen.append(record_filter)
        return [f"{record_filter.sex} one", f"{record_filter.sex} two"]

    buckets = bucket_by_sex(selector, RecordFilter(sex="female", age=AgeRange(60, 70), keyword="PO"))
    assert [bucket.label for bucket in buckets] == ["male", "female"]
    assert buckets[0].text == "male one male two"
    assert [record_filter.sex for record_filter in seen] == ["male", "female"]
    assert all(record_filter.keyword == "PO" for record_filter in seen)


def test_age_buckets_are_labelled_by_lower_bound() -> None:
    def selector(record_filter: RecordFilter) -> List[str]:
        return [record_filter.age.label]

    buckets = bucket_by_age(selector, RecordFilter(age=AgeRange(20, 39)))
    assert buckets[0].label == "20~"
    assert buckets[0].text == "20..21"
    assert buckets[-1].label == "38~"
