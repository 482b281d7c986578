# data/query_parser.py

'''
Query Parser

This module extracts everything the analytics engine needs from a free-text chat message:

1. Demographic filter:
   - Sex is decided by counting male versus female indicator words; a tie leaves it unset.
   - Age is read from four patterns tried in order ("30 to 50 years", "45 years old",
     "age between 30 and 50", "age 45"); no match keeps the default 0..120 range.

2. Chart intent:
   - The lowercased message words are checked against the chart keyword sets in priority
     order (line, table, pie, bar).
   - Line and bar charts also need a grouping attribute, read from phrases such as
     "x is date" or "group by gender".

3. Keyword:
   - "keyword is cancer" / "keyword: PO" scopes the records and the dated entries.

4. Routing triggers:
   - Help, effect and frequency trigger prefixes decide which reply path claims a message.

Optional extractors return ``None`` when the message does not specify the value; age falls back to 0..120.
'''

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from core.charts import ChartKind
from core.records import AgeRange, DEFAULT_AGE_RANGE, RecordFilter
from core.text_stats import tokenize
from core.vocabulary import Vocabulary, load_vocabulary

AGE_PATTERNS = (
    re.compile(r"(\d+)[^\d]{1,20}(\d+)[^\d]{1,20}year", re.IGNORECASE),
    re.compile(r"(\d+)[^\d]{1,20}year", re.IGNORECASE),
    re.compile(r"age[^\d]{1,20}(\d+)[^\d]{1,20}(\d+)", re.IGNORECASE),
    re.compile(r"age[^\d]{1,20}(\d+)", re.IGNORECASE),
)

LINE_GROUPING_PATTERN = re.compile(
    r"(?:x\s*|axis|around)+\s*(?::|\-|upon|is|in|on|by|at|for|with|as|\s*)\s*([^\s]+)\s*",
    re.IGNORECASE,
)
BAR_GROUPING_PATTERN = re.compile(
    r"(?:grouped|grouping|group|bar\s*|categorized|categorize|graph\s*)+\s*(?:by|on|\s*)\s*([^\s]+)\s*",
    re.IGNORECASE,
)
KEYWORD_PATTERN = re.compile(r"keyword.*(?:is|:)\s*([a-z]+)", re.IGNORECASE)
_ALPHA_RUN = re.compile(r"[a-zA-Z]+")

GROUPINGS = {
    ChartKind.LINE: ("sex", "date"),
    ChartKind.BAR: ("sex", "age"),
}


@dataclass(frozen=True)
class QueryIntent:
    raw_message: str
    record_filter: RecordFilter
    chart_kind: Optional[ChartKind] = None
    grouping: Optional[str] = None

    @property
    def keyword(self) -> Optional[str]:
        return self.record_filter.keyword


def message_words(text: str) -> List[str]:
    return [word.lower() for word in tokenize(text)]


def has_trigger(text: str, route: str, vocabulary: Optional[Vocabulary] = None) -> bool:
    """True when any message word starts with one of the route's trigger prefixes."""

    prefixes = (vocabulary or load_vocabulary()).trigger_prefixes(route)
    if not prefixes:
        return False
    return any(word.startswith(prefixes) for word in message_words(text))


def parse_sex(text: str, vocabulary: Optional[Vocabulary] = None) -> Optional[str]:
    vocabulary = vocabulary or load_vocabulary()
    male_count = 0
    female_count = 0
    for word in message_words(text):
        if word in vocabulary.male_words:
            male_count += 1
        if word in vocabulary.female_words:
            female_count += 1
    if male_count == female_count:
        return None
    return "male" if male_count > female_count else "female"


def match_age(text: str) -> Optional[AgeRange]:
    for pattern in AGE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        numbers = [int(group) for group in match.groups()]
        low = numbers[0]
        high = numbers[1] if len(numbers) > 1 else low
        if low > high:
            low, high = high, low
        return AgeRange(low, high)
    return None


def parse_age(text: str) -> AgeRange:
    return match_age(text) or DEFAULT_AGE_RANGE


def parse_keyword(text: str) -> Optional[str]:
    match = KEYWORD_PATTERN.search(text)
    return match.group(1) if match else None


def parse_chart_kind(text: str, vocabulary: Optional[Vocabulary] = None) -> Optional[ChartKind]:
    vocabulary = vocabulary or load_vocabulary()
    words = set(message_words(text))
    for kind_name, keywords in vocabulary.chart_keywords:
        if words & keywords:
            try:
                return ChartKind(kind_name)
            except ValueError:
                continue
    return None


def normalize_grouping(
    raw: Optional[str],
    allowed: tuple,
    vocabulary: Optional[Vocabulary] = None,
) -> Optional[str]:
    if not raw:
        return None
    match = _ALPHA_RUN.search(raw)
    if not match:
        return None
    grouping = (vocabulary or load_vocabulary()).grouping_for(match.group(0))
    return grouping if grouping in allowed else None


def parse_grouping(
    text: str,
    kind: ChartKind,
    vocabulary: Optional[Vocabulary] = None,
) -> Optional[str]:
    """Return the first captured grouping word that normalises for ``kind``."""

    if kind == ChartKind.LINE:
        pattern = LINE_GROUPING_PATTERN
    elif kind == ChartKind.BAR:
        pattern = BAR_GROUPING_PATTERN
    else:
        return None
    for match in pattern.finditer(text):
        grouping = normalize_grouping(match.group(1), GROUPINGS[kind], vocabulary)
        if grouping:
            return grouping
    return None


def parse_filter(text: str, vocabulary: Optional[Vocabulary] = None) -> RecordFilter:
    return RecordFilter(
        sex=parse_sex(text, vocabulary),
        age=parse_age(text),
        keyword=parse_keyword(text),
    )


def parse_message(text: str, vocabulary: Optional[Vocabulary] = None) -> QueryIntent:
    vocabulary = vocabulary or load_vocabulary()
    kind = parse_chart_kind(text, vocabulary)
    grouping = parse_grouping(text, kind, vocabulary) if kind else None
    return QueryIntent(
        raw_message=text,
        record_filter=parse_filter(text, vocabulary),
        chart_kind=kind,
        grouping=grouping,
    )


__all__ = [
    "QueryIntent",
    "has_trigger",
    "message_words",
    "parse_sex",
    "match_age",
    "parse_age",
    "parse_keyword",
    "parse_chart_kind",
    "normalize_grouping",
    "parse_grouping",
    "parse_filter",
    "parse_message",
]
