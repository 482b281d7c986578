"""Patient record model and the request-scoped selection filter."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

SEXES = ("male", "female")


@dataclass(frozen=True)
class DatedEntry:
    year: int
    month: int
    day: int
    text: str = ""

    @property
    def sort_key(self) -> int:
        return self.year * 13 * 50 + self.month * 50 + self.day

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "DatedEntry":
        values = list(row) + [0, 0, 0, ""][len(row):]
        text = values[3] if isinstance(values[3], str) else ""
        return cls(year=int(values[0] or 0), month=int(values[1] or 0), day=int(values[2] or 0), text=text)


@dataclass(frozen=True)
class Document:
    id: int
    sex: str
    age: int
    text: str = ""
    dated_entries: Tuple[DatedEntry, ...] = ()

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Document":
        """Build a document from the store's native record shape."""

        rows = record.get("date_content") or []
        return cls(
            id=int(record.get("pid", 0) or 0),
            sex=str(record.get("sex", "")),
            age=int(record.get("age", 0) or 0),
            text=record.get("english_content") or "",
            dated_entries=tuple(DatedEntry.from_row(row) for row in rows if row),
        )


@dataclass(frozen=True)
class AgeRange:
    """Inclusive age interval."""

    low: int = 0
    high: int = 120

    @property
    def size(self) -> int:
        return self.high - self.low + 1

    @property
    def label(self) -> str:
        return f"{self.low}..{self.high}"

    def contains(self, age: int) -> bool:
        return self.low <= age <= self.high


DEFAULT_AGE_RANGE = AgeRange(0, 120)


@dataclass(frozen=True)
class RecordFilter:
    sex: Optional[str] = None
    age: AgeRange = field(default_factory=lambda: DEFAULT_AGE_RANGE)
    keyword: Optional[str] = None

    def with_sex(self, sex: str) -> "RecordFilter":
        return replace(self, sex=sex)

    def with_age(self, age: AgeRange) -> "RecordFilter":
        return replace(self, age=age)

    def matches(self, document: Document) -> bool:
        if self.sex is not None and document.sex != self.sex:
            return False
        return self.age.contains(document.age)

    def values(self) -> List[str]:
        parts = [self.sex] if self.sex else []
        parts.append(self.age.label)
        if self.keyword:
            parts.append(self.keyword)
        return parts

    def describe(self) -> str:
        parts: List[str] = []
        if self.sex:
            parts.append(f"sex: {self.sex}")
        parts.append(f"age: {self.age.label}")
        if self.keyword:
            parts.append(f"keyword: {self.keyword}")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {"sex": self.sex, "age": self.age.label, "keyword": self.keyword}


__all__ = ["SEXES", "DatedEntry", "Document", "AgeRange", "DEFAULT_AGE_RANGE", "RecordFilter"]
