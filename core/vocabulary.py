"""Tunable word lists shared by the query parser and the usefulness filter."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

import yaml

from helpers.logging_utils import log_event

_DEFAULT_STOPWORDS = (
    "and", "with", "of", "he", "his", "him", "boy", "man", "male", "she", "her", "girl", "lady",
    "female", "ml", "dl", "mmol", "item", "to", "for", "was", "on", "the", "mg", "time", "or",
    "is", "are", "they", "them", "their", "doctor", "hospital", "in", "no", "under", "below",
    "above", "status", "at", "days", "without",
)

_DEFAULT_CHART_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("line", ("relation", "relates", "relating", "related", "line", "plot", "plots")),
    ("table", ("table", "list", "listed", "lists")),
    ("pie", ("pie", "chart", "charts", "picture", "pictures", "pictured", "picturing")),
    ("bar", ("bar", "group", "groups", "grouped", "grouping",
             "categorize", "categorizes", "categorized", "categorizing")),
)

_DEFAULT_TRIGGERS = {
    "help": ("help",),
    "effect": ("result", "after", "effect"),
    "frequency": ("freq", "tf"),
}

_DEFAULT_GROUPING_ALIASES = {
    "sex": ("sex", "gender"),
    "age": ("age", "year", "old"),
    "date": ("time", "date", "day", "days"),
}


@dataclass(frozen=True)
class Vocabulary:
    stopwords: FrozenSet[str]
    male_words: FrozenSet[str]
    female_words: FrozenSet[str]
    chart_keywords: Tuple[Tuple[str, FrozenSet[str]], ...]
    triggers: Mapping[str, Tuple[str, ...]]
    grouping_aliases: Mapping[str, FrozenSet[str]]

    def trigger_prefixes(self, route: str) -> Tuple[str, ...]:
        return tuple(self.triggers.get(route, ()))

    def grouping_for(self, word: str) -> Optional[str]:
        lowered = word.lower()
        for name, aliases in self.grouping_aliases.items():
            if lowered in aliases:
                return name
        return None


def _words(raw: Any, default: Iterable[str]) -> FrozenSet[str]:
    if isinstance(raw, (list, tuple, set)):
        cleaned = {str(item).strip().lower() for item in raw if str(item).strip()}
        if cleaned:
            return frozenset(cleaned)
    return frozenset(default)


def _chart_keywords(raw: Any) -> Tuple[Tuple[str, FrozenSet[str]], ...]:
    if not isinstance(raw, dict) or not raw:
        return tuple((kind, frozenset(words)) for kind, words in _DEFAULT_CHART_KEYWORDS)
    defaults = dict(_DEFAULT_CHART_KEYWORDS)
    return tuple((str(kind), _words(words, defaults.get(str(kind), ()))) for kind, words in raw.items())


def _prefixes(raw: Any) -> Dict[str, Tuple[str, ...]]:
    merged = dict(_DEFAULT_TRIGGERS)
    if isinstance(raw, dict):
        for route, words in raw.items():
            merged[str(route)] = tuple(sorted(_words(words, merged.get(str(route), ()))))
    return merged


def _aliases(raw: Any) -> Dict[str, FrozenSet[str]]:
    merged = {name: frozenset(words) for name, words in _DEFAULT_GROUPING_ALIASES.items()}
    if isinstance(raw, dict):
        for name, words in raw.items():
            merged[str(name)] = _words(words, merged.get(str(name), ()))
    return merged


def _default_vocabulary_path() -> Path:
    base_dir = Path(__file__).resolve().parent.parent
    return base_dir / "config" / "vocabulary.yaml"


def build_vocabulary(data: Optional[Mapping[str, Any]] = None) -> Vocabulary:
    data = data or {}
    return Vocabulary(
        stopwords=_words(data.get("stopwords"), _DEFAULT_STOPWORDS),
        male_words=_words(data.get("male_words"), ("man", "male", "his", "him", "himself", "he", "boy")),
        female_words=_words(data.get("female_words"), ("woman", "female", "her", "herself", "she", "girl")),
        chart_keywords=_chart_keywords(data.get("chart_keywords")),
        triggers=_prefixes(data.get("triggers")),
        grouping_aliases=_aliases(data.get("grouping_aliases")),
    )


@lru_cache(maxsize=8)
def load_vocabulary(path: Optional[str] = None) -> Vocabulary:
    """Load word lists from YAML, falling back to built-in defaults per section."""

    config_path = Path(path) if path else _default_vocabulary_path()
    if not config_path.exists():
        return build_vocabulary()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as exc:
        log_event("vocabulary.load.error", {"path": str(config_path), "error": str(exc)}, level="warning")
        return build_vocabulary()
    return build_vocabulary(loaded if isinstance(loaded, dict) else None)


__all__ = ["Vocabulary", "build_vocabulary", "load_vocabulary"]
