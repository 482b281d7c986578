"""Record stores: MongoDB when configured, a JSON file otherwise."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

from core.errors import ExternalServiceError
from core.records import Document, RecordFilter
from helpers.logging_utils import log_event

_PROJECTION = {"_id": 0, "pid": 1, "sex": 1, "age": 1, "english_content": 1, "date_content": 1}


def build_mongo_query(record_filter: RecordFilter) -> Dict[str, Any]:
    query: Dict[str, Any] = {"age": {"$gte": record_filter.age.low, "$lte": record_filter.age.high}}
    if record_filter.sex:
        query["sex"] = record_filter.sex
    return query


def _to_documents(records: Iterable[Dict[str, Any]]) -> List[Document]:
    """Convert native records, reporting a malformed one as a store failure."""
    documents = []
    for record in records:
        try:
            documents.append(Document.from_record(record))
        except (ValueError, TypeError) as exc:
            log_event("store.record.invalid", {"pid": record.get("pid"), "error": str(exc)}, level="error")
            raise ExternalServiceError("record store", f"malformed record {record.get('pid')!r}: {exc}") from exc
    return documents


def _sorted_documents(records: Sequence[Dict[str, Any]]) -> List[Document]:
    documents = _to_documents(records)
    return sorted(documents, key=lambda document: document.id)


class MongoDocumentStore:
    def __init__(
        self,
        uri: str,
        database: str = "clinical",
        collection: str = "patients",
        timeout_ms: int = 2000,
    ) -> None:
        self._client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        self._collection = self._client[database][collection]

    def _query(self, query: Dict[str, Any]) -> List[Document]:
        try:
            cursor = self._collection.find(query, _PROJECTION).sort("pid", ASCENDING)
            records = list(cursor)
        except PyMongoError as exc:
            log_event("store.query.error", {"query": query, "error": str(exc)}, level="error")
            raise ExternalServiceError("record store", str(exc)) from exc
        return _to_documents(records)

    def find(self, record_filter: RecordFilter) -> List[Document]:
        return self._query(build_mongo_query(record_filter))

    def find_all(self) -> List[Document]:
        return self._query({})


class JsonDocumentStore:
    """Records held in memory, loaded from a JSON list of native records."""

    def __init__(self, records: Optional[Sequence[Dict[str, Any]]] = None) -> None:
        self._documents = _sorted_documents(list(records or []))

    @classmethod
    def from_path(cls, path: str) -> "JsonDocumentStore":
        file_path = Path(path)
        try:
            with file_path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            log_event("store.load.error", {"path": str(file_path), "error": str(exc)}, level="error")
            raise ExternalServiceError("record store", f"could not load {file_path}: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("records", [])
        if not isinstance(data, list):
            raise ExternalServiceError("record store", f"{file_path} does not hold a list of records")
        return cls([record for record in data if isinstance(record, dict)])

    def find(self, record_filter: RecordFilter) -> List[Document]:
        return [document for document in self._documents if record_filter.matches(document)]

    def find_all(self) -> List[Document]:
        return list(self._documents)


__all__ = ["build_mongo_query", "MongoDocumentStore", "JsonDocumentStore"]
