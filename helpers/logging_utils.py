"""Structured logging for the chat engine.

Every event is one JSON line. Events raised while answering a chat message go
through a ``RequestLog`` bound to that message's request id, so the parse, route
and publish lines of one message can be grepped together.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4


_LOGGER_NAME = "clinical_chat"
_NO_REQUEST = "-"


class _RequestIdDefault(logging.Filter):
    """Give records logged outside a request a placeholder id for the formatter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _NO_REQUEST
        return True


def get_logger() -> logging.Logger:
    """Return the shared logger, attaching a stream handler on first use."""
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.addFilter(_RequestIdDefault())
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(request_id)s | %(message)s"))
    logger.addHandler(handler)
    return logger


def new_request_id() -> str:
    return f"cc-{uuid4().hex[:12]}"


def _level(name: str) -> int:
    level = getattr(logging, name.upper(), logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def _event_json(event: str, payload: Optional[Dict[str, Any]]) -> str:
    data: Dict[str, Any] = {
        "event": event,
        "ts": datetime.now(timezone.utc).isoformat(),
    }
    if payload:
        data.update(payload)
    return json.dumps(data, ensure_ascii=False, default=str)


def log_event(event: str, payload: Optional[Dict[str, Any]] = None, *, level: str = "info") -> None:
    """Log an event that belongs to no particular chat message (adapters, config)."""
    get_logger().log(_level(level), "%s", _event_json(event, payload))


class RequestLog(logging.LoggerAdapter):
    """Logger bound to one inbound chat message."""

    def __init__(self, request_id: Optional[str] = None) -> None:
        super().__init__(get_logger(), {"request_id": request_id or new_request_id()})

    @property
    def request_id(self) -> str:
        return self.extra["request_id"]

    def event(self, event: str, payload: Optional[Dict[str, Any]] = None, *, level: str = "info") -> None:
        data: Dict[str, Any] = {"request_id": self.request_id}
        if payload:
            data.update(payload)
        self.log(_level(level), "%s", _event_json(event, data))


__all__ = ["get_logger", "new_request_id", "log_event", "RequestLog"]
