"""Exceptions raised inside the analytics core and turned into replies by the router."""

from __future__ import annotations


class QueryError(Exception):
    """Base class for failures that end up as a user-facing reply."""


class UserInputError(QueryError):
    """Raised when the message is missing something only the user can supply."""


class EmptyResultError(QueryError):
    """Raised when the active filter selects no records."""

    def __init__(self, description: str) -> None:
        self.description = description
        super().__init__(f"No matching records were found for {description}.")


class ExternalServiceError(QueryError):
    """Raised when the record store, dialogue service, renderer or uploader fails."""

    def __init__(self, service: str, detail: str) -> None:
        self.service = service
        self.detail = detail
        super().__init__(f"{service} failed: {detail}")


__all__ = ["QueryError", "UserInputError", "EmptyResultError", "ExternalServiceError"]
