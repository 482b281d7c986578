"""Client for the hosted dialogue service used when no local route claims a message."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import uuid4

import requests

from core.errors import ExternalServiceError
from helpers.logging_utils import log_event


@dataclass(frozen=True)
class DialogueResponse:
    action: str
    fulfillment_text: str

    @property
    def actions(self) -> List[str]:
        return [action for action in self.action.split(";") if action]


def parse_dialogue_body(body: Any) -> DialogueResponse:
    if not isinstance(body, dict) or not isinstance(body.get("result"), dict):
        raise ExternalServiceError("dialogue service", "response has no result block")
    result: Dict[str, Any] = body["result"]
    fulfillment = result.get("fulfillment") or {}
    speech = fulfillment.get("speech", "") if isinstance(fulfillment, dict) else ""
    return DialogueResponse(action=str(result.get("action") or ""), fulfillment_text=str(speech or ""))


class DialogueClient:
    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        timeout: int = 10,
        session_id: Optional[str] = None,
        lang: str = "en",
    ) -> None:
        self.url = url
        self.token = token
        self.timeout = timeout
        self.session_id = session_id or uuid4().hex
        self.lang = lang

    def interpret(self, text: str) -> DialogueResponse:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        payload = {"query": text, "lang": self.lang, "sessionId": self.session_id}
        try:
            response = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            log_event("dialogue.request.error", {"url": self.url, "error": str(exc)}, level="error")
            raise ExternalServiceError("dialogue service", str(exc)) from exc
        return parse_dialogue_body(body)


__all__ = ["DialogueResponse", "DialogueClient", "parse_dialogue_body"]
