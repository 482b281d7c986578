"""Route one chat message to help, outcome, chart or dialogue-fallback replies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Tuple

from core.charts import ChartPayload, DocumentSource
from core.errors import EmptyResultError, ExternalServiceError, UserInputError
from core.outcomes import co_occurring_terms, describe_outcomes
from core.records import RecordFilter
from core.vocabulary import Vocabulary, load_vocabulary
from data.query_parser import QueryIntent, has_trigger, parse_filter, parse_keyword
from helpers.dialogue import DialogueResponse
from helpers.logging_utils import RequestLog

HELP_TEXT = """usage:

- You can ask me to predict results by keyword:
e.g., "Tell me what would happen as result, the keyword is cancer"

- You can ask me to render a graph or table for term frequency analysis:
e.g., "Term frequency table graph where x is date, for male, age from 60 to 70. Keyword is PO"
e.g., "Term frequency line graph where x is date, female, age 60 to 70"
e.g., "Term frequency bar graph, group by gender, keyword is aortic"
e.g., "Term frequency pie chart, age between 50 to 60"
"""

NO_CHART_KIND_MESSAGE = (
    "If you want to render some graph for term frequency, please specify which kind of graph is desired. "
    "Line graph, pie graph, bar graph, and table is available"
)
NOT_UNDERSTOOD_MESSAGE = (
    "I don't know what you are talking about. You can submit 'help' to know more about what I can do."
)
SERVICE_FAILURE_MESSAGES = {
    "record store": "Sorry, I could not reach the record store right now.",
    "dialogue service": "Sorry, I could not understand that right now.",
    "chart renderer": "Sorry, the chart could not be rendered right now.",
    "image host": "Sorry, the chart could not be rendered right now.",
}
GENERIC_FAILURE_MESSAGE = "Sorry, something went wrong while handling your message."


class ChartDispatcher(Protocol):
    store: DocumentSource

    def pure_parse(self, raw_query: str) -> QueryIntent:
        ...

    def build_chart(self, intent: QueryIntent) -> ChartPayload:
        ...

    def publish(self, payload: ChartPayload) -> str:
        ...


class DialogueService(Protocol):
    def interpret(self, text: str) -> DialogueResponse:
        ...


@dataclass
class Reply:
    text: str
    route: str
    record_filter: RecordFilter
    payload: Optional[ChartPayload] = None
    error: bool = False
    request_id: str = ""


class ReplyRouter:
    def __init__(
        self,
        dispatcher: ChartDispatcher,
        dialogue: Optional[DialogueService] = None,
        vocabulary: Optional[Vocabulary] = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.dialogue = dialogue
        self.vocabulary = vocabulary or load_vocabulary()

    # ------------------------------------------------------------------
    def route(self, message: str) -> Reply:
        log = RequestLog()
        record_filter = parse_filter(message, self.vocabulary)
        log.event("request.received", {"message": message, "filter": record_filter.to_dict()})

        handlers: List[Tuple[str, Callable[[str, RecordFilter], Optional[Reply]]]] = [
            ("help", self._help_reply),
            ("effect", self._effect_reply),
            ("frequency", self._frequency_reply),
            ("fallback", self._fallback_reply),
        ]
        for route, handler in handlers:
            try:
                reply = handler(message, record_filter)
            except UserInputError as exc:
                reply = Reply(str(exc), route, record_filter, error=True)
            except EmptyResultError as exc:
                reply = Reply(str(exc), route, record_filter, error=True)
            except ExternalServiceError as exc:
                log.event("route.service_error", {"service": exc.service, "error": exc.detail}, level="error")
                text = SERVICE_FAILURE_MESSAGES.get(exc.service, GENERIC_FAILURE_MESSAGE)
                reply = Reply(text, route, record_filter, error=True)
            if reply is not None:
                reply.request_id = log.request_id
                log.event("route.selected", {"route": reply.route, "error": reply.error})
                return reply
        return Reply(NOT_UNDERSTOOD_MESSAGE, "fallback", record_filter, request_id=log.request_id)

    def process_message(self, message: str) -> str:
        """Route the message and publish any chart, returning the reply text or image link."""
        reply = self.route(message)
        if reply.payload is None:
            return reply.text
        try:
            return self.dispatcher.publish(reply.payload)
        except ExternalServiceError as exc:
            RequestLog(reply.request_id).event("publish.error", {"service": exc.service, "error": exc.detail}, level="error")
            return SERVICE_FAILURE_MESSAGES.get(exc.service, GENERIC_FAILURE_MESSAGE)

    # ------------------------------------------------------------------
    def _help_reply(self, message: str, record_filter: RecordFilter) -> Optional[Reply]:
        if not has_trigger(message, "help", self.vocabulary):
            return None
        return Reply(HELP_TEXT, "help", record_filter)

    def _effect_reply(self, message: str, record_filter: RecordFilter) -> Optional[Reply]:
        if not has_trigger(message, "effect", self.vocabulary):
            return None
        keyword = parse_keyword(message)
        if keyword is None:
            return None
        terms = co_occurring_terms(self.dispatcher.store.find_all(), keyword, vocabulary=self.vocabulary)
        return Reply(describe_outcomes(keyword, terms), "effect", record_filter)

    def _frequency_reply(self, message: str, record_filter: RecordFilter) -> Optional[Reply]:
        if not has_trigger(message, "frequency", self.vocabulary):
            return None
        intent = self.dispatcher.pure_parse(message)
        if intent.chart_kind is None:
            raise UserInputError(NO_CHART_KIND_MESSAGE)
        payload = self.dispatcher.build_chart(intent)
        return Reply(payload.title, "frequency", intent.record_filter, payload=payload)

    def _fallback_reply(self, message: str, record_filter: RecordFilter) -> Optional[Reply]:
        if self.dialogue is None:
            return Reply(NOT_UNDERSTOOD_MESSAGE, "fallback", record_filter)
        response = self.dialogue.interpret(message)
        text: Optional[str] = None
        for action in response.actions:
            if action == "show_info":
                text = f"Filters are: {', '.join(record_filter.values())}."
            elif action == "unknown":
                text = f"Did you say: {message}?"
        return Reply(text or response.fulfillment_text, "fallback", record_filter)


__all__ = [
    "HELP_TEXT",
    "NO_CHART_KIND_MESSAGE",
    "NOT_UNDERSTOOD_MESSAGE",
    "SERVICE_FAILURE_MESSAGES",
    "Reply",
    "ReplyRouter",
    "ChartDispatcher",
    "DialogueService",
]
