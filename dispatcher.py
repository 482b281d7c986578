# dispatcher.py

"""Thin helpers that bridge parsed chart requests to builders, the renderer and the image host."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Protocol, Type

from core.charts import CHART_BUILDERS, ChartBuilder, ChartKind, ChartPayload, DocumentSource
from core.errors import ExternalServiceError, UserInputError
from core.reply_router import NO_CHART_KIND_MESSAGE, ReplyRouter
from core.settings import Settings
from core.vocabulary import Vocabulary, load_vocabulary
from data.query_parser import QueryIntent, parse_message
from helpers.datasources import JsonDocumentStore, MongoDocumentStore
from helpers.dialogue import DialogueClient
from helpers.reporter import ChartRenderer, ImgurUploader


class Renderer(Protocol):
    def render(self, payload: ChartPayload) -> Path:
        ...


class Uploader(Protocol):
    def upload(self, path: Path) -> str:
        ...


class Dispatcher:
    """Build chart payloads for parsed requests and publish them as image links."""

    def __init__(
        self,
        store: DocumentSource,
        renderer: Optional[Renderer] = None,
        uploader: Optional[Uploader] = None,
        vocabulary: Optional[Vocabulary] = None,
        builders: Optional[Dict[ChartKind, Type[ChartBuilder]]] = None,
    ) -> None:
        self.store = store
        self.renderer = renderer
        self.uploader = uploader
        self.vocabulary = vocabulary or load_vocabulary()
        self.builders = builders or CHART_BUILDERS

    def pure_parse(self, raw_query: str) -> QueryIntent:
        return parse_message(raw_query, self.vocabulary)

    def build_chart(self, intent: QueryIntent) -> ChartPayload:
        if intent.chart_kind is None:
            raise UserInputError(NO_CHART_KIND_MESSAGE)
        builder = self.builders[intent.chart_kind](self.store, self.vocabulary)
        return builder.build_payload(intent.record_filter, intent.grouping)

    def publish(self, payload: ChartPayload) -> str:
        """Render the payload; return the hosted link, or the local path without an uploader."""

        if self.renderer is None:
            raise ExternalServiceError("chart renderer", "no renderer configured")
        path = self.renderer.render(payload)
        if self.uploader is None:
            return str(path)
        return self.uploader.upload(path)


def build_store(settings: Settings) -> DocumentSource:
    if settings.mongo_uri:
        return MongoDocumentStore(settings.mongo_uri, settings.mongo_db, settings.mongo_collection)
    return JsonDocumentStore.from_path(settings.records_path)


def build_router(settings: Settings) -> ReplyRouter:
    vocabulary = load_vocabulary(settings.vocabulary_path)
    uploader = (
        ImgurUploader(settings.imgur_client_id, timeout=settings.request_timeout_sec)
        if settings.imgur_client_id
        else None
    )
    dispatcher = Dispatcher(
        store=build_store(settings),
        renderer=ChartRenderer(settings.chart_output_dir),
        uploader=uploader,
        vocabulary=vocabulary,
    )
    dialogue = (
        DialogueClient(settings.dialogue_url, settings.dialogue_token, timeout=settings.request_timeout_sec)
        if settings.dialogue_url
        else None
    )
    return ReplyRouter(dispatcher, dialogue=dialogue, vocabulary=vocabulary)


__all__ = ["Dispatcher", "Renderer", "Uploader", "build_store", "build_router"]
