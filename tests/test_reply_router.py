import json
import logging

import pytest

from core.charts import BarChartBuilder, ChartKind
from core.errors import ExternalServiceError
from core.reply_router import (
    HELP_TEXT,
    NO_CHART_KIND_MESSAGE,
    NOT_UNDERSTOOD_MESSAGE,
    SERVICE_FAILURE_MESSAGES,
    ReplyRouter,
)
from dispatcher import Dispatcher
from helpers.reporter import ChartRenderer


@pytest.fixture
def router(dispatcher, vocabulary) -> ReplyRouter:
    return ReplyRouter(dispatcher, vocabulary=vocabulary)


def test_help_route(router) -> None:
    reply = router.route("help")
    assert reply.route == "help"
    assert reply.text == HELP_TEXT


def test_help_wins_over_frequency(router) -> None:
    assert router.route("help me with a tf table").route == "help"


def test_effect_route_lists_co_occurring_words(router) -> None:
    reply = router.route("what is the result, keyword is Fever")
    assert reply.route == "effect"
    assert reply.text == (
        "These things might occur as result, relating to the keyword Fever: cough, started, resolved."
    )


def test_effect_route_without_matches(router) -> None:
    reply = router.route("what is the effect, keyword is leukemia")
    assert reply.text == "I could not find anything relating to the keyword leukemia."


def test_effect_without_keyword_falls_through(router) -> None:
    reply = router.route("what is the effect")
    assert reply.route == "fallback"
    assert reply.text == NOT_UNDERSTOOD_MESSAGE


def test_frequency_without_chart_kind(router) -> None:
    reply = router.route("term frequency please")
    assert reply.route == "frequency"
    assert reply.error
    assert reply.text == NO_CHART_KIND_MESSAGE


def test_frequency_route_builds_payload(router) -> None:
    reply = router.route("Term frequency table graph, for female, age from 60 to 70")
    assert reply.route == "frequency"
    assert reply.payload is not None
    assert reply.payload.kind == ChartKind.TABLE
    assert reply.text == reply.payload.title
    assert reply.record_filter.sex == "female"


def test_process_message_publishes_chart(router, renderer, uploader) -> None:
    link = router.process_message("Term frequency pie chart, age between 50 to 70")
    assert link == uploader.link
    assert [payload.kind for payload in renderer.rendered] == [ChartKind.PIE]
    assert uploader.uploaded


def test_process_message_returns_text_replies(router) -> None:
    assert router.process_message("help") == HELP_TEXT


def test_empty_selection_reply(router) -> None:
    reply = router.route("tf pie chart age 100 to 110")
    assert reply.error
    assert reply.text == "No matching records were found for age: 100..110."


def test_missing_grouping_reply(router) -> None:
    reply = router.route("tf bar graph")
    assert reply.error
    assert reply.text == BarChartBuilder.missing_grouping_message


def test_filter_does_not_leak_between_messages(router) -> None:
    first = router.route("tf pie chart for female")
    second = router.route("tf pie chart")
    assert first.record_filter.sex == "female"
    assert second.record_filter.sex is None


def test_fallback_without_dialogue_service(router) -> None:
    reply = router.route("blah blah")
    assert reply.route == "fallback"
    assert not reply.error
    assert reply.text == NOT_UNDERSTOOD_MESSAGE


@pytest.mark.parametrize(
    "action, speech, message, expected",
    [
        ("show_info", "", "what are my filters, female age 60 to 70", "Filters are: female, 60..70."),
        ("unknown", "", "blah blah", "Did you say: blah blah?"),
        ("smalltalk.greetings", "Hello!", "hi there", "Hello!"),
        ("unknown;show_info", "", "blah", "Filters are: 0..120."),
    ],
)
def test_fallback_actions(dispatcher, vocabulary, dialogue_factory, action, speech, message, expected) -> None:
    dialogue = dialogue_factory(action=action, speech=speech)
    router = ReplyRouter(dispatcher, dialogue=dialogue, vocabulary=vocabulary)
    reply = router.route(message)
    assert reply.route == "fallback"
    assert reply.text == expected
    assert dialogue.messages == [message]


def test_dialogue_failure_reply(dispatcher, vocabulary, dialogue_factory) -> None:
    dialogue = dialogue_factory(error=ExternalServiceError("dialogue service", "timeout"))
    router = ReplyRouter(dispatcher, dialogue=dialogue, vocabulary=vocabulary)
    reply = router.route("hi there")
    assert reply.error
    assert reply.text == SERVICE_FAILURE_MESSAGES["dialogue service"]


def test_store_failure_reply(unreachable_store, renderer, vocabulary) -> None:
    router = ReplyRouter(Dispatcher(unreachable_store, renderer=renderer, vocabulary=vocabulary), vocabulary=vocabulary)
    for message in ("tf pie chart", "what is the result, keyword is cancer"):
        reply = router.route(message)
        assert reply.error
        assert reply.text == SERVICE_FAILURE_MESSAGES["record store"]


def test_render_failure_reply(store, failing_renderer, uploader, vocabulary) -> None:
    dispatcher = Dispatcher(store, renderer=failing_renderer, uploader=uploader, vocabulary=vocabulary)
    router = ReplyRouter(dispatcher, vocabulary=vocabulary)
    assert router.process_message("tf pie chart") == SERVICE_FAILURE_MESSAGES["chart renderer"]
    assert not uploader.uploaded


def test_unwritable_chart_directory_reply(store, uploader, vocabulary, tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    renderer = ChartRenderer(str(blocker / "charts"))
    router = ReplyRouter(Dispatcher(store, renderer=renderer, uploader=uploader, vocabulary=vocabulary), vocabulary=vocabulary)

    assert router.process_message("tf pie chart") == SERVICE_FAILURE_MESSAGES["chart renderer"]
    assert not uploader.uploaded


def test_frequency_route_parses_through_dispatcher(store, renderer, vocabulary) -> None:
    class TrackingDispatcher(Dispatcher):
        def __init__(self, *args, **kwargs) -> None:
            super().__init__(*args, **kwargs)
            self.parsed = []

        def pure_parse(self, raw_query):
            self.parsed.append(raw_query)
            return super().pure_parse(raw_query)

    dispatcher = TrackingDispatcher(store, renderer=renderer, vocabulary=vocabulary)
    router = ReplyRouter(dispatcher, vocabulary=vocabulary)
    reply = router.route("tf pie chart for female")
    assert dispatcher.parsed == ["tf pie chart for female"]
    assert reply.payload is not None


def test_route_events_share_one_request_id(router, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="clinical_chat"):
        reply = router.route("help")
    bound = [record for record in caplog.records if hasattr(record, "request_id")]
    events = [json.loads(record.getMessage()) for record in bound]
    assert [event["event"] for event in events] == ["request.received", "route.selected"]
    assert {record.request_id for record in bound} == {reply.request_id}
    assert {event["request_id"] for event in events} == {reply.request_id}
    assert reply.request_id.startswith("cc-")
