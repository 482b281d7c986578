# app.py

'''
Clinical Term Analytics Streamlit Frontend

This module implements the interactive Streamlit interface for the clinical record chat engine.

Features:
1. Chat UI with role-based message rendering for user and assistant.
2. Term frequency charts (pie, table, line, bar) rendered inline from chart payloads.
3. Keyword outcome summaries, usage help and dialogue-service fallback replies as text.
4. Active filter shown under every chart for traceability.
5. Session state management for chat history and the reply router.
'''


import plotly.io as pio
import streamlit as st  # type: ignore

from core.charts import ChartKind
from core.errors import ExternalServiceError
from core.reply_router import Reply, ReplyRouter
from core.settings import get_settings
from dispatcher import build_router
from helpers.reporter import figure_json


@st.cache_resource
def load_router() -> ReplyRouter:
    return build_router(get_settings())


def render_assistant_reply(reply: Reply):
    """Render a routed reply: a chart when one was built, plain text otherwise."""

    payload = reply.payload
    if payload is None:
        if reply.error:
            st.warning(reply.text)
        else:
            st.markdown(reply.text)
        return

    if payload.kind == ChartKind.TABLE:
        st.markdown(f"**{payload.title}**")
        st.dataframe(payload.to_frame(), width='stretch')
    else:
        try:
            fig = pio.from_json(figure_json(payload))
            st.plotly_chart(fig, width='stretch')
        except ValueError as exc:
            st.caption(f"[chart rendering failed: {exc}]")
    st.caption(f"Filter: {reply.record_filter.describe()}")


# --- Streamlit Chat UI ---
st.set_page_config(page_title="Clinical Term Analytics", layout="wide")
st.title("Clinical Term Analytics Assistant")

# --- Sidebar Controls ---
st.sidebar.markdown("### Controls")
if st.sidebar.button("🗑️ Clear Chat"):
    st.session_state.chat_history = []
    st.rerun()

# --- Session State Initialization ---
if "chat_history" not in st.session_state:
    st.session_state.chat_history = []

try:
    router = load_router()
except ExternalServiceError as exc:
    st.error(f"Could not start the assistant: {exc}")
    st.stop()


# --- Helper Functions ---
def add_message(role, message):
    st.session_state.chat_history.append((role, message))
    if len(st.session_state.chat_history) > 200:
        st.session_state.chat_history.pop(0)


def display_chat():
    for role, msg in st.session_state.chat_history:
        with st.chat_message(role):
            if isinstance(msg, Reply):
                render_assistant_reply(msg)
            elif isinstance(msg, str):
                st.markdown(msg)
            else:
                st.markdown(str(msg))


def respond(user_input):
    add_message("user", user_input)
    with st.chat_message("user"):
        st.markdown(user_input)

    with st.chat_message("assistant"), st.spinner("Assistant is composing..."):
        reply = router.route(user_input)
        render_assistant_reply(reply)
    add_message("assistant", reply)


# --- Main Flow ---
display_chat()

given_input = st.chat_input("Ask for a term frequency chart, or type 'help'...", key="input")
if given_input:
    input_text = given_input.strip()
    if input_text:
        respond(input_text)
