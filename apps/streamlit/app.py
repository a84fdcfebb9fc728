"""
planchat Streamlit UI
=====================

Chat page for the planning agent. Talks to the planchat relay
(``POST /api/proxy``), never to the agent API directly.

Usage:
    pip install -e .
    uvicorn planchat.main:app --port 8000
    streamlit run apps/streamlit/app.py
"""

import asyncio
import threading

import streamlit as st

from planchat.client import ConversationController, CookieFileStore, RelayClient, SessionIdentityManager
from planchat.config import settings

st.set_page_config(page_title="Planning AI", page_icon="🗓️")


@st.cache_resource
def get_relay() -> RelayClient:
    """One relay client per server process (opens a connection per call)."""
    return RelayClient(settings.relay_url)


def get_controller() -> ConversationController:
    if "controller" not in st.session_state:
        relay = get_relay()
        identity = SessionIdentityManager(CookieFileStore(settings.cookie_file), relay)
        session_id, fresh = identity.obtain()
        if fresh:
            # registration must not hold up the page or the first message
            threading.Thread(
                target=asyncio.run, args=(identity.register(session_id),), daemon=True
            ).start()
        st.session_state.identity = identity
        st.session_state.controller = ConversationController(relay, session_id)
    return st.session_state.controller


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------
st.title("Planning AI")

controller = get_controller()
st.caption(f"Session `{controller.session_id}`")
if st.session_state.identity.last_init_error:
    st.warning(f"Session initialization failed: {st.session_state.identity.last_init_error}")

for message in controller.messages:
    with st.chat_message("user" if message.role == "user" else "assistant"):
        st.markdown(message.text)

# submit() finishes before the rerun; the controller drops overlapping sends
prompt = st.chat_input("Type a message…")
if prompt:
    with st.chat_message("user"):
        st.markdown(prompt)
    with st.spinner("AI is thinking…"):
        asyncio.run(controller.submit(prompt))
    st.rerun()
