"""Shared helpers for the Streamlit display apps."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

import httpx
import streamlit as st

from menu_portal.client.api_client import PortalClient
from menu_portal.client.polling import PollSource
from menu_portal.core.config import settings
from menu_portal.core.errors import AuthenticationError

T = TypeVar("T")


def get_client() -> PortalClient:
    """One API client per browser session, carrying that session's token."""
    if "portal_client" not in st.session_state:
        st.session_state.portal_client = PortalClient(settings.portal_api_url)
    return st.session_state.portal_client


def is_display_visible() -> bool:
    """False while the operator has paused live updates for this browser session."""
    return not st.session_state.get("updates_paused", False)


def render_visibility_toggle() -> None:
    st.sidebar.toggle("Pause live updates", key="updates_paused")


def get_poll_source(
    key: str,
    fetch: Callable[[], T],
    interval: float,
    is_visible: Callable[[], bool] = is_display_visible,
) -> PollSource[T]:
    """Keep a ``PollSource`` across reruns so the last good value survives failures."""
    state_key = f"poll_{key}"
    source = st.session_state.get(state_key)
    if source is None:
        source = PollSource(fetch, interval=interval, is_visible=is_visible, name=key)
        st.session_state[state_key] = source
    source.fetch = fetch
    return source


def reset_session() -> None:
    for key in list(st.session_state.keys()):
        del st.session_state[key]


def render_login(client: PortalClient) -> None:
    st.subheader("Sign in")
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")
    if submitted:
        try:
            user = client.login(email, password)
        except (AuthenticationError, httpx.HTTPError) as exc:
            st.error(str(exc))
            return
        st.session_state.user = user
        st.rerun()
