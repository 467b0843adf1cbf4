# laundrylink/ui.py

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import streamlit as st

from laundrylink.config import AppConfig
from laundrylink.errors import LaundryError, describe_error
from laundrylink.realtime import ChangeFeed

logger = logging.getLogger(__name__)


# --- TOASTS -----------------------------------------------------------------

def notify_error(title: str, exc: BaseException) -> None:
    if isinstance(exc, LaundryError):
        logger.warning("%s: %s", title, exc)
    else:
        logger.exception("%s", title, exc_info=exc)
    st.toast(f"**{title}**\n\n{describe_error(exc)}", icon="⚠️")


def notify_success(title: str, description: str = "") -> None:
    st.toast(f"**{title}**\n\n{description}" if description else f"**{title}**", icon="✅")


def money(amount: Any, currency: str = "₹") -> str:
    return f"{currency}{float(amount or 0):.2f}"


def badge(label: str, color: str) -> str:
    return (
        f'<span style="background:{color};color:white;padding:2px 10px;'
        f'border-radius:999px;font-size:0.75rem;font-weight:600">{label}</span>'
    )


# --- CHANGE FEED ------------------------------------------------------------

def get_change_feed(cfg: AppConfig) -> Optional[ChangeFeed]:
    """The session's change feed, created on first use.

    Without a feed every rerun re-fetches, which only costs freshness latency.
    """
    if "change_feed" not in st.session_state:
        user = st.session_state.get("user")
        token = getattr(user, "access_token", None)
        try:
            st.session_state.change_feed = ChangeFeed(cfg.supabase.url, cfg.supabase.anon_key, access_token=token)
        except Exception:
            logger.exception("Realtime connection failed, views will re-fetch on every rerun")
            st.session_state.change_feed = None
    return st.session_state.change_feed


def refresh_feed_auth(client) -> None:
    """Pass the client's current access token on to the change feed when it rotated."""
    feed = st.session_state.get("change_feed")
    if feed is None:
        return
    session = client.auth.get_session()
    token = getattr(session, "access_token", None)
    if token and token != feed.access_token:
        feed.set_auth(token)


def close_change_feed() -> None:
    feed = st.session_state.pop("change_feed", None)
    if feed is not None:
        feed.close()
    st.session_state.pop("feed_cache", None)


def begin_page() -> None:
    st.session_state.watched_keys = set()


def end_page() -> None:
    """Drop subscriptions the page rendered in this run did not watch."""
    feed = st.session_state.get("change_feed")
    if feed is None:
        return
    watched = st.session_state.get("watched_keys", set())
    cache = st.session_state.setdefault("feed_cache", {})
    for key in feed.keys - watched:
        feed.unsubscribe(key)
        cache.pop(key, None)


def watched_fetch(cfg: AppConfig, key: str, table: str, fetch: Callable[[], Any],
                  filter: Optional[str] = None) -> Any:
    """Run `fetch` again only when the change feed reported a change for `key`."""
    st.session_state.setdefault("watched_keys", set()).add(key)
    cache = st.session_state.setdefault("feed_cache", {})

    feed = get_change_feed(cfg)
    if feed is None:
        return fetch()

    version = feed.subscribe(key, table, filter)
    entry = cache.get(key)
    if entry is None or entry[0] != version:
        cache[key] = (version, fetch())
    return cache[key][1]


def invalidate(*keys: str) -> None:
    cache = st.session_state.setdefault("feed_cache", {})
    for key in keys:
        cache.pop(key, None)
