"""Supabase change feed for one browser session.

Realtime needs a long-lived websocket, while Streamlit reruns the script on
every interaction. The feed therefore runs the async Supabase client on its
own event loop in a daemon thread. Each subscription carries a key; every
``postgres_changes`` event for it bumps that key's version. Views compare the
version with the one their cached rows were fetched at and re-fetch
everything when it moved. The events are signals only, their payload is
ignored.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable, Dict, Optional

from supabase import acreate_client

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], Awaitable[Any]]

SUBSCRIBE_TIMEOUT = 10


class ChangeFeed:
    def __init__(
        self,
        url: str,
        key: str,
        access_token: Optional[str] = None,
        client_factory: ClientFactory = acreate_client,
    ):
        self._lock = threading.Lock()
        self._versions: Dict[str, int] = {}
        self._channels: Dict[str, Any] = {}
        self.access_token = access_token

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever, name="laundrylink-change-feed", daemon=True
        )
        self._thread.start()
        try:
            self._client = self._run(self._connect(url, key, access_token, client_factory))
        except Exception:
            self._stop_loop()
            raise

    # ---------------- LOOP ----------------

    def _run(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result(SUBSCRIBE_TIMEOUT)

    async def _connect(self, url, key, access_token, client_factory):
        client = await client_factory(url, key)
        if access_token:
            await client.realtime.set_auth(access_token)
        return client

    def _on_change(self, key: str) -> Callable[[Dict[str, Any]], None]:
        def callback(payload: Dict[str, Any]) -> None:
            with self._lock:
                self._versions[key] = self._versions.get(key, 0) + 1
            logger.debug("Change on %s: %s", key, payload.get("eventType") if isinstance(payload, dict) else payload)
        return callback

    def _on_state(self, key: str, channel) -> Callable[..., None]:
        def callback(state, error=None) -> None:
            state = getattr(state, "value", state)
            if state == "SUBSCRIBED":
                return
            # closed, errored or timed out: forget the channel and bump the
            # version so the next run re-subscribes and re-fetches
            with self._lock:
                if self._channels.get(key) is channel:
                    del self._channels[key]
                self._versions[key] = self._versions.get(key, 0) + 1
            logger.warning("Channel %s is %s: %s", key, state, error)
        return callback

    # ---------------- PUBLIC ----------------

    @property
    def keys(self):
        with self._lock:
            return set(self._channels)

    def version(self, key: str) -> int:
        with self._lock:
            return self._versions.get(key, 0)

    def subscribe(self, key: str, table: str, filter: Optional[str] = None) -> int:
        """Watch `table` (optionally `column=eq.value` filtered) under `key`.

        Subscribing an already watched key is a no-op. Returns the current version.
        """
        with self._lock:
            if key in self._channels:
                return self._versions.get(key, 0)

        async def _subscribe():
            channel = self._client.channel(key)
            channel.on_postgres_changes(
                "*", schema="public", table=table, filter=filter, callback=self._on_change(key)
            )
            await channel.subscribe(self._on_state(key, channel))
            return channel

        channel = self._run(_subscribe())
        with self._lock:
            self._channels[key] = channel
            self._versions.setdefault(key, 0)
        logger.info("Subscribed %s to %s (%s)", key, table, filter or "all rows")
        return self.version(key)

    def set_auth(self, access_token: str) -> None:
        """Hand a refreshed session token to the realtime socket."""
        self._run(self._client.realtime.set_auth(access_token))
        self.access_token = access_token
        logger.info("Realtime token refreshed")

    def unsubscribe(self, key: str) -> None:
        with self._lock:
            channel = self._channels.pop(key, None)
        if channel is None:
            return
        self._run(self._client.remove_channel(channel))
        logger.info("Unsubscribed %s", key)

    def close(self) -> None:
        for key in list(self.keys):
            self.unsubscribe(key)
        self._stop_loop()

    def _stop_loop(self) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=SUBSCRIBE_TIMEOUT)
        if not self._thread.is_alive():
            self._loop.close()
