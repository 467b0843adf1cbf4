import unittest

from laundrylink.realtime import ChangeFeed


class FakeChannel:
    def __init__(self, name):
        self.name = name
        self.bindings = []
        self.subscribed = False
        self.state_callback = None

    def on_postgres_changes(self, event, schema="public", table=None, filter=None, callback=None):
        self.bindings.append({"event": event, "schema": schema, "table": table,
                              "filter": filter, "callback": callback})
        return self

    async def subscribe(self, callback=None):
        self.subscribed = True
        self.state_callback = callback
        return self

    def fire(self, event_type="UPDATE"):
        for binding in self.bindings:
            binding["callback"]({"eventType": event_type})


class FakeRealtime:
    def __init__(self):
        self.token = None
        self.calls = []

    async def set_auth(self, token):
        self.token = token
        self.calls.append(token)


class FakeAsyncClient:
    def __init__(self):
        self.channels = []
        self.removed = []
        self.realtime = FakeRealtime()

    def channel(self, name):
        channel = FakeChannel(name)
        self.channels.append(channel)
        return channel

    async def remove_channel(self, channel):
        self.removed.append(channel)


class ChangeFeedTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.client = FakeAsyncClient()
        self.created_with = None

        async def factory(url, key):
            self.created_with = (url, key)
            return self.client

        self.feed = ChangeFeed("https://x.supabase.co", "anon", access_token="jwt", client_factory=factory)

    def tearDown(self) -> None:
        self.feed.close()

    def test_connects_with_session_token(self) -> None:
        self.assertEqual(self.created_with, ("https://x.supabase.co", "anon"))
        self.assertEqual(self.client.realtime.token, "jwt")

    def test_subscribe_binds_table_and_filter(self) -> None:
        self.assertEqual(self.feed.subscribe("user-orders", "laundry_orders", "user_id=eq.u1"), 0)
        (channel,) = self.client.channels
        self.assertTrue(channel.subscribed)
        self.assertEqual(channel.bindings[0]["table"], "laundry_orders")
        self.assertEqual(channel.bindings[0]["filter"], "user_id=eq.u1")
        self.assertEqual(channel.bindings[0]["event"], "*")
        self.assertEqual(self.feed.keys, {"user-orders"})

    def test_events_bump_version(self) -> None:
        self.feed.subscribe("machine-updates", "machines")
        channel = self.client.channels[0]
        channel.fire("UPDATE")
        channel.fire("INSERT")
        self.assertEqual(self.feed.version("machine-updates"), 2)
        self.assertEqual(self.feed.version("other"), 0)

    def test_resubscribe_is_noop(self) -> None:
        self.feed.subscribe("machine-updates", "machines")
        self.client.channels[0].fire()
        self.assertEqual(self.feed.subscribe("machine-updates", "machines"), 1)
        self.assertEqual(len(self.client.channels), 1)

    def test_unsubscribe_removes_channel(self) -> None:
        self.feed.subscribe("wallet-updates", "wallet_transactions")
        self.feed.unsubscribe("wallet-updates")
        self.feed.unsubscribe("wallet-updates")
        self.assertEqual(self.feed.keys, set())
        self.assertEqual(self.client.removed, self.client.channels)

    def test_set_auth_updates_socket_token(self) -> None:
        self.feed.set_auth("jwt-2")
        self.assertEqual(self.client.realtime.calls, ["jwt", "jwt-2"])
        self.assertEqual(self.feed.access_token, "jwt-2")

    def test_closed_channel_is_dropped_and_resubscribed(self) -> None:
        self.feed.subscribe("user-orders", "laundry_orders", "user_id=eq.u1")
        channel = self.client.channels[0]
        channel.state_callback("SUBSCRIBED", None)
        self.assertEqual(self.feed.version("user-orders"), 0)

        with self.assertLogs("laundrylink.realtime", level="WARNING"):
            channel.state_callback("CHANNEL_ERROR", RuntimeError("token expired"))
        self.assertEqual(self.feed.keys, set())
        self.assertEqual(self.feed.version("user-orders"), 1)

        self.assertEqual(self.feed.subscribe("user-orders", "laundry_orders", "user_id=eq.u1"), 1)
        self.assertEqual(len(self.client.channels), 2)
        self.assertEqual(self.feed.keys, {"user-orders"})

    def test_close_removes_everything(self) -> None:
        self.feed.subscribe("a", "bookings")
        self.feed.subscribe("b", "machines")
        self.feed.close()
        self.assertEqual(len(self.client.removed), 2)
        self.assertFalse(self.feed._thread.is_alive())


class ChangeFeedConnectFailureTestCase(unittest.TestCase):
    def test_connect_failure_raises_and_stops_thread(self) -> None:
        async def factory(url, key):
            raise ConnectionError("realtime unavailable")

        with self.assertRaises(ConnectionError):
            ChangeFeed("https://x.supabase.co", "anon", client_factory=factory)


if __name__ == "__main__":
    unittest.main()
