import unittest
from types import SimpleNamespace
from unittest import mock

from streamlit.testing.v1 import AppTest

from laundrylink import ui
from laundrylink.views import admin_dashboard
from tests.fakes import FakeSupabase
from tests.test_ui import SessionState

ORDERS = [
    {"id": "o1", "user_id": "u1", "machine_id": "W1", "machine_type": "washer", "service_type": "Quick Wash",
     "status": "washing", "created_at": "2026-10-19T08:00:00+00:00"},
]


def order_management_page():
    import streamlit as st

    from laundrylink.orders import fetch_active_orders
    from laundrylink.views.admin_dashboard import render_order_management

    db = st.session_state["db"]
    render_order_management(db, fetch_active_orders(db))


def updates(db):
    return [payload["status"] for table, op, payload in db.calls if op == "update" and table == "laundry_orders"]


class OrderStatusControlTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = FakeSupabase({"laundry_orders": ORDERS, "machines": []})
        self.at = AppTest.from_function(order_management_page, default_timeout=30)
        self.at.session_state["db"] = self.db
        self.at.run()
        self.db = self.at.session_state["db"]

    def test_rerun_follows_status_changed_elsewhere(self) -> None:
        self.assertEqual(self.at.selectbox(key="status-o1-washing").value, "washing")

        self.db.rows("laundry_orders")[0]["status"] = "drying"
        self.at.run()
        self.at.run()

        self.assertEqual(updates(self.db), [])
        self.assertEqual(self.db.rows("laundry_orders")[0]["status"], "drying")
        self.assertEqual(self.at.selectbox(key="status-o1-drying").value, "drying")

    def test_one_write_per_selection(self) -> None:
        self.at.selectbox(key="status-o1-washing").select("drying").run()
        self.at.run()

        self.assertEqual(updates(self.db), ["drying"])
        self.assertEqual(self.db.rows("laundry_orders")[0]["status"], "drying")
        self.assertEqual(self.at.selectbox(key="status-o1-drying").value, "drying")

    def test_failed_write_is_not_retried(self) -> None:
        self.db.fail_on.add(("laundry_orders", "update"))
        self.at.selectbox(key="status-o1-washing").select("drying").run()
        self.at.run()
        self.at.run()

        self.assertEqual(updates(self.db), ["drying"])
        self.assertEqual(self.db.rows("laundry_orders")[0]["status"], "washing")
        self.assertEqual(self.at.selectbox(key="status-o1-washing").value, "washing")


class ChangeOrderStatusTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = FakeSupabase({"laundry_orders": ORDERS, "machines": []})
        self.session = SessionState(feed_cache={"admin-orders": (0, ORDERS)})
        fake_st = SimpleNamespace(session_state=self.session, toast=mock.Mock())
        for module in (admin_dashboard, ui):
            patcher = mock.patch.object(module, "st", fake_st)
            patcher.start()
            self.addCleanup(patcher.stop)
        self.key = admin_dashboard.status_widget_key(ORDERS[0])

    def test_key_carries_stored_status(self) -> None:
        self.assertEqual(self.key, "status-o1-washing")

    def test_unchanged_selection_writes_nothing(self) -> None:
        self.session[self.key] = "washing"
        admin_dashboard.change_order_status(self.db, "o1", "washing", self.key)
        self.assertEqual(updates(self.db), [])

    def test_selection_updates_and_invalidates(self) -> None:
        self.session[self.key] = "ready_for_pickup"
        admin_dashboard.change_order_status(self.db, "o1", "washing", self.key)
        self.assertEqual(updates(self.db), ["ready_for_pickup"])
        self.assertNotIn("admin-orders", self.session.feed_cache)

    def test_failure_resets_widget(self) -> None:
        self.db.fail_on.add(("laundry_orders", "update"))
        self.session[self.key] = "drying"
        with self.assertLogs("laundrylink.ui", level="ERROR"):
            admin_dashboard.change_order_status(self.db, "o1", "washing", self.key)
        self.assertNotIn(self.key, self.session)
        self.assertIn("admin-orders", self.session.feed_cache)


if __name__ == "__main__":
    unittest.main()
