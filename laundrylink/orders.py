# laundrylink/orders.py

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from laundrylink.db.models import LAUNDRY_ORDERS, MACHINES, OrderStatus
from laundrylink.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("queued", "washing", "drying", "ready_for_pickup", "completed")
ACTIVE_STATUSES = ("queued", "washing", "drying", "ready_for_pickup")

STATUS_PROGRESS = {
    "queued": 25,
    "washing": 50,
    "drying": 75,
    "ready_for_pickup": 100,
}

STATUS_COLORS = {
    "queued": "#eab308",
    "washing": "#3b82f6",
    "drying": "#f97316",
    "ready_for_pickup": "#22c55e",
    "completed": "#6b7280",
}
DEFAULT_COLOR = "#6b7280"

STATUS_ICONS = {
    "queued": "⏳",
    "washing": "🫧",
    "drying": "🌀",
    "ready_for_pickup": "🔔",
    "completed": "✅",
}


# ----------------- DISPLAY ------------------------

def progress_percent(status: Optional[str]) -> int:
    # completed orders are no longer "in progress" and read 0, like unknown values
    return STATUS_PROGRESS.get(status or "", 0)


def status_label(status: Optional[str]) -> str:
    return (status or "").replace("_", " ").upper()


def status_option_label(status: str) -> str:
    return status.replace("_", " ").capitalize()


def status_color(status: Optional[str]) -> str:
    return STATUS_COLORS.get(status or "", DEFAULT_COLOR)


def status_icon(status: Optional[str]) -> str:
    return STATUS_ICONS.get(status or "", "⏳")


# ----------------- QUERIES ------------------------

def fetch_current_order(client, user_id: str) -> Optional[Dict[str, Any]]:
    res = (
        client.table(LAUNDRY_ORDERS)
        .select("*")
        .eq("user_id", user_id)
        .in_("status", list(ACTIVE_STATUSES))
        .order("created_at", desc=True)
        .limit(1)
        .execute()
    )
    return res.data[0] if res.data else None


def fetch_recent_orders(client, user_id: str, limit: int = 5) -> List[Dict[str, Any]]:
    res = (
        client.table(LAUNDRY_ORDERS)
        .select("*")
        .eq("user_id", user_id)
        .eq("status", "completed")
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return res.data or []


def fetch_active_orders(client) -> List[Dict[str, Any]]:
    """All in-progress orders with the owner's name and email embedded (admin only)."""
    res = (
        client.table(LAUNDRY_ORDERS)
        .select("*, profiles!inner(full_name, email)")
        .in_("status", list(ACTIVE_STATUSES))
        .order("created_at", desc=True)
        .execute()
    )
    return res.data or []


# ----------------- UPDATES ------------------------

def update_order_status(client, order_id: str, new_status: OrderStatus) -> Dict[str, Any]:
    """Set an order's status. Any known status may follow any other."""
    if new_status not in ORDER_STATUSES:
        raise ValidationError(f"Unknown order status: {new_status!r}")

    payload: Dict[str, Any] = {"status": new_status}
    if new_status == "completed":
        payload["actual_completion"] = datetime.now(timezone.utc).isoformat()

    res = client.table(LAUNDRY_ORDERS).update(payload).eq("id", order_id).execute()
    if not res.data:
        raise NotFoundError(f"Order {order_id} not found")

    if new_status == "completed":
        release_machine(client, order_id)

    logger.info("Order %s moved to %s", order_id, new_status)
    return res.data[0]


def release_machine(client, order_id: str) -> None:
    # the machine may already have been freed, so no rows back is fine
    client.table(MACHINES).update(
        {"current_order_id": None, "status": "Available"}
    ).eq("current_order_id", order_id).execute()
