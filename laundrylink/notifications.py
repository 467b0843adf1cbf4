# laundrylink/notifications.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from laundrylink.db.models import NOTIFICATIONS


def fetch_notifications(client, user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
    res = (
        client.table(NOTIFICATIONS)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return res.data or []


def unread_count(notifications: List[Dict[str, Any]]) -> int:
    return sum(1 for n in notifications if not n.get("read_at"))


def mark_read(client, user_id: str, notification_id: str) -> None:
    client.table(NOTIFICATIONS).update(
        {"read_at": datetime.now(timezone.utc).isoformat()}
    ).eq("id", notification_id).eq("user_id", user_id).execute()


def mark_all_read(client, user_id: str) -> None:
    client.table(NOTIFICATIONS).update(
        {"read_at": datetime.now(timezone.utc).isoformat()}
    ).eq("user_id", user_id).is_("read_at", "null").execute()
