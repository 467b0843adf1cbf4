import streamlit as st

from laundrylink.auth import SignedInUser
from laundrylink.config import AppConfig
from laundrylink.db.models import NOTIFICATIONS
from laundrylink.notifications import fetch_notifications, mark_all_read, mark_read, unread_count
from laundrylink.ui import invalidate, notify_error, watched_fetch


def render_notification_center(cfg: AppConfig, client, user: SignedInUser) -> None:
    try:
        notifications = watched_fetch(
            cfg, "user-notifications", NOTIFICATIONS,
            lambda: fetch_notifications(client, user.id),
            filter=f"user_id=eq.{user.id}",
        )
    except Exception as e:
        notify_error("Error loading notifications", e)
        return

    unread = unread_count(notifications)
    head, action = st.columns([3, 1])
    head.subheader(f"🔔 Notifications ({unread} unread)")
    if unread and action.button("Mark all read"):
        try:
            mark_all_read(client, user.id)
        except Exception as e:
            notify_error("Error updating notifications", e)
            return
        invalidate("user-notifications")
        st.rerun()

    if not notifications:
        st.caption("You're all caught up.")
        return

    for n in notifications:
        with st.container(border=True):
            c1, c2 = st.columns([4, 1])
            title = n.get("title") or ""
            c1.markdown(f"**{title}**" if not n.get("read_at") else title)
            c1.write(n.get("message") or "")
            c1.caption(f"{n.get('type') or ''} · {str(n.get('sent_at') or n.get('created_at') or '')[:16].replace('T', ' ')}")
            if not n.get("read_at") and c2.button("Read", key=f"read-{n['id']}"):
                try:
                    mark_read(client, user.id, n["id"])
                except Exception as e:
                    notify_error("Error updating notifications", e)
                    return
                invalidate("user-notifications")
                st.rerun()
