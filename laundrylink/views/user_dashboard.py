import streamlit as st

from laundrylink.auth import SignedInUser
from laundrylink.config import AppConfig
from laundrylink.db.models import LAUNDRY_ORDERS
from laundrylink.orders import (
    fetch_current_order,
    fetch_recent_orders,
    progress_percent,
    status_color,
    status_icon,
    status_label,
)
from laundrylink.ui import badge, notify_error, watched_fetch
from laundrylink.views.booking_history import render_booking_history
from laundrylink.views.notification_center import render_notification_center
from laundrylink.views.qr_scanner import render_qr_scanner
from laundrylink.views.wallet_view import render_wallet


def _current_order_card(order) -> None:
    with st.container(border=True):
        st.markdown("#### Current Laundry")
        if not order:
            st.caption("You don't have any laundry orders in progress")
            return
        status = order.get("status")
        c1, c2 = st.columns([3, 1])
        c1.markdown(f"**{order.get('service_type')}** on machine `{order.get('machine_id')}` ({order.get('machine_type')})")
        c2.markdown(badge(f"{status_icon(status)} {status_label(status)}", status_color(status)), unsafe_allow_html=True)
        percent = progress_percent(status)
        st.progress(percent, text=f"{percent}%")
        if order.get("estimated_completion"):
            st.caption(f"Estimated completion: {str(order['estimated_completion'])[:16].replace('T', ' ')}")


def render_user_dashboard(cfg: AppConfig, client, user: SignedInUser) -> None:
    st.title(f"👋 Welcome back, {user.full_name or user.email}")

    try:
        current, recent = watched_fetch(
            cfg, "user-orders", LAUNDRY_ORDERS,
            lambda: (fetch_current_order(client, user.id), fetch_recent_orders(client, user.id)),
            filter=f"user_id=eq.{user.id}",
        )
    except Exception as e:
        notify_error("Error loading dashboard", e)
        current, recent = None, []

    left, right = st.columns([2, 1])
    with left:
        _current_order_card(current)
    with right:
        with st.container(border=True):
            st.markdown("#### Recent Orders")
            if not recent:
                st.caption("No completed orders yet")
            for order in recent:
                st.markdown(
                    f"{status_icon(order.get('status'))} {order.get('service_type')} · "
                    f"{str(order.get('created_at') or '')[:10]}"
                )

    bookings_tab, wallet_tab, scan_tab, notes_tab = st.tabs(
        ["🗓️ Bookings", "👛 Wallet", "📷 Scan QR", "🔔 Notifications"]
    )
    with bookings_tab:
        render_booking_history(cfg, client, user)
    with wallet_tab:
        render_wallet(cfg, client, user)
    with scan_tab:
        render_qr_scanner(cfg, client, user)
    with notes_tab:
        render_notification_center(cfg, client, user)
