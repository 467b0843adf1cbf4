import streamlit as st

from laundrylink.auth import SignedInUser
from laundrylink.booking_flow import (
    BOOKING_STATUSES,
    filter_by_status,
    format_long_date,
    group_bookings_by_date,
    is_upcoming,
    normalize_status,
    status_color,
    status_counts,
)
from laundrylink.bookings import cancel_booking, list_user_bookings
from laundrylink.config import AppConfig
from laundrylink.db.models import BOOKINGS
from laundrylink.ui import badge, invalidate, money, notify_error, notify_success, watched_fetch


def _booking_card(cfg: AppConfig, client, user: SignedInUser, booking, key_prefix: str) -> None:
    machine = (booking.get("machines") or {}).get("name") or booking.get("machine_id")
    with st.container(border=True):
        c1, c2, c3 = st.columns([3, 2, 1])
        c1.markdown(f"**🕒 {booking.get('time_slot')}** · {booking.get('service_type')}")
        c1.caption(f"📍 {machine}")
        c2.markdown(
            badge(normalize_status(booking.get("status")).upper(), status_color(booking.get("status"))),
            unsafe_allow_html=True,
        )
        c2.caption(money(booking.get("cost"), cfg.app.currency))
        if is_upcoming(booking):
            if c3.button("Cancel", key=f"{key_prefix}-cancel-{booking['id']}"):
                try:
                    cancel_booking(client, user.id, booking["id"])
                except Exception as e:
                    notify_error("Error cancelling booking", e)
                    return
                invalidate("user-bookings")
                notify_success("Booking cancelled", "Your booking has been successfully cancelled")
                st.rerun()


def render_booking_history(cfg: AppConfig, client, user: SignedInUser) -> None:
    st.subheader("🗓️ My Bookings")

    try:
        bookings = watched_fetch(
            cfg, "user-bookings", BOOKINGS,
            lambda: list_user_bookings(client, user.id, with_machine=True),
            filter=f"user_id=eq.{user.id}",
        )
    except Exception as e:
        notify_error("Error loading bookings", e)
        return

    counts = status_counts(bookings)
    cols = st.columns(len(BOOKING_STATUSES))
    for col, status in zip(cols, BOOKING_STATUSES):
        col.metric(status.capitalize(), counts[status])

    if not bookings:
        st.info("No bookings yet. Head to **Book a Slot** to reserve a machine.")
        return

    tabs = st.tabs(["All"] + [s.capitalize() for s in BOOKING_STATUSES])
    with tabs[0]:
        for day, day_bookings in group_bookings_by_date(bookings).items():
            st.markdown(f"##### {format_long_date(day)}")
            for booking in day_bookings:
                _booking_card(cfg, client, user, booking, "all")

    for tab, status in zip(tabs[1:], BOOKING_STATUSES):
        with tab:
            subset = filter_by_status(bookings, status)
            if not subset:
                st.caption(f"No {status} bookings.")
            for booking in subset:
                _booking_card(cfg, client, user, booking, status)
