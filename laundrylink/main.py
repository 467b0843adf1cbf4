from __future__ import annotations

import logging

import streamlit as st
from streamlit_autorefresh import st_autorefresh

from laundrylink.auth import SignedInUser, sign_out
from laundrylink.config import AppConfig, load_config
from laundrylink.db.database import get_supabase_client, reset_supabase_client
from laundrylink.ui import begin_page, close_change_feed, end_page, notify_error, refresh_feed_auth
from laundrylink.views.admin_dashboard import render_admin_dashboard
from laundrylink.views.auth_view import render_auth
from laundrylink.views.booking_page import render_booking_page
from laundrylink.views.machine_status import render_live_machine_status
from laundrylink.views.user_dashboard import render_user_dashboard

logger = logging.getLogger(__name__)

STUDENT_PAGES = ["Dashboard", "Book a Slot", "Machine Status"]
ADMIN_PAGES = ["Admin Dashboard", "Machine Status"]


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# --- CSS STYLING ---
def inject_custom_css():
    st.markdown("""
    <style>
        /* --- Tighter cards --- */
        div[data-testid="stVerticalBlockBorderWrapper"] {
            border-radius: 12px;
        }
        div[data-testid="stMetricValue"] {
            font-size: 1.6rem;
        }

        /* --- Hide Footer for clean look --- */
        footer {visibility: hidden;}
    </style>
    """, unsafe_allow_html=True)


def pages_for(user: SignedInUser):
    return ADMIN_PAGES if user.is_admin else STUDENT_PAGES


def _sign_out(client):
    try:
        sign_out(client)
    except Exception as e:
        notify_error("Error signing out", e)
    close_change_feed()
    reset_supabase_client()
    for key in ("user", "scanned_machine", "admin_filters", "admin_page"):
        st.session_state.pop(key, None)
    st.rerun()


def render_page(cfg: AppConfig, client, user: SignedInUser, page: str):
    if page == "Dashboard":
        render_user_dashboard(cfg, client, user)
    elif page == "Book a Slot":
        render_booking_page(cfg, client, user)
    elif page == "Admin Dashboard":
        render_admin_dashboard(cfg, client, user)
    else:
        render_live_machine_status(cfg, client)


def main():
    st.set_page_config(
        page_title="Hostel LaundryLink",
        page_icon="🧺",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    inject_custom_css()
    try:
        cfg = load_config()
    except Exception as e:
        st.error(f"Configuration error: {e}")
        st.stop()

    configure_logging(cfg.app.log_level)
    client = get_supabase_client(cfg.supabase)

    user: SignedInUser | None = st.session_state.get("user")
    if user is None:
        render_auth(cfg, client)
        return

    # Reruns the script so watched views pick up change-feed versions.
    st_autorefresh(interval=cfg.app.refresh_interval_ms, key="live-refresh")

    # --- SIDEBAR NAVIGATION ---
    with st.sidebar:
        st.title(f"🧺 {cfg.app.title}")
        st.caption(f"Signed in as {user.email} ({user.role})")
        page = st.radio("Go to", pages_for(user))
        st.divider()
        if st.button("Sign out", use_container_width=True):
            _sign_out(client)

    try:
        refresh_feed_auth(client)
    except Exception as e:
        notify_error("Error refreshing live updates", e)

    begin_page()
    render_page(cfg, client, user, page)
    end_page()


if __name__ == "__main__":
    main()
