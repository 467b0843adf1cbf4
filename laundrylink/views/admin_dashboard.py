import streamlit as st
import pandas as pd

from laundrylink.admin_bookings import (
    ALL,
    DISPLAY_COLUMNS,
    BookingFilters,
    apply_filters,
    bookings_frame,
    page_count,
    paginate,
    service_types,
    to_csv,
)
from laundrylink.auth import SignedInUser, list_profiles, require_role
from laundrylink.booking_flow import BOOKING_STATUSES
from laundrylink.bookings import list_all_bookings
from laundrylink.config import AppConfig
from laundrylink.db.models import LAUNDRY_ORDERS
from laundrylink.orders import (
    ORDER_STATUSES,
    fetch_active_orders,
    status_color,
    status_label,
    status_option_label,
    update_order_status,
)
from laundrylink.ui import badge, invalidate, notify_error, notify_success, watched_fetch
from laundrylink.views.analytics_view import render_analytics

SORTABLE = ["booking_date", "created_at", "time_slot", "service_type", "status", "cost", "email"]


def render_admin_dashboard(cfg: AppConfig, client, user: SignedInUser):
    st.title("🛡️ Admin Dashboard")
    st.caption("Manage all laundry operations and users")

    # --- Role check ---
    try:
        require_role(user, "admin")
    except Exception as e:
        notify_error("Access denied", e)
        st.warning("You don't have permission to access the admin dashboard.")
        return

    # --- Fetch Data ---
    try:
        orders = watched_fetch(cfg, "admin-orders", LAUNDRY_ORDERS, lambda: fetch_active_orders(client))
        profiles = list_profiles(client)
    except Exception as e:
        notify_error("Error loading admin dashboard", e)
        return

    # --- KPI Metrics ---
    col1, col2, col3 = st.columns(3)
    col1.metric("Active Orders", len(orders), help="Orders currently in progress")
    col2.metric("Total Students", sum(1 for p in profiles if p.get("role") == "student"))
    col3.metric("Ready for Pickup", sum(1 for o in orders if o.get("status") == "ready_for_pickup"))

    orders_tab, bookings_tab, users_tab, analytics_tab = st.tabs(
        ["📦 Active Orders", "🗓️ Bookings", "👥 Users", "📊 Analytics"]
    )
    with orders_tab:
        render_order_management(client, orders)
    with bookings_tab:
        render_bookings_table(cfg, client, profiles)
    with users_tab:
        render_users(profiles)
    with analytics_tab:
        render_analytics(cfg, client)


# --- Orders -----------------------------------------------------------------

def status_widget_key(order) -> str:
    # the stored status is part of the key, so the control follows changes made elsewhere
    return f"status-{order['id']}-{order.get('status')}"


def change_order_status(client, order_id, stored_status, key):
    """on_change callback of the status control: one update per user selection."""
    new_status = st.session_state[key]
    if new_status == stored_status:
        return
    try:
        update_order_status(client, order_id, new_status)
    except Exception as e:
        notify_error("Error updating order", e)
        # back to the stored status on the next run
        st.session_state.pop(key, None)
        return
    invalidate("admin-orders")
    notify_success("Order updated", f"Status changed to {new_status.replace('_', ' ')}")


def render_order_management(client, orders):
    if not orders:
        st.info("No active orders right now.")
        return

    for order in orders:
        owner = order.get("profiles") or {}
        status = order.get("status")
        key = status_widget_key(order)
        with st.container(border=True):
            c1, c2, c3 = st.columns([3, 2, 2])
            c1.markdown(f"**{owner.get('full_name') or 'Unknown'}** · {owner.get('email') or ''}")
            c1.caption(f"{order.get('service_type')} on {order.get('machine_id')} ({order.get('machine_type')})")
            c2.markdown(badge(status_label(status), status_color(status)), unsafe_allow_html=True)
            c3.selectbox(
                "Status",
                ORDER_STATUSES,
                index=ORDER_STATUSES.index(status) if status in ORDER_STATUSES else 0,
                format_func=status_option_label,
                key=key,
                on_change=change_order_status,
                args=(client, order["id"], status, key),
                label_visibility="collapsed",
            )


# --- Bookings ---------------------------------------------------------------

def render_bookings_table(cfg: AppConfig, client, profiles):
    try:
        df = bookings_frame(list_all_bookings(client), profiles)
    except Exception as e:
        notify_error("Error fetching data", e)
        return

    filters: BookingFilters = st.session_state.setdefault("admin_filters", BookingFilters())

    # --- Filters ---
    c1, c2, c3, c4 = st.columns(4)
    search = c1.text_input("Search", value=filters.search, placeholder="Email, machine, booking ID...")
    statuses = [ALL] + list(BOOKING_STATUSES)
    status = c2.selectbox("Status", statuses, index=statuses.index(filters.status) if filters.status in statuses else 0)
    services = [ALL] + service_types(df)
    service = c3.selectbox("Service", services, index=services.index(filters.service) if filters.service in services else 0)
    day = c4.date_input("Date", value=filters.booking_date)

    s1, s2, s3 = st.columns([2, 1, 1])
    sort_field = s1.selectbox("Sort by", SORTABLE, index=SORTABLE.index(filters.sort_field) if filters.sort_field in SORTABLE else 0)
    if s2.button("⇅ Toggle order"):
        filters.toggle_sort(sort_field)
    elif sort_field != filters.sort_field:
        filters.toggle_sort(sort_field)
    if s3.button("Reset filters"):
        filters.reset()
        st.session_state.admin_page = 1
        st.rerun()

    changed = (search, status, service, day) != (filters.search, filters.status, filters.service, filters.booking_date)
    filters.search, filters.status, filters.service, filters.booking_date = search, status, service, day
    if changed:
        st.session_state.admin_page = 1

    filtered = apply_filters(df, filters)
    pages = page_count(len(filtered), cfg.app.page_size)
    page = st.session_state.setdefault("admin_page", 1)

    st.caption(f"{len(filtered)} bookings · sorted by {filters.sort_field} ({filters.sort_direction})")
    final_cols = [c for c in DISPLAY_COLUMNS if c in filtered.columns]
    st.dataframe(paginate(filtered, page, cfg.app.page_size)[final_cols], use_container_width=True)

    p1, p2, p3 = st.columns([1, 2, 1])
    if p1.button("← Previous", disabled=page <= 1):
        st.session_state.admin_page = page - 1
        st.rerun()
    p2.caption(f"Page {page if pages else 0} of {pages}")
    if p3.button("Next →", disabled=page >= pages):
        st.session_state.admin_page = page + 1
        st.rerun()

    # --- Export ---
    st.download_button(
        "📥 Download as CSV",
        to_csv(filtered),
        "laundry_bookings.csv",
        "text/csv",
        key="download-csv",
    )


# --- Users ------------------------------------------------------------------

def render_users(profiles):
    if not profiles:
        st.info("No users yet.")
        return
    df = pd.DataFrame(profiles)
    display_cols = ["full_name", "email", "role", "room_number", "student_id", "phone", "created_at"]
    final_cols = [c for c in display_cols if c in df.columns]
    st.dataframe(df[final_cols], use_container_width=True)
