import streamlit as st
import pandas as pd
import plotly.express as px

from laundrylink.analytics import AnalyticsReport, fetch_analytics
from laundrylink.config import AppConfig
from laundrylink.ui import money, notify_error

COLORS = ["#8884d8", "#82ca9d", "#ffc658", "#ff7300", "#8dd1e1"]


def render_analytics(cfg: AppConfig, client) -> None:
    with st.spinner("Crunching numbers..."):
        try:
            report = fetch_analytics(client, average_cycle_minutes=cfg.app.cycle_minutes)
        except Exception as e:
            notify_error("Error loading analytics", e)
            return

    render_report(report, cfg.app.currency)


def render_report(report: AnalyticsReport, currency: str = "₹") -> None:
    # --- KPI Metrics ---
    totals = report.totals
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Bookings", totals.total_bookings, help="All time bookings")
    c2.metric("Total Students", totals.total_users, help="Registered users")
    c3.metric("Total Revenue", money(totals.total_revenue, currency), help="From all bookings")
    c4.metric("Avg. Cycle Time", f"{totals.average_booking_time}m", help="Per laundry cycle")

    left, right = st.columns(2)

    # --- Peak Hours ---
    with left:
        st.markdown("#### 📈 Peak Laundry Hours")
        if report.peak_hours:
            fig = px.bar(pd.DataFrame(report.peak_hours), x="hour", y="bookings",
                         color_discrete_sequence=[COLORS[0]])
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.caption("No bookings yet.")

    # --- Popular Machines ---
    with right:
        st.markdown("#### Most Used Machines")
        if report.popular_machines:
            fig = px.pie(pd.DataFrame(report.popular_machines), names="machine", values="usage",
                         color_discrete_sequence=COLORS)
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.caption("No bookings yet.")

    left, right = st.columns(2)

    # --- Monthly Trend ---
    with left:
        st.markdown("#### Bookings Trend (Last 6 Months)")
        fig = px.line(pd.DataFrame(report.monthly_bookings), x="month", y="bookings", markers=True,
                      hover_data=["revenue"], color_discrete_sequence=[COLORS[0]])
        st.plotly_chart(fig, use_container_width=True)

    # --- Service Popularity ---
    with right:
        st.markdown("#### Service Popularity")
        if report.service_stats:
            fig = px.bar(pd.DataFrame(report.service_stats), x="count", y="service", orientation="h",
                         hover_data=["revenue"], color_discrete_sequence=[COLORS[1]])
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.caption("No bookings yet.")
