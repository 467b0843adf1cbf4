import streamlit as st

from laundrylink.config import AppConfig
from laundrylink.db.models import MACHINES
from laundrylink.machines import availability_label, is_available, list_machines, split_by_kind
from laundrylink.ui import badge, notify_error, watched_fetch


def _machine_grid(machines, columns: int, icon: str) -> None:
    if not machines:
        st.caption("No machines registered.")
        return
    cols = st.columns(columns)
    for i, machine in enumerate(machines):
        color = "#22c55e" if is_available(machine) else "#ef4444"
        with cols[i % columns]:
            with st.container(border=True):
                st.markdown(f"### {icon}")
                st.markdown(f"**{machine.get('name')}**")
                st.caption(machine.get("location") or "")
                st.markdown(badge(availability_label(machine), color), unsafe_allow_html=True)


def render_live_machine_status(cfg: AppConfig, client) -> None:
    st.subheader("🔴 Live Machine Availability")
    st.caption("Check real-time availability before you head down to the laundry room!")

    try:
        machines = watched_fetch(cfg, "machine-updates", MACHINES, lambda: list_machines(client))
    except Exception as e:
        notify_error("Error loading machines", e)
        return

    washers, dryers = split_by_kind(machines)
    left, right = st.columns(2)
    with left:
        st.markdown("#### 🫧 Washing Machines")
        _machine_grid(washers, 4, "🫧")
    with right:
        st.markdown("#### 🌬️ Dryers")
        _machine_grid(dryers, 2, "🌬️")
