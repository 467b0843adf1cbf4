import streamlit as st

from laundrylink.auth import SignedInUser
from laundrylink.config import AppConfig
from laundrylink.machines import decode_qr, find_machine_by_qr, start_laundry
from laundrylink.ui import invalidate, notify_error, notify_success


def render_qr_scanner(cfg: AppConfig, client, user: SignedInUser) -> None:
    st.subheader("📷 QR Code Scanner")
    st.caption("Scan a machine's QR code to start your laundry")

    machine = st.session_state.get("scanned_machine")

    if machine is None:
        snapshot = st.camera_input("Point your camera at the machine's QR code")
        if snapshot is None:
            return
        try:
            payload = decode_qr(snapshot.getvalue())
            if payload is None:
                st.warning("No QR code found in the picture. Try again a little closer.")
                return
            machine = find_machine_by_qr(client, payload)
        except Exception as e:
            notify_error("Error processing QR code", e)
            return
        st.session_state.scanned_machine = machine
        notify_success("Machine scanned successfully!", f"Ready to start laundry on {machine['name']}")

    with st.container(border=True):
        st.markdown(f"### {machine['name']}")
        st.write(f"Type: {machine.get('type')}")
        st.success(f"Status: {machine.get('status') or 'Available'}")

    c1, c2 = st.columns(2)
    if c1.button("Start Laundry", type="primary", use_container_width=True):
        try:
            start_laundry(client, user.id, machine, cycle_minutes=cfg.app.cycle_minutes)
        except Exception as e:
            notify_error("Error starting laundry", e)
            return
        st.session_state.pop("scanned_machine", None)
        invalidate("user-orders", "machine-updates")
        notify_success(
            "Laundry started!",
            f"Your laundry has started on {machine['name']}. "
            f"Estimated completion in {cfg.app.cycle_minutes} minutes.",
        )
        st.rerun()
    if c2.button("Cancel", use_container_width=True):
        st.session_state.pop("scanned_machine", None)
        st.rerun()
