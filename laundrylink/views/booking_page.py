from datetime import date

import streamlit as st

from laundrylink.auth import SignedInUser
from laundrylink.booking_flow import (
    BookingRequest,
    available_slots,
    format_long_date,
    generate_confirmation_text,
)
from laundrylink.bookings import create_booking, fetch_services, list_bookings_for_date, service_price
from laundrylink.config import AppConfig
from laundrylink.machines import list_machines
from laundrylink.ui import invalidate, money, notify_error, notify_success
from laundrylink.wallet import fetch_wallet, pay_for_booking


def render_booking_page(cfg: AppConfig, client, user: SignedInUser) -> None:
    st.title("📅 Book a Laundry Slot")
    currency = cfg.app.currency

    try:
        services = fetch_services(client)
        machines = [m for m in list_machines(client) if m.get("is_active") is not False]
    except Exception as e:
        notify_error("Error loading booking options", e)
        return

    left, right = st.columns(2)

    with left:
        st.subheader("Select Date")
        booking_date = st.date_input("Choose your preferred date for laundry", value=date.today(),
                                     min_value=date.today())

        st.subheader("Select Service")
        service_names = [s["name"] for s in services]
        service_type = st.selectbox(
            "Choose the type of wash service you need",
            service_names,
            format_func=lambda name: f"{name} ({money(service_price(services, name), currency)})",
            index=0 if service_names else None,
        )

        st.subheader("Select Machine")
        machine_id = st.selectbox(
            "Machine",
            [m["id"] for m in machines],
            format_func=lambda mid: next((m["name"] for m in machines if m["id"] == mid), mid),
            index=0 if machines else None,
        )

    with right:
        st.subheader("Available Time Slots")
        try:
            taken = list_bookings_for_date(client, booking_date) if booking_date else []
        except Exception as e:
            notify_error("Error loading time slots", e)
            taken = []
        slots = available_slots(taken, machine_id, booking_date)
        if not slots:
            st.info("No free slots for this machine on that day.")
        time_slot = st.radio("Pick a convenient time slot", slots, index=None) if slots else None

        pay_now = st.checkbox("Pay from my wallet now", value=True)

        request = BookingRequest(
            booking_date=booking_date,
            time_slot=time_slot,
            service_type=service_type,
            machine_id=machine_id,
        )
        price = service_price(services, service_type)
        if time_slot:
            st.markdown(generate_confirmation_text(request, price, currency))

        if st.button("Book Now", type="primary", use_container_width=True):
            try:
                booking = create_booking(client, user.id, request, services)
            except Exception as e:
                notify_error("Error", e)
                return

            if pay_now:
                try:
                    pay_for_booking(client, user.id, fetch_wallet(client, user.id), booking, currency)
                except Exception as e:
                    notify_error("Booking saved, payment failed", e)

            invalidate("user-bookings", "wallet-updates")
            notify_success(
                "Booking successful!",
                f"You have booked {service_type} on {format_long_date(booking_date)} at {time_slot}",
            )
            st.rerun()
