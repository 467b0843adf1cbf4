import streamlit as st

from laundrylink.auth import sign_in, sign_up
from laundrylink.config import AppConfig
from laundrylink.ui import notify_error, notify_success


def render_auth(cfg: AppConfig, client) -> None:
    st.title(f"🧺 Welcome to {cfg.app.title}")
    st.caption("Sign in to book machines, track your laundry and top up your wallet.")

    signin_tab, signup_tab = st.tabs(["Sign In", "Create Account"])

    with signin_tab:
        with st.form("signin"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In", use_container_width=True)
        if submitted:
            try:
                user = sign_in(client, email, password)
            except Exception as e:
                notify_error("Error signing in", e)
                return
            st.session_state.user = user
            notify_success("Logged in successfully", f"Welcome back to {cfg.app.title}!")
            st.rerun()

    with signup_tab:
        with st.form("signup"):
            full_name = st.text_input("Full name")
            email = st.text_input("Email", key="signup_email")
            password = st.text_input("Password", type="password", key="signup_password")
            submitted = st.form_submit_button("Create Account", use_container_width=True)
        if submitted:
            try:
                user = sign_up(client, email, password, full_name)
            except Exception as e:
                notify_error("Error creating account", e)
                return
            st.session_state.user = user
            notify_success("Account created successfully", f"Welcome to {cfg.app.title}!")
            st.rerun()
