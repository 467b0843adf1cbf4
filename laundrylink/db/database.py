# laundrylink/db/database.py

from supabase import create_client, Client
import streamlit as st

from laundrylink.config import SupabaseConfig


def create_supabase_client(cfg: SupabaseConfig) -> Client:
    return create_client(cfg.url, cfg.anon_key)


def get_supabase_client(cfg: SupabaseConfig) -> Client:
    """
    Returns the Supabase client of the current browser session.
    Uses the anon key: the signed-in user's session lives on this client,
    so row-level security scopes every query to that user and role.
    """

    if "supabase_client" not in st.session_state:
        st.session_state.supabase_client = create_supabase_client(cfg)

    return st.session_state.supabase_client


def reset_supabase_client() -> None:
    st.session_state.pop("supabase_client", None)
