from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

import streamlit as st

from laundrylink.errors import LaundryError


# ---------------------- DATA CLASSES ----------------------

@dataclass
class SupabaseConfig:
    url: str
    anon_key: str  # browser-side key; every query runs under row-level security


@dataclass
class AppSettings:
    title: str = "Hostel LaundryLink"
    currency: str = "₹"
    top_up_amounts: List[int] = field(default_factory=lambda: [100, 200, 500])
    page_size: int = 10
    refresh_interval_ms: int = 15000
    cycle_minutes: int = 45
    log_level: str = "INFO"


@dataclass
class AppConfig:
    supabase: SupabaseConfig
    app: AppSettings


# ---------------------- LOADING ----------------------

def _section(secrets: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    if name in secrets:
        return secrets[name]
    return {}


def load_config(secrets: Optional[Mapping[str, Any]] = None) -> AppConfig:
    if secrets is None:
        secrets = st.secrets

    # --- Supabase ---
    supabase = _section(secrets, "supabase")
    if not supabase.get("url") or not supabase.get("anon_key"):
        raise LaundryError(
            "Missing [supabase] url/anon_key in .streamlit/secrets.toml"
        )
    supabase_cfg = SupabaseConfig(
        url=supabase["url"],
        anon_key=supabase["anon_key"],
    )

    # --- App ---
    # secrets.toml values may arrive as strings, so numbers are coerced
    app = _section(secrets, "app")
    defaults = AppSettings()
    app_cfg = AppSettings(
        title=app.get("title", defaults.title),
        currency=app.get("currency", defaults.currency),
        top_up_amounts=[int(a) for a in app.get("top_up_amounts", defaults.top_up_amounts)],
        page_size=int(app.get("page_size", defaults.page_size)),
        refresh_interval_ms=int(app.get("refresh_interval_ms", defaults.refresh_interval_ms)),
        cycle_minutes=int(app.get("cycle_minutes", defaults.cycle_minutes)),
        log_level=str(app.get("log_level", defaults.log_level)).upper(),
    )

    return AppConfig(
        supabase=supabase_cfg,
        app=app_cfg,
    )
