"""Search, filter, sort and page the admin bookings table."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd

ALL = "all"
PAGE_SIZE = 10
DATE_FIELDS = ("booking_date", "created_at")

DISPLAY_COLUMNS = [
    "id", "email", "machine_name", "service_type", "booking_date",
    "time_slot", "status", "cost", "created_at",
]


@dataclass
class BookingFilters:
    search: str = ""
    status: str = ALL
    service: str = ALL
    booking_date: Optional[date] = None
    sort_field: str = "booking_date"
    sort_direction: str = "desc"

    def toggle_sort(self, field: str) -> None:
        # same column flips direction, a new column starts ascending
        if self.sort_field == field:
            self.sort_direction = "asc" if self.sort_direction == "desc" else "desc"
        else:
            self.sort_field = field
            self.sort_direction = "asc"

    def reset(self) -> None:
        self.search = ""
        self.status = ALL
        self.service = ALL
        self.booking_date = None
        self.sort_field = "booking_date"
        self.sort_direction = "desc"


def bookings_frame(bookings: List[Dict[str, Any]], profiles: List[Dict[str, Any]]) -> pd.DataFrame:
    """One row per booking with the owner's email and the machine name flattened in."""
    df = pd.DataFrame(bookings, dtype=object)
    if df.empty:
        return pd.DataFrame(columns=DISPLAY_COLUMNS)

    emails = {p.get("id"): p.get("email") for p in profiles}
    df["email"] = df["user_id"].map(lambda uid: emails.get(uid) or "Unknown")

    if "machines" in df.columns:
        df["machine_name"] = df["machines"].map(
            lambda m: (m or {}).get("name") if isinstance(m, dict) else None
        )
    else:
        df["machine_name"] = None
    df["machine_name"] = df["machine_name"].fillna(df["machine_id"])
    return df


def service_types(df: pd.DataFrame) -> List[str]:
    if df.empty:
        return []
    return df["service_type"].dropna().unique().tolist()


def apply_filters(df: pd.DataFrame, filters: BookingFilters) -> pd.DataFrame:
    if df.empty:
        return df
    result = df

    if filters.search:
        query = filters.search.lower()
        haystack = (
            result["email"].fillna("").astype(str).str.lower()
            + "\n" + result["machine_name"].fillna("").astype(str).str.lower()
            + "\n" + result["id"].fillna("").astype(str).str.lower()
        )
        result = result[haystack.str.contains(query, regex=False)]

    if filters.status != ALL:
        result = result[result["status"].fillna("").str.lower() == filters.status.lower()]

    if filters.service != ALL:
        result = result[result["service_type"] == filters.service]

    if filters.booking_date:
        result = result[result["booking_date"] == filters.booking_date.isoformat()]

    return sort_bookings(result, filters.sort_field, filters.sort_direction)


def sort_bookings(df: pd.DataFrame, field: str, direction: str = "desc") -> pd.DataFrame:
    if df.empty or field not in df.columns:
        return df
    ascending = direction == "asc"
    if field in DATE_FIELDS:
        key = pd.to_datetime(df[field], errors="coerce", utc=True, format="ISO8601")
        order = key.sort_values(ascending=ascending, kind="stable", na_position="last").index
        return df.loc[order]
    return df.sort_values(field, ascending=ascending, kind="stable", na_position="last")


def page_count(total_rows: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total_rows / page_size) if total_rows else 0


def paginate(df: pd.DataFrame, page: int, page_size: int = PAGE_SIZE) -> pd.DataFrame:
    pages = page_count(len(df), page_size)
    page = max(1, min(page, pages or 1))
    start = (page - 1) * page_size
    return df.iloc[start:start + page_size]


def to_csv(df: pd.DataFrame) -> bytes:
    cols = [c for c in DISPLAY_COLUMNS if c in df.columns]
    return df[cols].to_csv(index=False).encode("utf-8")
