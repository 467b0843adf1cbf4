"""Admin analytics: bucket bookings by hour, machine, month and service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from laundrylink.db.models import BOOKINGS, PROFILES

logger = logging.getLogger(__name__)

AVERAGE_CYCLE_MINUTES = 45
TREND_MONTHS = 6
TOP_MACHINES = 5

BOOKING_COLUMNS = ["id", "time_slot", "machine_id", "service_type", "cost", "created_at"]


@dataclass
class TotalStats:
    total_bookings: int = 0
    total_users: int = 0
    total_revenue: float = 0.0
    average_booking_time: int = AVERAGE_CYCLE_MINUTES


@dataclass
class AnalyticsReport:
    peak_hours: List[Dict[str, Any]] = field(default_factory=list)
    popular_machines: List[Dict[str, Any]] = field(default_factory=list)
    monthly_bookings: List[Dict[str, Any]] = field(default_factory=list)
    service_stats: List[Dict[str, Any]] = field(default_factory=list)
    totals: TotalStats = field(default_factory=TotalStats)


# ---------------- HELPERS ----------------

def month_key(day: date) -> str:
    return day.strftime("%b %Y")


def trailing_months(today: date, count: int = TREND_MONTHS) -> List[date]:
    """First day of each of the `count` months ending at `today`'s month, oldest first."""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append(date(year, month, 1))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(months))


def _created_month(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return None
    try:
        created = datetime.fromisoformat(value)
    except ValueError:
        logger.warning("Skipping booking with unparseable created_at %r", value)
        return None
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc)
    return month_key(created.date())


def _bookings_frame(bookings: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    # object dtype keeps machine ids as they arrived ("3", not "3.0")
    frame = pd.DataFrame(list(bookings), dtype=object).reindex(columns=BOOKING_COLUMNS)
    frame["cost"] = pd.to_numeric(frame["cost"], errors="coerce").fillna(0.0)
    return frame


# ---------------- BUCKETS ----------------

def peak_hours(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    hours = frame["time_slot"].fillna("").astype(str).str.split(" - ").str[0]
    hours = hours[hours != ""]
    counts = hours.value_counts(sort=False).sort_index()
    return [{"hour": hour, "bookings": int(n)} for hour, n in counts.items()]


def popular_machines(frame: pd.DataFrame, limit: int = TOP_MACHINES) -> List[Dict[str, Any]]:
    machines = frame["machine_id"].fillna("").astype(str)
    # groupby(sort=False) keeps first-seen order, the stable sort keeps it for ties
    usage = machines.groupby(machines, sort=False).size()
    usage = usage.sort_values(ascending=False, kind="stable").head(limit)
    return [{"machine": f"Machine {machine}", "usage": int(n)} for machine, n in usage.items()]


def monthly_bookings(frame: pd.DataFrame, today: date) -> List[Dict[str, Any]]:
    trend = {month_key(m): {"bookings": 0, "revenue": 0.0} for m in trailing_months(today)}

    keyed = frame.assign(month=frame["created_at"].map(_created_month))
    grouped = keyed.groupby("month").agg(bookings=("cost", "size"), revenue=("cost", "sum"))

    for key, row in grouped.iterrows():
        # bookings outside the window are dropped
        if key in trend:
            trend[key]["bookings"] = int(row["bookings"])
            trend[key]["revenue"] = float(row["revenue"])

    return [{"month": key, **values} for key, values in trend.items()]


def service_stats(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    keyed = frame.assign(service=frame["service_type"].fillna("Unknown").astype(str))
    stats = keyed.groupby("service", sort=False).agg(count=("cost", "size"), revenue=("cost", "sum"))
    stats = stats.sort_values("count", ascending=False, kind="stable")
    return [
        {"service": service, "count": int(row["count"]), "revenue": float(row["revenue"])}
        for service, row in stats.iterrows()
    ]


# ---------------- REPORT ----------------

def build_report(
    bookings: Iterable[Dict[str, Any]],
    students: Iterable[Dict[str, Any]],
    today: Optional[date] = None,
    average_cycle_minutes: int = AVERAGE_CYCLE_MINUTES,
) -> AnalyticsReport:
    today = today or date.today()
    frame = _bookings_frame(bookings)

    totals = TotalStats(
        total_bookings=len(frame),
        total_users=len(list(students)),
        total_revenue=float(frame["cost"].sum()),
        # fixed figure, there is no cycle timing data to average
        average_booking_time=average_cycle_minutes,
    )

    return AnalyticsReport(
        peak_hours=peak_hours(frame),
        popular_machines=popular_machines(frame),
        monthly_bookings=monthly_bookings(frame, today),
        service_stats=service_stats(frame),
        totals=totals,
    )


def fetch_analytics(
    client,
    today: Optional[date] = None,
    average_cycle_minutes: int = AVERAGE_CYCLE_MINUTES,
) -> AnalyticsReport:
    """Fetch every booking and student profile and aggregate them.

    A failed query propagates; no partial report is built.
    """
    bookings = client.table(BOOKINGS).select("*").execute().data or []
    students = client.table(PROFILES).select("*").eq("role", "student").execute().data or []
    logger.info("Building analytics over %d bookings and %d students", len(bookings), len(students))
    return build_report(bookings, students, today=today, average_cycle_minutes=average_cycle_minutes)
