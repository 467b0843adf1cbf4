from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, date, time
from typing import Optional, Dict, Any, Iterable, List

from laundrylink.db.models import BookingStatus
from laundrylink.errors import ValidationError


TIME_SLOTS = [
    "08:00 - 09:00",
    "09:00 - 10:00",
    "10:00 - 11:00",
    "11:00 - 12:00",
    "13:00 - 14:00",
    "14:00 - 15:00",
    "15:00 - 16:00",
    "16:00 - 17:00",
]

BOOKING_STATUSES = ("upcoming", "completed", "cancelled")

BOOKING_FIELDS = [
    "booking_date",
    "time_slot",
    "service_type",
    "machine_id",
]

FIELD_LABELS = {
    "booking_date": "a date",
    "time_slot": "a time slot",
    "service_type": "a service",
    "machine_id": "a machine",
}

STATUS_COLORS = {
    "upcoming": "#3b82f6",
    "completed": "#22c55e",
    "cancelled": "#ef4444",
}


@dataclass
class BookingRequest:
    booking_date: Optional[date] = None
    time_slot: Optional[str] = None
    service_type: Optional[str] = None
    machine_id: Optional[str] = None

    errors: Dict[str, str] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "booking_date": self.booking_date.isoformat() if self.booking_date else None,
            "time_slot": self.time_slot,
            "service_type": self.service_type,
            "machine_id": self.machine_id,
        }


# ----------------- VALIDATORS ------------------------

def parse_date_str(val: str) -> Optional[date]:
    try:
        return datetime.strptime(val.strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        return None


def slot_start(time_slot: str) -> Optional[time]:
    if not time_slot:
        return None
    start = time_slot.split(" - ")[0].strip()
    try:
        return datetime.strptime(start, "%H:%M").time()
    except ValueError:
        return None


def get_missing_fields(request: BookingRequest) -> List[str]:
    missing = []
    for f in BOOKING_FIELDS:
        if getattr(request, f, None) in (None, ""):
            missing.append(f)
    return missing


def validate_request(request: BookingRequest, today: Optional[date] = None) -> BookingRequest:
    """Collect every problem in request.errors and raise on the first one."""
    today = today or date.today()
    request.errors.clear()

    missing = get_missing_fields(request)
    if {"booking_date", "time_slot"} & set(missing):
        request.errors["selection"] = "Please select a date and time slot"
    for f in missing:
        if f not in ("booking_date", "time_slot"):
            request.errors[f] = f"Please select {FIELD_LABELS[f]}"

    if request.booking_date and request.booking_date < today:
        request.errors["booking_date"] = "Invalid date (past). Please choose an upcoming date."

    if request.time_slot and request.time_slot not in TIME_SLOTS:
        request.errors["time_slot"] = f"Unknown time slot: {request.time_slot}"

    if request.errors:
        raise ValidationError(next(iter(request.errors.values())))
    return request


# ----------------- SLOT HANDLING ------------------------

def available_slots(
    bookings: Iterable[Dict[str, Any]],
    machine_id: Optional[str],
    booking_date: Optional[date],
) -> List[str]:
    """Slots still free for a machine on a day; cancelled bookings free their slot."""
    if not machine_id or not booking_date:
        return list(TIME_SLOTS)
    day = booking_date.isoformat()
    taken = {
        b.get("time_slot")
        for b in bookings
        if str(b.get("machine_id")) == str(machine_id)
        and b.get("booking_date") == day
        and normalize_status(b.get("status")) != "cancelled"
    }
    return [slot for slot in TIME_SLOTS if slot not in taken]


def generate_confirmation_text(request: BookingRequest, price: Optional[float], currency: str = "₹") -> str:
    return (
        f"- **Service:** {request.service_type}\n"
        f"- **Date:** {format_long_date(request.booking_date)}\n"
        f"- **Time:** {request.time_slot}\n"
        f"- **Machine:** {request.machine_id}\n"
        f"- **Cost:** {currency}{(price or 0):.2f}"
    )


# ----------------- HISTORY ------------------------

def normalize_status(status: Optional[str]) -> str:
    # older rows were written as "Upcoming" / "Cancelled"
    return (status or "").strip().lower()


def status_color(status: Optional[str]) -> str:
    return STATUS_COLORS.get(normalize_status(status), "#6b7280")


def format_long_date(value: Any) -> str:
    if isinstance(value, str):
        value = parse_date_str(value)
    if not value:
        return ""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def group_bookings_by_date(bookings: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for booking in bookings:
        groups.setdefault(booking.get("booking_date"), []).append(booking)
    return groups


def is_upcoming(booking: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    now = now or datetime.now()
    day = parse_date_str(booking.get("booking_date") or "")
    start = slot_start(booking.get("time_slot") or "")
    if not day or not start:
        return False
    return datetime.combine(day, start) > now and normalize_status(booking.get("status")) == "upcoming"


def status_counts(bookings: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    counts = Counter(normalize_status(b.get("status")) for b in bookings)
    return {status: counts.get(status, 0) for status in BOOKING_STATUSES}


def filter_by_status(bookings: Iterable[Dict[str, Any]], status: BookingStatus) -> List[Dict[str, Any]]:
    return [b for b in bookings if normalize_status(b.get("status")) == status]
