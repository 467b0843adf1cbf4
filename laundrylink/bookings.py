from typing import Dict, Any, List, Optional
from datetime import date, datetime, timezone
import logging

from laundrylink.booking_flow import BookingRequest, validate_request
from laundrylink.db.models import BOOKINGS, SERVICES
from laundrylink.errors import PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)


# --- SERVICES ---------------------------------------------------------------

def fetch_services(client) -> List[Dict[str, Any]]:
    res = client.table(SERVICES).select("*").order("price").execute()
    return res.data or []


def service_price(services: List[Dict[str, Any]], name: Optional[str]) -> Optional[float]:
    for service in services:
        if service.get("name") == name:
            return float(service.get("price") or 0)
    return None


# --- BOOKING PERSISTENCE ----------------------------------------------------

def create_booking(
    client,
    user_id: str,
    request: BookingRequest,
    services: List[Dict[str, Any]],
    today: Optional[date] = None,
) -> Dict[str, Any]:
    validate_request(request, today=today)

    price = service_price(services, request.service_type)
    if price is None:
        raise ValidationError(f"Unknown service: {request.service_type}")

    payload = request.to_payload()
    payload.update(
        {
            "user_id": user_id,
            "status": "upcoming",
            "cost": price,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
    )

    booking_insert = client.table(BOOKINGS).insert(payload).execute()
    if not booking_insert.data:
        raise PermissionDeniedError("Failed to insert booking. No data returned.")

    booking = booking_insert.data[0]
    logger.info("Booking %s created for user %s", booking.get("id"), user_id)
    return booking


# --- BOOKING RETRIEVAL ------------------------------------------------------

def list_user_bookings(client, user_id: str, with_machine: bool = False) -> List[Dict[str, Any]]:
    """A user's bookings, newest date first."""
    columns = "*, machines(name)" if with_machine else "*"
    res = (
        client.table(BOOKINGS)
        .select(columns)
        .eq("user_id", user_id)
        .order("booking_date", desc=True)
        .execute()
    )
    return res.data or []


def list_all_bookings(client) -> List[Dict[str, Any]]:
    res = (
        client.table(BOOKINGS)
        .select("*, machines(name, type)")
        .order("booking_date", desc=True)
        .execute()
    )
    return res.data or []


def list_bookings_for_date(client, booking_date: date) -> List[Dict[str, Any]]:
    res = (
        client.table(BOOKINGS)
        .select("id, machine_id, booking_date, time_slot, status")
        .eq("booking_date", booking_date.isoformat())
        .execute()
    )
    return res.data or []


# --- CANCELLATION -----------------------------------------------------------
# Both writes are scoped to the owner. Row-level security decides; an empty
# result means the store refused or the row is someone else's.

def cancel_booking(client, user_id: str, booking_id: str) -> Dict[str, Any]:
    res = (
        client.table(BOOKINGS)
        .update({"status": "cancelled"})
        .eq("id", booking_id)
        .eq("user_id", user_id)
        .execute()
    )
    if not res.data:
        logger.warning("Cancel of booking %s by %s returned no rows", booking_id, user_id)
        raise PermissionDeniedError("Booking not found or you are not allowed to cancel it")
    return res.data[0]


def delete_booking(client, user_id: str, booking_id: str) -> None:
    res = (
        client.table(BOOKINGS)
        .delete()
        .eq("id", booking_id)
        .eq("user_id", user_id)
        .execute()
    )
    if not res.data:
        logger.warning("Delete of booking %s by %s returned no rows", booking_id, user_id)
        raise PermissionDeniedError("Booking not found or you are not allowed to delete it")
