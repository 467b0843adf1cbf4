# laundrylink/machines.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import cv2
import numpy as np
from postgrest.exceptions import APIError

from laundrylink.db.models import LAUNDRY_ORDERS, MACHINES, NO_ROWS_CODE
from laundrylink.errors import NotFoundError, PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "Quick Wash"


# ---------------- LIVE STATUS ----------------

def list_machines(client) -> List[Dict[str, Any]]:
    res = client.table(MACHINES).select("*").order("id").execute()
    return res.data or []


def split_by_kind(machines: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    washers = [m for m in machines if m.get("type") == "washer"]
    dryers = [m for m in machines if m.get("type") == "dryer"]
    return washers, dryers


def is_available(machine: Dict[str, Any]) -> bool:
    # a NULL is_active counts as active
    return machine.get("is_active") is not False and not machine.get("current_order_id")


def availability_label(machine: Dict[str, Any]) -> str:
    if machine.get("is_active") is False:
        return "Out of Service"
    return "In Use" if machine.get("current_order_id") else "Available"


# ---------------- QR ----------------

def decode_qr(image_bytes: bytes) -> Optional[str]:
    """Decode the first QR code in a camera snapshot, None if nothing readable."""
    if not image_bytes:
        return None
    frame = cv2.imdecode(np.frombuffer(image_bytes, dtype=np.uint8), cv2.IMREAD_COLOR)
    if frame is None:
        raise ValidationError("Could not read the camera image")
    payload, points, _ = cv2.QRCodeDetector().detectAndDecode(frame)
    if points is None or not payload:
        return None
    return payload.strip()


def find_machine_by_qr(client, payload: str) -> Dict[str, Any]:
    if not payload:
        raise ValidationError("Empty QR code")
    try:
        res = client.table(MACHINES).select("*").eq("qr_code", payload).single().execute()
    except APIError as e:
        if e.code == NO_ROWS_CODE:
            raise NotFoundError("This QR code is not associated with any machine") from e
        raise

    machine = res.data
    if not is_available(machine):
        raise ValidationError(f"Machine {machine.get('name')} is currently {availability_label(machine)}")
    return machine


# ---------------- START A CYCLE ----------------

def start_laundry(client, user_id: str, machine: Dict[str, Any], cycle_minutes: int = 45,
                  service_type: str = DEFAULT_SERVICE) -> Dict[str, Any]:
    estimated = datetime.now(timezone.utc) + timedelta(minutes=cycle_minutes)
    order_insert = (
        client.table(LAUNDRY_ORDERS)
        .insert(
            {
                "user_id": user_id,
                "machine_id": machine["id"],
                "machine_type": machine.get("type"),
                "service_type": service_type,
                "status": "washing",
                "estimated_completion": estimated.isoformat(),
            }
        )
        .execute()
    )
    if not order_insert.data:
        raise PermissionDeniedError("Failed to start laundry. No order was created.")
    order = order_insert.data[0]

    client.table(MACHINES).update(
        {"status": "In Use", "current_order_id": order["id"]}
    ).eq("id", machine["id"]).execute()

    logger.info("User %s started order %s on machine %s", user_id, order["id"], machine["id"])
    return order
