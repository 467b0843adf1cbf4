# laundrylink/auth.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from postgrest.exceptions import APIError
from email_validator import validate_email as _validate_email, EmailNotValidError

from laundrylink.db.models import PROFILES, UserRole
from laundrylink.errors import PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass
class SignedInUser:
    id: str
    email: Optional[str]
    role: UserRole = "student"
    full_name: Optional[str] = None
    access_token: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# ----------------- VALIDATORS ------------------------

def validate_email(email: str) -> bool:
    try:
        _validate_email(email, check_deliverability=False)
        return True
    except EmailNotValidError:
        return False


def _check_credentials(email: str, password: str) -> None:
    if not email or not validate_email(email):
        raise ValidationError("Invalid email. Please try format: name@example.com")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


# ----------------- PROFILES ------------------------

def fetch_profile(client, user_id: str) -> Optional[Dict[str, Any]]:
    res = client.table(PROFILES).select("*").eq("id", user_id).limit(1).execute()
    return res.data[0] if res.data else None


def list_profiles(client) -> list:
    res = client.table(PROFILES).select("*").order("created_at", desc=True).execute()
    return res.data or []


def require_role(user: Optional[SignedInUser], role: UserRole) -> SignedInUser:
    if user is None:
        raise PermissionDeniedError("Please log in to continue")
    if user.role != role:
        raise PermissionDeniedError(f"You don't have permission to access the {role} dashboard")
    return user


# ----------------- SIGN UP / IN / OUT ------------------------

def sign_up(client, email: str, password: str, full_name: str) -> SignedInUser:
    email = (email or "").strip()
    full_name = (full_name or "").strip()
    _check_credentials(email, password)
    if len(full_name) < 2:
        raise ValidationError("Invalid name. Please provide your full name.")

    res = client.auth.sign_up(
        {
            "email": email,
            "password": password,
            "options": {"data": {"full_name": full_name}},
        }
    )
    if res.user is None:
        raise ValidationError("Sign-up did not return a user. Check your inbox to confirm the email.")

    # the account exists even when the profile insert fails; the user can still sign in
    try:
        client.table(PROFILES).insert(
            {
                "id": res.user.id,
                "email": res.user.email,
                "full_name": full_name,
                "role": "student",
            }
        ).execute()
    except APIError:
        logger.exception("Profile creation failed for %s", res.user.id)

    logger.info("New student account %s", res.user.id)
    return SignedInUser(
        id=res.user.id,
        email=res.user.email,
        role="student",
        full_name=full_name,
        access_token=res.session.access_token if res.session else None,
    )


def sign_in(client, email: str, password: str) -> SignedInUser:
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError("Please enter your email and password")

    res = client.auth.sign_in_with_password({"email": email, "password": password})
    profile = fetch_profile(client, res.user.id) or {}
    user = SignedInUser(
        id=res.user.id,
        email=res.user.email,
        role=profile.get("role") or "student",
        full_name=profile.get("full_name"),
        access_token=res.session.access_token if res.session else None,
    )
    logger.info("User %s signed in as %s", user.id, user.role)
    return user


def sign_out(client) -> None:
    client.auth.sign_out()
