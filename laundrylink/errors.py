# laundrylink/errors.py

from __future__ import annotations


class LaundryError(RuntimeError):
    """Base class for failures the views turn into a user-visible message."""


class ValidationError(LaundryError):
    """Raised when user input or a selection is missing or invalid."""


class PermissionDeniedError(LaundryError):
    """Raised when the role check fails or the store refuses a write."""


class NotFoundError(LaundryError):
    """Raised when a looked-up row does not exist."""


def describe_error(exc: BaseException) -> str:
    # postgrest.APIError and the auth errors carry a message attribute
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    details = getattr(exc, "details", None)
    if details:
        return str(details)
    return str(exc) or exc.__class__.__name__
