from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Expected failure whose message is shown to the caller as-is."""

    default_message = "unknown"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticatedError(GatewayError):
    default_message = "Not authenticated"


class ProfileNotFoundError(GatewayError):
    default_message = "Profile not found"


class RecordNotFoundError(GatewayError):
    default_message = "Record not found"


def error_message(exc: BaseException) -> str:
    """Return the backend's message for ``exc``, falling back to its string form."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or "unknown"
