"""Supabase-backed services used by the gateway."""

from .errors import (
    GatewayError,
    NotAuthenticatedError,
    ProfileNotFoundError,
    RecordNotFoundError,
)
from .outcome import OperationResult, guarded, quiet

__all__ = [
    "GatewayError",
    "NotAuthenticatedError",
    "ProfileNotFoundError",
    "RecordNotFoundError",
    "OperationResult",
    "guarded",
    "quiet",
]
