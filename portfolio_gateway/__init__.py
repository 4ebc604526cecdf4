"""Client-side data access for portfolio profiles stored in Supabase."""

from .gateway import LoginStatus, ProfileDataGateway
from .services.outcome import OperationResult

__all__ = ["LoginStatus", "OperationResult", "ProfileDataGateway"]
__version__ = "1.0.0"
