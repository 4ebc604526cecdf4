"""
Uniform operation results and the wrappers that produce them.

Mutating operations are wrapped with :func:`guarded`, which turns any raised
exception into a failed :class:`OperationResult`. Read operations are wrapped
with :func:`quiet`, which downgrades failures to an empty value instead.
"""
from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from .errors import GatewayError, error_message

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class OperationResult:
    """Result of a mutating gateway operation."""

    success: bool
    error: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, **data: Any) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: Optional[str] = None) -> "OperationResult":
        return cls(success=False, error=message or "unknown")

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, **self.data}
        return {"success": False, "error": self.error}


def guarded(action: str) -> Callable[[F], F]:
    """Convert exceptions raised by the wrapped operation into failed results.

    Args:
        action: Operation name used in log lines
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> OperationResult:
            try:
                return func(*args, **kwargs)
            except GatewayError as exc:
                logger.warning(f"{action}: {exc.message}")
                return OperationResult.fail(exc.message)
            except Exception as exc:
                logger.error(f"{action} failed: {exc}")
                return OperationResult.fail(error_message(exc))

        return wrapper  # type: ignore[return-value]

    return decorator


def quiet(action: str, default: Callable[[], Any]) -> Callable[[F], F]:
    """Return ``default()`` instead of raising when the wrapped read fails.

    Args:
        action: Operation name used in log lines
        default: Factory for the empty value (``list``, ``lambda: None``)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except GatewayError as exc:
                logger.debug(f"{action}: {exc.message}")
                return default()
            except Exception as exc:
                logger.error(f"{action} failed: {exc}")
                return default()

        return wrapper  # type: ignore[return-value]

    return decorator
