"""
Error taxonomy for the Marne status bot.

Purpose
-------
Define the structured exception hierarchy shared by every component. Each
error states whether the process can keep running after it, so the tick loop
and the entry point can decide between "log and wait for the next tick" and
"exit at startup" without inspecting messages.

Hierarchy
---------
MarneBotError (base)
├── ConfigError            (src.core.config.errors; fatal at startup)
│   └── ConfigValidationError
├── FetchError             (status API unreachable or malformed; transient)
└── UpdateError            (Discord rejected a presence/profile change; transient)

Design Notes
------------
- Every error carries:
  - `message`: human-readable description
  - `details`: structured context for log records
  - `severity`: `ErrorSeverity` used to pick the log level
  - `is_retryable`: whether the next tick may succeed
- `to_dict()` is passed as `extra=` to the logger so JSON logs keep the
  structure.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging."""

    INFO = "info"
    WARNING = "warning"  # Handled; the next tick retries
    ERROR = "error"
    CRITICAL = "critical"  # Process cannot continue


class MarneBotError(Exception):
    """
    Base exception for all bot errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the next tick may succeed

    Example:
        >>> raise MarneBotError("Server list unavailable", {"game": "bf1"})
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "error_message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.__class__.__name__}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class FetchError(MarneBotError):
    """
    Raised when the server list cannot be retrieved or understood.

    Covers transport failures, non-2xx responses, bodies that are not JSON,
    and JSON that does not have the expected server list shape. The tick loop
    logs it and waits for the next tick.

    Args:
        message: What went wrong
        url: The URL that was requested
        status: HTTP status code, when the failure happened at the HTTP level
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.url = url
        self.status = status
        merged: Dict[str, Any] = {"url": url, "status": status}
        merged.update(details or {})
        super().__init__(message, details=merged)


class UpdateError(MarneBotError):
    """
    Raised when Discord rejects a presence or profile image change.

    Typical causes are rate limiting, an invalidated token, or a failed map
    image download for the banner. Logged by the tick loop; never fatal.

    Args:
        message: What went wrong
        operation: "presence" or "banner"
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(
        self,
        message: str,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.operation = operation
        merged: Dict[str, Any] = {"operation": operation}
        merged.update(details or {})
        super().__init__(message, details=merged)


__all__ = [
    "ErrorSeverity",
    "MarneBotError",
    "FetchError",
    "UpdateError",
]
