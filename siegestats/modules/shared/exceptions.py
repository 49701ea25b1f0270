"""
Domain exceptions for SiegeStats.

Purpose
-------
Define the structured, domain-specific exception hierarchy for stats lookups.
These are raised by services for unknown players, provider failures and
invalid input. Callers translate them into user-facing responses.

Design Notes
------------
- All domain exceptions inherit from `SiegeStatsDomainException`, a
  `StructuredError`, so they carry the same metadata as infrastructure
  errors and are logged at their severity by `log_error()`.
- A category with no data is *not* an error: it is returned as ``None``.
  Only identity resolution raises `PlayerNotFoundError`.
- Provider failures are wrapped once at the adapter boundary and then
  propagate untouched through the cache-aside path.
"""

from __future__ import annotations

from typing import Any, Optional

from siegestats.core.exceptions import ErrorSeverity, StructuredError


class SiegeStatsDomainException(StructuredError):
    """Base for errors a caller of the stats service is expected to handle."""


class NotFoundError(SiegeStatsDomainException):
    """
    Raised when a requested resource cannot be found.

    Args:
        resource_type: Type of resource (e.g., "Player")
        identifier: Optional identifier for the missing resource
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={
                "resource_type": resource_type,
                "identifier": identifier,
            },
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class PlayerNotFoundError(NotFoundError):
    """
    Raised when the provider has no player for a platform/username pair.

    Args:
        platform: Platform the lookup was scoped to (uplay, psn, xbl)
        username: Username that did not resolve
    """

    def __init__(self, platform: str, username: str) -> None:
        self.platform = platform
        self.username = username
        super().__init__("Player", f"{platform}/{username}")
        self.details.update({"platform": platform, "username": username})


class ProviderError(SiegeStatsDomainException):
    """
    Raised when the remote stats provider fails (network, auth, rate limit).

    Never retried by the stats core; propagates to the caller unmodified.

    Args:
        operation: Provider call that failed (e.g., "get_level")
        original_error: The exception raised by the provider client
        platform: Optional platform of the failed call
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(
        self,
        operation: str,
        original_error: Exception,
        platform: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.original_error = original_error
        self.platform = platform
        message = f"Stats provider error during {operation}: {original_error}"
        super().__init__(
            message,
            details={
                "operation": operation,
                "platform": platform,
                "error": str(original_error),
                "error_type": type(original_error).__name__,
            },
            error_code="PROVIDER_ERROR",
        )


class ValidationError(SiegeStatsDomainException):
    """
    Raised when caller input fails validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        error_message = f"Validation error for {field}: {message}"
        super().__init__(
            error_message,
            details={
                "field": field,
                "validation_message": message,
            },
            error_code=f"VALIDATION_{field.upper()}",
        )
