"""
Custom exceptions for tracebin.

Credential and signing failures are raised to the caller because no
meaningful upload can proceed without them. Transport failures are never
raised out of an upload; they are reported as a failed result instead.
"""

from __future__ import annotations

from typing import Any


class TracebinError(Exception):
    """
    Base exception for all tracebin errors.

    Attributes:
        message: Human-readable error description.
        details: Structured context, safe to attach to log records.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})


class ConfigurationError(TracebinError):
    """
    Raised when the exporter is configured incorrectly.

    Example:
        >>> raise ConfigurationError("bucket", expected="non-empty bucket name", received="")
    """

    def __init__(self, config_key: str, expected: str | None = None, received: Any = None) -> None:
        self.config_key = config_key

        message = f"Invalid '{config_key}'"
        if expected:
            message += f": expected {expected}"
        if received is not None:
            message += f", got {received!r}"
        super().__init__(message, {"config_key": config_key})


class CredentialsError(TracebinError):
    """
    Raised when a credentials provider cannot produce usable credentials.

    Secret material is never included in the message or details.
    """

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(
            f"Could not resolve credentials from {provider}: {reason}",
            {"provider": provider},
        )


class SigningError(TracebinError):
    """Raised when a request cannot be canonicalized for signing."""
