"""Central error types used across the application."""

from __future__ import annotations


class ActivityReportsError(RuntimeError):
    """Base error for report generation failures."""


class ConfigError(ActivityReportsError):
    """Raised when a required credential or setting is missing."""


class ApiError(ActivityReportsError):
    """Raised when a remote API call fails after its retry budget is spent.

    ``status`` holds the HTTP status (or the status embedded in the provider
    error body); it is ``None`` for transport failures such as timeouts.
    """

    def __init__(self, status: int | None, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status={self.status!r}, message={self.message!r})"


class AuthError(ApiError):
    """Raised when the provider rejects a token exchange."""


__all__ = [
    "ActivityReportsError",
    "ConfigError",
    "ApiError",
    "AuthError",
]
