"""Custom exception types for the GitHub PR statistics tool."""

from typing import Optional


class PRStatsError(Exception):
    """Base exception for all recoverable PR statistics errors."""


class ConfigurationError(PRStatsError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(PRStatsError):
    """Raised when the GitHub token is unavailable."""


class ApiError(PRStatsError):
    """Raised when a GitHub API request fails or returns an unexpected response.

    ``status_code`` holds the HTTP status when GitHub answered with an error,
    and is ``None`` for transport failures and malformed payloads.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DataValidationError(PRStatsError):
    """Raised when fetched records violate the aggregation input contract."""
