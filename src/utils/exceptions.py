"""Custom exception hierarchy for Finance Manager.

Provides structured exception classes for different error scenarios.
"""

from __future__ import annotations


class FinanceManagerError(Exception):
    """Base exception for all Finance Manager errors."""

    pass


class ConfigurationError(FinanceManagerError):
    """Exception raised for configuration-related errors."""

    pass


class ApiError(FinanceManagerError):
    """Exception raised when the backend answers with a non-2xx status.

    ``detail`` carries the backend's ``detail`` field when present, otherwise
    ``"HTTP <status>: <reason>"``; it is also the exception message.
    """

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class ApiConnectionError(FinanceManagerError):
    """Exception raised when the backend cannot be reached."""

    pass


class ResponseFormatError(FinanceManagerError):
    """Exception raised when a successful response has an unexpected shape."""

    pass


class ValidationError(FinanceManagerError):
    """Exception raised when user input is rejected before any request."""

    pass


class AuthorizationError(FinanceManagerError):
    """Exception raised when the signed-in user is not allowed to use the app."""

    pass


class ServiceError(FinanceManagerError):
    """Base exception for service layer errors."""

    pass
