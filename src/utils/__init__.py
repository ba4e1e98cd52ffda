"""Utility functions and classes for Finance Manager."""

from .config import global_config
from .di_container import (
    DIContainer,
    DIContainerError,
    ServiceKeys,
    configure_container,
    get_container,
    reset_container,
)
from .exceptions import (
    ApiConnectionError,
    ApiError,
    AuthorizationError,
    ConfigurationError,
    FinanceManagerError,
    ResponseFormatError,
    ServiceError,
    ValidationError,
)
from .formatting import format_currency, format_date, format_month, format_number
from .logging_setup import RemoteLogHandler, setup_logging
from .request_guards import OnceGuard, RequestSequence

__all__ = [
    "ApiConnectionError",
    "ApiError",
    "AuthorizationError",
    "ConfigurationError",
    "DIContainer",
    "DIContainerError",
    "FinanceManagerError",
    "OnceGuard",
    "RemoteLogHandler",
    "RequestSequence",
    "ResponseFormatError",
    "ServiceError",
    "ServiceKeys",
    "ValidationError",
    "configure_container",
    "format_currency",
    "format_date",
    "format_month",
    "format_number",
    "get_container",
    "global_config",
    "reset_container",
    "setup_logging",
]
