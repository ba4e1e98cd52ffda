"""Finance backend REST API client."""

from .auth import AuthSession
from .client import FinanceApiClient

__all__ = ["AuthSession", "FinanceApiClient"]
