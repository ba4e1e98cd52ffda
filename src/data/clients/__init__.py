"""HTTP clients for external services."""

from .api import AuthSession, FinanceApiClient

__all__ = ["AuthSession", "FinanceApiClient"]
