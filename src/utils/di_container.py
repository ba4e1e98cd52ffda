"""Service wiring for the finance client.

``configure_container`` registers one lazy factory per service under a
``ServiceKeys`` name. The main window resolves what it needs; factories run
on first resolution and the instance is cached, so the auth session, the
API client and the settings manager are shared by every service.

Usage:
    from utils.di_container import ServiceKeys, configure_container

    container = configure_container()
    manager = container.resolve(ServiceKeys.FINANCE_MANAGER)

    # Tests swap a dependency before anything resolves it
    container.register(ServiceKeys.SETTINGS_MANAGER, fake_settings)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Factory = Callable[["DIContainer"], Any]


class DIContainerError(Exception):
    """Raised when a service key has neither an instance nor a factory."""

    pass


class DIContainer:
    """Registry of service instances and lazy factories.

    Resolution is guarded by a re-entrant lock so a factory may resolve its
    own dependencies while the lock is held.
    """

    def __init__(self) -> None:
        self._services: dict[str, Any] = {}
        self._factories: dict[str, Factory] = {}
        self._lock = threading.RLock()

    def register(self, key: str, instance: Any) -> None:
        """Register a ready instance; replaces any cached one for ``key``."""
        with self._lock:
            self._services[key] = instance
        logger.debug("Registered service: %s", key)

    def register_factory(self, key: str, factory: Factory) -> None:
        """Register ``factory(container)``, called once on first ``resolve``."""
        with self._lock:
            self._factories[key] = factory
        logger.debug("Registered factory: %s", key)

    def resolve(self, key: str) -> Any:
        """Return the instance for ``key``, building it from its factory if needed.

        Raises:
            DIContainerError: If ``key`` is unknown
        """
        with self._lock:
            if key in self._services:
                return self._services[key]
            factory = self._factories.get(key)
            if factory is None:
                known = sorted(set(self._services) | set(self._factories))
                raise DIContainerError(f"Service '{key}' not registered. Available: {known}")
            logger.debug("Creating service from factory: %s", key)
            instance = factory(self)
            self._services[key] = instance
            return instance

    def resolve_optional(self, key: str) -> Any | None:
        """Like ``resolve`` but returns None for unknown keys."""
        try:
            return self.resolve(key)
        except DIContainerError:
            return None


class ServiceKeys:
    """Container keys for the finance client's services."""

    CONFIG = "config"
    SETTINGS_MANAGER = "settings_manager"
    SIGNAL_BUS = "signal_bus"

    # Backend access
    SESSION_RESTORE_GUARD = "session_restore_guard"
    AUTH_SESSION = "auth_session"
    API_CLIENT = "api_client"

    WALLET_SERVICE = "wallet_service"
    FINANCE_MANAGER = "finance_manager"
    ASSET_SERVICE = "asset_service"
    MUTUAL_FUND_SERVICE = "mutual_fund_service"


_container_instance: DIContainer | None = None
_container_lock = threading.Lock()


def get_container() -> DIContainer:
    """Return the process-wide container, creating it on first use."""
    global _container_instance  # noqa: PLW0603
    with _container_lock:
        if _container_instance is None:
            _container_instance = DIContainer()
        return _container_instance


def reset_container() -> None:
    """Drop the process-wide container so the next caller gets a fresh one."""
    global _container_instance  # noqa: PLW0603
    with _container_lock:
        _container_instance = None


def configure_container(container: DIContainer | None = None) -> DIContainer:
    """Register the finance client's factories on ``container`` (global if None).

    Only the config is created eagerly. Everything else is built on first
    ``resolve``, so tests can register doubles for any key beforehand.
    """
    if container is None:
        container = get_container()

    from utils.config import get_config

    container.register(ServiceKeys.CONFIG, get_config())

    def signal_bus_factory(c: DIContainer) -> Any:
        from ui.signal_bus import get_signal_bus

        return get_signal_bus()

    def settings_factory(c: DIContainer) -> Any:
        from utils.settings_manager import get_settings_manager

        return get_settings_manager()

    # Backend registration runs at most once per container
    def restore_guard_factory(c: DIContainer) -> Any:
        from utils.request_guards import OnceGuard

        return OnceGuard()

    def auth_session_factory(c: DIContainer) -> Any:
        from data.clients import AuthSession

        auth = c.resolve(ServiceKeys.CONFIG).auth
        return AuthSession(
            token=auth.token,
            email=auth.email,
            authorization_enabled=auth.authorization_enabled,
            allowed_emails=auth.allowed_emails,
            settings_manager=c.resolve(ServiceKeys.SETTINGS_MANAGER),
            restore_guard=c.resolve(ServiceKeys.SESSION_RESTORE_GUARD),
        )

    # One httpx.AsyncClient shared by every service
    def api_client_factory(c: DIContainer) -> Any:
        from data.clients import FinanceApiClient

        api = c.resolve(ServiceKeys.CONFIG).api
        return FinanceApiClient(
            base_url=api.base_url,
            session=c.resolve(ServiceKeys.AUTH_SESSION),
            request_timeout=api.request_timeout,
            upload_timeout=api.upload_timeout,
            max_retries=api.max_retries,
        )

    def wallet_service_factory(c: DIContainer) -> Any:
        from services.wallet_service import WalletService

        return WalletService(
            api_client=c.resolve(ServiceKeys.API_CLIENT),
            accepted_extensions=c.resolve(ServiceKeys.CONFIG).api.accepted_upload_extensions,
        )

    def finance_manager_factory(c: DIContainer) -> Any:
        from services.finance_manager import FinanceManager

        return FinanceManager(
            wallet_service=c.resolve(ServiceKeys.WALLET_SERVICE),
            settings_manager=c.resolve(ServiceKeys.SETTINGS_MANAGER),
            default_page_limit=c.resolve(ServiceKeys.CONFIG).api.default_page_limit,
        )

    def asset_service_factory(c: DIContainer) -> Any:
        from services.asset_service import AssetService

        return AssetService(settings_manager=c.resolve(ServiceKeys.SETTINGS_MANAGER))

    def mutual_fund_service_factory(c: DIContainer) -> Any:
        from services.mutual_fund_service import MutualFundService

        return MutualFundService(api_client=c.resolve(ServiceKeys.API_CLIENT))

    factories: dict[str, Factory] = {
        ServiceKeys.SIGNAL_BUS: signal_bus_factory,
        ServiceKeys.SETTINGS_MANAGER: settings_factory,
        ServiceKeys.SESSION_RESTORE_GUARD: restore_guard_factory,
        ServiceKeys.AUTH_SESSION: auth_session_factory,
        ServiceKeys.API_CLIENT: api_client_factory,
        ServiceKeys.WALLET_SERVICE: wallet_service_factory,
        ServiceKeys.FINANCE_MANAGER: finance_manager_factory,
        ServiceKeys.ASSET_SERVICE: asset_service_factory,
        ServiceKeys.MUTUAL_FUND_SERVICE: mutual_fund_service_factory,
    }
    for key, factory in factories.items():
        container.register_factory(key, factory)

    logger.info("DI container configured with %d factories", len(factories))
    return container
