"""Centralized user settings management for Finance Manager.

This module manages user preferences and UI state through a JSON file.

Features:
- Thread-safe singleton pattern
- Atomic file writes (temp file + rename)
- Type-safe Pydantic models
- Per-view table settings
- User-entered current asset values
- Automatic defaults on first run

Usage:
    from utils.settings_manager import get_settings_manager

    settings = get_settings_manager()

    # Preferred transactions page size
    limit = settings.get_rows_per_page()

    # Current unit price entered for an asset
    entry = settings.get_asset_value("AAPL")
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
import time
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from .config import get_config

logger = logging.getLogger(__name__)


class UISettings(BaseModel):
    """Settings for a single table view.

    These settings control column widths and sorting for table-based views.
    """

    col_widths: dict[str, int] = Field(
        default_factory=dict,
        description="Width in pixels for each column keyed by column id",
    )
    sort_section: int = Field(
        default=-1,
        description="Index of the column used for sorting (-1 = no sort)",
    )
    sort_order: int = Field(
        default=0,
        description="Sort order (0 = ascending, 1 = descending)",
    )


class TablePreferences(BaseModel):
    """Preferences for the paginated transactions table."""

    rows_per_page: int | None = Field(
        default=None,
        description="Preferred page size (None = use API_DEFAULT_PAGE_LIMIT)",
    )
    last_wallet_id: str | None = Field(
        default=None,
        description="Wallet selected when the app was last closed",
    )


class StoredAssetValue(BaseModel):
    """Persisted current unit price for an asset."""

    value: float = Field(..., ge=0, description="Current price per unit")
    last_updated: datetime = Field(..., description="When the value was entered")


class LoggingPreferences(BaseModel):
    """Preferences for application logging."""

    save_to_file: bool = Field(
        default=True,
        description="Whether to save logs to files",
    )
    retention_count: int = Field(
        default=7,
        description="Number of log files to retain (older files are deleted)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )


class SessionPreferences(BaseModel):
    """Backend identity remembered between runs."""

    backend_user_id: str | None = Field(
        default=None,
        description="User ID assigned by POST /api/users/register",
    )
    email: str | None = Field(
        default=None,
        description="Email the backend user ID was registered for",
    )


class UserSettings(BaseModel):
    """Root settings model containing all user preferences."""

    ui: dict[str, UISettings] = Field(
        default_factory=dict,
        description="UI settings per view (transactions, failed_transactions, assets)",
    )
    table: TablePreferences = Field(
        default_factory=TablePreferences,
        description="Transactions table preferences",
    )
    asset_values: dict[str, StoredAssetValue] = Field(
        default_factory=dict,
        description="Current unit price per asset name",
    )
    logging: LoggingPreferences = Field(
        default_factory=LoggingPreferences,
        description="Logging preferences for file output and retention",
    )
    session: SessionPreferences = Field(
        default_factory=SessionPreferences,
        description="Backend identity",
    )


class SettingsManager:
    """Singleton settings manager with thread-safe JSON persistence.

    This class manages all user settings through a unified JSON file.
    All operations are thread-safe and writes are atomic.
    """

    _instance: SettingsManager | None = None
    _lock = threading.Lock()

    def __new__(cls) -> SettingsManager:
        """Create or return the singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._initialized = False
                    cls._instance = instance
        return cls._instance

    def __init__(self) -> None:
        """Initialize the settings manager."""
        # Prevent re-initialization
        if self._initialized:
            return

        self._settings_path = get_config().app.user_settings_file
        self._write_lock = threading.Lock()
        self._settings = self._load()
        self._initialized = True

    def _load(self) -> UserSettings:
        """Load settings from JSON file, create defaults if missing.

        Returns:
            UserSettings instance with loaded or default values
        """
        if not self._settings_path.exists():
            logger.info(
                f"Settings file not found at {self._settings_path}, creating defaults"
            )
            return self._create_defaults()

        try:
            with open(self._settings_path, encoding="utf-8") as f:
                data = json.load(f)
            return UserSettings.model_validate(data)
        except Exception as e:
            logger.warning(
                f"Failed to load settings from {self._settings_path}: {e}. "
                f"Using defaults."
            )
            return self._create_defaults()

    def _create_defaults(self) -> UserSettings:
        """Create default settings structure and save it immediately."""
        defaults = UserSettings(
            ui={
                "transactions": UISettings(),
                "failed_transactions": UISettings(),
                "assets": UISettings(),
            },
        )
        self._save(defaults)
        return defaults

    def _save(self, settings: UserSettings | None = None) -> None:
        """Atomically save settings to JSON with Windows-safe replace and retry.

        Writes to a unique temp file in the same directory, fsyncs, then replaces
        the target with os.replace with limited retries to avoid PermissionError
        when other processes momentarily lock the file.

        Args:
            settings: Settings to save. If None, saves current settings.
        """
        if settings is None:
            settings = self._settings

        with self._write_lock:
            self._settings_path.parent.mkdir(parents=True, exist_ok=True)

            payload = settings.model_dump(mode="json")
            temp_name = f"{self._settings_path.name}.tmp-{os.getpid()}-{int(time.time() * 1000)}"
            temp_path = self._settings_path.parent / temp_name

            try:
                with open(temp_path, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
            except Exception as e:
                logger.error(
                    "Failed to write temporary settings file %s: %s", temp_path, e
                )
                with contextlib.suppress(Exception):
                    if temp_path.exists():
                        temp_path.unlink()
                raise

            max_attempts = 5
            delay = 0.1
            last_err: Exception | None = None
            for attempt in range(1, max_attempts + 1):
                try:
                    os.replace(temp_path, self._settings_path)
                    logger.debug("Settings saved to %s", self._settings_path)
                    last_err = None
                    break
                except PermissionError as e:
                    last_err = e
                    logger.warning(
                        "PermissionError replacing settings (attempt %d/%d): %s",
                        attempt,
                        max_attempts,
                        e,
                    )
                    time.sleep(delay)
                    delay = min(delay * 2, 1.0)
                except Exception as e:
                    last_err = e
                    logger.error("Unexpected error replacing settings: %s", e)
                    break

            with contextlib.suppress(Exception):
                if temp_path.exists():
                    temp_path.unlink()

            if last_err is not None:
                raise last_err

    def reload(self) -> None:
        """Reload settings from disk, discarding any unsaved changes."""
        with self._write_lock:
            self._settings = self._load()
            logger.debug("Settings reloaded from disk")

    # -------------------------------------------------------------------------
    # UI Settings
    # -------------------------------------------------------------------------

    def get_ui_settings(self, view_name: str) -> UISettings:
        """Get settings for a table view, creating defaults if missing."""
        if view_name not in self._settings.ui:
            self._settings.ui[view_name] = UISettings()
        return self._settings.ui[view_name]

    def update_ui_settings(self, view_name: str, **kwargs: object) -> None:
        """Update individual fields of a view's settings and save."""
        current = self.get_ui_settings(view_name)
        self._settings.ui[view_name] = current.model_copy(update=kwargs)
        self._save()

    # -------------------------------------------------------------------------
    # Transactions Table
    # -------------------------------------------------------------------------

    def get_rows_per_page(self) -> int | None:
        """Get the preferred transactions page size (None if never chosen)."""
        return self._settings.table.rows_per_page

    def set_rows_per_page(self, limit: int) -> None:
        """Set the preferred transactions page size."""
        if limit < 1:
            raise ValueError(f"rows per page must be positive, got {limit}")
        self._settings.table.rows_per_page = int(limit)
        self._save()

    def get_last_wallet_id(self) -> str | None:
        """Get the wallet that was selected when the app last closed."""
        return self._settings.table.last_wallet_id

    def set_last_wallet_id(self, wallet_id: str | None) -> None:
        """Remember the selected wallet (None = summary view)."""
        self._settings.table.last_wallet_id = wallet_id
        self._save()

    # -------------------------------------------------------------------------
    # Asset Current Values
    # -------------------------------------------------------------------------

    def get_asset_value(self, asset_name: str) -> StoredAssetValue | None:
        """Get the stored current unit price for an asset."""
        return self._settings.asset_values.get(asset_name)

    def get_all_asset_values(self) -> dict[str, StoredAssetValue]:
        """Get a copy of all stored current asset values."""
        return dict(self._settings.asset_values)

    def set_asset_value(
        self, asset_name: str, value: float, last_updated: datetime
    ) -> None:
        """Store the current unit price for an asset.

        Raises:
            pydantic.ValidationError: If value is negative.
        """
        self._settings.asset_values[asset_name] = StoredAssetValue(
            value=value, last_updated=last_updated
        )
        self._save()

    def remove_asset_value(self, asset_name: str) -> None:
        """Forget the stored current value for an asset."""
        if self._settings.asset_values.pop(asset_name, None) is not None:
            self._save()

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def get_backend_user_id(self) -> str | None:
        """Get the backend user ID from the last registration."""
        return self._settings.session.backend_user_id

    def get_session_email(self) -> str | None:
        """Get the email the stored backend user ID belongs to."""
        return self._settings.session.email

    def set_backend_user(self, user_id: str | None, email: str | None = None) -> None:
        """Store (or clear, with None) the backend user ID."""
        self._settings.session.backend_user_id = user_id
        self._settings.session.email = email if user_id is not None else None
        self._save()

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def export_settings(self, path: Path) -> None:
        """Export settings to a JSON file.

        Args:
            path: Destination file path
        """
        with open(path, "w", encoding="utf-8") as f:
            json.dump(
                self._settings.model_dump(mode="json"),
                f,
                indent=2,
                ensure_ascii=False,
            )
        logger.info(f"Settings exported to {path}")

    def import_settings(self, path: Path) -> None:
        """Import settings from a JSON file.

        Args:
            path: Source file path
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        self._settings = UserSettings.model_validate(data)
        self._save()
        logger.info(f"Settings imported from {path}")

    # -------------------------------------------------------------------------
    # Logging Preferences
    # -------------------------------------------------------------------------

    def get_logging_save_to_file(self) -> bool:
        """Get whether logs should be saved to files."""
        return self._settings.logging.save_to_file

    def set_logging_save_to_file(self, enabled: bool) -> None:
        """Set whether logs should be saved to files."""
        self._settings.logging.save_to_file = bool(enabled)
        self._save()

    def get_logging_retention_count(self) -> int:
        """Get the number of log files to retain."""
        return self._settings.logging.retention_count

    def set_logging_retention_count(self, count: int) -> None:
        """Set the number of log files to retain."""
        self._settings.logging.retention_count = max(1, min(365, count))
        self._save()

    def get_logging_level(self) -> str:
        """Get the logging level."""
        return self._settings.logging.log_level

    def set_logging_level(self, level: str) -> None:
        """Set the logging level.

        Args:
            level: One of 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'
        """
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level.upper() in valid_levels:
            self._settings.logging.log_level = level.upper()
            self._save()


# Global singleton accessor
_manager_instance: SettingsManager | None = None
_manager_lock = threading.Lock()


def get_settings_manager(
    settings_manager: SettingsManager | None = None,
) -> SettingsManager:
    """Get the global settings manager instance.

    Args:
        settings_manager: Optional settings manager to use instead of singleton.
                          If provided, replaces the singleton.

    Returns:
        Global SettingsManager singleton
    """
    global _manager_instance  # noqa: PLW0603

    if settings_manager is not None:
        with _manager_lock:
            _manager_instance = settings_manager
        return _manager_instance

    if _manager_instance is None:
        with _manager_lock:
            if _manager_instance is None:
                _manager_instance = SettingsManager()

    assert _manager_instance is not None
    return _manager_instance


def reset_settings_manager() -> None:
    """Reset the global settings manager instance.

    Primarily for testing purposes.
    """
    global _manager_instance  # noqa: PLW0603

    with _manager_lock:
        _manager_instance = None

    SettingsManager._instance = None  # noqa: SLF001
