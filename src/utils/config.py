"""Centralized configuration management for Finance Manager.

This module provides application-level configuration from environment variables.

Features:
- Environment variable support via .env files
- Fallback priority: .env → hardcoded defaults
- Automatic .env.example generation from defaults
- Type-safe configuration using Pydantic
- Singleton pattern for global access

Usage:
    from utils import global_config

    client = FinanceApiClient(
        base_url=global_config.api.base_url,
        timeout=global_config.api.request_timeout,
    )
"""

from __future__ import annotations

import sys
import threading
import tomllib
from logging import getLogger
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = getLogger(__name__)

_DEFAULT_NAME = "finance-manager"


def _read_pyproject() -> dict:
    """Read pyproject.toml and extract project metadata."""
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        frozen_path = Path(sys._MEIPASS) / "pyproject.toml"  # noqa: SLF001
        if frozen_path.exists():
            pyproject_path = frozen_path
    try:
        with open(pyproject_path, "rb") as f:
            project = tomllib.load(f).get("project", {})
    except Exception as e:
        logger.warning(f"Could not read pyproject.toml: {e}")
        return {"name": _DEFAULT_NAME, "version": "?.?.?", "urls": {}}

    urls = {}
    if isinstance(project.get("urls"), dict):
        for k, v in project["urls"].items():
            if isinstance(v, str):
                urls[str(k).lower()] = v

    return {
        "name": project.get("name", _DEFAULT_NAME),
        "version": project.get("version", "?.?.?"),
        "urls": urls,
    }


# Read project metadata once at module load
_PROJECT_METADATA = _read_pyproject()


class ApiConfig(BaseSettings):
    """Finance backend REST API configuration."""

    base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the finance backend",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Per-request timeout in seconds",
        gt=0,
    )
    upload_timeout: float = Field(
        default=120.0,
        description="Timeout in seconds for transaction file uploads",
        gt=0,
    )
    max_retries: int = Field(
        default=1,
        description="Attempts per request (1 disables retries; only transport errors and 5xx are retried)",
        ge=1,
    )
    default_page_limit: int = Field(
        default=1000,
        description="Transactions requested per page when no preference is stored",
        ge=1,
    )
    accepted_upload_extensions: list[str] = Field(
        default=[".csv", ".xls", ".xlsx"],
        description="File extensions accepted for transaction uploads",
    )

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("accepted_upload_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lower-case extensions and make sure each starts with a dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized


class AuthConfig(BaseSettings):
    """Authorization configuration.

    The identity provider is external; this only decides which signed-in
    emails may use the app and optionally supplies a static bearer token.
    """

    authorization_enabled: bool = Field(
        default=False,
        description="Restrict access to the emails listed in AUTH_ALLOWED_EMAILS",
    )
    allowed_emails: list[str] = Field(
        default_factory=list,
        description="Whitelisted emails (case-insensitive)",
    )
    token: str | None = Field(
        default=None,
        description="Static bearer token sent to the backend",
    )
    email: str | None = Field(
        default=None,
        description="Email of the signed-in user",
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("allowed_emails", mode="before")
    @classmethod
    def split_emails(cls, v: object) -> object:
        """Accept a comma-separated string as well as a JSON list."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class LogConfig(BaseSettings):
    """Remote log sink configuration."""

    remote_enabled: bool = Field(
        default=False,
        description="Ship log records to the backend's /api/logs/file endpoint",
    )
    batch_size: int = Field(
        default=10,
        description="Records buffered before a remote flush",
        ge=1,
    )
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Minimum level shipped to the remote sink",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


class AppConfig(BaseSettings):
    """Application-wide configuration."""

    name: str = Field(
        default_factory=lambda: _PROJECT_METADATA["name"],
        description="Application name (from pyproject.toml)",
    )
    version: str = Field(
        default_factory=lambda: _PROJECT_METADATA["version"],
        description="Application version (from pyproject.toml)",
    )
    environment: str = Field(
        default="development",
        description="Deployment environment reported with remote log records",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )

    # Project paths
    project_root: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent.parent,
        description="Project root directory",
    )
    data_dir: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent.parent / "data",
        description="Directory for settings and logs",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def user_data_dir(self) -> Path:
        """Get user data directory for writable files.

        Returns a 'data' directory next to the executable (when frozen) or
        the configured data directory otherwise.

        Returns:
            Path to directory for settings, logs, and other writable data.
        """
        if getattr(sys, "frozen", False):
            app_dir = Path(sys.executable).parent / "data"
        else:
            app_dir = self.data_dir

        app_dir.mkdir(parents=True, exist_ok=True)
        return app_dir

    @property
    def user_settings_file(self) -> Path:
        """Get path to the user settings JSON file.

        Returns:
            Path to user_settings.json in user_data_dir.
        """
        return self.user_data_dir / "user_settings.json"

    @property
    def user_agent(self) -> str:
        """User-Agent header sent to the backend."""
        return f"{self.name}/{self.version}"


class Config:
    """Main configuration container with auto-initialization."""

    _SECTIONS: tuple[tuple[str, str, type[BaseSettings]], ...] = (
        ("Application Settings", "APP_", AppConfig),
        ("Backend API Settings", "API_", ApiConfig),
        ("Authorization Settings", "AUTH_", AuthConfig),
        ("Remote Logging Settings", "LOG_", LogConfig),
    )

    def __init__(self) -> None:
        """Initialize configuration from environment and defaults."""
        self.app = AppConfig()
        self.api = ApiConfig()
        self.auth = AuthConfig()
        self.log = LogConfig()

        self._update_env_example()

    def _update_env_example(self) -> None:
        """Update .env.example with current default values."""
        env_example_path = self.app.project_root / ".env.example"

        lines = [
            "# Finance Manager - Environment Configuration",
            "# Copy this file to .env and customize the values",
            "#",
            "# Priority: .env > hardcoded defaults",
            "",
        ]

        for title, prefix, section in self._SECTIONS:
            lines.extend(
                [
                    "# " + "=" * 76,
                    f"# {title}",
                    "# " + "=" * 76,
                    "",
                ]
            )
            for field_name, field_info in section.model_fields.items():
                if field_name in ("project_root", "data_dir"):
                    continue  # Skip computed paths

                if field_info.default_factory:
                    try:
                        default = field_info.default_factory()
                    except Exception:
                        default = None
                else:
                    default = field_info.default

                env_var = f"{prefix}{field_name.upper()}"
                lines.append(f"# {field_info.description or ''}")
                if default is None or default == "":
                    lines.append(f"# {env_var}=")
                else:
                    lines.append(f"# {env_var}={default}")
                lines.append("")

        content = "\n".join(lines)
        try:
            env_example_path.parent.mkdir(parents=True, exist_ok=True)
            env_example_path.write_text(content, encoding="utf-8")
        except Exception as e:
            # Non-fatal: read-only installs simply skip the example file
            logger.warning(f"Could not write .env.example to {env_example_path}: {e}")

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"Config(\n  app={self.app},\n  api={self.api},\n"
            f"  auth={self.auth},\n  log={self.log}\n)"
        )


_config_instance: Config | None = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Return the process-wide configuration, reading env and .env on first use."""
    global _config_instance  # noqa: PLW0603
    with _config_lock:
        if _config_instance is None:
            _config_instance = Config()
        return _config_instance


global_config = get_config()
