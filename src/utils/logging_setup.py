"""Logging configuration with file rotation and an optional remote sink.

Provides centralized logging setup with optional file output and rotation.

Log Level Precedence (deterministic resolution order):
1. CLI/explicit parameter (log_level argument to setup_logging)
2. Environment variable (APP_LOG_LEVEL in .env)
3. User preferences (logging.log_level in user_settings.json via SettingsManager)
4. Config defaults (config.app.log_level from config.py)

When LOG_REMOTE_ENABLED is set, records at or above LOG_LEVEL are also
batched to the backend's ``/api/logs/file`` endpoint by RemoteLogHandler.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable
from datetime import UTC, datetime
from logging.handlers import BufferingHandler, RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from utils.config import get_config

if TYPE_CHECKING:
    from utils.settings_manager import SettingsManager

logger = logging.getLogger(__name__)

# Backend log levels; WARNING and CRITICAL are folded into these
_REMOTE_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

UserContextProvider = Callable[[], tuple[str | None, str | None]]


class RemoteLogHandler(BufferingHandler):
    """Batch log records and POST them to the backend log sink.

    Records are buffered until ``capacity`` is reached (or the handler is
    flushed or closed) and then sent as ``{"logs": [entry, ...]}``. Each entry
    follows the backend's file-log shape: ``timestamp, level, source,
    category, message, user_id, email, context, environment``.

    ``category`` and ``context`` are taken from the record's ``extra`` when
    given (``logger.info("...", extra={"category": "upload"})``) and default
    to the logger name and an empty dict.

    Delivery failures go through ``Handler.handleError`` and never propagate.
    """

    def __init__(
        self,
        base_url: str,
        capacity: int = 10,
        environment: str = "development",
        user_context: UserContextProvider | None = None,
        http_client: httpx.Client | None = None,
        timeout: float = 5.0,
    ) -> None:
        super().__init__(capacity)
        self._url = f"{base_url.rstrip('/')}/api/logs/file"
        self._environment = environment
        self._user_context = user_context
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.Client(timeout=timeout)

    def build_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        """Convert a log record into the backend payload entry."""
        user_id, email = (None, None)
        if self._user_context is not None:
            user_id, email = self._user_context()

        context = getattr(record, "context", None)
        if not isinstance(context, dict):
            context = {}
        context = {**context, "logger": record.name}
        if record.exc_info:
            context["exception"] = logging.Formatter().formatException(record.exc_info)

        return {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": _REMOTE_LEVEL_NAMES.get(record.levelno, record.levelname),
            "source": "frontend",
            "category": getattr(record, "category", None) or record.name,
            "message": record.getMessage(),
            "user_id": user_id,
            "email": email,
            "context": context,
            "environment": self._environment,
        }

    def flush(self) -> None:
        """Send all buffered records in one request."""
        self.acquire()
        try:
            if not self.buffer:
                return
            records = list(self.buffer)
            self.buffer.clear()
        finally:
            self.release()

        try:
            payload = {"logs": [self.build_entry(r) for r in records]}
            response = self._http_client.post(self._url, json=payload)
            response.raise_for_status()
        except Exception:
            self.handleError(records[-1])

    def close(self) -> None:
        try:
            super().close()
        finally:
            if self._owns_client:
                self._http_client.close()


def setup_logging(
    settings_manager: SettingsManager | None = None,
    log_level: str | None = None,
    user_data_dir: Path | None = None,
    user_context: UserContextProvider | None = None,
) -> None:
    """Configure application logging with file output and rotation.

    Implements deterministic log level precedence:
      1. Explicit log_level parameter (CLI/programmatic override)
      2. APP_LOG_LEVEL environment variable (.env file)
      3. User preferences (settings_manager.get_logging_level())
      4. Config default (config.app.log_level)

    Args:
        settings_manager: Optional settings manager for logging preferences.
        log_level: Explicit logging level override (highest priority).
        user_data_dir: Directory for log files (defaults to config user_data_dir).
        user_context: Callable returning ``(user_id, email)`` for remote log
            entries.
    """
    config = get_config()

    resolved_level: str
    if log_level is not None:
        resolved_level = log_level
    else:
        env_level = os.environ.get("APP_LOG_LEVEL")
        if env_level:
            resolved_level = env_level
        elif settings_manager:
            resolved_level = settings_manager.get_logging_level()
        else:
            resolved_level = config.app.log_level

    numeric_level = getattr(logging, resolved_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicates
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(console_handler)

    save_to_file = True
    if settings_manager:
        save_to_file = settings_manager.get_logging_save_to_file()

    if save_to_file:
        if user_data_dir is None:
            user_data_dir = config.app.user_data_dir

        log_dir = user_data_dir / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = (
            log_dir / f"finance_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S')}.log"
        )

        retention_count = 7
        if settings_manager:
            retention_count = settings_manager.get_logging_retention_count()

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=retention_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

        _cleanup_old_logs(log_dir, retention_count)

        logger.info(f"Logging to file: {log_file}")

    if config.log.remote_enabled:
        remote_handler = RemoteLogHandler(
            base_url=config.api.base_url,
            capacity=config.log.batch_size,
            environment=config.app.environment,
            user_context=user_context,
        )
        remote_handler.setLevel(getattr(logging, config.log.level))
        root_logger.addHandler(remote_handler)
        logger.info(f"Remote logging enabled (batch size {config.log.batch_size})")

    logger.info(f"Logging configured with level: {resolved_level}")


def _cleanup_old_logs(log_dir: Path, keep_count: int) -> None:
    """Remove old log files, keeping only the most recent ones.

    Args:
        log_dir: Directory containing log files.
        keep_count: Number of most recent log files to keep.
    """
    try:
        log_files = sorted(
            log_dir.glob("finance_*.log*"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )

        for log_file in log_files[keep_count:]:
            try:
                log_file.unlink()
                logger.debug(f"Deleted old log file: {log_file}")
            except Exception as e:
                logger.warning(f"Failed to delete old log file {log_file}: {e}")
    except Exception as e:
        logger.warning(f"Failed to cleanup old log files: {e}")
