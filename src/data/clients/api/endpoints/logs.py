"""Remote log sink endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from data.clients.api import FinanceApiClient


class LogEndpoints:
    """Handles the backend's file log sink."""

    def __init__(self, client: FinanceApiClient):
        self._client = client

    async def send(self, entries: list[dict[str, Any]]) -> None:
        """Ship a batch of log entries (see ``RemoteLogHandler.build_entry``)."""
        if not entries:
            return
        await self._client.request("POST", "/api/logs/file", json_body={"logs": entries})
