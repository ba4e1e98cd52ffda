"""Transaction endpoints: paginated listing, stored errors, upload."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING

from models.finance import (
    CurrencyDetection,
    FailedTransaction,
    TransactionPage,
    UploadResult,
)

if TYPE_CHECKING:
    from data.clients.api import FinanceApiClient

logger = logging.getLogger(__name__)


def _file_part(path: Path) -> tuple[str, bytes, str]:
    """Build an httpx multipart file tuple for ``path``."""
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return (path.name, path.read_bytes(), content_type)


class TransactionEndpoints:
    """Handles transaction endpoints.

    Example:
        ```python
        page = await client.transactions.get_page(wallet_id, page=2, limit=100)
        result = await client.transactions.upload(
            Path("export.csv"), wallet_id, wallet_name="Brokerage", currency="EUR"
        )
        ```
    """

    def __init__(self, client: FinanceApiClient):
        """Initialize transaction endpoints with the API client.

        Args:
            client: API client instance for HTTP operations
        """
        self._client = client

    async def get_page(self, wallet_id: str, page: int, limit: int) -> TransactionPage:
        """Get one page of a wallet's transactions.

        Args:
            wallet_id: Wallet ID
            page: 1-based page index
            limit: Rows per page

        Returns:
            The page, with the pagination fields exactly as sent by the backend
        """
        data = await self._client.request(
            "GET",
            "/api/transactions",
            params={"wallet_id": wallet_id, "page": page, "limit": limit},
        )
        result = self._client.parse(TransactionPage, data or {}, "/api/transactions")
        logger.debug(
            "Retrieved page %d/%d (%d rows) for wallet %s",
            result.page,
            result.total_pages,
            len(result.transactions),
            wallet_id,
        )
        return result

    async def get_errors(self, wallet_id: str) -> list[FailedTransaction]:
        """Get the rows rejected by earlier uploads into this wallet."""
        data = await self._client.request(
            "GET", "/api/transactions/errors", params={"wallet_id": wallet_id}
        )
        if isinstance(data, dict):
            data = data.get("errors", data.get("failed_transactions", []))
        return (
            [
                self._client.parse(FailedTransaction, row, "/api/transactions/errors")
                for row in data
            ]
            if isinstance(data, list)
            else []
        )

    async def detect_currency(self, file_path: Path) -> CurrencyDetection:
        """Ask the backend which currency an upload file is denominated in."""
        data = await self._client.request(
            "POST",
            "/api/transactions/detect-currency",
            files={"file": _file_part(file_path)},
            timeout=self._client.upload_timeout,
        )
        return self._client.parse(
            CurrencyDetection, data or {}, "/api/transactions/detect-currency"
        )

    async def upload(
        self,
        file_path: Path,
        wallet_id: str,
        wallet_name: str,
        currency: str | None = None,
    ) -> UploadResult:
        """Upload a CSV/XLS/XLSX transaction export into a wallet.

        Args:
            file_path: File to upload (extension already validated)
            wallet_id: Target wallet ID
            wallet_name: Target wallet name
            currency: Optional ISO 4217 code overriding detection

        Returns:
            Import summary including any rejected rows
        """
        form = {"wallet_id": wallet_id, "wallet_name": wallet_name}
        if currency:
            form["currency"] = currency
        data = await self._client.request(
            "POST",
            "/api/transactions/upload",
            files={"file": _file_part(file_path)},
            data=form,
            timeout=self._client.upload_timeout,
        )
        result = self._client.parse(
            UploadResult, data or {}, "/api/transactions/upload"
        )
        logger.info(
            "Uploaded %s to wallet %s: %d processed, %d failed",
            file_path.name,
            wallet_id,
            result.processed_count,
            result.failed_count,
        )
        return result
