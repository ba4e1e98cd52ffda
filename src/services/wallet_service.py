"""Framework-agnostic wallet application service."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from models.finance import (
    CurrencyDetection,
    FailedTransaction,
    TransactionPage,
    UploadResult,
    Wallet,
    WalletStats,
)
from utils import global_config
from utils.exceptions import ValidationError

if TYPE_CHECKING:
    from data.clients import FinanceApiClient

logger = logging.getLogger(__name__)

_CURRENCY_CODE_RE = re.compile(r"^[A-Z]{3}$")

SELECT_WALLET_FIRST = "Please select a wallet first"
INVALID_FILE_TYPE = "Invalid file type. Please upload CSV, XLS, or XLSX files."


def validate_wallet_name(name: str) -> str:
    """Return the trimmed wallet name, rejecting blank names."""
    trimmed = (name or "").strip()
    if not trimmed:
        raise ValidationError("Wallet name cannot be empty")
    return trimmed


def normalize_currency(code: str | None) -> str | None:
    """Upper-case an optional ISO 4217 code; None/blank means auto-detect."""
    if code is None or not code.strip():
        return None
    normalized = code.strip().upper()
    if not _CURRENCY_CODE_RE.match(normalized):
        raise ValidationError(
            f"Invalid currency code '{code}'. Use a 3-letter ISO code such as USD."
        )
    return normalized


def validate_upload_file(
    file_path: str | Path, accepted_extensions: list[str] | None = None
) -> Path:
    """Check the extension (case-insensitive) and existence of an upload file."""
    path = Path(file_path)
    accepted = accepted_extensions or global_config.api.accepted_upload_extensions
    if path.suffix.lower() not in accepted:
        raise ValidationError(INVALID_FILE_TYPE)
    if not path.is_file():
        raise ValidationError(f"File not found: {path}")
    return path


class WalletService:
    """Business logic for wallets, transaction pages and uploads."""

    def __init__(
        self,
        api_client: FinanceApiClient,
        accepted_extensions: list[str] | None = None,
    ):
        self._api = api_client
        self._accepted_extensions = accepted_extensions

    async def list_wallets(self) -> list[Wallet]:
        wallets = await self._api.wallets.list_wallets()
        logger.info("Loaded %d wallets", len(wallets))
        return wallets

    async def create_wallet(self, name: str) -> Wallet:
        """Create a wallet after trimming and validating its name."""
        wallet = await self._api.wallets.create_wallet(validate_wallet_name(name))
        logger.info("Created wallet %s (%s)", wallet.id, wallet.name)
        return wallet

    async def delete_wallet(self, wallet_id: str) -> None:
        await self._api.wallets.delete_wallet(wallet_id)
        logger.info("Deleted wallet %s", wallet_id)

    async def get_transaction_page(
        self, wallet_id: str, page: int, limit: int
    ) -> TransactionPage:
        """Fetch one page of a wallet's transactions.

        Raises:
            ValidationError: If page or limit is below 1.
        """
        if page < 1:
            raise ValidationError(f"Page must be 1 or greater, got {page}")
        if limit < 1:
            raise ValidationError(f"Rows per page must be 1 or greater, got {limit}")
        return await self._api.transactions.get_page(wallet_id, page=page, limit=limit)

    async def get_transaction_errors(self, wallet_id: str) -> list[FailedTransaction]:
        return await self._api.transactions.get_errors(wallet_id)

    async def get_stats(self, wallet_id: str | None = None) -> WalletStats:
        return await self._api.stats.get_stats(wallet_id)

    async def detect_currency(self, file_path: str | Path) -> CurrencyDetection:
        path = validate_upload_file(file_path, self._accepted_extensions)
        detection = await self._api.transactions.detect_currency(path)
        logger.info("Detected currency %s for %s", detection.currency, path.name)
        return detection

    async def upload_transactions(
        self,
        wallet: Wallet | None,
        file_path: str | Path,
        currency: str | None = None,
    ) -> UploadResult:
        """Validate and upload a transaction file into ``wallet``.

        Raises:
            ValidationError: If no wallet is given, the extension is not
                accepted, the file is missing, or the currency code is invalid.
        """
        if wallet is None:
            raise ValidationError(SELECT_WALLET_FIRST)
        path = validate_upload_file(file_path, self._accepted_extensions)
        code = normalize_currency(currency)
        return await self._api.transactions.upload(
            path, wallet_id=wallet.id, wallet_name=wallet.name, currency=code
        )
