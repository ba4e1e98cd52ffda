"""Async client for the finance backend REST API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from utils import global_config
from utils.exceptions import ApiConnectionError, ApiError, ResponseFormatError

from .auth import AuthSession
from .endpoints import (
    LogEndpoints,
    MutualFundEndpoints,
    StatsEndpoints,
    TransactionEndpoints,
    UserEndpoints,
    WalletEndpoints,
)

logger = logging.getLogger(__name__)

# Constants
HTTP_STATUS_NO_CONTENT = 204
RETRY_BACKOFF_BASE = 2
SERVER_ERROR_CODES = frozenset({500, 502, 503, 504})

ModelT = TypeVar("ModelT", bound=BaseModel)


class FinanceApiClient:
    """Finance backend client with session headers and error translation.

    The client organizes endpoints into namespaces (wallets, transactions,
    etc.) and returns typed Pydantic models.

    Example:
        ```python
        client = FinanceApiClient(session=AuthSession(token="..."))

        wallets = await client.wallets.list_wallets()
        page = await client.transactions.get_page(wallets[0].id, page=1, limit=100)
        print(f"{page.total_count} transactions in {page.total_pages} pages")

        await client.close()
        ```

    Errors:
        Non-2xx responses raise ``ApiError`` carrying the backend's ``detail``
        (or ``"HTTP <status>: <reason>"``); transport failures raise
        ``ApiConnectionError``. With ``max_retries > 1`` only transport errors
        and 5xx responses are retried, with exponential backoff.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: AuthSession | None = None,
        request_timeout: float | None = None,
        upload_timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the API client.

        Args:
            base_url: Backend base URL. Falls back to config/env.
            session: Authentication state attached to every request.
            request_timeout: Per-request timeout in seconds. Falls back to config/env.
            upload_timeout: Timeout for file uploads in seconds. Falls back to config/env.
            max_retries: Attempts per request. Falls back to config/env.
            transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        """
        api_config = global_config.api
        self.base_url = (base_url or api_config.base_url).rstrip("/")
        self.session = session or AuthSession()
        self.request_timeout = request_timeout or api_config.request_timeout
        self.upload_timeout = upload_timeout or api_config.upload_timeout
        self.max_retries = max(1, max_retries or api_config.max_retries)
        self._transport = transport

        self._http_client: httpx.AsyncClient | None = None

        self.users = UserEndpoints(self)
        self.wallets = WalletEndpoints(self)
        self.transactions = TransactionEndpoints(self)
        self.stats = StatsEndpoints(self)
        self.mutual_funds = MutualFundEndpoints(self)
        self.logs = LogEndpoints(self)

    def _initialize_http_client(self) -> httpx.AsyncClient:
        """Initialize HTTP client with default headers."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.request_timeout,
                headers={"User-Agent": global_config.app.user_agent},
                transport=self._transport,
            )
        return self._http_client

    def _prepare_request_headers(self, headers: dict | None) -> dict[str, str]:
        """Merge session headers with caller headers (caller wins)."""
        request_headers = self.session.headers()
        if headers:
            request_headers.update(headers)
        return {k.lower(): v for k, v in request_headers.items()}

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Extract the backend's error detail or build ``HTTP <status>: <reason>``."""
        detail: Any = None
        try:
            body = response.json()
        except (ValueError, json.JSONDecodeError):
            body = None
        if isinstance(body, dict):
            detail = body.get("detail")

        if isinstance(detail, str) and detail:
            return detail
        if isinstance(detail, list) and detail:
            # FastAPI validation errors: [{"loc": [...], "msg": "...", ...}]
            messages = [
                item.get("msg", str(item)) if isinstance(item, dict) else str(item)
                for item in detail
            ]
            return "; ".join(messages)
        return f"HTTP {response.status_code}: {response.reason_phrase}"

    def _parse_response_data(
        self, response: httpx.Response, method: str, url: str
    ) -> Any:
        """Parse a JSON response body; empty or non-JSON bodies yield None."""
        if response.status_code == HTTP_STATUS_NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except (ValueError, json.JSONDecodeError) as e:
            preview = response.text[:200] if response.text else "<empty>"
            logger.warning(
                "Failed to parse JSON response for %s %s (status=%d): %s. "
                "Response preview: %s",
                method,
                url,
                response.status_code,
                e,
                preview,
            )
            return None

    @staticmethod
    def parse(model: type[ModelT], data: Any, path: str) -> ModelT:
        """Validate a response body into ``model``.

        Raises:
            ResponseFormatError: When the body does not match the model
        """
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            errors = e.errors()
            first = errors[0] if errors else {}
            location = ".".join(str(part) for part in first.get("loc", ())) or "body"
            detail = (
                f"Unexpected response from {path}: "
                f"{location}: {first.get('msg', 'invalid value')}"
            )
            logger.error("%s (%d validation errors)", detail, len(errors))
            raise ResponseFormatError(detail) from e

    async def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json_body: Any = None,
        files: dict | None = None,
        data: dict | None = None,
        headers: dict | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Generic request method with error translation and optional retries.

        Args:
            method: HTTP method
            path: API path (e.g., /api/wallets)
            params: Query parameters (None values are dropped)
            json_body: JSON body for POST requests
            files: Multipart files (httpx ``files`` format)
            data: Multipart form fields
            headers: Additional headers
            timeout: Timeout override in seconds

        Returns:
            Parsed JSON body, or None for 204 and empty responses

        Raises:
            ApiError: On non-2xx responses
            ApiConnectionError: When the backend cannot be reached
        """
        client = self._initialize_http_client()
        request_params = (
            {k: v for k, v in params.items() if v is not None} if params else None
        )

        for attempt in range(self.max_retries):
            # Prepare headers fresh on each attempt so session changes are applied
            request_headers = self._prepare_request_headers(headers)
            logger.debug(
                "Sending HTTP request: %s %s (attempt %d/%d) Authorization=%s",
                method,
                path,
                attempt + 1,
                self.max_retries,
                "present" if "authorization" in request_headers else "missing",
            )

            try:
                response = await client.request(
                    method,
                    path,
                    params=request_params,
                    json=json_body,
                    files=files,
                    data=data,
                    headers=request_headers,
                    timeout=timeout or self.request_timeout,
                )
            except httpx.RequestError as e:
                if attempt == self.max_retries - 1:
                    logger.error("Request %s %s failed: %s", method, path, e)
                    raise ApiConnectionError(
                        f"Cannot reach the backend at {self.base_url}: {e}"
                    ) from e
                await asyncio.sleep(RETRY_BACKOFF_BASE**attempt)
                continue

            if response.is_success:
                logger.debug("%s %s -> %d", method, path, response.status_code)
                return self._parse_response_data(response, method, path)

            if (
                response.status_code in SERVER_ERROR_CODES
                and attempt < self.max_retries - 1
            ):
                logger.warning(
                    "%s %s returned %d; retrying", method, path, response.status_code
                )
                await asyncio.sleep(RETRY_BACKOFF_BASE**attempt)
                continue

            detail = self._error_detail(response)
            logger.error(
                "API error %d for %s %s: %s", response.status_code, method, path, detail
            )
            raise ApiError(response.status_code, detail)

        # Should never reach here due to raises above, but satisfy type checker
        raise RuntimeError("Request failed after all retries")

    async def check_health(self) -> bool:
        """Check whether the backend answers ``GET /health``."""
        try:
            await self.request("GET", "/health")
        except (ApiError, ApiConnectionError) as e:
            logger.warning("Backend health check failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        """Close the client and cleanup resources."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> FinanceApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
