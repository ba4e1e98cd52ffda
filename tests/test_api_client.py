"""Tests for FinanceApiClient against an in-memory httpx transport."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from data.clients import AuthSession, FinanceApiClient
from models.finance import BackendUser
from utils.exceptions import (
    ApiConnectionError,
    ApiError,
    FinanceManagerError,
    ResponseFormatError,
)

BASE_URL = "http://backend.test"


def _session(token="tok", email="ann@example.com", user_id=None):
    session = AuthSession(
        token=token,
        email=email,
        authorization_enabled=False,
        allowed_emails=[],
    )
    if user_id:
        session.set_user(BackendUser(user_id=user_id))
    return session


def _client(handler, session=None, max_retries=1):
    return FinanceApiClient(
        base_url=BASE_URL,
        session=session or _session(),
        request_timeout=5,
        upload_timeout=30,
        max_retries=max_retries,
        transport=httpx.MockTransport(handler),
    )


class TestRequest:
    """Generic request handling."""

    @pytest.mark.asyncio
    async def test_session_headers_are_attached(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json=[])

        client = _client(handler, session=_session(user_id="u-42"))
        await client.request("GET", "/api/wallets")
        await client.close()

        headers = captured[0].headers
        assert headers["authorization"] == "Bearer tok"
        assert headers["x-user-id"] == "u-42"
        assert "user-agent" in headers

    @pytest.mark.asyncio
    async def test_headers_follow_session_changes(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={})

        session = _session()
        client = _client(handler, session=session)
        await client.request("GET", "/a")
        session.sign_out()
        await client.request("GET", "/b")
        await client.close()

        assert "authorization" in captured[0].headers
        assert "authorization" not in captured[1].headers

    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={})

        client = _client(handler)
        await client.request("GET", "/api/stats", params={"wallet_id": None, "x": 1})
        await client.close()

        assert dict(captured[0].url.params) == {"x": "1"}

    @pytest.mark.asyncio
    async def test_no_content_returns_none(self):
        client = _client(lambda request: httpx.Response(204))
        assert await client.request("DELETE", "/api/wallets/w1") is None
        await client.close()

    @pytest.mark.asyncio
    async def test_non_json_body_returns_none(self):
        client = _client(lambda request: httpx.Response(200, text="<html>ok</html>"))
        assert await client.request("GET", "/") is None
        await client.close()

    @pytest.mark.asyncio
    async def test_error_detail_is_raised(self):
        client = _client(
            lambda request: httpx.Response(404, json={"detail": "Wallet not found"})
        )

        with pytest.raises(ApiError) as exc_info:
            await client.request("GET", "/api/wallets/missing")
        await client.close()

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Wallet not found"
        assert str(exc_info.value) == "Wallet not found"

    @pytest.mark.asyncio
    async def test_error_without_detail_uses_status_line(self):
        client = _client(lambda request: httpx.Response(500, text="oops"))

        with pytest.raises(ApiError) as exc_info:
            await client.request("GET", "/api/wallets")
        await client.close()

        assert exc_info.value.detail == "HTTP 500: Internal Server Error"

    @pytest.mark.asyncio
    async def test_validation_error_list_is_joined(self):
        body = {
            "detail": [
                {"loc": ["query", "page"], "msg": "must be >= 1"},
                {"loc": ["query", "limit"], "msg": "must be >= 1"},
            ]
        }
        client = _client(lambda request: httpx.Response(422, json=body))

        with pytest.raises(ApiError) as exc_info:
            await client.request("GET", "/api/transactions")
        await client.close()

        assert exc_info.value.detail == "must be >= 1; must be >= 1"

    @pytest.mark.asyncio
    async def test_transport_error_becomes_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)

        with pytest.raises(ApiConnectionError):
            await client.request("GET", "/api/wallets")
        await client.close()

    @pytest.mark.asyncio
    async def test_server_errors_are_retried(self):
        responses = [httpx.Response(503), httpx.Response(200, json={"ok": True})]

        client = _client(lambda request: responses.pop(0), max_retries=2)
        with patch("asyncio.sleep", new=AsyncMock()):
            data = await client.request("GET", "/health")
        await client.close()

        assert data == {"ok": True}

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"detail": "bad"})

        client = _client(handler, max_retries=3)
        with pytest.raises(ApiError):
            await client.request("GET", "/api/wallets")
        await client.close()

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_check_health(self):
        healthy = _client(lambda request: httpx.Response(200, json={"status": "ok"}))
        broken = _client(lambda request: httpx.Response(503))

        assert await healthy.check_health() is True
        assert await broken.check_health() is False

        await healthy.close()
        await broken.close()


class TestWalletEndpoints:
    @pytest.mark.asyncio
    async def test_list_accepts_bare_list(self):
        body = [{"id": 1, "name": "Broker", "balance": "12.5"}]
        client = _client(lambda request: httpx.Response(200, json=body))

        wallets = await client.wallets.list_wallets()
        await client.close()

        assert wallets[0].id == "1"
        assert wallets[0].balance == pytest.approx(12.5)

    @pytest.mark.asyncio
    async def test_list_accepts_wrapped_list(self):
        body = {"wallets": [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}], "count": 2}
        client = _client(lambda request: httpx.Response(200, json=body))

        wallets = await client.wallets.list_wallets()
        await client.close()

        assert [w.name for w in wallets] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_null_balance_reads_as_zero(self):
        body = [{"id": "w1", "name": "Broker", "balance": None}]
        client = _client(lambda request: httpx.Response(200, json=body))

        wallets = await client.wallets.list_wallets()
        await client.close()

        assert wallets[0].balance == 0.0

    @pytest.mark.asyncio
    async def test_malformed_wallet_raises_response_format_error(self):
        body = [{"id": "w1", "name": "Broker", "balance": "n/a"}]
        client = _client(lambda request: httpx.Response(200, json=body))

        with pytest.raises(ResponseFormatError, match="/api/wallets: balance"):
            await client.wallets.list_wallets()
        await client.close()

    @pytest.mark.asyncio
    async def test_create_posts_name(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(201, json={"id": "w9", "name": "New"})

        client = _client(handler)
        wallet = await client.wallets.create_wallet("New")
        await client.close()

        assert captured[0].method == "POST"
        assert json.loads(captured[0].content) == {"name": "New"}
        assert wallet.id == "w9"

    @pytest.mark.asyncio
    async def test_delete(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(204)

        client = _client(handler)
        assert await client.wallets.delete_wallet("w1") is None
        await client.close()

        assert captured[0].method == "DELETE"
        assert captured[0].url.path == "/api/wallets/w1"


class TestTransactionEndpoints:
    @pytest.mark.asyncio
    async def test_get_page_sends_page_and_limit(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(
                200,
                json={
                    "transactions": [
                        {
                            "id": 7,
                            "transaction_date": "2024-02-01",
                            "asset_name": "AAPL",
                            "transaction_type": "BUY",
                            "transaction_amount": -100,
                            "currency": None,
                        }
                    ],
                    "total_count": 101,
                    "total_pages": 2,
                    "page": 2,
                    "limit": 100,
                    "has_next": False,
                    "has_prev": True,
                },
            )

        client = _client(handler)
        page = await client.transactions.get_page("w1", page=2, limit=100)
        await client.close()

        params = captured[0].url.params
        assert params["wallet_id"] == "w1"
        assert params["page"] == "2"
        assert params["limit"] == "100"
        assert page.total_count == 101
        assert page.transactions[0].id == "7"
        assert page.transactions[0].date == "2024-02-01"
        assert page.transactions[0].currency == "USD"

    @pytest.mark.asyncio
    async def test_row_without_date_raises_response_format_error(self):
        body = {
            "transactions": [{"id": "t1", "asset_name": "AAPL", "transaction_amount": 5}],
            "total_count": 1,
            "total_pages": 1,
            "page": 1,
            "limit": 100,
        }
        client = _client(lambda request: httpx.Response(200, json=body))

        with pytest.raises(ResponseFormatError) as exc_info:
            await client.transactions.get_page("w1", page=1, limit=100)
        await client.close()

        assert "transactions.0.date" in str(exc_info.value)
        assert isinstance(exc_info.value, FinanceManagerError)

    @pytest.mark.asyncio
    async def test_get_errors_accepts_wrapped_list(self):
        body = {"errors": [{"row": 3, "error_message": "Missing date", "raw_data": {"a": 1}}]}
        client = _client(lambda request: httpx.Response(200, json=body))

        rows = await client.transactions.get_errors("w1")
        await client.close()

        assert rows[0].row_number == 3
        assert rows[0].error == "Missing date"
        assert rows[0].data == {"a": 1}

    @pytest.mark.asyncio
    async def test_upload_is_multipart(self, tmp_path):
        export = tmp_path / "export.csv"
        export.write_text("date,amount\n2024-01-01,10\n", encoding="utf-8")
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(
                200,
                json={
                    "message": "Imported 1 of 2 rows",
                    "successful_count": 1,
                    "failed_count": 1,
                    "failed_transactions": [{"row_number": 2, "error": "bad amount"}],
                },
            )

        client = _client(handler)
        result = await client.transactions.upload(
            export, wallet_id="w1", wallet_name="Broker", currency="EUR"
        )
        await client.close()

        request = captured[0]
        body = request.content
        assert request.url.path == "/api/transactions/upload"
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b'name="wallet_id"' in body
        assert b'name="wallet_name"' in body
        assert b'name="currency"' in body
        assert b'filename="export.csv"' in body
        assert result.processed_count == 1
        assert result.has_failures is True
        assert result.failed_transactions[0].row_number == 2

    @pytest.mark.asyncio
    async def test_upload_without_currency_omits_field(self, tmp_path):
        export = tmp_path / "export.xlsx"
        export.write_bytes(b"PK\x03\x04")
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={"message": "ok"})

        client = _client(handler)
        await client.transactions.upload(export, wallet_id="w1", wallet_name="Broker")
        await client.close()

        assert b'name="currency"' not in captured[0].content

    @pytest.mark.asyncio
    async def test_detect_currency(self, tmp_path):
        export = tmp_path / "export.csv"
        export.write_text("x", encoding="utf-8")
        client = _client(
            lambda request: httpx.Response(200, json={"detected_currency": "PLN"})
        )

        detection = await client.transactions.detect_currency(export)
        await client.close()

        assert detection.currency == "PLN"


class TestOtherEndpoints:
    @pytest.mark.asyncio
    async def test_register_user(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={"id": 12, "email": "ann@example.com"})

        client = _client(handler)
        user = await client.users.register("ann@example.com")
        await client.close()

        assert json.loads(captured[0].content) == {
            "email": "ann@example.com",
            "username": "ann",
        }
        assert user.user_id == "12"

    @pytest.mark.asyncio
    async def test_stats_for_all_wallets(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={"balance": 10, "transaction_count": 4})

        client = _client(handler)
        stats = await client.stats.get_stats()
        await client.close()

        assert "wallet_id" not in captured[0].url.params
        assert stats.total_balance == pytest.approx(10.0)
        assert stats.total_transactions == 4

    @pytest.mark.asyncio
    async def test_mutual_funds(self):
        captured = []

        def handler(request):
            captured.append(request)
            if request.method == "GET":
                return httpx.Response(
                    200, json={"funds": [{"_id": "f1", "name": "Global", "current_value": 10}]}
                )
            return httpx.Response(201, json={"ok": True})

        client = _client(handler)
        funds = await client.mutual_funds.list_funds()
        result = await client.mutual_funds.push_value("f1", 12.5, "2024-05-01")
        await client.close()

        assert funds[0].id == "f1"
        assert funds[0].current_value == pytest.approx(10.0)
        assert captured[1].url.path == "/api/v1/mutual_funds/f1/values"
        assert json.loads(captured[1].content) == {
            "current_value": 12.5,
            "date": "2024-05-01",
        }
        assert result == {"ok": True}

    @pytest.mark.asyncio
    async def test_log_batch(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(204)

        client = _client(handler)
        await client.logs.send([])
        await client.logs.send([{"level": "INFO", "message": "hi"}])
        await client.close()

        assert len(captured) == 1
        assert json.loads(captured[0].content) == {
            "logs": [{"level": "INFO", "message": "hi"}]
        }
