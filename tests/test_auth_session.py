"""Tests for AuthSession headers, whitelist and once-only restore."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from data.clients import AuthSession
from models.finance import BackendUser
from utils.exceptions import ApiConnectionError, AuthorizationError
from utils.request_guards import OnceGuard


def _session(**kwargs):
    kwargs.setdefault("token", "tok")
    kwargs.setdefault("email", "ann@example.com")
    kwargs.setdefault("authorization_enabled", False)
    kwargs.setdefault("allowed_emails", [])
    return AuthSession(**kwargs)


class TestHeaders:
    def test_bearer_and_user_id(self):
        session = _session()
        session.set_user(BackendUser(user_id="u1"))
        assert session.headers() == {
            "Authorization": "Bearer tok",
            "X-User-ID": "u1",
        }

    def test_anonymous_session_has_no_headers(self):
        session = _session(token=None, email=None)
        assert session.headers() == {}
        assert session.is_signed_in is False


class TestAuthorization:
    def test_disabled_allows_everyone(self):
        assert _session().is_authorized("anyone@example.com") is True

    def test_whitelist_ignores_case_and_whitespace(self):
        session = _session(
            authorization_enabled=True, allowed_emails=[" Ann@Example.com ", ""]
        )
        assert session.is_authorized() is True
        assert session.is_authorized("ANN@example.COM") is True
        assert session.is_authorized("bob@example.com") is False

    def test_missing_email_is_not_authorized(self):
        session = _session(email=None, authorization_enabled=True, allowed_emails=["a@b.c"])
        assert session.is_authorized() is False
        with pytest.raises(AuthorizationError):
            session.ensure_authorized()


class TestSignInOut:
    def test_sign_in_with_new_email_forgets_user_id(self):
        session = _session()
        session.set_user(BackendUser(user_id="u1"))

        session.sign_in("tok2", "bob@example.com")

        assert session.user_id is None
        assert session.token == "tok2"
        assert session.email == "bob@example.com"

    def test_sign_in_with_same_email_keeps_user_id(self):
        session = _session()
        session.set_user(BackendUser(user_id="u1"))

        session.sign_in("tok2", "ann@example.com")

        assert session.user_id == "u1"

    def test_sign_out_clears_stored_user(self):
        settings = Mock()
        settings.get_session_email = Mock(return_value="ann@example.com")
        settings.get_backend_user_id = Mock(return_value="u1")
        session = _session(settings_manager=settings)
        assert session.user_id == "u1"

        session.sign_out()

        assert session.user_id is None
        assert session.token is None
        settings.set_backend_user.assert_called_with(None, None)

    def test_stored_user_of_other_email_is_ignored(self):
        settings = Mock()
        settings.get_session_email = Mock(return_value="bob@example.com")
        settings.get_backend_user_id = Mock(return_value="u-bob")

        session = _session(settings_manager=settings)

        assert session.user_id is None


class TestRestore:
    """Backend registration on start-up."""

    @pytest.mark.asyncio
    async def test_registers_once_for_concurrent_callers(self):
        session = _session()
        release = asyncio.Event()

        async def register(email):
            await release.wait()
            return BackendUser(user_id="u7", email=email)

        register_mock = AsyncMock(side_effect=register)

        first = asyncio.ensure_future(session.restore(register_mock))
        second = asyncio.ensure_future(session.restore(register_mock))
        await asyncio.sleep(0)
        release.set()

        assert await first == "u7"
        assert await second == "u7"
        assert await session.restore(register_mock) == "u7"
        register_mock.assert_awaited_once_with("ann@example.com")
        assert session.headers()["X-User-ID"] == "u7"

    @pytest.mark.asyncio
    async def test_stored_user_id_skips_registration(self):
        session = _session()
        session.set_user(BackendUser(user_id="u1"))
        register = AsyncMock()

        assert await session.restore(register) == "u1"
        register.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_email_skips_registration(self):
        session = _session(email=None)
        register = AsyncMock()

        assert await session.restore(register) is None
        register.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unauthorized_email_raises(self):
        session = _session(authorization_enabled=True, allowed_emails=["bob@example.com"])
        register = AsyncMock()

        with pytest.raises(AuthorizationError):
            await session.restore(register)
        register.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sign_out_allows_restore_again(self):
        guard = OnceGuard()
        session = _session(restore_guard=guard)
        register = AsyncMock(return_value=BackendUser(user_id="u1"))
        await session.restore(register)

        session.sign_out()
        session.sign_in("tok", "ann@example.com")
        await session.restore(register)

        assert register.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_registration_is_retried(self):
        session = _session()
        register = AsyncMock(
            side_effect=[
                ApiConnectionError("Cannot reach the backend"),
                BackendUser(user_id="u2"),
            ]
        )

        with pytest.raises(ApiConnectionError):
            await session.restore(register)
        session.sign_in("tok", "ann@example.com")

        assert await session.restore(register) == "u2"
        assert register.await_count == 2
        assert session.user_id == "u2"
