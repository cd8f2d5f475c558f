"""Unit tests for SessionManager (login, refresh rotation, logout, password change)."""

import pytest
from unittest.mock import MagicMock

from common.utils.exceptions import (
    InternalServerException,
    InvalidCredentialsException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from accounts.auth.services.session_manager import SessionManager


# ─────────────────────────────────────────────────────────────────
# login
# ─────────────────────────────────────────────────────────────────


class TestLogin:
    @pytest.mark.asyncio
    async def test_returns_tokens_and_redacted_user(self, session_manager, user_store, registered_user):
        result = await session_manager.login(password="Secret1", username="alice")

        assert result["accessToken"]
        assert result["refreshToken"]
        assert result["user"]["username"] == "alice"
        assert "password" not in result["user"]
        assert "refreshTokens" not in result["user"]

        stored = user_store.users[str(registered_user["_id"])]
        assert stored["refreshTokens"]["default"] == result["refreshToken"]

    @pytest.mark.asyncio
    async def test_login_by_email_is_case_insensitive(self, session_manager, registered_user):
        result = await session_manager.login(password="Secret1", email="A@X.COM")

        assert result["user"]["email"] == "a@x.com"

    @pytest.mark.asyncio
    async def test_requires_identifier(self, session_manager):
        with pytest.raises(ValidationException):
            await session_manager.login(password="Secret1")

    @pytest.mark.asyncio
    async def test_unknown_user(self, session_manager):
        with pytest.raises(NotFoundException):
            await session_manager.login(password="Secret1", username="nobody")

    @pytest.mark.asyncio
    async def test_wrong_password(self, session_manager, registered_user):
        with pytest.raises(InvalidCredentialsException) as exc_info:
            await session_manager.login(password="wrong", username="alice")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_second_login_supersedes_first_refresh_token(self, session_manager, registered_user):
        first = await session_manager.login(password="Secret1", username="alice")
        await session_manager.login(password="Secret1", username="alice")

        with pytest.raises(UnauthorizedException):
            await session_manager.refresh(first["refreshToken"])

    @pytest.mark.asyncio
    async def test_signing_failure_is_internal_error(self, user_store, password_hasher, registered_user):
        provider = MagicMock()
        provider.issue_access_token.side_effect = RuntimeError("signing backend down")
        manager = SessionManager(user_store, provider, password_hasher)

        with pytest.raises(InternalServerException):
            await manager.login(password="Secret1", username="alice")


# ─────────────────────────────────────────────────────────────────
# refresh
# ─────────────────────────────────────────────────────────────────


class TestRefresh:
    @pytest.mark.asyncio
    async def test_rotates_refresh_token(self, session_manager, registered_user):
        login = await session_manager.login(password="Secret1", username="alice")

        tokens = await session_manager.refresh(login["refreshToken"])

        assert tokens["refreshToken"] != login["refreshToken"]
        assert tokens["accessToken"] != login["accessToken"]

    @pytest.mark.asyncio
    async def test_replayed_token_rejected(self, session_manager, registered_user):
        login = await session_manager.login(password="Secret1", username="alice")
        await session_manager.refresh(login["refreshToken"])

        with pytest.raises(UnauthorizedException) as exc_info:
            await session_manager.refresh(login["refreshToken"])

        assert exc_info.value.message == "Refresh token is expired or used"

    @pytest.mark.asyncio
    async def test_missing_token(self, session_manager):
        with pytest.raises(UnauthorizedException):
            await session_manager.refresh(None)

    @pytest.mark.asyncio
    async def test_access_token_cannot_refresh(self, session_manager, registered_user):
        login = await session_manager.login(password="Secret1", username="alice")

        with pytest.raises(UnauthorizedException):
            await session_manager.refresh(login["accessToken"])

    @pytest.mark.asyncio
    async def test_deleted_user(self, session_manager, user_store, registered_user):
        login = await session_manager.login(password="Secret1", username="alice")
        user_store.delete_user(registered_user["_id"])

        with pytest.raises(UnauthorizedException):
            await session_manager.refresh(login["refreshToken"])

    @pytest.mark.asyncio
    async def test_lost_race_is_unauthorized(self, session_manager, user_store, registered_user):
        login = await session_manager.login(password="Secret1", username="alice")

        async def lose_race(*args, **kwargs):
            return False

        user_store.rotate_refresh_token = lose_race

        with pytest.raises(UnauthorizedException):
            await session_manager.refresh(login["refreshToken"])


# ─────────────────────────────────────────────────────────────────
# logout
# ─────────────────────────────────────────────────────────────────


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_revokes_refresh_token(self, session_manager, registered_user):
        login = await session_manager.login(password="Secret1", username="alice")

        await session_manager.logout(str(registered_user["_id"]))

        with pytest.raises(UnauthorizedException):
            await session_manager.refresh(login["refreshToken"])

    @pytest.mark.asyncio
    async def test_logout_is_idempotent(self, session_manager, user_store, registered_user):
        user_id = str(registered_user["_id"])

        await session_manager.logout(user_id)
        await session_manager.logout(user_id)

        assert user_store.users[user_id]["refreshTokens"] == {}


# ─────────────────────────────────────────────────────────────────
# change_password
# ─────────────────────────────────────────────────────────────────


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_changes_hash_and_revokes_sessions(
        self, session_manager, user_store, password_hasher, registered_user,
    ):
        user_id = str(registered_user["_id"])
        login = await session_manager.login(password="Secret1", username="alice")

        await session_manager.change_password(user_id, "Secret1", "Secret2")

        stored = user_store.users[user_id]
        assert password_hasher.verify_password("Secret2", stored["password"])
        assert stored["refreshTokens"] == {}
        with pytest.raises(UnauthorizedException):
            await session_manager.refresh(login["refreshToken"])

    @pytest.mark.asyncio
    async def test_wrong_old_password(self, session_manager, user_store, registered_user):
        user_id = str(registered_user["_id"])
        before = user_store.users[user_id]["password"]

        with pytest.raises(InvalidCredentialsException):
            await session_manager.change_password(user_id, "wrong", "Secret2")

        assert user_store.users[user_id]["password"] == before

    @pytest.mark.asyncio
    async def test_empty_new_password(self, session_manager, registered_user):
        with pytest.raises(ValidationException):
            await session_manager.change_password(str(registered_user["_id"]), "Secret1", "")
