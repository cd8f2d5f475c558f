"""Shared test fixtures for the accounts service tests."""

import copy
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.auth import JWTAuth, PasswordHasher
from common.storage import MediaStorage, MediaUploadError, UploadResult
from common.utils.exceptions import ConflictException
from accounts.auth.services.session_manager import SessionManager
from accounts.config import Settings
from accounts.middleware.auth import AuthMiddleware
from accounts.user.services.profile_service import ProfileService
from accounts.user.services.user_service import (
    UserService,
    normalize_email,
    normalize_username,
)


ACCESS_SECRET = "test-access-secret"
REFRESH_SECRET = "test-refresh-secret"


# ─────────────────────────────────────────────────────────────────
# In-memory collaborators
# ─────────────────────────────────────────────────────────────────


class InMemoryUserService(UserService):
    """UserService backed by a dict instead of a Motor collection."""

    def __init__(self):
        self.users = {}

    async def ensure_indexes(self) -> None:
        return None

    async def create_user(self, full_name, email, username, password_hash, avatar, cover_image=""):
        email = normalize_email(email)
        username = normalize_username(username)
        for user in self.users.values():
            if user["email"] == email or user["username"] == username:
                raise ConflictException(
                    message="User with email or username already exists",
                    code="USER_ALREADY_EXISTS",
                )
        now = datetime.now(timezone.utc)
        doc = {
            "_id": ObjectId(),
            "fullName": full_name.strip(),
            "email": email,
            "username": username,
            "password": password_hash,
            "avatar": avatar,
            "coverImage": cover_image or "",
            "refreshTokens": {},
            "createdAt": now,
            "updatedAt": now,
        }
        self.users[str(doc["_id"])] = doc
        return copy.deepcopy(doc)

    async def get_user_by_id(self, user_id):
        user = self.users.get(str(user_id))
        return copy.deepcopy(user) if user else None

    async def get_public_user(self, user_id):
        user = self.users.get(str(user_id))
        return self.to_public_view(user) if user else None

    async def find_by_username_or_email(self, username=None, email=None):
        for user in self.users.values():
            if username and user["username"] == normalize_username(username):
                return copy.deepcopy(user)
            if email and user["email"] == normalize_email(email):
                return copy.deepcopy(user)
        return None

    async def set_refresh_token(self, user_id, refresh_token, device_id="default"):
        user = self.users.get(str(user_id))
        if not user:
            return False
        user["refreshTokens"][device_id] = refresh_token
        return True

    async def rotate_refresh_token(self, user_id, presented_token, new_token, device_id="default"):
        user = self.users.get(str(user_id))
        if not user or user["refreshTokens"].get(device_id) != presented_token:
            return False
        user["refreshTokens"][device_id] = new_token
        return True

    async def clear_refresh_token(self, user_id, device_id="default"):
        user = self.users.get(str(user_id))
        if user:
            user["refreshTokens"].pop(device_id, None)

    async def update_password(self, user_id, password_hash):
        user = self.users.get(str(user_id))
        if not user:
            return False
        user["password"] = password_hash
        user["refreshTokens"] = {}
        return True

    async def update_details(self, user_id, full_name, email):
        user = self.users.get(str(user_id))
        if not user:
            return None
        email = normalize_email(email)
        for other_id, other in self.users.items():
            if other_id != str(user_id) and other["email"] == email:
                raise ConflictException(message="Email is already in use", code="EMAIL_IN_USE")
        user["fullName"] = full_name.strip()
        user["email"] = email
        return self.to_public_view(user)

    async def update_image(self, user_id, field, url):
        user = self.users.get(str(user_id))
        if not user:
            return None
        user[field] = url
        return self.to_public_view(user)

    def delete_user(self, user_id):
        self.users.pop(str(user_id), None)


class InMemoryMediaStorage(MediaStorage):
    """Records uploads; fails for paths whose name contains a marker."""

    def __init__(self, fail_marker: Optional[str] = None):
        self.fail_marker = fail_marker
        self.stored = {}
        self.deleted = []

    async def upload(self, local_path) -> UploadResult:
        path = Path(local_path)
        if not path.is_file():
            raise MediaUploadError(f"File not found: {path.name}")
        if self.fail_marker and self.fail_marker in path.name:
            raise MediaUploadError("Simulated upload failure")
        public_id = f"{secrets.token_hex(8)}{path.suffix}"
        self.stored[public_id] = path.read_bytes()
        return UploadResult(url=f"https://media.test/{public_id}", public_id=public_id)

    async def delete(self, public_id: str) -> None:
        self.stored.pop(public_id, None)
        self.deleted.append(public_id)


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def jwt_auth():
    return JWTAuth(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture
def password_hasher():
    # bcrypt minimum cost
    return PasswordHasher(rounds=4)


@pytest.fixture
def user_store():
    return InMemoryUserService()


@pytest.fixture
def media_storage():
    return InMemoryMediaStorage()


@pytest.fixture
def session_manager(user_store, jwt_auth, password_hasher):
    return SessionManager(
        user_service=user_store,
        token_provider=jwt_auth,
        password_hasher=password_hasher,
    )


@pytest.fixture
def auth_middleware(user_store, jwt_auth):
    return AuthMiddleware(user_service=user_store, token_provider=jwt_auth)


@pytest.fixture
def profile_service(user_store, media_storage):
    return ProfileService(user_service=user_store, media_storage=media_storage)


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        ACCESS_TOKEN_SECRET=ACCESS_SECRET,
        REFRESH_TOKEN_SECRET=REFRESH_SECRET,
        TEMP_UPLOAD_DIR=str(tmp_path / "temp"),
        MEDIA_ROOT=str(tmp_path / "uploads"),
    )


@pytest_asyncio.fixture
async def registered_user(user_store, password_hasher):
    """A stored user 'alice' with password 'Secret1'."""
    return await user_store.create_user(
        full_name="Alice Example",
        email="a@x.com",
        username="alice",
        password_hash=password_hasher.hash_password("Secret1"),
        avatar="https://media.test/alice.png",
    )


@pytest.fixture
def failing_media_storage():
    """Factory for a media storage that rejects files whose name contains a marker."""
    return lambda marker: InMemoryMediaStorage(fail_marker=marker)
