"""
User service: the credential store.

Owns the persisted user document, including the password hash and the
refresh-token slots used for session revocation.
"""

import hmac
import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from common.utils.exceptions import ConflictException

logger = logging.getLogger(__name__)

DEFAULT_DEVICE = "default"

# Fields never returned to clients
SECRET_FIELDS = {"password": 0, "refreshTokens": 0}

IMAGE_FIELDS = ("avatar", "coverImage")


def normalize_username(username: str) -> str:
    return username.strip().lower()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _object_id(user_id) -> Optional[ObjectId]:
    if isinstance(user_id, ObjectId):
        return user_id
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        return None


class UserService:
    """
    Manages user documents in the users collection.

    Every write is a single-document atomic operation.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize UserService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._users_collection = db["users"]

    async def ensure_indexes(self) -> None:
        """Create unique indexes on username and email."""
        await self._users_collection.create_index(
            [("username", ASCENDING)], unique=True, name="username_unique"
        )
        await self._users_collection.create_index(
            [("email", ASCENDING)], unique=True, name="email_unique"
        )
        logger.info("User indexes ensured")

    async def create_user(
        self,
        full_name: str,
        email: str,
        username: str,
        password_hash: str,
        avatar: str,
        cover_image: str = "",
    ) -> dict:
        """
        Create a new user record.

        Args:
            full_name: Display name
            email: Email address (normalized to lowercase)
            username: Username (normalized to lowercase)
            password_hash: Already-hashed password
            avatar: Avatar URL
            cover_image: Cover image URL, empty when not supplied

        Returns:
            Created user document

        Raises:
            ConflictException: username or email already taken
        """
        now = datetime.now(timezone.utc)
        user_doc = {
            "fullName": full_name.strip(),
            "email": normalize_email(email),
            "username": normalize_username(username),
            "password": password_hash,
            "avatar": avatar,
            "coverImage": cover_image or "",
            "refreshTokens": {},
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            result = await self._users_collection.insert_one(user_doc)
        except DuplicateKeyError:
            raise ConflictException(
                message="User with email or username already exists",
                code="USER_ALREADY_EXISTS",
            )

        user_doc["_id"] = result.inserted_id
        logger.info(f"User created: {result.inserted_id}")
        return user_doc

    async def get_user_by_id(self, user_id: str) -> Optional[dict]:
        """
        Load the full user document, secrets included.

        Args:
            user_id: MongoDB ObjectId as string

        Returns:
            User document or None if not found or the id is invalid
        """
        oid = _object_id(user_id)
        if oid is None:
            return None
        return await self._users_collection.find_one({"_id": oid})

    async def get_public_user(self, user_id: str) -> Optional[dict]:
        """Load a user by ID as a redacted view."""
        oid = _object_id(user_id)
        if oid is None:
            return None
        user = await self._users_collection.find_one({"_id": oid}, SECRET_FIELDS)
        return self.to_public_view(user) if user else None

    async def find_by_username_or_email(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[dict]:
        """
        Find a user matching either the username or the email.

        Empty values are ignored, so a missing field never matches
        documents by accident.
        """
        clauses = []
        if username and username.strip():
            clauses.append({"username": normalize_username(username)})
        if email and email.strip():
            clauses.append({"email": normalize_email(email)})

        if not clauses:
            return None

        return await self._users_collection.find_one({"$or": clauses})

    @staticmethod
    def stored_refresh_token(user: dict, device_id: str = DEFAULT_DEVICE) -> Optional[str]:
        """Return the refresh token currently held in a user's slot."""
        return (user.get("refreshTokens") or {}).get(device_id)

    @staticmethod
    def refresh_token_matches(user: dict, presented: str, device_id: str = DEFAULT_DEVICE) -> bool:
        """Constant-time comparison of a presented token with the stored one."""
        stored = UserService.stored_refresh_token(user, device_id)
        if not stored or not presented:
            return False
        return hmac.compare_digest(stored.encode("utf-8"), presented.encode("utf-8"))

    async def set_refresh_token(
        self,
        user_id: str,
        refresh_token: str,
        device_id: str = DEFAULT_DEVICE,
    ) -> bool:
        """
        Store a refresh token, overwriting the slot.

        Returns:
            True if the user exists
        """
        oid = _object_id(user_id)
        if oid is None:
            return False
        result = await self._users_collection.update_one(
            {"_id": oid},
            {
                "$set": {
                    f"refreshTokens.{device_id}": refresh_token,
                    "updatedAt": datetime.now(timezone.utc),
                }
            },
        )
        return result.matched_count > 0

    async def rotate_refresh_token(
        self,
        user_id: str,
        presented_token: str,
        new_token: str,
        device_id: str = DEFAULT_DEVICE,
    ) -> bool:
        """
        Replace the stored refresh token only if it still equals the presented one.

        Returns:
            True if the slot was rotated, False if it held another value
        """
        oid = _object_id(user_id)
        if oid is None:
            return False
        slot = f"refreshTokens.{device_id}"
        result = await self._users_collection.find_one_and_update(
            {"_id": oid, slot: presented_token},
            {"$set": {slot: new_token, "updatedAt": datetime.now(timezone.utc)}},
            projection={"_id": 1},
        )
        return result is not None

    async def clear_refresh_token(
        self,
        user_id: str,
        device_id: str = DEFAULT_DEVICE,
    ) -> None:
        """Remove the refresh token from a slot. Idempotent."""
        oid = _object_id(user_id)
        if oid is None:
            return
        await self._users_collection.update_one(
            {"_id": oid},
            {
                "$unset": {f"refreshTokens.{device_id}": ""},
                "$set": {"updatedAt": datetime.now(timezone.utc)},
            },
        )

    async def update_password(self, user_id: str, password_hash: str) -> bool:
        """
        Replace the password hash and revoke every refresh token.

        Returns:
            True if the user exists
        """
        oid = _object_id(user_id)
        if oid is None:
            return False
        result = await self._users_collection.update_one(
            {"_id": oid},
            {
                "$set": {
                    "password": password_hash,
                    "refreshTokens": {},
                    "updatedAt": datetime.now(timezone.utc),
                }
            },
        )
        return result.matched_count > 0

    async def update_details(
        self,
        user_id: str,
        full_name: str,
        email: str,
    ) -> Optional[dict]:
        """
        Update display name and email.

        Returns:
            Redacted updated user, or None if not found

        Raises:
            ConflictException: email belongs to another user
        """
        oid = _object_id(user_id)
        if oid is None:
            return None

        email = normalize_email(email)
        taken = await self._users_collection.find_one(
            {"email": email, "_id": {"$ne": oid}}, {"_id": 1}
        )
        if taken:
            raise ConflictException(message="Email is already in use", code="EMAIL_IN_USE")

        try:
            user = await self._users_collection.find_one_and_update(
                {"_id": oid},
                {
                    "$set": {
                        "fullName": full_name.strip(),
                        "email": email,
                        "updatedAt": datetime.now(timezone.utc),
                    }
                },
                projection=SECRET_FIELDS,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictException(message="Email is already in use", code="EMAIL_IN_USE")

        return self.to_public_view(user) if user else None

    async def update_image(self, user_id: str, field: str, url: str) -> Optional[dict]:
        """
        Set the avatar or cover image URL.

        Returns:
            Redacted updated user, or None if not found
        """
        if field not in IMAGE_FIELDS:
            raise ValueError(f"Unknown image field: {field}")

        oid = _object_id(user_id)
        if oid is None:
            return None

        user = await self._users_collection.find_one_and_update(
            {"_id": oid},
            {"$set": {field: url, "updatedAt": datetime.now(timezone.utc)}},
            projection=SECRET_FIELDS,
            return_document=ReturnDocument.AFTER,
        )
        return self.to_public_view(user) if user else None

    @staticmethod
    def to_public_view(user: dict) -> dict:
        """Format a user document for API responses, without secret fields."""
        return {
            "id": str(user["_id"]),
            "username": user.get("username"),
            "email": user.get("email"),
            "fullName": user.get("fullName"),
            "avatar": user.get("avatar"),
            "coverImage": user.get("coverImage", ""),
            "createdAt": user.get("createdAt"),
            "updatedAt": user.get("updatedAt"),
        }
