"""
Account store backed by the ``users`` collection.

Handles account creation, lookup, name updates, verification state and
deletion. Email uniqueness is enforced by a unique index, so concurrent
registrations of the same address are settled by MongoDB.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from accounts.models import Account

logger = logging.getLogger(__name__)


class DuplicateEmailError(Exception):
    """An account with this email already exists."""

    def __init__(self, email: str):
        super().__init__(f"Email already in use: {email}")
        self.email = email


class InvalidIdFormatError(ValueError):
    """The identifier is not a valid ObjectId."""

    def __init__(self, user_id: str):
        super().__init__(f"Invalid user id: {user_id!r}")
        self.user_id = user_id


def parse_object_id(user_id: str) -> ObjectId:
    """
    Convert a string identifier to an ObjectId.

    Raises:
        InvalidIdFormatError: If the string is not 24 hex characters
    """
    if not isinstance(user_id, str) or not ObjectId.is_valid(user_id):
        raise InvalidIdFormatError(user_id)
    return ObjectId(user_id)


class AccountStore:
    """
    Create, find, update and delete account records.
    """

    COLLECTION = "users"

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize AccountStore.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._users_collection = db[self.COLLECTION]

    async def ensure_indexes(self) -> None:
        """Create the unique email index. Safe to call on every startup."""
        await self._users_collection.create_index("email", unique=True, name="email_unique")
        logger.info("Ensured unique index on users.email")

    async def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        verification_code: Optional[int] = None,
        verification_code_expires_at: Optional[datetime] = None,
        role: str = "user",
    ) -> Account:
        """
        Insert a new, unverified account.

        Returns:
            The stored account

        Raises:
            DuplicateEmailError: email already taken
        """
        now = datetime.now(timezone.utc)
        user_doc = {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": password_hash,
            "role": role,
            "isVerified": False,
            "createdAt": now,
            "updatedAt": now,
        }
        if verification_code is not None:
            user_doc["verificationCode"] = verification_code
            user_doc["verificationCodeExpiresAt"] = verification_code_expires_at

        try:
            result = await self._users_collection.insert_one(user_doc)
        except DuplicateKeyError:
            logger.info(f"Duplicate email rejected by index: {email}")
            raise DuplicateEmailError(email)

        user_doc["_id"] = result.inserted_id
        logger.info(f"Account created: {result.inserted_id}")
        return Account.from_document(user_doc)

    async def find_by_email(self, email: str) -> Optional[Account]:
        """
        Load account by email, exactly as stored.

        Returns:
            Account or None if not found
        """
        doc = await self._users_collection.find_one({"email": email})
        return Account.from_document(doc) if doc else None

    async def find_by_id(self, user_id: str) -> Optional[Account]:
        """
        Load account by ID.

        Raises:
            InvalidIdFormatError: user_id is not an ObjectId string
        """
        doc = await self._users_collection.find_one({"_id": parse_object_id(user_id)})
        return Account.from_document(doc) if doc else None

    async def update_names(
        self,
        user_id: str,
        first_name: str,
        last_name: str,
    ) -> Optional[Account]:
        """
        Replace first and last name.

        Returns:
            Updated account or None if not found
        """
        doc = await self._users_collection.find_one_and_update(
            {"_id": parse_object_id(user_id)},
            {
                "$set": {
                    "firstName": first_name,
                    "lastName": last_name,
                    "updatedAt": datetime.now(timezone.utc),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        return Account.from_document(doc) if doc else None

    async def mark_verified(self, user_id: str, verification_code: int) -> Optional[Account]:
        """
        Flip an account to verified and clear its pending code.

        Only matches while the stored code is still ``verification_code`` and
        the account is unverified, so two racing requests cannot both succeed.

        Returns:
            Updated account, or None if nothing matched
        """
        doc = await self._users_collection.find_one_and_update(
            {
                "_id": parse_object_id(user_id),
                "verificationCode": verification_code,
                "isVerified": False,
            },
            {
                "$set": {"isVerified": True, "updatedAt": datetime.now(timezone.utc)},
                "$unset": {"verificationCode": "", "verificationCodeExpiresAt": ""},
            },
            return_document=ReturnDocument.AFTER,
        )
        return Account.from_document(doc) if doc else None

    async def replace_verification_code(
        self,
        user_id: str,
        verification_code: int,
        expires_at: datetime,
    ) -> Optional[Account]:
        """
        Store a fresh code on an unverified account, invalidating the old one.

        Returns:
            Updated account, or None if missing or already verified
        """
        doc = await self._users_collection.find_one_and_update(
            {"_id": parse_object_id(user_id), "isVerified": False},
            {
                "$set": {
                    "verificationCode": verification_code,
                    "verificationCodeExpiresAt": expires_at,
                    "updatedAt": datetime.now(timezone.utc),
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        return Account.from_document(doc) if doc else None

    async def delete_by_id(self, user_id: str) -> bool:
        """
        Delete an account.

        Returns:
            True if a record was removed
        """
        result = await self._users_collection.delete_one({"_id": parse_object_id(user_id)})
        deleted = result.deleted_count == 1
        if deleted:
            logger.info(f"Account deleted: {user_id}")
        return deleted
