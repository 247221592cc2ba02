"""Shared test fixtures for the account service tests."""

from datetime import datetime, timezone
from typing import Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from common.auth import JWTAuth, PasswordHasher
from accounts.config import Settings
from accounts.dependencies import AccountServices
from accounts.models import Account
from accounts.services.account_store import DuplicateEmailError, parse_object_id
from accounts.services.verification_codes import VerificationCodeIssuer

TEST_SECRET = "test-secret-key"


class InMemoryAccountStore:
    """
    Dict-backed stand-in for AccountStore with the same contract:
    unique emails, ObjectId ids, conditional verification update.
    """

    def __init__(self):
        self.docs: Dict[str, dict] = {}

    async def ensure_indexes(self) -> None:
        return None

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
        if any(doc["email"] == email for doc in self.docs.values()):
            raise DuplicateEmailError(email)
        now = datetime.now(timezone.utc)
        doc = {
            "_id": ObjectId(),
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
            doc["verificationCode"] = verification_code
            doc["verificationCodeExpiresAt"] = verification_code_expires_at
        self.docs[str(doc["_id"])] = doc
        return Account.from_document(doc)

    def _get(self, user_id: str) -> Optional[dict]:
        return self.docs.get(str(parse_object_id(user_id)))

    async def find_by_email(self, email: str) -> Optional[Account]:
        for doc in self.docs.values():
            if doc["email"] == email:
                return Account.from_document(doc)
        return None

    async def find_by_id(self, user_id: str) -> Optional[Account]:
        doc = self._get(user_id)
        return Account.from_document(doc) if doc else None

    async def update_names(self, user_id: str, first_name: str, last_name: str) -> Optional[Account]:
        doc = self._get(user_id)
        if not doc:
            return None
        doc.update(firstName=first_name, lastName=last_name, updatedAt=datetime.now(timezone.utc))
        return Account.from_document(doc)

    async def mark_verified(self, user_id: str, verification_code: int) -> Optional[Account]:
        doc = self._get(user_id)
        if not doc or doc["isVerified"] or doc.get("verificationCode") != verification_code:
            return None
        doc["isVerified"] = True
        doc.pop("verificationCode", None)
        doc.pop("verificationCodeExpiresAt", None)
        return Account.from_document(doc)

    async def replace_verification_code(
        self, user_id: str, verification_code: int, expires_at: datetime
    ) -> Optional[Account]:
        doc = self._get(user_id)
        if not doc or doc["isVerified"]:
            return None
        doc["verificationCode"] = verification_code
        doc["verificationCodeExpiresAt"] = expires_at
        return Account.from_document(doc)

    async def delete_by_id(self, user_id: str) -> bool:
        return self.docs.pop(str(parse_object_id(user_id)), None) is not None


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # find_one_and_update etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def settings():
    return Settings(
        JWT_SECRET=TEST_SECRET,
        BCRYPT_ROUNDS=4,
        EMAIL_MODE="console",
        ENVIRONMENT="test",
    )


@pytest.fixture
def store():
    return InMemoryAccountStore()


@pytest.fixture
def hasher():
    # Minimum cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def codes():
    return VerificationCodeIssuer(expire_minutes=60)


@pytest.fixture
def jwt_auth():
    return JWTAuth(secret=TEST_SECRET, access_token_expire_minutes=60)


@pytest.fixture
def email_service():
    service = MagicMock()
    service.send_verification_code = AsyncMock(return_value={"success": True, "mode": "console"})
    return service


@pytest.fixture
def services(store, hasher, codes, jwt_auth, email_service):
    return AccountServices(
        store=store,
        hasher=hasher,
        codes=codes,
        tokens=jwt_auth,
        email=email_service,
    )


@pytest.fixture
def app(settings, services):
    from api import create_app

    return create_app(settings=settings, services=services)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def registration_body():
    return {
        "firstName": "Ana",
        "lastName": "Silva",
        "email": "ana@example.com",
        "password": "Abc123!@",
    }

