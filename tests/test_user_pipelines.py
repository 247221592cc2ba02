"""Unit tests for the user pipelines (registration, verification, login, profile)."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from common.utils.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from accounts.pipelines import users as pipelines
from accounts.services.account_store import DuplicateEmailError


# ─────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────


def sent_code(email_service) -> int:
    return email_service.send_verification_code.call_args.kwargs["code"]


async def _register(store, hasher, codes, email_service, email="ana@example.com"):
    return await pipelines.register_pipeline(
        store=store,
        hasher=hasher,
        codes=codes,
        email_service=email_service,
        first_name="Ana",
        last_name="Silva",
        email=email,
        password="Abc123!@",
    )


async def _register_verified(store, hasher, codes, email_service):
    account = await _register(store, hasher, codes, email_service)
    await pipelines.verify_pipeline(store, codes, account.id, sent_code(email_service))
    return account


# ─────────────────────────────────────────────────────────────────
# register_pipeline
# ─────────────────────────────────────────────────────────────────


class TestRegister:
    @pytest.mark.asyncio
    async def test_creates_unverified_account_and_sends_code(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)

        assert account.is_verified is False
        assert account.role == "user"
        assert account.password_hash != "Abc123!@"
        assert hasher.verify_password("Abc123!@", account.password_hash)

        email_service.send_verification_code.assert_awaited_once()
        kwargs = email_service.send_verification_code.call_args.kwargs
        assert kwargs["to_email"] == "ana@example.com"
        assert kwargs["first_name"] == "Ana"
        assert kwargs["code"] == account.verification_code
        assert 100000 <= kwargs["code"] <= 999999

    @pytest.mark.asyncio
    async def test_duplicate_email(self, store, hasher, codes, email_service):
        await _register(store, hasher, codes, email_service)

        with pytest.raises(ConflictException) as exc_info:
            await _register(store, hasher, codes, email_service)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Email already in use"
        assert len(store.docs) == 1

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_caught_at_insert(self, store, hasher, codes, email_service):
        store.find_by_email = AsyncMock(return_value=None)
        store.create = AsyncMock(side_effect=DuplicateEmailError("ana@example.com"))

        with pytest.raises(ConflictException):
            await _register(store, hasher, codes, email_service)

        email_service.send_verification_code.assert_not_called()

    @pytest.mark.asyncio
    async def test_email_failure_does_not_fail_registration(self, store, hasher, codes, email_service):
        email_service.send_verification_code.side_effect = RuntimeError("SMTP down")

        account = await _register(store, hasher, codes, email_service)

        assert account.id in store.docs

    @pytest.mark.asyncio
    async def test_unsuccessful_delivery_result_is_tolerated(self, store, hasher, codes, email_service):
        email_service.send_verification_code.return_value = {"success": False, "error": "rejected"}

        account = await _register(store, hasher, codes, email_service)

        assert account.id in store.docs

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, store, hasher, codes, email_service):
        store.find_by_email = AsyncMock(side_effect=RuntimeError("database unavailable"))

        with pytest.raises(RuntimeError):
            await _register(store, hasher, codes, email_service)


# ─────────────────────────────────────────────────────────────────
# verify_pipeline
# ─────────────────────────────────────────────────────────────────


class TestVerify:
    @pytest.mark.asyncio
    async def test_correct_code_verifies_and_clears_code(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)

        verified = await pipelines.verify_pipeline(store, codes, account.id, sent_code(email_service))

        assert verified.is_verified is True
        assert verified.verification_code is None
        assert "verificationCode" not in store.docs[account.id]

    @pytest.mark.asyncio
    async def test_wrong_code(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)
        wrong = 100000 if sent_code(email_service) != 100000 else 100001

        with pytest.raises(ValidationException) as exc_info:
            await pipelines.verify_pipeline(store, codes, account.id, wrong)

        assert exc_info.value.message == "Invalid verification code"
        assert store.docs[account.id]["isVerified"] is False

    @pytest.mark.asyncio
    async def test_second_verification_fails(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)
        code = sent_code(email_service)
        await pipelines.verify_pipeline(store, codes, account.id, code)

        with pytest.raises(ValidationException):
            await pipelines.verify_pipeline(store, codes, account.id, code)

    @pytest.mark.asyncio
    async def test_expired_code(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)
        store.docs[account.id]["verificationCodeExpiresAt"] = datetime.now(timezone.utc) - timedelta(minutes=1)

        with pytest.raises(ValidationException) as exc_info:
            await pipelines.verify_pipeline(store, codes, account.id, sent_code(email_service))

        assert exc_info.value.message == "Verification code has expired"

    @pytest.mark.asyncio
    async def test_invalid_id(self, store, codes):
        with pytest.raises(ValidationException) as exc_info:
            await pipelines.verify_pipeline(store, codes, "123", 123456)
        assert exc_info.value.message == "Invalid user id"

    @pytest.mark.asyncio
    async def test_unknown_user(self, store, codes, sample_user_id):
        with pytest.raises(NotFoundException):
            await pipelines.verify_pipeline(store, codes, sample_user_id, 123456)


# ─────────────────────────────────────────────────────────────────
# resend_verification_pipeline
# ─────────────────────────────────────────────────────────────────


class TestResendVerification:
    @pytest.mark.asyncio
    async def test_new_code_replaces_old(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)
        first_code = sent_code(email_service)

        await pipelines.resend_verification_pipeline(store, codes, email_service, "ana@example.com")
        second_code = sent_code(email_service)

        assert email_service.send_verification_code.await_count == 2
        assert store.docs[account.id]["verificationCode"] == second_code
        if first_code != second_code:
            with pytest.raises(ValidationException):
                await pipelines.verify_pipeline(store, codes, account.id, first_code)
        verified = await pipelines.verify_pipeline(store, codes, account.id, second_code)
        assert verified.is_verified is True

    @pytest.mark.asyncio
    async def test_unknown_email(self, store, codes, email_service):
        with pytest.raises(NotFoundException):
            await pipelines.resend_verification_pipeline(store, codes, email_service, "nobody@example.com")

    @pytest.mark.asyncio
    async def test_already_verified(self, store, hasher, codes, email_service):
        await _register_verified(store, hasher, codes, email_service)

        with pytest.raises(ValidationException) as exc_info:
            await pipelines.resend_verification_pipeline(store, codes, email_service, "ana@example.com")

        assert exc_info.value.message == "User is already verified"


# ─────────────────────────────────────────────────────────────────
# login_pipeline
# ─────────────────────────────────────────────────────────────────


class TestLogin:
    @pytest.mark.asyncio
    async def test_verified_user_gets_token(self, store, hasher, codes, jwt_auth, email_service):
        account = await _register_verified(store, hasher, codes, email_service)

        token, logged_in = await pipelines.login_pipeline(
            store, hasher, jwt_auth, "ana@example.com", "Abc123!@"
        )

        claims = await jwt_auth.verify_token(token)
        assert claims["sub"] == account.id
        assert claims["email"] == "ana@example.com"
        assert claims["role"] == "user"
        assert logged_in.id == account.id

    @pytest.mark.asyncio
    async def test_unknown_email(self, store, hasher, jwt_auth):
        with pytest.raises(NotFoundException):
            await pipelines.login_pipeline(store, hasher, jwt_auth, "nobody@example.com", "Abc123!@")

    @pytest.mark.asyncio
    async def test_wrong_password(self, store, hasher, codes, jwt_auth, email_service):
        await _register_verified(store, hasher, codes, email_service)

        with pytest.raises(UnauthorizedException) as exc_info:
            await pipelines.login_pipeline(store, hasher, jwt_auth, "ana@example.com", "Wrong123!")

        assert exc_info.value.message == "Invalid password"

    @pytest.mark.asyncio
    async def test_unverified_user(self, store, hasher, codes, jwt_auth, email_service):
        await _register(store, hasher, codes, email_service)

        with pytest.raises(ForbiddenException) as exc_info:
            await pipelines.login_pipeline(store, hasher, jwt_auth, "ana@example.com", "Abc123!@")

        assert exc_info.value.message == "Email not verified"

    @pytest.mark.asyncio
    async def test_password_checked_before_verification(self, store, hasher, codes, jwt_auth, email_service):
        await _register(store, hasher, codes, email_service)

        with pytest.raises(UnauthorizedException):
            await pipelines.login_pipeline(store, hasher, jwt_auth, "ana@example.com", "Wrong123!")


# ─────────────────────────────────────────────────────────────────
# profile pipelines
# ─────────────────────────────────────────────────────────────────


class TestProfile:
    @pytest.mark.asyncio
    async def test_get_user(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)

        fetched = await pipelines.get_user_pipeline(store, account.id)

        assert fetched.email == "ana@example.com"

    @pytest.mark.asyncio
    async def test_update_names_only(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)

        updated = await pipelines.update_user_pipeline(store, account.id, "Ana Maria", "Souza")

        assert updated.first_name == "Ana Maria"
        assert updated.last_name == "Souza"
        assert updated.email == account.email
        assert updated.password_hash == account.password_hash

    @pytest.mark.asyncio
    async def test_update_missing(self, store, sample_user_id):
        with pytest.raises(NotFoundException):
            await pipelines.update_user_pipeline(store, sample_user_id, "Ana", "Silva")

    @pytest.mark.asyncio
    async def test_update_invalid_id(self, store):
        with pytest.raises(ValidationException):
            await pipelines.update_user_pipeline(store, "nope", "Ana", "Silva")

    @pytest.mark.asyncio
    async def test_delete_then_missing(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)

        await pipelines.delete_user_pipeline(store, account.id)

        with pytest.raises(NotFoundException):
            await pipelines.get_user_pipeline(store, account.id)
        with pytest.raises(NotFoundException):
            await pipelines.delete_user_pipeline(store, account.id)

    @pytest.mark.asyncio
    async def test_delete_invalid_id(self, store):
        with pytest.raises(ValidationException):
            await pipelines.delete_user_pipeline(store, "nope")

    @pytest.mark.asyncio
    async def test_current_user(self, store, hasher, codes, email_service):
        account = await _register(store, hasher, codes, email_service)

        current = await pipelines.current_user_pipeline(store, {"sub": account.id})

        assert current.id == account.id

    @pytest.mark.asyncio
    async def test_current_user_deleted(self, store, sample_user_id):
        with pytest.raises(NotFoundException):
            await pipelines.current_user_pipeline(store, {"sub": sample_user_id})
