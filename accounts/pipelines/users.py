"""
User pipeline functions.

Stateless orchestration logic for registration, verification, login and
profile operations. Each pipeline receives the collaborators it needs and
raises APIException subclasses for every expected failure.
"""

import logging
from typing import Any, Dict, Tuple

from fastapi.concurrency import run_in_threadpool

from common.auth import PasswordHasher, TokenProvider
from common.utils.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from accounts.models import Account
from accounts.services.account_store import (
    AccountStore,
    DuplicateEmailError,
    InvalidIdFormatError,
)
from accounts.services.email_service import EmailService
from accounts.services.verification_codes import VerificationCodeIssuer

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================
async def _load_account(store: AccountStore, user_id: str) -> Account:
    """Fetch an account or raise 400 (bad id) / 404 (absent)."""
    try:
        account = await store.find_by_id(user_id)
    except InvalidIdFormatError:
        raise ValidationException(message="Invalid user id", code="INVALID_USER_ID")

    if not account:
        raise NotFoundException(message="User not found", code="USER_NOT_FOUND")
    return account


async def _deliver_code(email_service: EmailService, account: Account, code: int) -> None:
    """
    Send a verification code. Best effort: the account is already stored,
    so delivery problems are logged and never surface to the caller.
    """
    try:
        result = await email_service.send_verification_code(
            to_email=account.email,
            code=code,
            first_name=account.first_name,
        )
    except Exception as e:
        logger.error(f"Failed to send verification code to user {account.id}: {e}")
        return

    if not result.get("success"):
        logger.warning(
            f"Verification code not delivered to user {account.id}: {result.get('error')}"
        )


# =============================================================================
# Registration & verification
# =============================================================================
async def register_pipeline(
    store: AccountStore,
    hasher: PasswordHasher,
    codes: VerificationCodeIssuer,
    email_service: EmailService,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
) -> Account:
    """
    Create an unverified account and send it a verification code.

    Raises:
        ConflictException: Email already registered (verified or not)
    """
    logger.info(f"Registration attempt for email: {email}")

    existing = await store.find_by_email(email)
    if existing:
        logger.warning(f"Registration failed - email already exists: {email}")
        raise ConflictException(message="Email already in use", code="EMAIL_EXISTS")

    password_hash = await run_in_threadpool(hasher.hash_password, password)
    code = codes.issue()

    try:
        account = await store.create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            verification_code=code,
            verification_code_expires_at=codes.expires_at(),
        )
    except DuplicateEmailError:
        # Lost a race with a concurrent registration of the same email
        logger.warning(f"Registration failed - concurrent duplicate: {email}")
        raise ConflictException(message="Email already in use", code="EMAIL_EXISTS")

    await _deliver_code(email_service, account, code)

    logger.info(f"User registered: {account.id}")
    return account


async def verify_pipeline(
    store: AccountStore,
    codes: VerificationCodeIssuer,
    user_id: str,
    verification_code: int,
) -> Account:
    """
    Check a submitted code and mark the account verified.

    Raises:
        ValidationException: Bad id, wrong code or expired code
        NotFoundException: No such account
    """
    account = await _load_account(store, user_id)

    if not codes.check(verification_code, account.verification_code):
        logger.warning(f"Invalid verification code for user: {user_id}")
        raise ValidationException(message="Invalid verification code", code="INVALID_CODE")

    if codes.is_expired(account.verification_code_expires_at):
        logger.warning(f"Expired verification code for user: {user_id}")
        raise ValidationException(message="Verification code has expired", code="CODE_EXPIRED")

    verified = await store.mark_verified(user_id, verification_code)
    if not verified:
        # Code was consumed or replaced between the read and the update
        raise ValidationException(message="Invalid verification code", code="INVALID_CODE")

    logger.info(f"User verified: {user_id}")
    return verified


async def resend_verification_pipeline(
    store: AccountStore,
    codes: VerificationCodeIssuer,
    email_service: EmailService,
    email: str,
) -> Account:
    """
    Replace the pending code of an unverified account and send the new one.

    Raises:
        NotFoundException: No account with this email
        ValidationException: Account is already verified
    """
    account = await store.find_by_email(email)
    if not account:
        raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

    if account.is_verified:
        raise ValidationException(message="User is already verified", code="ALREADY_VERIFIED")

    code = codes.issue()
    updated = await store.replace_verification_code(account.id, code, codes.expires_at())
    if not updated:
        raise ValidationException(message="User is already verified", code="ALREADY_VERIFIED")

    await _deliver_code(email_service, updated, code)

    logger.info(f"Verification code re-issued for user: {account.id}")
    return updated


# =============================================================================
# Login
# =============================================================================
async def login_pipeline(
    store: AccountStore,
    hasher: PasswordHasher,
    tokens: TokenProvider,
    email: str,
    password: str,
) -> Tuple[str, Account]:
    """
    Authenticate a verified account and issue an access token.

    Returns:
        (token, account)

    Raises:
        NotFoundException: No account with this email
        UnauthorizedException: Wrong password
        ForbiddenException: Account not verified yet
    """
    logger.info(f"Login attempt for email: {email}")

    account = await store.find_by_email(email)
    if not account:
        logger.warning(f"Login failed - user not found: {email}")
        raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

    password_ok = await run_in_threadpool(
        hasher.verify_password, password, account.password_hash
    )
    if not password_ok:
        logger.warning(f"Login failed - invalid password for user: {account.id}")
        raise UnauthorizedException(message="Invalid password", code="INVALID_PASSWORD")

    if not account.is_verified:
        logger.warning(f"Login failed - user not verified: {account.id}")
        raise ForbiddenException(message="Email not verified", code="EMAIL_NOT_VERIFIED")

    token = await tokens.create_token(account.id, email=account.email, role=account.role)

    logger.info(f"Login successful for user: {account.id}")
    return token, account


# =============================================================================
# Profile CRUD
# =============================================================================
async def get_user_pipeline(store: AccountStore, user_id: str) -> Account:
    return await _load_account(store, user_id)


async def update_user_pipeline(
    store: AccountStore,
    user_id: str,
    first_name: str,
    last_name: str,
) -> Account:
    """
    Replace an account's names.

    Raises:
        ValidationException: Bad id
        NotFoundException: No such account
    """
    try:
        account = await store.update_names(user_id, first_name, last_name)
    except InvalidIdFormatError:
        raise ValidationException(message="Invalid user id", code="INVALID_USER_ID")

    if not account:
        raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

    logger.info(f"User updated: {user_id}")
    return account


async def delete_user_pipeline(store: AccountStore, user_id: str) -> None:
    """
    Remove an account permanently.

    Raises:
        ValidationException: Bad id
        NotFoundException: No such account
    """
    try:
        deleted = await store.delete_by_id(user_id)
    except InvalidIdFormatError:
        raise ValidationException(message="Invalid user id", code="INVALID_USER_ID")

    if not deleted:
        raise NotFoundException(message="User not found", code="USER_NOT_FOUND")


async def current_user_pipeline(store: AccountStore, claims: Dict[str, Any]) -> Account:
    """Resolve the account named by validated token claims."""
    return await _load_account(store, claims["sub"])
