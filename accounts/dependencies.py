"""
FastAPI dependencies for the account service.

Services are built once in the application lifespan and stored on
``app.state.services``; route handlers receive them through Depends.
"""

import logging
from dataclasses import dataclass

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.auth import JWTAuth, PasswordHasher, TokenProvider, create_auth_dependency

from accounts.config import Settings
from accounts.services.account_store import AccountStore
from accounts.services.email_service import EmailService
from accounts.services.verification_codes import VerificationCodeIssuer

logger = logging.getLogger(__name__)


@dataclass
class AccountServices:
    """Everything the user pipelines need, owned by one application."""

    store: AccountStore
    hasher: PasswordHasher
    codes: VerificationCodeIssuer
    tokens: TokenProvider
    email: EmailService


def build_email_service(settings: Settings) -> EmailService:
    """Create the email service from settings."""
    return EmailService(
        mode=settings.EMAIL_MODE,
        from_email=settings.get_from_email(),
        from_name=settings.SMTP_FROM_NAME,
        smtp_host=settings.SMTP_HOST,
        smtp_port=settings.SMTP_PORT,
        smtp_user=settings.SMTP_USER,
        smtp_password=settings.SMTP_PASSWORD,
        resend_api_key=settings.RESEND_API_KEY,
        timeout=settings.EMAIL_TIMEOUT_SECONDS,
    )


def init_services(db: AsyncIOMotorDatabase, settings: Settings) -> AccountServices:
    """
    Build account services on top of a database connection.

    Called once at application startup.

    Args:
        db: MongoDB database connection
        settings: Loaded application settings
    """
    services = AccountServices(
        store=AccountStore(db=db),
        hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        codes=VerificationCodeIssuer(expire_minutes=settings.VERIFICATION_CODE_EXPIRE_MINUTES),
        tokens=JWTAuth(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
        ),
        email=build_email_service(settings),
    )
    logger.info("Account services initialized")
    return services


def get_services(request: Request) -> AccountServices:
    """Get the services of the application handling this request."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Account services not initialized. Call init_services first.")
    return services


def get_token_provider(request: Request) -> TokenProvider:
    """Get the token provider of the application handling this request."""
    return get_services(request).tokens


require_auth = create_auth_dependency(get_token_provider)
