"""
Account service settings.

Extends the base settings with account-specific configuration.
"""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, model_validator

from common.config import BaseAppSettings


# Mail host used when only SMTP credentials are configured
DEFAULT_SMTP_HOST = "smtp.gmail.com"


class Settings(BaseAppSettings):
    """Account service settings."""

    # ==========================================================================
    # Credentials & Verification
    # ==========================================================================
    BCRYPT_ROUNDS: int = 10

    # Pending verification codes stop matching after this long
    VERIFICATION_CODE_EXPIRE_MINUTES: int = 24 * 60

    # ==========================================================================
    # Request Handling
    # ==========================================================================
    # Deadline covering store, hash and notification calls of one request
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # ==========================================================================
    # Email Settings (verification codes)
    # ==========================================================================
    EMAIL_MODE: str = "console"  # console, smtp, resend
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = Field(
        None, validation_alias=AliasChoices("SMTP_USER", "EMAIL_USER")
    )
    SMTP_PASSWORD: Optional[str] = Field(
        None, validation_alias=AliasChoices("SMTP_PASSWORD", "EMAIL_PASS")
    )
    SMTP_FROM_EMAIL: Optional[str] = None
    SMTP_FROM_NAME: str = "Account Service"
    RESEND_API_KEY: Optional[str] = None
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    @model_validator(mode="after")
    def infer_smtp_delivery(self) -> "Settings":
        """
        Credentials alone are enough to send mail: without an explicit
        EMAIL_MODE they select SMTP, and a missing host means Gmail.
        """
        if self.SMTP_USER and self.SMTP_PASSWORD:
            if "EMAIL_MODE" not in self.model_fields_set:
                self.EMAIL_MODE = "smtp"
            if not self.SMTP_HOST:
                self.SMTP_HOST = DEFAULT_SMTP_HOST
        return self

    def get_from_email(self) -> str:
        """Sender address, falling back to the SMTP login like most mail hosts expect."""
        return self.SMTP_FROM_EMAIL or self.SMTP_USER or "noreply@example.com"


@lru_cache()
def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings()
