"""
User request/response schemas.
"""

import unicodedata
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field, StrictInt, field_validator
from pydantic.networks import validate_email

from common.utils.password import validate_password


def _is_name_char(ch: str) -> bool:
    # Combining marks cover diacritics with no precomposed form
    return ch.isalpha() or ch == " " or unicodedata.category(ch).startswith("M")


def _check_name(value: str) -> str:
    """Letters (including diacritics) and spaces only. Returned in NFC form."""
    value = unicodedata.normalize("NFC", value)
    if not value.strip():
        raise ValueError("must not be empty")
    if not all(_is_name_char(ch) for ch in value):
        raise ValueError("may only contain letters and spaces")
    return value


def _check_email(value: str) -> str:
    """Format check only. The address is kept exactly as submitted."""
    validate_email(value)
    return value


EmailAddress = Annotated[str, AfterValidator(_check_email)]


class NamesMixin(BaseModel):
    """First and last name with the shared format rule."""

    firstName: str = Field(max_length=50)
    lastName: str = Field(max_length=50)

    @field_validator("firstName", "lastName")
    @classmethod
    def names_are_letters(cls, value: str) -> str:
        return _check_name(value)


class RegisterRequest(NamesMixin):
    """User registration request."""

    email: EmailAddress
    password: str

    @field_validator("password")
    @classmethod
    def password_is_strong(cls, value: str) -> str:
        is_valid, errors = validate_password(value)
        if not is_valid:
            raise ValueError("; ".join(errors))
        return value


class VerifyRequest(BaseModel):
    """Email verification request."""

    userId: str
    verificationCode: StrictInt


class ResendVerificationRequest(BaseModel):
    """Request a fresh verification code."""

    email: EmailAddress


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailAddress
    password: str = Field(min_length=1)


class UpdateUserRequest(NamesMixin):
    """Profile update request. Only names can change."""


class UserResponse(BaseModel):
    """User data in response. Never carries the password or pending code."""

    id: str
    firstName: str
    lastName: str
    email: str
    role: str
    isVerified: bool
    createdAt: Optional[str] = None


class UserEnvelope(BaseModel):
    """Single-user response body."""

    user: UserResponse


class RegisterResponse(BaseModel):
    """Registration response body."""

    message: str
    userId: str


class LoginResponse(BaseModel):
    """Login response body."""

    message: str
    token: str
    user: UserResponse


class MessageResponse(BaseModel):
    """Confirmation-only response body."""

    message: str
