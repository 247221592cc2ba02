"""
Account service Pydantic schemas.

Request and response models for API endpoints.
"""

from accounts.schemas.users import (
    RegisterRequest,
    VerifyRequest,
    ResendVerificationRequest,
    LoginRequest,
    UpdateUserRequest,
    UserResponse,
    UserEnvelope,
    RegisterResponse,
    LoginResponse,
    MessageResponse,
)

__all__ = [
    # Requests
    "RegisterRequest",
    "VerifyRequest",
    "ResendVerificationRequest",
    "LoginRequest",
    "UpdateUserRequest",
    # Responses
    "UserResponse",
    "UserEnvelope",
    "RegisterResponse",
    "LoginResponse",
    "MessageResponse",
]
