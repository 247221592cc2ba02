"""
Authentication module - Token provider (JWT), password hashing, FastAPI dependencies.
"""

from common.auth.base import (
    TokenProvider,
    TokenError,
    InvalidSignatureError,
    TokenExpiredError,
    MalformedTokenError,
)
from common.auth.jwt_auth import JWTAuth
from common.auth.password_hasher import PasswordHasher
from common.auth.dependencies import create_auth_dependency, extract_bearer_token

__all__ = [
    "TokenProvider",
    "TokenError",
    "InvalidSignatureError",
    "TokenExpiredError",
    "MalformedTokenError",
    "JWTAuth",
    "PasswordHasher",
    "create_auth_dependency",
    "extract_bearer_token",
]
