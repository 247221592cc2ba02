"""
Common library for reusable infrastructure components.

- database: Async MongoDB connection with Motor
- auth: JWT tokens, bcrypt password hashing, FastAPI bearer dependencies
- utils: Standard responses, exceptions, password validation
- config: Base settings class
"""

from common.database import MongoDB
from common.auth import (
    TokenProvider,
    TokenError,
    JWTAuth,
    PasswordHasher,
    create_auth_dependency,
)
from common.utils import (
    success_response,
    error_response,
    APIException,
    ValidationException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    InternalServerException,
    validate_password,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    # Auth
    "TokenProvider",
    "TokenError",
    "JWTAuth",
    "PasswordHasher",
    "create_auth_dependency",
    # Utils
    "success_response",
    "error_response",
    "APIException",
    "ValidationException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "InternalServerException",
    "validate_password",
    # Config
    "BaseAppSettings",
]
