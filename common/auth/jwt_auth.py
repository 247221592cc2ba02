"""
JWT token provider.

Signs and validates stateless access tokens with python-jose.

Example:
    auth = JWTAuth(
        secret="your-secret-key",
        access_token_expire_minutes=60,
    )

    token = await auth.create_token(user_id, email="ana@example.com")

    claims = await auth.verify_token(token)
    print(claims["sub"])  # user_id
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

from jose import jwt, JWTError, ExpiredSignatureError

from common.auth.base import (
    TokenProvider,
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)

logger = logging.getLogger(__name__)


class JWTAuth(TokenProvider):
    """
    JWT authentication provider.

    Tokens carry ``sub`` (the user ID), ``iat``, ``exp`` and any extra
    claims passed to create_token.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60,
    ):
        """
        Initialize JWT auth provider.

        Args:
            secret: Secret key for JWT signing (keep this secure!)
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Token expiration time
        """
        if not secret:
            raise ValueError("JWT secret must not be empty")

        self.secret = secret
        self.algorithm = algorithm
        self.access_token_expire = timedelta(minutes=access_token_expire_minutes)

    async def create_token(
        self,
        user_id: str,
        expires_delta: Optional[timedelta] = None,
        **claims: Any,
    ) -> str:
        """Create a JWT token for the user."""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self.access_token_expire)
        payload = {
            **claims,
            "sub": user_id,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify and decode a JWT token."""
        # Parse first so garbage is reported apart from a bad signature
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as e:
            logger.debug(f"Malformed token: {e}")
            raise MalformedTokenError("Malformed token")

        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except JWTError as e:
            logger.debug(f"Token rejected: {e}")
            raise InvalidSignatureError("Invalid token signature")
