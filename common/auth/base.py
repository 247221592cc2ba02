"""
Abstract token provider interface.

Defines the contract that token issuers must implement, so the HTTP layer
can depend on "something that signs and checks tokens" rather than on a
particular scheme.

Example:
    from common.auth import TokenProvider, JWTAuth

    def get_token_provider(settings) -> TokenProvider:
        return JWTAuth(secret=settings.JWT_SECRET)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class TokenError(ValueError):
    """Base class for token validation failures."""


class InvalidSignatureError(TokenError):
    """Token signature does not match its contents."""


class TokenExpiredError(TokenError):
    """Token is past its expiry time."""


class MalformedTokenError(TokenError):
    """Token cannot be parsed at all."""


class TokenProvider(ABC):
    """
    Abstract token provider.

    All methods are async to support both sync and async implementations.
    """

    @abstractmethod
    async def create_token(
        self,
        user_id: str,
        **claims: Any,
    ) -> str:
        """
        Create an authentication token for a user.

        Args:
            user_id: The user's ID
            **claims: Additional claims to include in the token

        Returns:
            The authentication token string
        """
        pass

    @abstractmethod
    async def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify an authentication token.

        Args:
            token: The token to verify

        Returns:
            Dictionary containing decoded token claims (at minimum: sub)

        Raises:
            MalformedTokenError: If the token cannot be parsed
            InvalidSignatureError: If the token was tampered with
            TokenExpiredError: If the token is past its expiry
        """
        pass
