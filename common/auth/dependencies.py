"""
FastAPI authentication dependencies.

Provides factory functions to create auth dependencies that can be
injected into route handlers. Works with any TokenProvider implementation.

Example:
    from common.auth import JWTAuth, create_auth_dependency

    auth = JWTAuth(secret="your-secret")
    get_current_claims = create_auth_dependency(lambda request: auth)

    @app.get("/me")
    async def me(claims: dict = Depends(get_current_claims)):
        return {"user_id": claims["sub"]}
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Header, Request

from common.auth.base import TokenProvider, TokenError
from common.utils.exceptions import UnauthorizedException, ForbiddenException

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str], scheme: str = "Bearer") -> Optional[str]:
    """Return the token from an ``Authorization`` header value, or None."""
    if not authorization:
        return None

    prefix = f"{scheme} "
    if not authorization.startswith(prefix):
        return None

    token = authorization[len(prefix):].strip()
    return token or None


def create_auth_dependency(
    get_token_provider: Callable[[Request], TokenProvider],
    header_name: str = "Authorization",
    scheme: str = "Bearer",
):
    """
    Factory to create FastAPI auth dependencies.

    Args:
        get_token_provider: Callable that returns the TokenProvider for a request
        header_name: Header to extract token from (default: Authorization)
        scheme: Auth scheme prefix (default: Bearer)

    Returns:
        A FastAPI dependency that verifies the token, attaches the claims
        to ``request.state.user`` and returns them
    """

    async def get_current_claims(
        request: Request,
        authorization: Optional[str] = Header(None, alias=header_name),
    ) -> Dict[str, Any]:
        """
        Raises:
            UnauthorizedException: If no token is provided
            ForbiddenException: If the token is invalid, expired or malformed
        """
        token = extract_bearer_token(authorization, scheme)
        if not token:
            raise UnauthorizedException(
                message="Access denied. No token provided.",
                code="NO_TOKEN",
            )

        auth = get_token_provider(request)
        try:
            claims = await auth.verify_token(token)
        except TokenError as e:
            logger.warning(f"Token rejected on {request.url.path}: {e}")
            raise ForbiddenException(message=str(e), code="INVALID_TOKEN")

        if not claims.get("sub"):
            raise ForbiddenException(message="Token missing user ID", code="INVALID_TOKEN")

        request.state.user = claims
        return claims

    return get_current_claims
