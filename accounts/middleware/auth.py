"""
Authentication middleware for protected routes.

Validates bearer access tokens and attaches the account to requests.
"""

import logging
from typing import Optional

from fastapi import Request

from common.auth import InvalidTokenError, JWTAuth, TokenKind
from common.utils.exceptions import UnauthorizedException

from accounts.models import Account
from accounts.services.account_store import AccountRepository

logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    Middleware that validates access tokens and attaches the account to request.
    """

    def __init__(self, jwt_auth: JWTAuth, repository: AccountRepository):
        """
        Initialize AuthMiddleware.

        Args:
            jwt_auth: Token issuer used to verify access tokens
            repository: Account lookup for the token subject
        """
        self._jwt_auth = jwt_auth
        self._repository = repository

    async def require_auth(self, request: Request) -> Account:
        """
        Validate request is authenticated.

        Args:
            request: HTTP request object

        Returns:
            Account attached to request

        Raises:
            UnauthorizedException: No/malformed header, invalid or expired
                token, a refresh token presented as access token, or the
                account no longer exists

        Side Effects:
            - Attaches account to request.state.account
            - Attaches token claims to request.state.token_claims
        """
        token = self._extract_token(request)

        if not token:
            raise UnauthorizedException(
                message="Access denied. No token provided or invalid format.",
                code="AUTH_REQUIRED"
            )

        try:
            claims = self._jwt_auth.verify_token(token, TokenKind.ACCESS)
        except InvalidTokenError as e:
            logger.debug(f"Access token rejected: {e}")
            raise UnauthorizedException(
                message="Invalid token.",
                code="INVALID_TOKEN"
            )

        account = await self._repository.find_by_id(claims.subject)

        if account is None:
            raise UnauthorizedException(
                message="Invalid token. User not found.",
                code="USER_NOT_FOUND"
            )

        request.state.account = account
        request.state.token_claims = claims

        return account

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract bearer token from Authorization header.

        Args:
            request: HTTP request object

        Returns:
            Token string if present and valid format, None otherwise

        Expected format: "Authorization: Bearer <token>"
        """
        auth_header = request.headers.get("Authorization")

        if not auth_header:
            return None

        parts = auth_header.split()

        if len(parts) != 2:
            return None

        scheme, token = parts

        if scheme.lower() != "bearer":
            return None

        return token
