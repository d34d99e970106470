"""
Request-time authentication.

AuthGate turns a bearer token into the account it names, stripped of its
credential fields. Any failure raises an AuthenticationError subclass, which
the dependency layer lets propagate so the protected handler never runs.
"""

from __future__ import annotations

from typing import Optional

from errors import AuthenticationError
from repositories.protocol import UserStore
from schemas.models.user import AuthenticatedUser
from services.token_service import TokenService
from shared.logging import get_logger

log = get_logger(__name__)


def extract_bearer_token(
    authorization: Optional[str], cookie_token: Optional[str] = None
) -> Optional[str]:
    """Return the token from ``Authorization: Bearer <token>``, else the cookie."""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        if token:
            return token
    if cookie_token:
        return cookie_token
    return None


class AuthGate:
    def __init__(self, token_service: TokenService, store: UserStore) -> None:
        self._tokens = token_service
        self._store = store

    async def authenticate(self, token: Optional[str]) -> AuthenticatedUser:
        if not token:
            raise AuthenticationError("No token, authorization denied")

        claims = self._tokens.verify(token)

        account = await self._store.find_by_id(claims.account_id)
        if account is None:
            log.warning("auth_gate_rejected", reason="user_not_found")
            raise AuthenticationError("User not found")
        return AuthenticatedUser.from_doc(account)
