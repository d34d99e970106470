"""
Signed, time-limited identity tokens (JWT).

TokenService is built once from JWTSettings. It signs with RS256 when a key
pair is configured and falls back to HS256 with ``jwt_secret`` otherwise.

There is no revocation list: a token stays valid until its ``exp`` claim.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from config import JWTSettings
from errors import InvalidTokenError, TokenExpiredError
from shared.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    account_id: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings
        if settings.use_rs256:
            # Support keys provided via env with literal \n sequences
            self._signing_key = settings.jwt_private_key.replace("\\n", "\n")
            self._verifying_key = settings.jwt_public_key.replace("\\n", "\n")
            self._algorithm = "RS256"
        else:
            if not settings.jwt_secret:
                raise RuntimeError(
                    "JWT_SECRET must be set when RS256 keys are not provided"
                )
            self._signing_key = settings.jwt_secret
            self._verifying_key = settings.jwt_secret
            self._algorithm = "HS256"

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def issue(self, account_id: str, ttl_seconds: Optional[int] = None) -> str:
        """Return a signed token for *account_id*.

        ``ttl_seconds`` overrides the session lifetime for this token only
        (password-reset links use ``reset_token_ttl_seconds``).
        """
        if ttl_seconds is None:
            ttl_seconds = self._settings.access_token_ttl_seconds
        now = datetime.now(timezone.utc)
        claims = {
            "iss": self._settings.jwt_issuer,
            "aud": self._settings.jwt_audience,
            "sub": str(account_id),
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
        }
        return jwt.encode(claims, self._signing_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode and validate *token*.

        Raises:
            TokenExpiredError: the token is past its ``exp``.
            InvalidTokenError: bad signature, wrong issuer/audience,
                malformed input or missing subject.
        """
        try:
            claims = jwt.decode(
                token,
                self._verifying_key,
                algorithms=[self._algorithm],
                audience=self._settings.jwt_audience,
                issuer=self._settings.jwt_issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            log.info("token_rejected", reason=type(e).__name__)
            raise InvalidTokenError("Invalid token")

        account_id = claims.get("sub")
        if not account_id:
            raise InvalidTokenError("Invalid token payload")

        return TokenClaims(
            account_id=str(account_id),
            issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
