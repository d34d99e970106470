"""
One-time passcodes for email verification.

OTPService never touches storage. generate()/bind() produce the values the
account service writes onto the account, and consume() is a pure check over
the account's current OTP fields.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from schemas.models.user import UserDoc
from shared.datetime_utils import ensure_utc, minutes_from_now, utcnow
from shared.generators import generate_otp_code


@dataclass(frozen=True)
class OTPBinding:
    code: str
    expires_at: datetime


class OTPService:
    def __init__(self, length: int = 6) -> None:
        if length < 4:
            raise ValueError("OTP length must be at least 4 digits")
        self.length = length

    def generate(self) -> str:
        return generate_otp_code(self.length)

    def bind(self, code: str, ttl_minutes: int) -> OTPBinding:
        """Pair *code* with an absolute expiry *ttl_minutes* from now."""
        return OTPBinding(code=code, expires_at=minutes_from_now(ttl_minutes))

    def issue(self, ttl_minutes: int) -> OTPBinding:
        return self.bind(self.generate(), ttl_minutes)

    def consume(
        self,
        account: UserDoc,
        supplied_code: Optional[str],
        now: Optional[datetime] = None,
    ) -> bool:
        """Return True iff *supplied_code* matches the bound, unexpired OTP.

        The caller is responsible for clearing the OTP fields on success.
        """
        if not supplied_code or not account.otp_code or account.otp_expires_at is None:
            return False
        if not hmac.compare_digest(
            str(supplied_code).encode("utf-8"), account.otp_code.encode("utf-8")
        ):
            return False
        now = now or utcnow()
        return now < ensure_utc(account.otp_expires_at)
