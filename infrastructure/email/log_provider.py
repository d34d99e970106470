"""Logging EmailProvider for local development.

Selected when no ZeptoMail token is configured. Nothing leaves the process.
Outside production the verification code and reset link are written to the
log so the flow can be followed from the console. The reset link carries a
signed token, so it is withheld like the code.
"""

from typing import Optional

from shared.logging import get_logger

log = get_logger(__name__)


class LogEmailProvider:
    def __init__(self, reveal_codes: bool = False) -> None:
        self._reveal_codes = reveal_codes

    async def send_verification_email(
        self,
        email: str,
        user_name: Optional[str],
        otp_code: str,
        expires_in_minutes: int,
    ) -> bool:
        extra = {"verification_code": otp_code} if self._reveal_codes else {}
        log.info(
            "verification_email_logged",
            to_email=email,
            expires_in_minutes=expires_in_minutes,
            **extra,
        )
        return True

    async def send_password_reset_email(
        self, email: str, user_name: Optional[str], reset_link: str
    ) -> bool:
        extra = {"reset_link": reset_link} if self._reveal_codes else {}
        log.info("password_reset_email_logged", to_email=email, **extra)
        return True
