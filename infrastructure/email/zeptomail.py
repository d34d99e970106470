"""ZeptoMail implementation of EmailProvider.

Messages are rendered from Jinja2 templates under templates/emails and posted
to the ZeptoMail HTTP API through the shared HttpClient. Delivery failures are
logged and reported as False; they never raise into the caller.
"""

import os
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"
_AUTH_SCHEME = "Zoho-enczapikey"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


def _greeting(user_name: Optional[str]) -> str:
    return f"Hello {user_name}," if user_name else "Hello,"


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        app_name: str = "AuthShop",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._templates = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html"]),
        )

    def _authorization(self) -> str:
        token = self._settings.zepto_api_token
        return token if token.startswith(_AUTH_SCHEME) else f"{_AUTH_SCHEME} {token}"

    def _message(
        self,
        to_email: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: str,
    ) -> dict:
        return {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [{"email_address": {"address": to_email, "name": to_name or to_email}}],
            "subject": subject,
            "htmlbody": html_body,
            "textbody": text_body,
        }

    async def _deliver(self, message: dict) -> bool:
        to_email = message["to"][0]["email_address"]["address"]
        if not self._settings.zepto_api_token:
            log.error("email_not_sent", to_email=to_email, reason="token_not_configured")
            return False

        try:
            response = await self._http.post(
                _ZEPTO_API_URL,
                json=message,
                headers={
                    "Authorization": self._authorization(),
                    "Content-Type": "application/json",
                },
            )
        except Exception as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=message["subject"],
                error_type=type(e).__name__,
            )
            return False

        if 200 <= response.status_code < 300:
            log.info("email_sent", to_email=to_email, subject=message["subject"])
            return True
        log.error(
            "email_rejected",
            to_email=to_email,
            subject=message["subject"],
            status_code=response.status_code,
            response=response.text[:200],
        )
        return False

    async def send_verification_email(
        self,
        email: str,
        user_name: Optional[str],
        otp_code: str,
        expires_in_minutes: int,
    ) -> bool:
        html_body = self._templates.get_template("verification.html").render(
            otp_code=otp_code,
            user_name=user_name,
            expires_in_minutes=expires_in_minutes,
            app_name=self._app_name,
        )
        text_body = (
            f"{_greeting(user_name)}\n\n"
            f"Your {self._app_name} verification code is: {otp_code}\n\n"
            f"This code expires in {expires_in_minutes} minutes."
        )
        message = self._message(
            email,
            user_name,
            f"Verify your email - {self._app_name}",
            html_body,
            text_body,
        )
        return await self._deliver(message)

    async def send_password_reset_email(
        self, email: str, user_name: Optional[str], reset_link: str
    ) -> bool:
        html_body = self._templates.get_template("password_reset.html").render(
            reset_link=reset_link, user_name=user_name, app_name=self._app_name
        )
        text_body = (
            f"{_greeting(user_name)}\n\n"
            f"Open this link to choose a new {self._app_name} password:\n"
            f"{reset_link}\n\n"
            "If you did not ask for a reset, you can ignore this email."
        )
        message = self._message(
            email,
            user_name,
            f"Reset your password - {self._app_name}",
            html_body,
            text_body,
        )
        return await self._deliver(message)
