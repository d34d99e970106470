"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

AppSettings is built once by create_app() and handed to each service
constructor; no service reads the environment on its own.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "AuthShop"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "authshop"
    jwt_audience: str = "authshop.api"
    # Session tokens live as long as the login cookie (24h)
    access_token_ttl_seconds: int = 86400
    reset_token_ttl_seconds: int = 3600
    cookie_secure: bool = False

    # RS256 keys (preferred)
    jwt_private_key: str = ""
    jwt_public_key: str = ""

    # HS256 fallback (used when RS256 keys are absent)
    jwt_secret: str = ""

    @property
    def use_rs256(self) -> bool:
        return bool(self.jwt_private_key and self.jwt_public_key)


class OTPSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    otp_length: int = 6
    registration_otp_ttl_minutes: int = 50
    resend_otp_ttl_minutes: int = 10


class UploadSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    upload_dir: str = "uploads"
    upload_url_path: str = "/uploads"
    max_upload_bytes: int = 5 * 1024 * 1024
    allowed_image_types: list[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ]


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@authshop.local"
    zepto_from_name: str = "AuthShop"


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_url: str = "http://localhost:3000"
    app_name: str = "AuthShop"

    # Frontend dev server; credentials are allowed so the login cookie flows
    cors_origins: list[str] = ["http://localhost:5173"]

    # Base of the link mailed by send-reset-password-email; {id}/{token} is appended.
    # It must be a frontend page (the API route is POST-only); defaults to
    # {first cors origin}/users/reset, or {app_url}/users/reset with no origins.
    password_reset_url: str = ""

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    otp: Optional[OTPSettings] = None
    uploads: Optional[UploadSettings] = None
    email: Optional[EmailSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if not self.password_reset_url:
            frontend = self.cors_origins[0] if self.cors_origins else self.app_url
            self.password_reset_url = f"{frontend.rstrip('/')}/users/reset"

        # Populate sub-configs from the same env/dotenv source
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.otp is None:
            self.otp = OTPSettings()
        if self.uploads is None:
            self.uploads = UploadSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
