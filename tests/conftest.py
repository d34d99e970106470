"""
Shared test configuration.

Patches dotenv so pydantic-settings never reads the project's real .env file
during tests, and builds settings, services and the app around in-memory
fakes. No test opens a network connection.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from config import (
    AppSettings,
    DatabaseSettings,
    EmailSettings,
    JWTSettings,
    LoggingSettings,
    OTPSettings,
    SentrySettings,
    UploadSettings,
)
from fakes import InMemoryFileStore, InMemoryUserStore, RecordingEmailProvider
from services.auth_gate import AuthGate
from services.auth_service import AuthService
from services.otp_service import OTPService
from services.token_service import TokenService

TEST_JWT_SECRET = "test-jwt-secret-that-is-at-least-32-bytes-long"


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        app_url="http://testserver",
        cors_origins=["http://frontend.test"],
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
        jwt=JWTSettings(jwt_secret=TEST_JWT_SECRET),
        otp=OTPSettings(),
        uploads=UploadSettings(upload_dir=str(tmp_path / "uploads")),
        email=EmailSettings(zepto_api_token=""),
        logging=LoggingSettings(),
        sentry=SentrySettings(sentry_dsn=""),
    )


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def mailer() -> RecordingEmailProvider:
    return RecordingEmailProvider()


@pytest.fixture
def file_store() -> InMemoryFileStore:
    return InMemoryFileStore()


@pytest.fixture
def token_service(settings) -> TokenService:
    return TokenService(settings.jwt)


@pytest.fixture
def auth_service(settings, store, mailer, file_store, token_service) -> AuthService:
    return AuthService(
        store=store,
        token_service=token_service,
        otp_service=OTPService(settings.otp.otp_length),
        email_provider=mailer,
        file_store=file_store,
        otp_settings=settings.otp,
        jwt_settings=settings.jwt,
        upload_settings=settings.uploads,
        app_url=settings.app_url,
        password_reset_url=settings.password_reset_url,
    )


@pytest.fixture
def auth_gate(token_service, store) -> AuthGate:
    return AuthGate(token_service, store)


@pytest.fixture
def mongo_db():
    """Mock database handle whose ping succeeds."""
    db = MagicMock()
    db.client.admin.command = AsyncMock(return_value={"ok": 1})
    return db


@pytest.fixture
def api_app(monkeypatch, settings, store, mailer, mongo_db):
    """The real create_app() wiring with Mongo and mail replaced by fakes."""
    import app as app_module

    mongo_client = MagicMock()
    mongo_client.__getitem__.return_value = mongo_db
    mongo_client.close = AsyncMock()

    monkeypatch.setattr(app_module, "AsyncMongoClient", lambda *a, **kw: mongo_client)
    monkeypatch.setattr(app_module, "UserRepository", lambda db: store)
    monkeypatch.setattr(
        app_module, "build_email_provider", lambda settings, http_client: mailer
    )
    return app_module.create_app(settings)


@pytest.fixture
def client(api_app):
    with TestClient(api_app) as c:
        yield c
