"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.log_provider import LogEmailProvider
from infrastructure.email.protocol import EmailProvider
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.storage.local import LocalFileStore
from repositories.user_repository import UserRepository
from routes.health_routes import router as health_router
from routes.user_routes import router as user_router
from services.auth_gate import AuthGate
from services.auth_service import AuthService
from services.otp_service import OTPService
from services.token_service import TokenService
from shared.logging import get_logger, setup_logging
from shared.request_logging import setup_request_logging

log = get_logger(__name__)


def build_email_provider(
    settings: AppSettings, http_client: HttpClient
) -> EmailProvider:
    """ZeptoMail when an API token is configured, otherwise log-only delivery."""
    if settings.email.zepto_api_token:
        return ZeptoMailProvider(settings.email, http_client, app_name=settings.app_name)
    log.warning("email_provider_not_configured", fallback="log")
    return LogEmailProvider(reveal_codes=not settings.is_production)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            environment=settings.env,
        )

    # Fails fast when no signing key is configured
    token_service = TokenService(settings.jwt)
    file_store = LocalFileStore(
        settings.uploads.upload_dir, settings.uploads.upload_url_path
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]
        app.state.settings = settings

        store = UserRepository(app.state.db)
        await store.ensure_indexes()

        http_client = HttpClient(user_agent=f"{settings.app_name}/1.0")
        app.state.http_client = http_client

        app.state.auth_service = AuthService(
            store=store,
            token_service=token_service,
            otp_service=OTPService(settings.otp.otp_length),
            email_provider=build_email_provider(settings, http_client),
            file_store=file_store,
            otp_settings=settings.otp,
            jwt_settings=settings.jwt,
            upload_settings=settings.uploads,
            app_url=settings.app_url,
            password_reset_url=settings.password_reset_url,
        )
        app.state.auth_gate = AuthGate(token_service, store)

        log.info(
            "app_started",
            env=settings.env,
            db_name=settings.db.db_name,
            jwt_algorithm=token_service.algorithm,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await http_client.aclose()
        await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Credentials are allowed so the session cookie reaches the frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_request_logging(app)

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(user_router)
    app.mount(
        settings.uploads.upload_url_path,
        StaticFiles(directory=file_store.root),
        name="uploads",
    )

    return app
