"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Services are built once in create_app() and kept
on app.state.
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import Depends, Request

from config import AppSettings
from schemas.models.user import AuthenticatedUser
from services.auth_gate import AuthGate, extract_bearer_token
from services.auth_service import AuthService

SESSION_COOKIE_NAME = "token"


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


async def get_current_user(
    request: Request, gate: AuthGate = Depends(get_auth_gate)
) -> AuthenticatedUser:
    """Resolve the bearer token (header first, then the session cookie).

    The resolved identity (no credential fields) is stored on
    ``request.state.user`` and its id is bound to the logging context for the
    rest of the request.
    """
    token = extract_bearer_token(
        request.headers.get("Authorization"),
        request.cookies.get(SESSION_COOKIE_NAME),
    )
    user = await gate.authenticate(token)
    request.state.user = user
    structlog.contextvars.bind_contextvars(user_id=user.account_id)
    return user


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
