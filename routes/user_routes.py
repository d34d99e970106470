"""
Account endpoints under /users.

Handlers are thin: they unpack the request, call one AuthService method and
wrap the result in a response DTO. All failures are AppError subclasses raised
by the service (or the auth dependency) and rendered by the global handlers.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, Form, Request, Response, UploadFile, status

from dependencies import (
    SESSION_COOKIE_NAME,
    AuthServiceDep,
    CurrentUser,
    get_settings,
)
from errors import ValidationError
from infrastructure.storage.protocol import ImageUpload
from schemas.dto.requests.auth import (
    ChangePasswordByEmailRequest,
    CheckEmailRequest,
    LoginRequest,
    PasswordConfirmRequest,
    ResendOtpRequest,
    ResetPasswordDirectRequest,
    SendResetEmailRequest,
    VerifyOtpRequest,
)
from schemas.dto.responses.auth import (
    CheckEmailResponse,
    EmailCheckUser,
    LoggedUserResponse,
    LoginResponse,
    RegisterResponse,
    UserSummary,
    VerifyOtpResponse,
)
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from services.auth_service import AccountSummary

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={
        code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 500)
    },
)

_UPLOAD_CHUNK_BYTES = 64 * 1024


def set_session_cookie(request: Request, response: Response, token: str) -> None:
    jwt_settings = get_settings(request).jwt
    response.set_cookie(
        SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=jwt_settings.cookie_secure,
        samesite="lax",
        path="/",
        max_age=jwt_settings.access_token_ttl_seconds,
    )


def clear_session_cookie(request: Request, response: Response) -> None:
    jwt_settings = get_settings(request).jwt
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        secure=jwt_settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


def _summary_dto(summary: AccountSummary) -> UserSummary:
    return UserSummary(
        id=summary.id,
        name=summary.name,
        email=summary.email,
        profile_image=summary.profile_image,
    )


async def _read_upload(upload: UploadFile, max_bytes: int) -> ImageUpload:
    """Read *upload* into memory, refusing anything over *max_bytes*."""
    content = bytearray()
    while True:
        chunk = await upload.read(_UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        content.extend(chunk)
        if len(content) > max_bytes:
            raise ValidationError(
                "Profile image is too large",
                field="profileImage",
                details={"max_bytes": max_bytes},
            )
    return ImageUpload(
        filename=upload.filename,
        content_type=upload.content_type,
        content=bytes(content),
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: Request,
    service: AuthServiceDep,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    confirm_password: Optional[str] = Form(None),
    profileImage: Optional[UploadFile] = File(None),
) -> RegisterResponse:
    upload = None
    if profileImage is not None and profileImage.filename:
        max_bytes = get_settings(request).uploads.max_upload_bytes
        upload = await _read_upload(profileImage, max_bytes)

    result = await service.register(name, email, password, confirm_password, upload)
    return RegisterResponse(
        message="User registered. Please verify your email via OTP.",
        user_id=result.account_id,
        profile_image=result.profile_image,
        verification_sent=result.verification_sent,
    )


@router.post("/verify-otp", response_model=VerifyOtpResponse)
async def verify_otp(
    body: VerifyOtpRequest, service: AuthServiceDep
) -> VerifyOtpResponse:
    await service.verify_otp(body.email, body.otp)
    return VerifyOtpResponse(message="Email verified successfully", verified=True)


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(body: ResendOtpRequest, service: AuthServiceDep) -> MessageResponse:
    await service.resend_otp(body.email)
    return MessageResponse(message="OTP resent successfully")


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    service: AuthServiceDep,
) -> LoginResponse:
    result = await service.login(body.email, body.password)
    set_session_cookie(request, response, result.token)
    return LoginResponse(
        message="Login successful",
        token=result.token,
        user=_summary_dto(result.account),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response) -> MessageResponse:
    # Stateless sessions: the token stays valid until exp, the client drops it
    clear_session_cookie(request, response)
    return MessageResponse(message="Logged out successfully")


@router.post("/send-reset-password-email", response_model=MessageResponse)
async def send_reset_password_email(
    body: SendResetEmailRequest, service: AuthServiceDep
) -> MessageResponse:
    await service.send_reset_email(body.email)
    return MessageResponse(message="Password reset link sent to your email")


@router.post("/password-reset/{account_id}/{token}", response_model=MessageResponse)
async def password_reset(
    account_id: str,
    token: str,
    body: PasswordConfirmRequest,
    service: AuthServiceDep,
) -> MessageResponse:
    await service.reset_password_by_token(
        account_id, token, body.password, body.confirm_password
    )
    return MessageResponse(message="Password reset successful")


@router.post("/reset-password-direct", response_model=MessageResponse)
async def reset_password_direct(
    body: ResetPasswordDirectRequest, service: AuthServiceDep
) -> MessageResponse:
    await service.reset_password_direct(body.email, body.password, body.confirm_password)
    return MessageResponse(message="Password reset successful")


@router.post("/check-email", response_model=CheckEmailResponse)
async def check_email(
    body: CheckEmailRequest, service: AuthServiceDep
) -> CheckEmailResponse:
    account_id, email = await service.check_email(body.email)
    return CheckEmailResponse(
        message="Email exists", user=EmailCheckUser(id=account_id, email=email)
    )


@router.post("/change-password-email", response_model=MessageResponse)
async def change_password_email(
    body: ChangePasswordByEmailRequest, service: AuthServiceDep
) -> MessageResponse:
    await service.change_password_by_email(
        body.email, body.old_password, body.new_password
    )
    return MessageResponse(message="Password updated successfully")


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: PasswordConfirmRequest, user: CurrentUser, service: AuthServiceDep
) -> MessageResponse:
    await service.change_password(user, body.password, body.confirm_password)
    return MessageResponse(message="Password updated")


@router.get("/logged-user", response_model=LoggedUserResponse)
async def logged_user(user: CurrentUser, service: AuthServiceDep) -> LoggedUserResponse:
    summary = service.summarize(user)
    dto = _summary_dto(summary)
    dto.profile_image = summary.profile_image or ""
    return LoggedUserResponse(user=dto)
