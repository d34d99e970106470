"""
Response DTOs for the /users endpoints.

Keys are camelCase on the wire (``userId``, ``profileImage``) to match the
frontend; Python code uses the snake_case field names.

UserSummary            account shape in login / logged-user responses
RegisterResponse       POST /users/register  (201)
VerifyOtpResponse      POST /users/verify-otp  (200)
LoginResponse          POST /users/login  (200)
LoggedUserResponse     GET /users/logged-user  (200)
EmailCheckUser         user shape in CheckEmailResponse
CheckEmailResponse     POST /users/check-email  (200)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.dto.responses.common import MessageResponse


class UserSummary(BaseModel):
    """Public account fields. Credentials and OTP state are never included."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    profile_image: Optional[str] = Field(default=None, alias="profileImage")


class RegisterResponse(MessageResponse):
    """Response body for POST /users/register (201)."""

    user_id: str = Field(alias="userId")
    profile_image: Optional[str] = Field(default=None, alias="profileImage")
    verification_sent: bool = Field(alias="verificationSent")


class VerifyOtpResponse(MessageResponse):
    """Response body for POST /users/verify-otp (200)."""

    verified: bool


class LoginResponse(MessageResponse):
    """Response body for POST /users/login (200).

    The token is also set as an HTTP-only cookie.
    """

    token: str
    user: UserSummary


class LoggedUserResponse(BaseModel):
    """Response body for GET /users/logged-user (200)."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = "success"
    user: UserSummary


class EmailCheckUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str


class CheckEmailResponse(MessageResponse):
    """Response body for POST /users/check-email (200)."""

    user: EmailCheckUser
