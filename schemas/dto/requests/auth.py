"""
Request DTOs for the /users endpoints.

Fields are optional at this layer: AuthService reports missing values with
its own "All fields are required" validation error, so a half-filled form
gets the same 400 envelope whichever field is missing.

LoginRequest                    POST /users/login
VerifyOtpRequest                POST /users/verify-otp
ResendOtpRequest                POST /users/resend-otp
SendResetEmailRequest           POST /users/send-reset-password-email
CheckEmailRequest               POST /users/check-email
PasswordConfirmRequest          POST /users/change-password,
                                POST /users/password-reset/{id}/{token}
ResetPasswordDirectRequest      POST /users/reset-password-direct
ChangePasswordByEmailRequest    POST /users/change-password-email

Registration is a multipart form and is declared on the route itself.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Request body for POST /users/login."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    """Request body for POST /users/verify-otp.

    ``otp`` is the numeric code mailed at registration or resend. Clients
    that post it as a JSON number are accepted too.
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    email: Optional[str] = None
    otp: Optional[str] = None


class ResendOtpRequest(BaseModel):
    """Request body for POST /users/resend-otp."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None


class SendResetEmailRequest(BaseModel):
    """Request body for POST /users/send-reset-password-email."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None


class CheckEmailRequest(BaseModel):
    """Request body for POST /users/check-email."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None


class PasswordConfirmRequest(BaseModel):
    """New password plus confirmation."""

    model_config = ConfigDict(populate_by_name=True)

    password: Optional[str] = None
    confirm_password: Optional[str] = None


class ResetPasswordDirectRequest(BaseModel):
    """Request body for POST /users/reset-password-direct."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None


class ChangePasswordByEmailRequest(BaseModel):
    """Request body for POST /users/change-password-email (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    old_password: Optional[str] = Field(default=None, alias="oldPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")
