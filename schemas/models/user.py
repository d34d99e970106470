"""
User (account) document model.

Maps to the `users` MongoDB collection.

Lifecycle:
- created by registration with is_verified=False and a pending OTP
- verification sets is_verified=True and clears otp_code/otp_expires_at
- resend overwrites otp_code/otp_expires_at
- password operations replace password_hash

Documents are never deleted. password_hash is always an argon2 digest and
never leaves the service layer.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from schemas.models.base import MongoBaseModel


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    name: str
    email: str
    password_hash: str
    profile_image: Optional[str] = None  # relative path, e.g. "uploads/ab12.png"
    is_verified: bool = False
    otp_code: Optional[str] = None
    otp_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def account_id(self) -> str:
        return str(self.id)


class AuthenticatedUser(BaseModel):
    """The account a request is acting as, without credential fields.

    Built by the auth gate so password_hash and pending OTP data never reach
    route handlers or request.state.
    """

    id: str
    name: str
    email: str
    profile_image: Optional[str] = None
    is_verified: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: UserDoc) -> "AuthenticatedUser":
        return cls(
            id=doc.account_id,
            name=doc.name,
            email=doc.email,
            profile_image=doc.profile_image,
            is_verified=doc.is_verified,
            created_at=doc.created_at,
        )

    @property
    def account_id(self) -> str:
        return self.id
