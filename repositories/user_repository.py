"""
Repository for the `users` collection.

Every state change is a single-document update. Writes that depend on the
account's current state carry that state in the filter (compare-and-set), so
two requests racing on the same account can never both apply: the loser's
update matches nothing and the method returns False.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from errors import ConflictError
from schemas.models.base import parse_object_id
from schemas.models.user import UserDoc
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)

USERS_COLLECTION = "users"


class UserRepository:
    def __init__(self, db) -> None:
        self._col = db[USERS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._col.create_index(
            [("email", ASCENDING)], unique=True, name="email_unique"
        )

    async def find_by_email(self, email: str) -> Optional[UserDoc]:
        doc = await self._col.find_one({"email": email})
        return UserDoc.from_mongo(doc)

    async def find_by_id(self, account_id: str) -> Optional[UserDoc]:
        oid = parse_object_id(account_id)
        if oid is None:
            return None
        doc = await self._col.find_one({"_id": oid})
        return UserDoc.from_mongo(doc)

    async def insert(self, user: UserDoc) -> UserDoc:
        """Insert *user* and return it with its generated id.

        Raises:
            ConflictError: the unique email index rejected the insert.
        """
        now = utcnow()
        user = user.model_copy(update={"created_at": now, "updated_at": now})
        try:
            result = await self._col.insert_one(user.to_mongo())
        except DuplicateKeyError:
            log.warning("user_insert_conflict", reason="duplicate_email")
            raise ConflictError("Email already registered", field="email")
        return user.model_copy(update={"id": result.inserted_id})

    async def mark_verified(self, account_id: str, expected_otp: str) -> bool:
        """Set is_verified and clear the OTP, only if *expected_otp* is still bound."""
        oid = parse_object_id(account_id)
        if oid is None:
            return False
        result = await self._col.update_one(
            {"_id": oid, "is_verified": False, "otp_code": expected_otp},
            {
                "$set": {
                    "is_verified": True,
                    "otp_code": None,
                    "otp_expires_at": None,
                    "updated_at": utcnow(),
                }
            },
        )
        return result.modified_count == 1

    async def replace_otp(
        self, account_id: str, code: str, expires_at: datetime
    ) -> bool:
        """Overwrite the pending OTP of an unverified account."""
        oid = parse_object_id(account_id)
        if oid is None:
            return False
        result = await self._col.update_one(
            {"_id": oid, "is_verified": False},
            {
                "$set": {
                    "otp_code": code,
                    "otp_expires_at": expires_at,
                    "updated_at": utcnow(),
                }
            },
        )
        return result.matched_count == 1

    async def update_password_hash(self, account_id: str, password_hash: str) -> bool:
        oid = parse_object_id(account_id)
        if oid is None:
            return False
        result = await self._col.update_one(
            {"_id": oid},
            {"$set": {"password_hash": password_hash, "updated_at": utcnow()}},
        )
        return result.matched_count == 1
