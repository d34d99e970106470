"""UserStore protocol implemented by UserRepository and by the test fakes."""

from datetime import datetime
from typing import Optional, Protocol

from schemas.models.user import UserDoc


class UserStore(Protocol):
    async def find_by_email(self, email: str) -> Optional[UserDoc]: ...

    async def find_by_id(self, account_id: str) -> Optional[UserDoc]: ...

    async def insert(self, user: UserDoc) -> UserDoc: ...

    async def mark_verified(self, account_id: str, expected_otp: str) -> bool: ...

    async def replace_otp(
        self, account_id: str, code: str, expires_at: datetime
    ) -> bool: ...

    async def update_password_hash(
        self, account_id: str, password_hash: str
    ) -> bool: ...
