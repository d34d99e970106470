"""
Account lifecycle service.

AuthService owns every operation that moves an account between states:
registration (unverified, OTP pending), OTP verification and resend, login,
and the password change/reset variants. Collaborators (store, token service,
OTP service, mailer, file store) are injected so tests can swap in fakes.

Errors are raised as AppError subclasses; the HTTP layer maps them to status
codes in errors.register_error_handlers().

Known gaps kept on purpose (see DESIGN.md):
- reset_password_direct() needs nothing but the email address
- logout is client-side only; issued tokens stay valid until they expire
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from argon2.exceptions import HashingError

from config import JWTSettings, OTPSettings, UploadSettings
from errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    InternalError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from infrastructure.email.protocol import EmailProvider
from infrastructure.storage.protocol import FileStore, ImageUpload
from repositories.protocol import UserStore
from schemas.models.user import AuthenticatedUser, UserDoc
from services.otp_service import OTPService
from services.token_service import TokenService
from shared.crypto import hash_password, verify_password
from shared.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class AccountSummary:
    id: str
    name: str
    email: str
    profile_image: Optional[str]


@dataclass(frozen=True)
class RegisterResult:
    account_id: str
    profile_image: Optional[str]
    verification_sent: bool


@dataclass(frozen=True)
class LoginResult:
    token: str
    account: AccountSummary


def _require(*values: Optional[str]) -> None:
    if any(v is None or not str(v).strip() for v in values):
        raise ValidationError("All fields are required")


def _require_match(password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise ValidationError("Passwords do not match", field="confirm_password")


class AuthService:
    def __init__(
        self,
        store: UserStore,
        token_service: TokenService,
        otp_service: OTPService,
        email_provider: EmailProvider,
        file_store: FileStore,
        otp_settings: OTPSettings,
        jwt_settings: JWTSettings,
        upload_settings: UploadSettings,
        app_url: str,
        password_reset_url: str,
    ) -> None:
        self._store = store
        self._tokens = token_service
        self._otp = otp_service
        self._email = email_provider
        self._files = file_store
        self._otp_settings = otp_settings
        self._jwt_settings = jwt_settings
        self._upload_settings = upload_settings
        self._app_url = app_url.rstrip("/")
        self._password_reset_url = password_reset_url.rstrip("/")

    # ── Helpers ──────────────────────────────────────────────────────────────

    def image_url(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return f"{self._app_url}/{path.lstrip('/')}"

    def summarize(self, account: Union[UserDoc, AuthenticatedUser]) -> AccountSummary:
        return AccountSummary(
            id=account.account_id,
            name=account.name,
            email=account.email,
            profile_image=self.image_url(account.profile_image),
        )

    def _hash(self, password: str) -> str:
        try:
            return hash_password(password)
        except HashingError as e:
            log.error("password_hash_failed", error_type=type(e).__name__)
            raise InternalError("Unable to process password")

    def _validate_image(self, upload: ImageUpload) -> None:
        if upload.content_type not in self._upload_settings.allowed_image_types:
            raise ValidationError(
                "Profile image must be a JPEG, PNG, GIF or WebP file",
                field="profileImage",
            )
        if upload.size > self._upload_settings.max_upload_bytes:
            raise ValidationError(
                "Profile image is too large",
                field="profileImage",
                details={"max_bytes": self._upload_settings.max_upload_bytes},
            )

    async def _get_by_email(
        self, email: str, message: str = "User not found"
    ) -> UserDoc:
        account = await self._store.find_by_email(email)
        if account is None:
            raise NotFoundError(message)
        return account

    async def _replace_password(
        self, account_id: str, new_password: str, via: str
    ) -> None:
        password_hash = self._hash(new_password)
        updated = await self._store.update_password_hash(account_id, password_hash)
        if not updated:
            raise NotFoundError("User not found")
        log.info("password_changed", user_id=account_id, via=via)

    # ── Registration & verification ──────────────────────────────────────────

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
        profile_image: Optional[ImageUpload] = None,
    ) -> RegisterResult:
        _require(name, email, password, confirm_password)
        _require_match(password, confirm_password)

        if await self._store.find_by_email(email) is not None:
            log.warning("registration_failed", reason="email_exists")
            raise ConflictError("Email already registered", field="email")

        if profile_image is not None and profile_image.size == 0:
            profile_image = None
        if profile_image is not None:
            self._validate_image(profile_image)

        password_hash = self._hash(password)
        ttl = self._otp_settings.registration_otp_ttl_minutes
        binding = self._otp.issue(ttl)

        image_path = None
        if profile_image is not None:
            image_path = await self._files.save(profile_image)

        try:
            account = await self._store.insert(
                UserDoc(
                    name=name,
                    email=email,
                    password_hash=password_hash,
                    profile_image=image_path,
                    is_verified=False,
                    otp_code=binding.code,
                    otp_expires_at=binding.expires_at,
                )
            )
        except Exception:
            # ConflictError from a concurrent registration included
            if image_path:
                await self._files.delete(image_path)
            raise

        sent = await self._email.send_verification_email(
            account.email, account.name, binding.code, ttl
        )
        if not sent:
            log.warning("verification_email_not_sent", user_id=account.account_id)

        log.info(
            "user_registered",
            user_id=account.account_id,
            has_profile_image=bool(image_path),
        )
        return RegisterResult(
            account_id=account.account_id,
            profile_image=self.image_url(image_path),
            verification_sent=sent,
        )

    async def verify_otp(self, email: Optional[str], code: Optional[str]) -> None:
        _require(email, code)
        account = await self._get_by_email(email)

        if account.is_verified:
            raise ConflictError("User already verified")

        if not self._otp.consume(account, code):
            log.warning("otp_verification_failed", user_id=account.account_id)
            raise ValidationError("Invalid or expired OTP", field="otp")

        if not await self._store.mark_verified(account.account_id, account.otp_code):
            # Lost a race with another verify or a resend
            current = await self._store.find_by_id(account.account_id)
            if current is not None and current.is_verified:
                raise ConflictError("User already verified")
            raise ValidationError("Invalid or expired OTP", field="otp")

        log.info("otp_verified", user_id=account.account_id)

    async def resend_otp(self, email: Optional[str]) -> None:
        _require(email)
        account = await self._get_by_email(email)

        if account.is_verified:
            raise ConflictError("User already verified")

        ttl = self._otp_settings.resend_otp_ttl_minutes
        binding = self._otp.issue(ttl)
        if not await self._store.replace_otp(
            account.account_id, binding.code, binding.expires_at
        ):
            raise ConflictError("User already verified")

        sent = await self._email.send_verification_email(
            account.email, account.name, binding.code, ttl
        )
        if not sent:
            log.warning("verification_email_not_sent", user_id=account.account_id)
        log.info("otp_resent", user_id=account.account_id)

    # ── Session ──────────────────────────────────────────────────────────────

    async def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        if not email or not password:
            raise ValidationError("Email and password required")

        account = await self._store.find_by_email(email)
        if account is None:
            log.warning("login_failed", reason="not_registered")
            raise NotFoundError("User not registered")

        if not account.is_verified:
            log.warning(
                "login_failed", reason="unverified", user_id=account.account_id
            )
            raise ForbiddenError("Please verify your email before login")

        if not verify_password(password, account.password_hash):
            log.warning(
                "login_failed",
                reason="invalid_password",
                user_id=account.account_id,
            )
            raise AuthenticationError("Invalid credentials")

        token = self._tokens.issue(account.account_id)
        log.info("login_success", user_id=account.account_id)
        return LoginResult(token=token, account=self.summarize(account))

    # ── Password change / reset ──────────────────────────────────────────────

    async def change_password(
        self,
        account: AuthenticatedUser,
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> None:
        _require(password, confirm_password)
        _require_match(password, confirm_password)
        await self._replace_password(account.account_id, password, via="session")

    async def change_password_by_email(
        self,
        email: Optional[str],
        old_password: Optional[str],
        new_password: Optional[str],
    ) -> None:
        _require(email, old_password, new_password)
        account = await self._get_by_email(email)

        if not verify_password(old_password, account.password_hash):
            log.warning(
                "password_change_failed",
                reason="old_password_mismatch",
                user_id=account.account_id,
            )
            raise AuthenticationError(
                "Old password is incorrect", field="oldPassword"
            )

        await self._replace_password(
            account.account_id, new_password, via="email_old_password"
        )

    async def reset_password_direct(
        self,
        email: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> None:
        _require(email, password, confirm_password)
        _require_match(password, confirm_password)
        account = await self._get_by_email(email)
        await self._replace_password(account.account_id, password, via="direct_reset")

    async def send_reset_email(self, email: Optional[str]) -> None:
        if not email:
            raise ValidationError("Email is required")
        account = await self._get_by_email(email, "Email does not exist")

        token = self._tokens.issue(
            account.account_id, ttl_seconds=self._jwt_settings.reset_token_ttl_seconds
        )
        link = f"{self._password_reset_url}/{account.account_id}/{token}"
        sent = await self._email.send_password_reset_email(
            account.email, account.name, link
        )
        if not sent:
            log.warning("password_reset_email_not_sent", user_id=account.account_id)
        log.info("password_reset_requested", user_id=account.account_id)

    async def reset_password_by_token(
        self,
        account_id: str,
        token: str,
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> None:
        account = await self._store.find_by_id(account_id)
        if account is None:
            raise NotFoundError("User not found")

        claims = self._tokens.verify(token)
        if claims.account_id != account.account_id:
            log.warning(
                "password_reset_failed",
                reason="subject_mismatch",
                user_id=account.account_id,
            )
            raise InvalidTokenError("Invalid or expired token")

        _require(password, confirm_password)
        _require_match(password, confirm_password)
        await self._replace_password(account.account_id, password, via="reset_token")

    async def check_email(self, email: Optional[str]) -> tuple[str, str]:
        if not email:
            raise ValidationError("Email is required")
        account = await self._get_by_email(email, "Email not found")
        return account.account_id, account.email
