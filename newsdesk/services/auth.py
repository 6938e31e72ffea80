"""Authentication service: registration, email verification, login, password and profile changes."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import Session

from newsdesk.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from newsdesk.core.permissions import Role
from newsdesk.core.security import (
    NAME_MAX_LEN,
    OAUTH_PASSWORD_SENTINEL,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    PasswordHasher,
    TokenClaims,
    TokenCodec,
    generate_verification_token,
    token_selector,
)
from newsdesk.models import User
from newsdesk.repositories import UserRepository
from newsdesk.schemas.auth import SafeUser
from newsdesk.services.email import EmailSender

logger = logging.getLogger(__name__)

REGISTERED_MESSAGE = "Registration successful. Please check your email to verify your account."
VERIFIED_MESSAGE = "Email successfully verified. You can now log in."
ALREADY_VERIFIED_MESSAGE = "Email already verified."
RESEND_MESSAGE = (
    "If an account with that email exists and is not verified, "
    "a new verification link has been sent."
)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: SafeUser


def normalize_email(email: str) -> str:
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError as e:
        raise ValidationError("Invalid email address", "INVALID_EMAIL") from e


def validate_new_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LEN} characters", "PASSWORD_TOO_SHORT"
        )
    if len(password) > PASSWORD_MAX_LEN:
        raise ValidationError(
            f"Password must be at most {PASSWORD_MAX_LEN} characters", "PASSWORD_TOO_LONG"
        )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class AuthService:
    """
    Account lifecycle: UNVERIFIED -> VERIFIED (one way, by token redemption), with
    ACTIVE/BANNED and the suspended flag controlled by administrators.

    Raw verification tokens only ever leave the process inside the emailed link;
    the database holds a sha256 selector (to find the row) and a bcrypt hash (to prove it).
    """

    def __init__(
        self,
        db: Session,
        hasher: PasswordHasher,
        codec: TokenCodec,
        email_sender: EmailSender,
        verification_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self.users = UserRepository(db)
        self.hasher = hasher
        self.codec = codec
        self.email_sender = email_sender
        self.verification_ttl = verification_ttl

    # ------------------------------------------------------------------
    # Projections and tokens
    # ------------------------------------------------------------------

    def to_safe_user(self, user: User, is_subscriber: bool | None = None) -> SafeUser:
        if is_subscriber is None:
            is_subscriber = self.users.has_active_subscription(user.id)
        return SafeUser(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            is_verified=user.is_verified,
            is_subscriber=is_subscriber,
            profile_image=user.profile_image,
            bio=user.bio,
            created_at=user.created_at,
        )

    def issue_token(self, user: User) -> LoginResult:
        """Mint a session token; the subscriber flag is looked up now and frozen into the token."""
        is_subscriber = self.users.has_active_subscription(user.id)
        claims = TokenClaims(
            id=user.id,
            email=user.email,
            name=user.name,
            role=Role(user.role),
            is_subscriber=is_subscriber,
        )
        return LoginResult(
            token=self.codec.mint(claims),
            user=self.to_safe_user(user, is_subscriber=is_subscriber),
        )

    def get_cookie_options(self, is_production: bool) -> dict[str, Any]:
        """Keyword arguments for Response.set_cookie; max_age matches the token lifetime."""
        return {
            "httponly": True,
            "secure": is_production,
            "samesite": "lax",
            "max_age": self.codec.max_age_seconds,
            "path": "/",
        }

    # ------------------------------------------------------------------
    # Registration and verification
    # ------------------------------------------------------------------

    def _rotate_verification_token(self, user: User) -> str:
        raw_token = generate_verification_token()
        self.users.update(
            user,
            verification_selector=token_selector(raw_token),
            verification_token_hash=self.hasher.hash(raw_token),
            verification_sent_at=datetime.now(UTC),
        )
        return raw_token

    def register(self, name: str, email: str, password: str) -> dict[str, str]:
        name = (name or "").strip()
        if not name or not (email or "").strip() or not password:
            raise ValidationError(
                "Missing required fields: name, email, and password.", "MISSING_FIELDS"
            )
        if len(name) > NAME_MAX_LEN:
            raise ValidationError("Name is too long", "NAME_TOO_LONG")
        email = normalize_email(email)
        validate_new_password(password)

        if self.users.find_by_email(email) is not None:
            raise ConflictError("Email already registered", "EMAIL_ALREADY_REGISTERED")

        user = self.users.create(
            name=name,
            email=email,
            password_hash=self.hasher.hash(password),
            role=Role.USER,
            is_verified=False,
        )
        raw_token = self._rotate_verification_token(user)
        try:
            self.email_sender.send_verification_email(user.email, user.name, raw_token)
        except Exception:
            self.users.rollback()
            logger.error("Registration rolled back: verification email failed", extra={"email": email})
            raise
        self.users.commit()
        logger.info("User registered, verification email sent", extra={"user_id": user.id})
        return {"message": REGISTERED_MESSAGE}

    def verify_email(self, raw_token: str) -> dict[str, str]:
        """Redeem a verification token. Replaying an already-redeemed token is a no-op success."""
        invalid = NotFoundError("Invalid or expired verification token.", "INVALID_TOKEN")
        if not raw_token or not raw_token.strip():
            raise invalid
        raw_token = raw_token.strip()
        user = self.users.find_by_verification_selector(token_selector(raw_token))
        if user is None:
            raise invalid
        if user.is_verified:
            return {"message": ALREADY_VERIFIED_MESSAGE}
        if not self.hasher.compare(raw_token, user.verification_token_hash):
            raise invalid
        sent_at = user.verification_sent_at
        if sent_at is not None and datetime.now(UTC) - _as_utc(sent_at) > self.verification_ttl:
            raise invalid

        self.users.update(user, is_verified=True, verification_token_hash=None)
        self.users.commit()
        logger.info("Email verified", extra={"user_id": user.id})
        return {"message": VERIFIED_MESSAGE}

    def resend_verification(self, email: str) -> dict[str, str]:
        """Same answer for unknown, verified and unverified accounts so emails cannot be enumerated."""
        try:
            normalized = normalize_email(email or "")
        except ValidationError:
            return {"message": RESEND_MESSAGE}
        user = self.users.find_by_email(normalized)
        if user is None or user.is_verified:
            return {"message": RESEND_MESSAGE}

        raw_token = self._rotate_verification_token(user)
        try:
            self.email_sender.send_verification_email(user.email, user.name, raw_token)
        except Exception:
            self.users.rollback()
            raise
        self.users.commit()
        logger.info("Verification token reissued", extra={"user_id": user.id})
        return {"message": RESEND_MESSAGE}

    # ------------------------------------------------------------------
    # Login and credentials
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> LoginResult:
        """
        Check the password first; unverified/suspended state is only revealed to a caller
        who already proved the password. Unknown email and wrong password are indistinguishable.
        """
        invalid = AuthenticationError("Invalid credentials", "INVALID_CREDENTIALS")
        if not email or not password:
            raise invalid
        user = self.users.find_by_email(email)
        if user is None:
            self.hasher.compare_dummy(password)
            raise invalid
        if not self.hasher.compare(password, user.password_hash):
            raise invalid
        if not user.is_verified:
            raise AuthenticationError(
                "Account not verified. Please check your email for the verification link.",
                "EMAIL_NOT_VERIFIED",
            )
        if not user.can_authenticate:
            raise AuthenticationError(
                "Account suspended. Please contact support.", "ACCOUNT_SUSPENDED"
            )

        result = self.issue_token(user)
        logger.info("User logged in", extra={"user_id": user.id})
        return result

    def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", "USER_NOT_FOUND")
        if not user.password_hash or user.password_hash == OAUTH_PASSWORD_SENTINEL:
            raise AuthenticationError("You don't have a password set.", "PASSWORD_NOT_SET")
        if not self.hasher.compare(old_password, user.password_hash):
            raise AuthenticationError("Incorrect old password", "INVALID_CREDENTIALS")
        validate_new_password(new_password)

        self.users.update(user, password_hash=self.hasher.hash(new_password))
        self.users.commit()
        logger.info("User password changed", extra={"user_id": user_id})

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_profile(self, user_id: str) -> SafeUser:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", "USER_NOT_FOUND")
        return self.to_safe_user(user)

    def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        bio: str | None = None,
    ) -> SafeUser:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", "USER_NOT_FOUND")
        changes: dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Name cannot be empty", "MISSING_FIELDS")
            changes["name"] = name.strip()
        if email is not None:
            normalized = normalize_email(email)
            existing = self.users.find_by_email(normalized)
            if existing is not None and existing.id != user_id:
                raise ConflictError("Email already registered", "EMAIL_ALREADY_REGISTERED")
            changes["email"] = normalized
        if bio is not None:
            changes["bio"] = bio
        if changes:
            self.users.update(user, **changes)
            self.users.commit()
            logger.info("User profile updated", extra={"user_id": user_id, "fields": ",".join(changes)})
        return self.to_safe_user(user)

    def link_oauth_profile(
        self,
        provider_id: str,
        email: str | None,
        name: str | None = None,
        profile_image: str | None = None,
    ) -> User:
        """
        Resolve an identity-provider callback to a local user: by provider id, then by
        email (linking the account and trusting the provider's verification), else create one.
        """
        if not provider_id:
            raise ValidationError("Provider id is required", "MISSING_FIELDS")
        user = self.users.find_by_google_id(provider_id)
        if user is not None:
            return user
        if not email:
            raise ValidationError("Identity provider did not return an email", "MISSING_FIELDS")
        normalized = normalize_email(email)

        user = self.users.find_by_email(normalized)
        if user is not None:
            self.users.update(user, google_id=provider_id, is_verified=True)
            self.users.commit()
            logger.info("Linked identity provider to existing user", extra={"user_id": user.id})
            return user

        user = self.users.create(
            google_id=provider_id,
            email=normalized,
            name=(name or "").strip() or normalized.split("@")[0],
            profile_image=profile_image,
            password_hash=OAUTH_PASSWORD_SENTINEL,
            role=Role.USER,
            is_verified=True,
        )
        self.users.commit()
        logger.info("Created user from identity provider", extra={"user_id": user.id})
        return user
