"""Password hashing and session token creation/verification for authentication."""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from newsdesk.core.config import DURATION_PATTERN, JWT_SECRET_MIN_LEN
from newsdesk.core.errors import ConfigError, TokenExpired, TokenInvalid
from newsdesk.core.permissions import Role

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72

# Length limits for names and passwords.
NAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Stored as password_hash for accounts created through an identity provider; never a valid bcrypt hash.
OAUTH_PASSWORD_SENTINEL = "oauth-account-no-password"

_DURATION_UNITS = {"d": "days", "h": "hours", "m": "minutes", "s": "seconds"}


def parse_duration(value: str) -> timedelta:
    """Parse '7d', '12h', '30m' or '45s' into a timedelta. Raises ValueError otherwise."""
    match = DURATION_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount = int(match.group(1))
    if amount <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return timedelta(**{_DURATION_UNITS[match.group(2)]: amount})


class PasswordHasher:
    """One-way bcrypt hash/compare for passwords and one-time tokens."""

    def __init__(self, rounds: int = 12) -> None:
        if rounds < 4 or rounds > 31:
            raise ConfigError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds
        self._dummy_digest: str | None = None

    def compare_dummy(self, plaintext: str) -> bool:
        """Spend the same work as compare() when there is no stored digest (unknown account)."""
        if self._dummy_digest is None:
            self._dummy_digest = self.hash(secrets.token_hex(16))
        self.compare(plaintext, self._dummy_digest)
        return False

    def hash(self, plaintext: str) -> str:
        data = plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(data, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def compare(self, plaintext: str, digest: str | None) -> bool:
        """Constant-time check of plaintext against a stored digest. Malformed digests never match."""
        if not digest:
            return False
        data = plaintext.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(data, digest.encode("utf-8"))
        except (ValueError, TypeError):
            return False


def generate_verification_token() -> str:
    """Random one-time token (64 hex chars) sent to the user; only its hash is stored."""
    return secrets.token_hex(32)


def token_selector(raw_token: str) -> str:
    """Deterministic lookup key for a raw one-time token (the bcrypt hash cannot be searched)."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class TokenClaims:
    """Decoded session token payload."""

    id: str
    email: str
    name: str
    role: Role
    is_subscriber: bool
    iat: datetime | None = None
    exp: datetime | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "sub": self.id,
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "isSubscriber": self.is_subscriber,
        }


class TokenCodec:
    """Mint and verify signed, time-bound session tokens with a process-wide secret."""

    def __init__(self, secret: str | None, algorithm: str = "HS256", expires_in: str = "7d") -> None:
        if not secret or not secret.strip():
            raise ConfigError("JWT secret is not configured")
        if len(secret.strip()) < JWT_SECRET_MIN_LEN:
            raise ConfigError(
                f"JWT secret must be at least {JWT_SECRET_MIN_LEN} characters long"
            )
        try:
            self.lifetime = parse_duration(expires_in)
        except ValueError as e:
            raise ConfigError(f"Invalid token expiry: {e}") from e
        self._secret = secret
        self.algorithm = algorithm

    @property
    def max_age_seconds(self) -> int:
        return int(self.lifetime.total_seconds())

    def mint(self, claims: TokenClaims, now: datetime | None = None) -> str:
        """Sign claims; embeds iat and exp from the configured lifetime."""
        now = now or datetime.now(UTC)
        payload = claims.to_payload()
        payload["iat"] = now
        payload["exp"] = now + self.lifetime
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token.
        Raises TokenExpired past expiry and TokenInvalid on any signature or shape failure.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired("Token expired") from e
        except jwt.PyJWTError as e:
            raise TokenInvalid("Invalid token") from e

        user_id = payload.get("id") or payload.get("sub")
        email = payload.get("email")
        role = payload.get("role")
        if not isinstance(user_id, str) or not user_id:
            raise TokenInvalid("Invalid token payload")
        if not isinstance(email, str) or not email:
            raise TokenInvalid("Invalid token payload")
        try:
            role_enum = Role(role)
        except ValueError as e:
            raise TokenInvalid("Invalid token payload") from e

        return TokenClaims(
            id=user_id,
            email=email,
            name=str(payload.get("name") or ""),
            role=role_enum,
            is_subscriber=payload.get("isSubscriber") is True,
            iat=datetime.fromtimestamp(payload["iat"], UTC),
            exp=datetime.fromtimestamp(payload["exp"], UTC),
        )
