"""Process-wide components built once at startup and shared read-only by every request."""

from dataclasses import dataclass
from datetime import timedelta

from newsdesk.core.config import Settings
from newsdesk.core.security import PasswordHasher, TokenCodec, parse_duration
from newsdesk.services.email import EmailSender, build_email_sender


@dataclass(frozen=True)
class Components:
    settings: Settings
    hasher: PasswordHasher
    codec: TokenCodec
    email_sender: EmailSender
    verification_ttl: timedelta


def build_components(
    settings: Settings,
    email_sender: EmailSender | None = None,
    hasher: PasswordHasher | None = None,
) -> Components:
    """Wire the token codec, hasher and email transport. Raises ConfigError on bad settings."""
    codec = TokenCodec(
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expires_in=settings.JWT_EXPIRES_IN,
    )
    return Components(
        settings=settings,
        hasher=hasher or PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        codec=codec,
        email_sender=email_sender or build_email_sender(settings),
        verification_ttl=parse_duration(settings.VERIFICATION_TOKEN_EXPIRES_IN),
    )
