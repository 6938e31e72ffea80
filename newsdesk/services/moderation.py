"""Comment state machine, content validation and non-blocking spam heuristics."""

import logging
import re
from enum import Enum

from newsdesk.core.errors import ValidationError

logger = logging.getLogger(__name__)

CONTENT_MIN_LEN = 3
CONTENT_MAX_LEN = 1000

# Heuristics only; a hit is logged and, unless blocking is enabled, the comment is still stored.
REPEATED_CHAR_PATTERN = re.compile(r"(.)\1{4,}", re.DOTALL)
URL_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)
SPAM_WORDS_PATTERN = re.compile(r"\b(viagra|casino|poker|lottery)\b", re.IGNORECASE)
CAPS_RATIO_THRESHOLD = 0.7
CAPS_MIN_LENGTH = 10


class CommentState(str, Enum):
    """Single source of truth for moderation state; persisted as (is_approved, is_spam)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    SPAM = "SPAM"

    @classmethod
    def from_flags(cls, is_approved: bool, is_spam: bool) -> "CommentState":
        # Spam wins if a legacy row somehow carries both flags.
        if is_spam:
            return cls.SPAM
        if is_approved:
            return cls.APPROVED
        return cls.PENDING

    def to_flags(self) -> dict[str, bool]:
        return {
            "is_approved": self is CommentState.APPROVED,
            "is_spam": self is CommentState.SPAM,
        }

    @property
    def is_public(self) -> bool:
        return self is CommentState.APPROVED


# PENDING -> APPROVED | SPAM, APPROVED <-> SPAM. Re-applying the current state is a no-op.
ALLOWED_TRANSITIONS: dict[CommentState, frozenset[CommentState]] = {
    CommentState.PENDING: frozenset({CommentState.APPROVED, CommentState.SPAM}),
    CommentState.APPROVED: frozenset({CommentState.APPROVED, CommentState.SPAM}),
    CommentState.SPAM: frozenset({CommentState.APPROVED, CommentState.SPAM}),
}


def transition(current: CommentState, target: CommentState) -> CommentState:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot move a comment from {current.value} to {target.value}",
            "INVALID_STATE_TRANSITION",
        )
    return target


def validate_comment_content(content: str | None) -> str:
    """Return the trimmed content or raise ValidationError with a CONTENT_* code."""
    if content is None or not isinstance(content, str):
        raise ValidationError("Comment content is required", "CONTENT_REQUIRED")
    trimmed = content.strip()
    if not trimmed:
        raise ValidationError("Comment cannot be empty", "CONTENT_REQUIRED")
    if len(trimmed) < CONTENT_MIN_LEN:
        raise ValidationError(
            f"Comment is too short (min {CONTENT_MIN_LEN} characters)", "CONTENT_TOO_SHORT"
        )
    if len(trimmed) > CONTENT_MAX_LEN:
        raise ValidationError(
            f"Comment is too long (max {CONTENT_MAX_LEN} characters)", "CONTENT_TOO_LONG"
        )
    return trimmed


def caps_ratio(text: str) -> float:
    letters = [c for c in text if c.isalpha()]
    if not letters:
        return 0.0
    return sum(1 for c in letters if c.isupper()) / len(letters)


def detect_spam_signals(content: str) -> list[str]:
    """Names of the heuristics the content trips; empty when it looks clean."""
    signals: list[str] = []
    if REPEATED_CHAR_PATTERN.search(content):
        signals.append("repeated_characters")
    if len(content) > CAPS_MIN_LENGTH and caps_ratio(content) > CAPS_RATIO_THRESHOLD:
        signals.append("excessive_caps")
    if URL_PATTERN.search(content):
        signals.append("link")
    if SPAM_WORDS_PATTERN.search(content):
        signals.append("spam_keyword")
    return signals


def screen_for_spam(content: str, blocking: bool = False, **log_context: str) -> list[str]:
    """Log spam signals; raise SPAM_DETECTED only when blocking is enabled."""
    signals = detect_spam_signals(content)
    if signals:
        logger.warning(
            "Potential spam comment detected",
            extra={"spam_signals": ",".join(signals), "content_length": len(content), **log_context},
        )
        if blocking:
            raise ValidationError("Comment looks like spam", "SPAM_DETECTED")
    return signals
