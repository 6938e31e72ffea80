"""Outbound email: verification links over a Resend-compatible HTTP API, or an in-memory outbox in dev."""

from __future__ import annotations

import html
import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urlencode

import httpx

from newsdesk.core.errors import InternalError

if TYPE_CHECKING:
    from newsdesk.core.config import Settings

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verify your Newsdesk account"
OUTBOX_MAX_MESSAGES = 100


class EmailDeliveryError(InternalError):
    """Raised when the email API rejects or cannot receive a message."""

    default_code = "EMAIL_DELIVERY_FAILED"
    default_message = "Could not send email. Please try again later."

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.upstream_status = status_code
        super().__init__(message)


class EmailSender(Protocol):
    def send_verification_email(self, to_address: str, display_name: str, raw_token: str) -> None:
        ...


def build_verification_link(client_url: str, raw_token: str) -> str:
    return f"{client_url.rstrip('/')}/verify-email?{urlencode({'token': raw_token})}"


def render_verification_html(display_name: str, link: str, expires_in: str) -> str:
    return (
        f"<p>Hello {html.escape(display_name)},</p>"
        "<p>Thank you for registering! Please click the link below to verify your email address:</p>"
        f'<p><a href="{html.escape(link)}">Verify Email Address</a></p>'
        f"<p>This link will expire in {html.escape(expires_in)}.</p>"
        "<p>If you did not sign up for this account, please ignore this email.</p>"
    )


class ResendEmailSender:
    """Send mail through an HTTP email API (Resend request/response shape)."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        from_address: str,
        client_url: str,
        link_expires_in: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_url = api_url
        self._api_key = api_key
        self.from_address = from_address
        self.client_url = client_url
        self.link_expires_in = link_expires_in
        self.timeout = timeout
        self._client = client

    def _post(self, payload: dict) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if self._client is not None:
            return self._client.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        with httpx.Client() as client:
            return client.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)

    def send_verification_email(self, to_address: str, display_name: str, raw_token: str) -> None:
        link = build_verification_link(self.client_url, raw_token)
        payload = {
            "from": self.from_address,
            "to": [to_address],
            "subject": VERIFICATION_SUBJECT,
            "html": render_verification_html(display_name, link, self.link_expires_in),
        }
        try:
            resp = self._post(payload)
        except httpx.TimeoutException as e:
            logger.error("Email API timed out", extra={"to_address": to_address})
            raise EmailDeliveryError("Email service timed out.") from e
        except httpx.HTTPError as e:
            logger.error("Email API unreachable", extra={"to_address": to_address, "reason": str(e)[:200]})
            raise EmailDeliveryError("Email service is unreachable.") from e
        if resp.status_code >= 400:
            logger.error(
                "Email API rejected message",
                extra={"to_address": to_address, "upstream_status": resp.status_code},
            )
            raise EmailDeliveryError(
                f"Email service returned {resp.status_code}.", resp.status_code
            )
        logger.info("Verification email sent", extra={"to_address": to_address})


@dataclass
class OutboxMessage:
    to_address: str
    display_name: str
    raw_token: str
    link: str


class OutboxEmailSender:
    """Dev sender: keeps the most recent messages in memory instead of delivering them."""

    def __init__(self, client_url: str = "http://localhost:3000", max_messages: int = OUTBOX_MAX_MESSAGES) -> None:
        self.client_url = client_url
        self.outbox: deque[OutboxMessage] = deque(maxlen=max_messages)

    def send_verification_email(self, to_address: str, display_name: str, raw_token: str) -> None:
        link = build_verification_link(self.client_url, raw_token)
        self.outbox.append(OutboxMessage(to_address, display_name, raw_token, link))
        logger.info("Verification email queued in dev outbox", extra={"to_address": to_address})


def build_email_sender(settings: Settings) -> EmailSender:
    """Real sender when an API key is configured; the dev outbox otherwise."""
    if settings.EMAIL_API_KEY is not None and settings.EMAIL_API_KEY.get_secret_value().strip():
        return ResendEmailSender(
            api_url=settings.EMAIL_API_URL,
            api_key=settings.EMAIL_API_KEY.get_secret_value(),
            from_address=settings.EMAIL_FROM,
            client_url=settings.CLIENT_URL,
            link_expires_in=settings.VERIFICATION_TOKEN_EXPIRES_IN,
            timeout=settings.EMAIL_REQUEST_TIMEOUT_SEC,
        )
    logger.warning("EMAIL_API_KEY not set; verification emails go to the in-memory dev outbox")
    return OutboxEmailSender(client_url=settings.CLIENT_URL)
