"""Email dispatch using the Resend API."""

import asyncio
import html
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

import resend

from src.lexora.core.config import get_settings
from src.lexora.core.exceptions import NetworkError
from src.lexora.core.logging import get_logger

logger = get_logger(__name__)

# Resend's client is synchronous; sends run here with a timeout
_email_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="email_sender")

_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
_BUTTON_STYLE = (
    "background-color: #2563eb; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px; display: inline-block; font-weight: 500;"
)
_LINK_STYLE = "color: #2563eb; word-break: break-all;"
_MUTED_STYLE = "color: #666; font-size: 14px;"


class Mailer(Protocol):
    """Mail dispatch capability injected into services."""

    async def send_magic_link(self, to: str, link: str, expires_minutes: int) -> None:
        """Deliver a sign-in link. Raises NetworkError when delivery fails."""
        ...


class ResendMailer:
    """Mailer backed by Resend.

    Without an API key (development) the email is logged instead of sent.
    """

    def __init__(
        self,
        api_key: str | None,
        sender: str,
        app_name: str,
        timeout_seconds: float,
    ):
        self.api_key = api_key
        self.sender = sender
        self.app_name = app_name
        self.timeout_seconds = timeout_seconds

    async def send_magic_link(self, to: str, link: str, expires_minutes: int) -> None:
        if not self.api_key:
            logger.warning(
                "RESEND_API_KEY not set - email not sent",
                to=to,
                email_type="magic_link",
            )
            return

        message: dict[str, Any] = {
            "from": self.sender,
            "to": [to],
            "subject": f"Your {self.app_name} sign-in link",
            "html": _get_magic_link_email_html(self.app_name, link, expires_minutes),
        }
        await self._send(message, to)
        logger.info("Magic link email sent", to=to)

    async def _send(self, message: dict[str, Any], to: str) -> None:
        resend.api_key = self.api_key
        loop = asyncio.get_running_loop()
        try:
            await asyncio.wait_for(
                loop.run_in_executor(_email_executor, resend.Emails.send, message),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as e:
            logger.error("Email send timed out", to=to, timeout=self.timeout_seconds)
            raise NetworkError("Timed out sending email") from e
        except Exception as e:
            logger.error("Failed to send email", to=to, error=str(e))
            raise NetworkError("Failed to send email") from e


def get_mailer() -> Mailer:
    """Build the configured mailer."""
    settings = get_settings()
    return ResendMailer(
        api_key=settings.resend_api_key,
        sender=settings.email_from,
        app_name=settings.app_name,
        timeout_seconds=settings.email_send_timeout_seconds,
    )


def _get_magic_link_email_html(app_name: str, link: str, expires_minutes: int) -> str:
    """Generate HTML content for the sign-in email."""
    safe_app_name = html.escape(app_name)
    safe_link = html.escape(link, quote=True)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="{_BODY_STYLE}">
    <h1 style="color: #2563eb; margin-bottom: 24px;">Sign in to {safe_app_name}</h1>
    <p>Click the button below to sign in:</p>
    <p style="margin: 32px 0;">
        <a href="{safe_link}" style="{_BUTTON_STYLE}">Sign In</a>
    </p>
    <p style="{_MUTED_STYLE}">
        Or copy and paste this link into your browser:<br>
        <a href="{safe_link}" style="{_LINK_STYLE}">{safe_link}</a>
    </p>
    <p style="{_MUTED_STYLE} margin-top: 32px;">
        This link will expire in {expires_minutes} minutes and can be used once.
        If you didn't request it, you can safely ignore this email.
    </p>
</body>
</html>"""
