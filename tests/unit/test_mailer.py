"""Tests for Resend-backed mail dispatch."""

import time
from unittest.mock import patch

import pytest

from src.lexora.core.exceptions import NetworkError
from src.lexora.core.notifications import ResendMailer

pytestmark = pytest.mark.unit

LINK = "http://test/api/auth/verify-magic-link?token=abc&x=<y>"


def make_mailer(api_key: str | None = "re_test", timeout_seconds: float = 5) -> ResendMailer:
    return ResendMailer(
        api_key=api_key,
        sender="noreply@lexora.io",
        app_name="Lexora",
        timeout_seconds=timeout_seconds,
    )


async def test_without_api_key_nothing_is_sent():
    with patch("src.lexora.core.notifications.email.resend.Emails.send") as send:
        await make_mailer(api_key=None).send_magic_link("a@example.com", LINK, 15)

    send.assert_not_called()


async def test_message_contents():
    with patch("src.lexora.core.notifications.email.resend.Emails.send") as send:
        await make_mailer().send_magic_link("a@example.com", LINK, 15)

    message = send.call_args.args[0]
    assert message["to"] == ["a@example.com"]
    assert message["from"] == "noreply@lexora.io"
    assert "Lexora" in message["subject"]
    # Link is HTML-escaped in the body
    assert "token=abc&amp;x=&lt;y&gt;" in message["html"]
    assert "<y>" not in message["html"]
    assert "15 minutes" in message["html"]


async def test_provider_error_becomes_network_error():
    with patch(
        "src.lexora.core.notifications.email.resend.Emails.send",
        side_effect=RuntimeError("invalid api key"),
    ):
        with pytest.raises(NetworkError, match="Failed to send email"):
            await make_mailer().send_magic_link("a@example.com", LINK, 15)


async def test_timeout_becomes_network_error():
    def slow_send(message):
        time.sleep(0.5)

    with patch("src.lexora.core.notifications.email.resend.Emails.send", side_effect=slow_send):
        with pytest.raises(NetworkError, match="Timed out"):
            await make_mailer(timeout_seconds=0.05).send_magic_link("a@example.com", LINK, 15)
