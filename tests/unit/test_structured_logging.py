"""Tests for structured logging context."""

from unittest.mock import MagicMock
from uuid import uuid7

import pytest
import structlog
from structlog.testing import CapturingLogger

from src.lexora.core import config
from src.lexora.core.logging import (
    bind_organization_context,
    bind_request_context,
    bind_user_context,
    clear_request_context,
    redact_credentials,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def capturing_logger():
    cap_logger = CapturingLogger()
    old_config = structlog.get_config()

    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=lambda *args, **kwargs: cap_logger,
        cache_logger_on_first_use=False,
    )

    clear_request_context()
    yield cap_logger
    clear_request_context()
    structlog.configure(**old_config)


def logged_context(capturing_logger: CapturingLogger) -> dict:
    structlog.get_logger().info("test message")
    entries = capturing_logger.calls
    assert len(entries) == 1
    return entries[0].kwargs


def test_bind_request_context(capturing_logger):
    bind_request_context("test-request-123")

    assert logged_context(capturing_logger)["request_id"] == "test-request-123"


def test_none_request_id_is_not_bound(capturing_logger):
    bind_request_context(None)

    assert "request_id" not in logged_context(capturing_logger)


def test_email_not_logged_by_default(capturing_logger):
    """Emails stay out of logs unless log_user_emails is enabled."""
    user_id = uuid7()

    bind_user_context(user_id, "ada@example.com")

    context = logged_context(capturing_logger)
    assert context["user_id"] == str(user_id)
    assert "user_email" not in context


def test_email_logged_when_enabled(capturing_logger, monkeypatch):
    mock_settings = MagicMock()
    mock_settings.log_user_emails = True
    monkeypatch.setattr(config, "get_settings", lambda: mock_settings)

    bind_user_context(uuid7(), "ada@example.com")

    assert logged_context(capturing_logger)["user_email"] == "ada@example.com"


def test_context_accumulates_through_the_chain(capturing_logger):
    user_id = uuid7()
    organization_id = uuid7()

    bind_request_context("test-request-123")
    bind_user_context(user_id)
    bind_organization_context(organization_id)

    context = logged_context(capturing_logger)
    assert context["request_id"] == "test-request-123"
    assert context["user_id"] == str(user_id)
    assert context["organization_id"] == str(organization_id)


def test_clear_request_context(capturing_logger):
    bind_request_context("test-request-123")
    bind_user_context(uuid7())

    clear_request_context()

    context = logged_context(capturing_logger)
    assert "request_id" not in context
    assert "user_id" not in context


def test_credentials_are_redacted():
    event = {"event": "issued", "refresh_token": "secret", "user_id": "u1", "link": "http://x"}

    redacted = redact_credentials(None, "info", event)

    assert redacted["refresh_token"] == "[redacted]"
    assert redacted["link"] == "[redacted]"
    assert redacted["user_id"] == "u1"
