"""Unit tests for the SendGrid email helpers."""

from __future__ import annotations

import json
import types

import pytest

from notification_engine.domain.entities import Notification
from notification_engine.infrastructure import email as email_module


class DummySettings:
    sendgrid_api_key = "SG.fake"
    sendgrid_sender = "sender@example.com"
    client_url = "https://app.example.com/"


class _StubSendGridAPIClient:
    """Default stub client that returns a successful response."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):  # pragma: no cover - overridden per test
        return types.SimpleNamespace(status_code=202, body=None, headers={})


def _notification(**overrides) -> Notification:
    values = {
        "id": 5,
        "user_id": 1,
        "category": "financial",
        "event_type": "invoice_overdue",
        "title": "Invoice Overdue",
        "message": "Invoice <INV-7> is overdue",
        "priority": "high",
        "action_url": "/dashboard/invoicing/7",
    }
    values.update(overrides)
    return Notification(**values)


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    """When SendGrid settings are missing the helper should exit early."""

    class MissingSettings:
        sendgrid_api_key = None
        sendgrid_sender = None

    monkeypatch.setattr(email_module, "get_settings", lambda: MissingSettings())

    result = email_module.send_email("Subject", "<p>Body</p>", "user@example.com")

    assert result.success is False
    assert result.error == "Email service not configured"


def test_send_email_success(monkeypatch: pytest.MonkeyPatch) -> None:
    """A successful SendGrid response should carry the message id."""

    class SuccessfulClient(_StubSendGridAPIClient):
        def send(self, message):
            return types.SimpleNamespace(
                status_code=202, body=None, headers={"X-Message-Id": "abc123"}
            )

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", SuccessfulClient)

    result = email_module.send_email("Subject", "<p>Body</p>", "user@example.com")

    assert result.success is True
    assert result.provider_response == "abc123"


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog):
    """Forbidden responses from SendGrid should surface meaningful log details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {"errors": [{"message": "The provided authorization grant is invalid."}]}
        ).encode()

    class FailingClient(_StubSendGridAPIClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email("Subject", "<p>Body</p>", "user@example.com")

    assert result.success is False
    assert result.error == "The provided authorization grant is invalid."
    assert "status 403" in caplog.text


def test_notification_email_escapes_content_and_links_back(monkeypatch) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())

    subject, html = email_module.build_notification_email(_notification(), "Ada")

    assert subject == "[Urgent] Invoice Overdue"
    assert "Invoice &lt;INV-7&gt; is overdue" in html
    assert "Hello Ada," in html
    assert 'href="https://app.example.com/dashboard/invoicing/7"' in html


def test_send_notification_email_uses_built_message(monkeypatch) -> None:
    sent = []

    def fake_send(subject, html_content, recipient):
        sent.append((subject, recipient))
        return email_module.SendResult(success=True, provider_response="ok")

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "send_email", fake_send)

    result = email_module.send_notification_email(
        _notification(priority="low"), "ada@example.com"
    )

    assert result.success is True
    assert sent == [("Invoice Overdue", "ada@example.com")]
