"""Send notification emails through SendGrid."""

from __future__ import annotations

import json
import logging
from html import escape
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from notification_engine.config import get_settings
from notification_engine.domain.entities import PRIORITY_HIGH, Notification, SendResult

logger = logging.getLogger(__name__)

_PRIORITY_COLORS = {"high": "#dc2626", "medium": "#d97706", "low": "#2563eb"}


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a readable description of a SendGrid error payload."""

    if body in (None, ""):
        return None
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return body

    if isinstance(body, dict):
        messages = [
            str(item["message"])
            for item in body.get("errors") or []
            if isinstance(item, dict) and item.get("message")
        ]
        if messages:
            return "; ".join(messages)
        try:
            return json.dumps(body)
        except (TypeError, ValueError):
            return None
    if isinstance(body, list):
        return "; ".join(str(item) for item in body)
    return None


def send_email(subject: str, html_content: str, recipient: str) -> SendResult:
    """Send an email using the configured SendGrid credentials."""

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return SendResult(success=False, error="Email service not configured")

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:
        status_code = getattr(exc, "status_code", None)
        details = _extract_sendgrid_error_details(getattr(exc, "body", None))
        logger.error(
            "SendGrid API request failed with status %s: %s",
            status_code,
            details or exc,
        )
        return SendResult(success=False, error=details or str(exc))

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        details = _extract_sendgrid_error_details(getattr(response, "body", None))
        logger.error("SendGrid API responded with status %s: %s", status_code, details)
        return SendResult(
            success=False,
            provider_response=f"status {status_code}",
            error=details or f"SendGrid responded with status {status_code}",
        )

    headers = getattr(response, "headers", None) or {}
    message_id = headers.get("X-Message-Id") if hasattr(headers, "get") else None
    return SendResult(success=True, provider_response=message_id or f"status {status_code}")


def absolute_action_url(action_url: str | None) -> str | None:
    if not action_url:
        return None
    if action_url.startswith(("http://", "https://")):
        return action_url
    base = get_settings().client_url.rstrip("/")
    return f"{base}{action_url}" if base else action_url


def build_notification_email(
    notification: Notification, recipient_name: str | None = None
) -> tuple[str, str]:
    """Return the subject and HTML body for ``notification``."""

    subject = notification.title
    if notification.priority == PRIORITY_HIGH:
        subject = f"[Urgent] {subject}"

    color = _PRIORITY_COLORS.get(notification.priority, _PRIORITY_COLORS["medium"])
    parts = [
        f"<h2 style=\"color:{color}\">{escape(notification.title)}</h2>",
        f"<p>Hello {escape(recipient_name)},</p>" if recipient_name else "<p>Hello,</p>",
        f"<p>{escape(notification.message)}</p>",
    ]
    if notification.additional_notes:
        parts.append(f"<p><em>{escape(notification.additional_notes)}</em></p>")
    link = absolute_action_url(notification.action_url)
    if link:
        parts.append(f"<p><a href=\"{escape(link, quote=True)}\">View details</a></p>")
    parts.append(
        "<p style=\"font-size:12px;color:#6b7280\">You are receiving this email "
        "because of your notification preferences.</p>"
    )
    return subject, "".join(parts)


def send_notification_email(
    notification: Notification, email: str, recipient_name: str | None = None
) -> SendResult:
    subject, html_content = build_notification_email(notification, recipient_name)
    result = send_email(subject, html_content, email)
    if result.success:
        logger.info("Notification %s emailed to %s", notification.id, email)
    return result


__all__ = [
    "absolute_action_url",
    "build_notification_email",
    "send_email",
    "send_notification_email",
]
