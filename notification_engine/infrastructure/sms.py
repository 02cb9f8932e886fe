"""Send notification text messages through Twilio."""

from __future__ import annotations

import logging
import re

from twilio.rest import Client

from notification_engine.config import get_settings
from notification_engine.domain.entities import PRIORITY_HIGH, Notification, SendResult

from .email import absolute_action_url

logger = logging.getLogger(__name__)

SMS_MAX_LENGTH = 160
_BODY_LIMIT = 140
_NON_DIGITS = re.compile(r"\D")


def format_phone_number(phone: str | None) -> str | None:
    """Normalise ``phone`` to E.164, assuming North American numbers.

    Ten digit numbers get a ``+1`` prefix, eleven digit numbers starting with
    ``1`` get a ``+``. Anything else already starting with ``+`` is kept as is.
    Returns ``None`` when the number cannot be normalised.
    """

    if not phone:
        return None
    phone = phone.strip()
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if phone.startswith("+") and 8 <= len(digits) <= 15:
        return f"+{digits}"
    return None


def build_sms_body(notification: Notification) -> str:
    body = "[URGENT] " if notification.priority == PRIORITY_HIGH else ""
    body += notification.short_message or notification.message
    if len(body) > _BODY_LIMIT:
        body = body[: _BODY_LIMIT - 3] + "..."

    link = absolute_action_url(notification.action_url)
    if link and len(body) + len(link) + 1 <= SMS_MAX_LENGTH:
        body += f"\n{link}"
    return body


def _twilio_client() -> Client:
    settings = get_settings()
    if not (settings.twilio_account_sid and settings.twilio_auth_token):
        raise ValueError("Twilio credentials missing")
    return Client(settings.twilio_account_sid, settings.twilio_auth_token)


def send_sms(phone: str, body: str) -> SendResult:
    """Send ``body`` to ``phone`` using the configured Twilio number."""

    settings = get_settings()
    if not settings.sms_enabled():
        logger.info("Twilio configuration incomplete; skipping SMS delivery")
        return SendResult(success=False, error="SMS service not configured")

    to = format_phone_number(phone)
    if to is None:
        logger.warning("Invalid phone number format: %s", phone)
        return SendResult(success=False, error="Invalid phone number format")

    try:
        message = _twilio_client().messages.create(
            body=body, from_=settings.twilio_phone_number, to=to
        )
    except Exception as exc:
        logger.error("Failed to send SMS to %s: %s", to, exc)
        return SendResult(success=False, error=str(exc) or "Failed to send SMS")

    logger.info("SMS sent to %s (SID: %s)", to, message.sid)
    return SendResult(success=True, provider_response=message.sid)


def send_notification_sms(notification: Notification, phone: str) -> SendResult:
    return send_sms(phone, build_sms_body(notification))


__all__ = [
    "SMS_MAX_LENGTH",
    "build_sms_body",
    "format_phone_number",
    "send_notification_sms",
    "send_sms",
]
