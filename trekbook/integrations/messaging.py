"""WhatsApp and email delivery for booking notifications.

Both gateways are plain JSON-over-HTTP endpoints authenticated with a bearer token.
When a gateway URL is not configured the send is simulated as delivered, which is how
local and demo environments run. Every attempt, successful or not, lands in
``message_logs`` so admins can inspect and retry it.
"""

import json
import logging
import re
from datetime import date, datetime, timezone
from http.client import HTTPException
from typing import Any
from urllib.request import Request, urlopen

from trekbook.core.config import settings
from trekbook.integrations.supabase_client import (
    get_booking_by_id,
    insert_message_log,
    list_message_templates,
)

logger = logging.getLogger(__name__)

CONFIRMATION_TEMPLATE_NAME = "Booking Confirmation"
_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def render_template(template: str, variables: dict[str, str]) -> str:
    def _replace(match: re.Match) -> str:
        key = match.group(1)
        if key in variables:
            return str(variables[key])
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, template or "")


def format_long_date(value: Any) -> str:
    try:
        parsed = date.fromisoformat(str(value)[:10])
    except ValueError:
        return str(value or "")
    return f"{parsed:%A}, {parsed.day} {parsed:%B} {parsed.year}"


def format_amount(value: Any) -> str:
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        amount = 0.0
    text = f"{amount:,.2f}"
    if text.endswith(".00"):
        text = text[:-3]
    return f"{settings.currency_symbol}{text}"


def booking_reference(booking: dict[str, Any]) -> str:
    reference = booking.get("booking_reference")
    if reference:
        return str(reference)
    return str(booking.get("id") or "")[:8].upper()


def build_confirmation_variables(booking: dict[str, Any], *, today: date | None = None) -> dict[str, str]:
    customer = booking.get("customer") or {}
    package = booking.get("package") or {}
    confirmed_on = today or date.today()
    return {
        "userName": str(customer.get("name") or ""),
        "packageTitle": str(package.get("title") or ""),
        "location": str(package.get("location") or ""),
        "startDate": format_long_date(booking.get("start_date")),
        "duration": str(package.get("duration") or ""),
        "groupSize": str(booking.get("group_size") or ""),
        "totalAmount": format_amount(booking.get("total_amount")),
        "bookingReference": booking_reference(booking),
        "confirmationDate": f"{confirmed_on.day}/{confirmed_on.month}/{confirmed_on.year}",
    }


def _timeout_seconds() -> float:
    return max(0.05, min(settings.messaging_timeout_ms, 30_000) / 1000)


def _post_json(url: str, token: str, body: dict[str, Any]) -> bool:
    request = Request(
        url,
        data=json.dumps(body).encode("utf-8"),
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        },
        method="POST",
    )
    with urlopen(request, timeout=_timeout_seconds()) as response:  # noqa: S310
        return 200 <= int(getattr(response, "status", 200)) < 300


def _write_log(payload: dict[str, Any]) -> None:
    try:
        insert_message_log(payload)
    except RuntimeError:
        logger.exception(
            "Message log write failed (booking_id=%s, type=%s)",
            payload.get("booking_id"),
            payload.get("type"),
        )


def _deliver(
    *,
    channel: str,
    url: str,
    token: str,
    body: dict[str, Any],
    log_payload: dict[str, Any],
) -> bool:
    sent_at = datetime.now(timezone.utc).isoformat()
    error_message: str | None = None
    if not url:
        logger.info(
            "%s gateway not configured; simulating delivery (booking_id=%s)",
            channel,
            log_payload.get("booking_id"),
        )
        success = True
    else:
        try:
            success = _post_json(url, token, body)
            if not success:
                error_message = "Gateway returned a non-success status."
        except (OSError, HTTPException, ValueError) as exc:
            logger.warning("%s delivery failed (booking_id=%s): %s", channel, log_payload.get("booking_id"), exc)
            success = False
            error_message = str(exc)

    record = {
        **log_payload,
        "type": channel,
        "status": "sent" if success else "failed",
        "sent_at": sent_at,
        "delivered_at": datetime.now(timezone.utc).isoformat() if success else None,
    }
    if error_message:
        record["error_message"] = error_message
    _write_log(record)
    return success


def send_whatsapp_message(*, to: str, message: str, booking_id: str | None) -> bool:
    return _deliver(
        channel="whatsapp",
        url=settings.whatsapp_api_url,
        token=settings.whatsapp_api_token,
        body={"to": to, "type": "text", "text": {"body": message}},
        log_payload={
            "booking_id": booking_id,
            "recipient": to,
            "content": message,
        },
    )


def send_email(*, to: str, subject: str, message: str, booking_id: str | None) -> bool:
    return _deliver(
        channel="email",
        url=settings.email_api_url,
        token=settings.email_api_token,
        body={"from": settings.email_sender, "to": to, "subject": subject, "html": message},
        log_payload={
            "booking_id": booking_id,
            "recipient": to,
            "subject": subject,
            "content": message,
        },
    )


def _find_template(templates: list[dict[str, Any]], channel: str) -> dict[str, Any] | None:
    for template in templates:
        if template.get("type") == channel and template.get("name") == CONFIRMATION_TEMPLATE_NAME:
            return template
    return None


def send_booking_confirmation(booking_id: str) -> dict[str, bool | None]:
    booking = get_booking_by_id(booking_id)
    if not booking:
        raise RuntimeError("Booking not found.")

    customer = booking.get("customer") or {}
    variables = build_confirmation_variables(booking)
    templates = list_message_templates()
    whatsapp_template = _find_template(templates, "whatsapp")
    email_template = _find_template(templates, "email")

    result: dict[str, bool | None] = {"whatsapp": None, "email": None}
    if customer.get("phone") and whatsapp_template:
        result["whatsapp"] = send_whatsapp_message(
            to=str(customer["phone"]),
            message=render_template(whatsapp_template.get("content") or "", variables),
            booking_id=str(booking.get("id") or booking_id),
        )

    if email_template and customer.get("email"):
        result["email"] = send_email(
            to=str(customer["email"]),
            subject=render_template(email_template.get("subject") or "Booking Confirmed", variables),
            message=render_template(email_template.get("content") or "", variables),
            booking_id=str(booking.get("id") or booking_id),
        )

    logger.info(
        "Booking confirmation processed (booking_id=%s, whatsapp=%s, email=%s)",
        booking_id,
        result["whatsapp"],
        result["email"],
    )
    return result


def retry_message(message_log: dict[str, Any]) -> bool:
    channel = message_log.get("type")
    if channel == "whatsapp":
        return send_whatsapp_message(
            to=str(message_log.get("recipient") or ""),
            message=str(message_log.get("content") or ""),
            booking_id=message_log.get("booking_id") or None,
        )
    if channel == "email":
        return send_email(
            to=str(message_log.get("recipient") or ""),
            subject=str(message_log.get("subject") or "Booking Confirmation"),
            message=str(message_log.get("content") or ""),
            booking_id=message_log.get("booking_id") or None,
        )
    return False
