import socket
import threading
from datetime import date
from urllib.error import URLError

import pytest

from trekbook.core.config import settings
from trekbook.integrations import messaging


def _booking(**overrides) -> dict:
    row = {
        "id": "3f2a9c1e-7b44-4d1a-9e11-000000000001",
        "start_date": "2026-02-21",
        "group_size": 3,
        "total_amount": 25500,
        "booking_reference": None,
        "customer": {"name": "Asha", "email": "asha@example.com", "phone": "9876543210"},
        "package": {"title": "Kedarkantha", "location": "Uttarakhand", "duration": 5},
    }
    row.update(overrides)
    return row


def _templates() -> list[dict]:
    return [
        {
            "type": "whatsapp",
            "name": "Booking Confirmation",
            "content": "Hi {{userName}}, {{packageTitle}} on {{startDate}} is confirmed. Ref {{bookingReference}}",
        },
        {
            "type": "email",
            "name": "Booking Confirmation",
            "subject": "Booking Confirmed - {{packageTitle}}",
            "content": "<p>Total {{totalAmount}} {{unknownField}}</p>",
        },
    ]


@pytest.fixture
def message_logs(monkeypatch) -> list[dict]:
    logs: list[dict] = []
    monkeypatch.setattr(messaging, "insert_message_log", logs.append)
    monkeypatch.setattr(settings, "whatsapp_api_url", "")
    monkeypatch.setattr(settings, "email_api_url", "")
    monkeypatch.setattr(settings, "currency_symbol", "₹")
    return logs


def test_render_template_keeps_unknown_placeholders() -> None:
    rendered = messaging.render_template("Hi {{ userName }}, see {{missing}}", {"userName": "Asha"})
    assert rendered == "Hi Asha, see {{missing}}"


def test_confirmation_variables(monkeypatch) -> None:
    monkeypatch.setattr(settings, "currency_symbol", "₹")

    variables = messaging.build_confirmation_variables(_booking(), today=date(2026, 2, 9))

    assert variables["startDate"] == "Saturday, 21 February 2026"
    assert variables["totalAmount"] == "₹25,500"
    assert variables["bookingReference"] == "3F2A9C1E"
    assert variables["confirmationDate"] == "9/2/2026"
    assert variables["groupSize"] == "3"


def test_stored_booking_reference_wins() -> None:
    assert messaging.booking_reference(_booking(booking_reference="TRK-0042")) == "TRK-0042"


def test_format_amount_keeps_paise() -> None:
    assert messaging.format_amount(1234.5).endswith("1,234.50")


def test_send_booking_confirmation_in_demo_mode(monkeypatch, message_logs) -> None:
    monkeypatch.setattr(messaging, "get_booking_by_id", lambda _: _booking())
    monkeypatch.setattr(messaging, "list_message_templates", lambda *args: _templates())

    result = messaging.send_booking_confirmation("bk-1")

    assert result == {"whatsapp": True, "email": True}
    assert [log["type"] for log in message_logs] == ["whatsapp", "email"]
    assert all(log["status"] == "sent" for log in message_logs)
    assert "Kedarkantha on Saturday, 21 February 2026" in message_logs[0]["content"]
    assert message_logs[1]["subject"] == "Booking Confirmed - Kedarkantha"
    assert "{{unknownField}}" in message_logs[1]["content"]


def test_confirmation_skips_whatsapp_without_phone(monkeypatch, message_logs) -> None:
    booking = _booking(customer={"name": "Asha", "email": "asha@example.com", "phone": None})
    monkeypatch.setattr(messaging, "get_booking_by_id", lambda _: booking)
    monkeypatch.setattr(messaging, "list_message_templates", lambda *args: _templates())

    result = messaging.send_booking_confirmation("bk-1")

    assert result == {"whatsapp": None, "email": True}
    assert len(message_logs) == 1


def test_confirmation_for_missing_booking_raises(monkeypatch, message_logs) -> None:
    monkeypatch.setattr(messaging, "get_booking_by_id", lambda _: None)

    with pytest.raises(RuntimeError, match="Booking not found"):
        messaging.send_booking_confirmation("bk-404")


def test_gateway_failure_is_logged_not_raised(monkeypatch, message_logs) -> None:
    def unreachable(*_args):
        raise URLError("connection refused")

    monkeypatch.setattr(settings, "email_api_url", "https://mail.example.com/send")
    monkeypatch.setattr(messaging, "_post_json", unreachable)

    sent = messaging.send_email(to="asha@example.com", subject="Hi", message="Body", booking_id="bk-1")

    assert sent is False
    assert message_logs[0]["status"] == "failed"
    assert "connection refused" in message_logs[0]["error_message"]
    assert message_logs[0]["delivered_at"] is None


def test_log_write_failure_does_not_break_delivery(monkeypatch) -> None:
    def failing_log(_payload):
        raise RuntimeError("Supabase integration not configured.")

    monkeypatch.setattr(messaging, "insert_message_log", failing_log)
    monkeypatch.setattr(settings, "whatsapp_api_url", "")

    assert messaging.send_whatsapp_message(to="9876543210", message="Hi", booking_id="bk-1") is True


def test_retry_dispatches_by_type(monkeypatch, message_logs) -> None:
    assert messaging.retry_message({"type": "whatsapp", "recipient": "9876543210", "content": "Hi"}) is True
    assert messaging.retry_message({"type": "sms", "recipient": "x", "content": "y"}) is False
    assert len(message_logs) == 1


@pytest.fixture
def dropping_gateway():
    """Local endpoint that reads the request and closes without answering."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)

    def serve_once() -> None:
        conn, _addr = server.accept()
        with conn:
            conn.recv(65536)

    worker = threading.Thread(target=serve_once, daemon=True)
    worker.start()
    yield f"http://127.0.0.1:{server.getsockname()[1]}/send"
    worker.join(timeout=2)
    server.close()


def test_gateway_closing_connection_is_logged_not_raised(monkeypatch, message_logs, dropping_gateway) -> None:
    monkeypatch.setattr(settings, "whatsapp_api_url", dropping_gateway)

    sent = messaging.send_whatsapp_message(to="9876543210", message="Hi", booking_id="bk-1")

    assert sent is False
    assert len(message_logs) == 1
    assert message_logs[0]["status"] == "failed"
    assert message_logs[0]["error_message"]


def test_malformed_gateway_url_is_logged_not_raised(monkeypatch, message_logs) -> None:
    monkeypatch.setattr(settings, "email_api_url", "mail-gateway.local/send")

    sent = messaging.send_email(to="asha@example.com", subject="Hi", message="Body", booking_id="bk-1")

    assert sent is False
    assert message_logs[0]["status"] == "failed"


def test_retry_keeps_missing_booking_id_as_null(message_logs) -> None:
    sent = messaging.retry_message(
        {"type": "email", "recipient": "asha@example.com", "subject": "Hi", "content": "Body", "booking_id": None}
    )

    assert sent is True
    assert message_logs[0]["booking_id"] is None
