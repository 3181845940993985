import json
import logging

from commsgate.config.sentry import before_send_filter
from commsgate.logging.formatters import AppLogsJSONFormatter
from commsgate.logging.slack_handler import SlackErrorHandler
from commsgate.logging.utils import mask_email, mask_phone
from commsgate.middlewares.logging_middleware import mask_body
from commsgate.middlewares.request_context import clear_request_context, request_context


def test_mask_phone_keeps_last_four():
    assert mask_phone("+15551234567") == "***4567"
    assert mask_phone("123") == "***123"
    assert mask_phone("") == ""


def test_mask_email():
    assert mask_email("someone@example.com") == "so***@example.com"
    assert mask_email("broken") == "***"


def test_mask_body_hides_codes():
    masked = mask_body({"phone_number": "+15551234567", "otp": "123456", "nested": [{"token": "abc"}]})
    assert masked == {"phone_number": "+15551234567", "otp": "****", "nested": [{"token": "****"}]}


def test_sentry_filter_strips_secrets():
    event = {
        "request": {
            "headers": {"Authorization": "Bearer SG.key", "Accept": "application/json"},
            "data": {"phone_number": "+15551234567", "otp": "123456"},
        }
    }

    filtered = before_send_filter(event, None)

    assert filtered["request"]["headers"]["Authorization"] == "[Filtered]"
    assert filtered["request"]["headers"]["Accept"] == "application/json"
    assert filtered["request"]["data"]["otp"] == "[Filtered]"
    assert filtered["request"]["data"]["phone_number"] == "+15551234567"


def test_app_formatter_includes_delivery_context():
    from commsgate.logging.filters import DeliveryContextFilter, RequestContextFilter

    clear_request_context()
    request_context.request_id = "req-1"
    request_context.provider = "twilio"
    request_context.channel = "sms"

    record = logging.LogRecord("commsgate.test", logging.INFO, __file__, 1, "sent", None, None)
    RequestContextFilter().filter(record)
    DeliveryContextFilter().filter(record)
    payload = json.loads(AppLogsJSONFormatter().format(record))

    assert payload["request_id"] == "req-1"
    assert payload["provider"] == "twilio"
    assert payload["channel"] == "sms"
    assert payload["message"] == "sent"
    clear_request_context()


def test_slack_handler_disabled_without_webhook(monkeypatch):
    calls = []
    monkeypatch.setattr("commsgate.logging.slack_handler.requests.post", lambda *a, **k: calls.append(a))
    handler = SlackErrorHandler(webhook="")

    record = logging.LogRecord("commsgate.test", logging.ERROR, __file__, 1, "boom", None, None)
    handler.handle(record)

    assert handler.enabled is False
    assert calls == []


def test_slack_handler_posts_errors(monkeypatch):
    calls = []
    monkeypatch.setattr(
        "commsgate.logging.slack_handler.requests.post",
        lambda url, json=None, timeout=None: calls.append((url, json)),
    )
    logger = logging.getLogger("commsgate.test.slack")
    logger.propagate = False
    logger.setLevel(logging.INFO)
    logger.addHandler(SlackErrorHandler(webhook="https://hooks.slack.com/services/T/B/X"))

    logger.error("boom")
    logger.info("fine")

    assert len(calls) == 1
    assert calls[0][0] == "https://hooks.slack.com/services/T/B/X"
    assert "boom" in calls[0][1]["text"]


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_audit_record_masks_otp_and_captures_errors(monkeypatch, client, otp_store):
    from commsgate.logging.config import LoggingConfig
    from commsgate.logging.utils import get_audit_logger

    monkeypatch.setattr(LoggingConfig, "AUDIT_LOGGING_ENABLED", True)
    monkeypatch.setattr(LoggingConfig, "CAPTURE_RESPONSE_BODY", True)
    audit_logger = get_audit_logger()
    capture = ListHandler()
    audit_logger.addHandler(capture)
    try:
        otp_store.put("OTP_+15551234567", "123456", 300)
        response = client.post(
            "/api/otp/verify-otp",
            json={"phone_number": "+15551234567", "otp": "654321"},
            headers={"Authorization": "Bearer secret"},
        )
    finally:
        audit_logger.removeHandler(capture)

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid OTP"}
    record = capture.records[-1]
    assert record.status_code == 400
    assert record.request["BODY"]["otp"] == "****"
    assert record.request["HEADERS"]["authorization"] == "****"
    assert record.response == {"message": "Invalid OTP"}
