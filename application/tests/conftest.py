"""
Pytest configuration and fixtures for commsgate tests.

Provider credentials are seeded into the environment before any commsgate
module is imported, so settings objects built at import time see them.
"""
import os
import tempfile

os.environ.setdefault("TWILIO_ACCOUNT_SID", "ACtest00000000000000000000000000")
os.environ.setdefault("TWILIO_AUTH_TOKEN", "test-auth-token")
os.environ.setdefault("TWILIO_FROM_NUMBER", "+15550000000")
os.environ.setdefault("SENDGRID_API_KEY", "SG.test-key")
os.environ.setdefault("SENDGRID_FROM_EMAIL", "noreply@example.com")
os.environ.setdefault("SENDGRID_FROM_NAME", "Commsgate Tests")
os.environ["OTP_STORE_BACKEND"] = "memory"
os.environ["DEBUG"] = "true"
os.environ["SENTRY_ENABLED"] = "false"
os.environ["FIREHOSE_ENABLED"] = "false"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="commsgate-test-logs-")

import pytest
from fastapi.testclient import TestClient

from commsgate.core.results import DeliveryResult
from commsgate.services.otp_store import InMemoryOTPStore
from commsgate.services.otp_service import OTPService
from commsgate.services.messaging_service import MessagingService


class FakeMessagingClient:
    """Stands in for TwilioMessagingClient; records every send"""

    def __init__(self):
        self.sent = []
        self.result = None
        self.error = None
        self._counter = 0

    async def send_message(self, destination, body, channel="sms"):
        self.sent.append({"to": destination, "body": body, "channel": channel})
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        self._counter += 1
        return DeliveryResult(success=True, message_id=f"SM{self._counter:032d}")

    def fail_with(self, error="Twilio API error: invalid number"):
        self.result = DeliveryResult.failed(error)

    @property
    def last_body(self):
        return self.sent[-1]["body"] if self.sent else None


class FakeEmailClient:
    def __init__(self):
        self.sent = []
        self.accept = True

    async def send_email(self, to_email, subject, plain_text_content, html_content):
        self.sent.append({
            "to": to_email,
            "subject": subject,
            "text": plain_text_content,
            "html": html_content,
        })
        return self.accept


def otp_from_body(body: str) -> str:
    """Pull the code out of 'Your OTP is: 123456'"""
    return body.rsplit(":", 1)[1].strip()


@pytest.fixture
def otp_store():
    return InMemoryOTPStore()


@pytest.fixture
def fake_messaging():
    return FakeMessagingClient()


@pytest.fixture
def fake_email():
    return FakeEmailClient()


@pytest.fixture
def otp_service(fake_messaging, otp_store):
    return OTPService(fake_messaging, otp_store)


@pytest.fixture
def messaging_service(fake_messaging, fake_email):
    return MessagingService(fake_messaging, fake_email)


@pytest.fixture
def app():
    from commsgate.main import app as fastapi_app
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app, otp_service, messaging_service):
    from commsgate.services.factory import get_email_service, get_otp_service, get_text_messaging_service

    app.dependency_overrides[get_otp_service] = lambda: otp_service
    app.dependency_overrides[get_text_messaging_service] = lambda: messaging_service
    app.dependency_overrides[get_email_service] = lambda: messaging_service
    with TestClient(app) as test_client:
        yield test_client
