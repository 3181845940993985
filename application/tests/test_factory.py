import pytest

from commsgate.core.exceptions import ConfigurationError, DeliveryError
from commsgate.services import factory


@pytest.fixture
def sendgrid_unconfigured(monkeypatch, fake_messaging):
    def raise_unconfigured():
        raise ConfigurationError("SendGrid settings not configured: SENDGRID_API_KEY")

    monkeypatch.setattr(factory, "get_twilio_client", lambda: fake_messaging)
    monkeypatch.setattr(factory, "get_sendgrid_client", raise_unconfigured)


def test_text_messaging_does_not_need_sendgrid(sendgrid_unconfigured, fake_messaging):
    service = factory.get_text_messaging_service()

    assert service.messaging_client is fake_messaging
    assert service.email_client is None


def test_email_service_reports_missing_sendgrid(sendgrid_unconfigured):
    with pytest.raises(ConfigurationError, match="SENDGRID_API_KEY"):
        factory.get_email_service()


def test_delivery_error_carries_provider():
    error = DeliveryError("Failed to send email.", provider="sendgrid")

    assert str(error) == "Failed to send email."
    assert error.provider == "sendgrid"
    assert not hasattr(error, "status_code")
