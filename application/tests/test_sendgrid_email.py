from unittest.mock import MagicMock

import pytest
import requests

from commsgate.config.settings import GatewayConfigs
from commsgate.core.exceptions import ConfigurationError
from commsgate.integrations.sendgrid_email import SendGridEmailClient


@pytest.fixture
def settings():
    settings = GatewayConfigs()
    settings.SENDGRID_API_KEY = "SG.key"
    settings.SENDGRID_FROM_EMAIL = "noreply@example.com"
    settings.SENDGRID_FROM_NAME = "Example"
    settings.SENDGRID_BASE_URL = "https://api.sendgrid.com/v3"
    return settings


@pytest.fixture
def email_client(settings):
    return SendGridEmailClient(settings=settings)


@pytest.fixture
def post(monkeypatch):
    mock_post = MagicMock(return_value=MagicMock(status_code=202, text=""))
    monkeypatch.setattr("commsgate.integrations.sendgrid_email.requests.post", mock_post)
    return mock_post


def test_payload_includes_both_bodies(email_client):
    payload = email_client.build_payload("user@example.com", "Hi", "plain", "<p>html</p>")

    assert payload["personalizations"] == [{"to": [{"email": "user@example.com"}]}]
    assert payload["from"] == {"email": "noreply@example.com", "name": "Example"}
    assert payload["subject"] == "Hi"
    assert payload["content"] == [
        {"type": "text/plain", "value": "plain"},
        {"type": "text/html", "value": "<p>html</p>"},
    ]


def test_payload_skips_empty_bodies(email_client, settings):
    settings.SENDGRID_FROM_NAME = ""
    client = SendGridEmailClient(settings=settings)

    payload = client.build_payload("user@example.com", "Hi", "", "<p>html</p>")

    assert payload["from"] == {"email": "noreply@example.com"}
    assert payload["content"] == [{"type": "text/html", "value": "<p>html</p>"}]


@pytest.mark.asyncio
async def test_accepted_is_success(email_client, post):
    assert await email_client.send_email("user@example.com", "Hi", "plain", "") is True

    args, kwargs = post.call_args
    assert args[0] == "https://api.sendgrid.com/v3/mail/send"
    assert kwargs["headers"]["Authorization"] == "Bearer SG.key"
    assert kwargs["json"]["subject"] == "Hi"


@pytest.mark.asyncio
async def test_rejected_is_failure(email_client, post):
    post.return_value = MagicMock(status_code=400, text='{"errors":[{"message":"bad from"}]}')

    assert await email_client.send_email("user@example.com", "Hi", "plain", "") is False


@pytest.mark.asyncio
async def test_transport_error_is_failure(email_client, post):
    post.side_effect = requests.ConnectionError("no route")

    assert await email_client.send_email("user@example.com", "Hi", "plain", "") is False


def test_missing_api_key_raises(settings):
    settings.SENDGRID_API_KEY = ""

    with pytest.raises(ConfigurationError, match="SENDGRID_API_KEY"):
        SendGridEmailClient(settings=settings)
