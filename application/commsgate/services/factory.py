"""
Provider client and service factories.

Clients are created once per process; the routes receive services through
FastAPI dependencies built from these.
"""
from typing import Optional

from commsgate.integrations.sendgrid_email import SendGridEmailClient
from commsgate.integrations.twilio_messaging import TwilioMessagingClient
from commsgate.logging.utils import get_app_logger
from commsgate.services.messaging_service import MessagingService
from commsgate.services.otp_service import OTPService
from commsgate.services.otp_store import get_otp_store

logger = get_app_logger(__name__)

_twilio_client: Optional[TwilioMessagingClient] = None
_sendgrid_client: Optional[SendGridEmailClient] = None


def get_twilio_client() -> TwilioMessagingClient:
    """Raises ConfigurationError when Twilio credentials are missing."""
    global _twilio_client
    if _twilio_client is None:
        _twilio_client = TwilioMessagingClient()
        logger.info("Twilio messaging client initialized")
    return _twilio_client


def get_sendgrid_client() -> SendGridEmailClient:
    """Raises ConfigurationError when SendGrid credentials are missing."""
    global _sendgrid_client
    if _sendgrid_client is None:
        _sendgrid_client = SendGridEmailClient()
        logger.info("SendGrid email client initialized")
    return _sendgrid_client


def get_otp_service() -> OTPService:
    return OTPService(get_twilio_client(), get_otp_store())


def get_text_messaging_service() -> MessagingService:
    """SMS and WhatsApp routes; needs only the Twilio client."""
    return MessagingService(messaging_client=get_twilio_client())


def get_email_service() -> MessagingService:
    """Email route; needs only the SendGrid client."""
    return MessagingService(email_client=get_sendgrid_client())
