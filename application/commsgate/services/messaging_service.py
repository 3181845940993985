from typing import Optional

from commsgate.integrations.sendgrid_email import SendGridEmailClient
from commsgate.integrations.twilio_messaging import TwilioMessagingClient, CHANNEL_SMS, CHANNEL_WHATSAPP
from commsgate.logging.utils import get_app_logger, mask_phone
from commsgate.middlewares.request_context import request_context

logger = get_app_logger(__name__)


class MessagingService:
    """Relays free-form SMS, WhatsApp and email messages to the providers"""

    def __init__(
        self,
        messaging_client: Optional[TwilioMessagingClient] = None,
        email_client: Optional[SendGridEmailClient] = None,
    ):
        self.messaging_client = messaging_client
        self.email_client = email_client

    async def _send_text(self, to: str, body: str, channel: str) -> bool:
        request_context.provider = "twilio"
        request_context.channel = channel
        result = await self.messaging_client.send_message(to, body, channel=channel)
        if not result.delivered:
            logger.warning(f"{channel} delivery to {mask_phone(to)} failed: {result.error}")
        return result.delivered

    async def send_sms(self, to: str, body: str) -> bool:
        return await self._send_text(to, body, CHANNEL_SMS)

    async def send_whatsapp(self, to: str, body: str) -> bool:
        return await self._send_text(to, body, CHANNEL_WHATSAPP)

    async def send_email(self, to_email: str, subject: str, plain_text_content: str, html_content: str) -> bool:
        request_context.provider = "sendgrid"
        request_context.channel = "email"
        return await self.email_client.send_email(to_email, subject, plain_text_content, html_content)
