from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.rest import Client

from commsgate.config.settings import GatewayConfigs
from commsgate.core.exceptions import ConfigurationError
from commsgate.core.results import DeliveryResult
from commsgate.logging.utils import get_app_logger, mask_phone

logger = get_app_logger(__name__)
configs = GatewayConfigs()

CHANNEL_SMS = "sms"
CHANNEL_WHATSAPP = "whatsapp"
WHATSAPP_PREFIX = "whatsapp:"


class TwilioMessagingClient:
    """
    Twilio Programmable Messaging wrapper for SMS and WhatsApp.

    Requires:
    - TWILIO_ACCOUNT_SID
    - TWILIO_AUTH_TOKEN
    - TWILIO_FROM_NUMBER (TWILIO_WHATSAPP_FROM_NUMBER for the WhatsApp sender, defaults to the SMS one)
    """

    def __init__(self, client: Client | None = None, settings: GatewayConfigs | None = None):
        settings = settings or configs
        missing = settings.missing_twilio_settings()
        if missing:
            logger.critical(f"Twilio settings not configured: {', '.join(missing)}")
            raise ConfigurationError(f"Twilio settings not configured: {', '.join(missing)}")

        self.from_number = settings.TWILIO_FROM_NUMBER
        self.whatsapp_from_number = settings.TWILIO_WHATSAPP_FROM_NUMBER or settings.TWILIO_FROM_NUMBER
        self.client = client or Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)

    @staticmethod
    def _whatsapp_address(number: str) -> str:
        if number.startswith(WHATSAPP_PREFIX):
            return number
        return f"{WHATSAPP_PREFIX}{number}"

    def _addresses(self, destination: str, channel: str) -> tuple[str, str]:
        if channel == CHANNEL_WHATSAPP:
            return self._whatsapp_address(self.whatsapp_from_number), self._whatsapp_address(destination)
        if channel == CHANNEL_SMS:
            return self.from_number, destination
        raise ValueError(f"Unknown messaging channel: {channel}")

    async def send_message(self, destination: str, body: str, channel: str = CHANNEL_SMS) -> DeliveryResult:
        """
        Send a text message through Twilio.

        Args:
            destination: Recipient phone number in E.164 format
            body: Message text
            channel: "sms" or "whatsapp"

        Returns:
            DeliveryResult: success plus the Twilio message SID, or the error text
        """
        sender, recipient = self._addresses(destination, channel)
        try:
            message = self.client.messages.create(
                body=body,
                from_=sender,
                to=recipient,
            )
        except TwilioRestException as e:
            logger.error(f"Twilio API error sending {channel} to {mask_phone(destination)}: status={e.status} code={e.code} msg={e.msg}")
            return DeliveryResult.failed(f"Twilio API error: {e.msg}")
        except TwilioException as e:
            logger.error(f"Twilio error sending {channel} to {mask_phone(destination)}: {str(e)}")
            return DeliveryResult.failed(f"Twilio error: {str(e)}")
        except Exception as e:
            logger.error(f"Unexpected error sending {channel} to {mask_phone(destination)}: {str(e)}", exc_info=True)
            return DeliveryResult.failed(f"Unexpected error: {str(e)}")

        sid = getattr(message, "sid", None)
        if not sid:
            logger.warning(f"Twilio returned no message SID for {channel} to {mask_phone(destination)}")
            return DeliveryResult(success=False, message_id=None, error="Provider returned no message id")

        logger.info(f"{channel} message sent to {mask_phone(destination)}, SID: {sid}, status: {getattr(message, 'status', '')}")
        return DeliveryResult(success=True, message_id=sid)
