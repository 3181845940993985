import hmac
import secrets
from typing import Optional

from commsgate.config.settings import GatewayConfigs
from commsgate.core.exceptions import DeliveryError
from commsgate.integrations.twilio_messaging import TwilioMessagingClient, CHANNEL_SMS
from commsgate.logging.utils import get_app_logger, mask_phone
from commsgate.middlewares.request_context import request_context
from commsgate.services.otp_store import OTPStore, get_otp_store

logger = get_app_logger(__name__)
configs = GatewayConfigs()

OTP_DIGITS = "0123456789"


class OTPService:
    """
    Phone OTP flow:
    - code generation
    - delivery over SMS
    - storage keyed by phone number
    - verification
    """

    def __init__(
        self,
        messaging_client: TwilioMessagingClient,
        store: Optional[OTPStore] = None,
        settings: Optional[GatewayConfigs] = None,
    ):
        settings = settings or configs
        self.messaging_client = messaging_client
        self.store = store if store is not None else get_otp_store()
        self.otp_length = settings.OTP_LENGTH
        self.otp_expiry = settings.OTP_EXPIRY_SECONDS
        self.key_prefix = settings.OTP_KEY_PREFIX
        self.single_use = settings.OTP_SINGLE_USE
        self.message_template = settings.OTP_MESSAGE_TEMPLATE

    def generate_otp(self) -> str:
        """
        Generate a numeric OTP.

        Each character is drawn independently and uniformly from 0-9, so
        repeats and leading zeros are allowed.

        Returns:
            str: OTP of configured length
        """
        return "".join(secrets.choice(OTP_DIGITS) for _ in range(self.otp_length))

    def get_cache_key(self, phone_number: str) -> str:
        return f"{self.key_prefix}{phone_number}"

    async def _deliver(self, phone_number: str, otp: str) -> str:
        """Send the code by SMS and return the provider message id."""
        body = self.message_template.format(otp=otp)
        result = await self.messaging_client.send_message(phone_number, body, channel=CHANNEL_SMS)
        if not result.delivered:
            raise DeliveryError(result.error or "OTP delivery failed", provider="twilio")
        return result.message_id

    async def send_otp(self, phone_number: str) -> bool:
        """
        Generate, deliver and store an OTP for phone_number.

        The record is written only after the provider confirms delivery with
        a message id. A new code replaces any earlier one for the same number.

        Returns:
            bool: True if the code was delivered and stored, False otherwise
        """
        request_context.provider = "twilio"
        request_context.channel = CHANNEL_SMS
        masked = mask_phone(phone_number)
        try:
            otp = self.generate_otp()
            message_id = await self._deliver(phone_number, otp)
        except DeliveryError as e:
            logger.warning(f"OTP delivery failed for {masked}: {str(e)}")
            return False
        except Exception as e:
            logger.error(f"Error occurred while sending OTP to {masked}: {str(e)}", exc_info=True)
            return False

        if not self.store.put(self.get_cache_key(phone_number), otp, self.otp_expiry):
            logger.error(f"OTP delivered to {masked} (SID: {message_id}) but could not be stored")
            return False

        logger.info(f"OTP sent and stored for {masked}, SID: {message_id}")
        return True

    def verify_otp(self, phone_number: str, otp: str) -> bool:
        """
        Compare a submitted code with the stored one.

        Exact, case-sensitive comparison with no normalisation. The record is
        left in place unless OTP_SINGLE_USE is enabled.

        Returns:
            bool: True on match, False on mismatch, missing record or store failure
        """
        masked = mask_phone(phone_number)
        key = self.get_cache_key(phone_number)
        try:
            stored_otp = self.store.get(key)
        except Exception as e:
            logger.error(f"Error occurred while verifying OTP for {masked}: {str(e)}", exc_info=True)
            return False

        if not stored_otp:
            logger.warning(f"OTP expired or not found for {masked}")
            return False

        if otp is None or not hmac.compare_digest(stored_otp.encode(), str(otp).encode()):
            logger.warning(f"Invalid OTP provided for {masked}")
            return False

        if self.single_use:
            self.store.delete(key)

        logger.info(f"OTP verified for {masked}")
        return True
