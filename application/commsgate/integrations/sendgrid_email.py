import requests

from commsgate.config.settings import GatewayConfigs
from commsgate.core.exceptions import ConfigurationError
from commsgate.logging.utils import get_app_logger, mask_email

logger = get_app_logger(__name__)
configs = GatewayConfigs()


class SendGridEmailClient:
    """
    SendGrid v3 mail/send integration.
    Simple wrapper around the REST API using requests.
    """

    MAIL_SEND_PATH = "/mail/send"

    def __init__(self, settings: GatewayConfigs | None = None):
        settings = settings or configs
        missing = settings.missing_sendgrid_settings()
        if missing:
            logger.critical(f"SendGrid settings not configured: {', '.join(missing)}")
            raise ConfigurationError(f"SendGrid settings not configured: {', '.join(missing)}")

        self.api_key = settings.SENDGRID_API_KEY
        self.from_email = settings.SENDGRID_FROM_EMAIL
        self.from_name = settings.SENDGRID_FROM_NAME
        self.url = settings.SENDGRID_BASE_URL.rstrip("/") + self.MAIL_SEND_PATH
        self.timeout = settings.SENDGRID_TIMEOUT

    def build_payload(self, to_email: str, subject: str, plain_text_content: str, html_content: str) -> dict:
        sender = {"email": self.from_email}
        if self.from_name:
            sender["name"] = self.from_name

        content = []
        if plain_text_content:
            content.append({"type": "text/plain", "value": plain_text_content})
        if html_content:
            content.append({"type": "text/html", "value": html_content})

        return {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": sender,
            "subject": subject,
            "content": content,
        }

    async def send_email(self, to_email: str, subject: str, plain_text_content: str, html_content: str) -> bool:
        """
        Send a single email.

        Returns:
            bool: True when SendGrid accepted the message (2xx), False otherwise
        """
        payload = self.build_payload(to_email, subject, plain_text_content, html_content)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Request failed while sending email to {mask_email(to_email)}: {str(e)}")
            return False
        except Exception as e:
            logger.error(f"Error occurred while sending email to {mask_email(to_email)}: {str(e)}", exc_info=True)
            return False

        if 200 <= response.status_code < 300:
            logger.info(f"Email sent successfully to {mask_email(to_email)}")
            return True

        logger.error(f"Failed to send email to {mask_email(to_email)}. Status code: {response.status_code}, Response: {response.text}")
        return False
