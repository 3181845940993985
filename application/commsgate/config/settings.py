import os
from dotenv import load_dotenv
load_dotenv()

from commsgate.core.exceptions import ConfigurationError


class GatewayConfigs:
    def __init__(self):

        # Environment settings
        self.APPLICATION_ENVIRONMENT = os.getenv("APPLICATION_ENVIRONMENT", "UAT")
        self.APP_NAME = os.getenv("APP_NAME", "commsgate")
        self.APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
        self.DEBUG = os.getenv("DEBUG", "true").lower() == "true"
        self.ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "")

        # Twilio settings
        self.TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
        self.TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
        self.TWILIO_FROM_NUMBER = os.getenv("TWILIO_FROM_NUMBER", "")
        self.TWILIO_WHATSAPP_FROM_NUMBER = os.getenv("TWILIO_WHATSAPP_FROM_NUMBER", self.TWILIO_FROM_NUMBER)

        # SendGrid settings
        self.SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY", "")
        self.SENDGRID_FROM_EMAIL = os.getenv("SENDGRID_FROM_EMAIL", "")
        self.SENDGRID_FROM_NAME = os.getenv("SENDGRID_FROM_NAME", "")
        self.SENDGRID_BASE_URL = os.getenv("SENDGRID_BASE_URL", "https://api.sendgrid.com/v3")
        self.SENDGRID_TIMEOUT = int(os.getenv("SENDGRID_TIMEOUT", "30"))

        # OTP settings
        self.OTP_LENGTH = int(os.getenv("OTP_LENGTH", "6"))
        self.OTP_EXPIRY_SECONDS = int(os.getenv("OTP_EXPIRY_SECONDS", "300"))
        self.OTP_KEY_PREFIX = os.getenv("OTP_KEY_PREFIX", "OTP_")
        self.OTP_STORE_BACKEND = os.getenv("OTP_STORE_BACKEND", "memory").lower()
        self.OTP_SINGLE_USE = os.getenv("OTP_SINGLE_USE", "false").lower() == "true"
        self.OTP_MESSAGE_TEMPLATE = os.getenv("OTP_MESSAGE_TEMPLATE", "Your OTP is: {otp}")

        # Redis settings
        self.REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")
        self.REDIS_CACHE_DB = int(os.getenv("REDIS_CACHE_DB", "3"))

        # Sentry settings
        self.SENTRY_ENABLED = os.getenv("SENTRY_ENABLED", "false").lower() == "true"
        self.SENTRY_DSN = os.getenv("SENTRY_DSN", "")
        self.ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
        self.SENTRY_RELEASE = os.getenv("SENTRY_RELEASE", "commsgate@1.0.0")
        self.SENTRY_TRACES_SAMPLE_RATE = os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")
        self.SENTRY_PROFILES_SAMPLE_RATE = os.getenv("SENTRY_PROFILES_SAMPLE_RATE", "0.1")

        # Logging Core settings
        self.FIREHOSE_ENABLED = os.getenv("FIREHOSE_ENABLED", "false").lower() == "true"
        self.AUDIT_LOGGING_ENABLED = os.getenv("AUDIT_LOGGING_ENABLED", "false").lower() == "true"
        self.CAPTURE_RESPONSE_BODY = os.getenv("CAPTURE_RESPONSE_BODY", "false").lower() == "true"
        self.LOG_DEBUG_PRINTS = os.getenv("LOG_DEBUG_PRINTS", "false").lower() == "true"
        self.LOG_DIR = os.getenv("LOG_DIR", "logs")
        self.SLACK_WEBHOOK_URL = os.getenv("SLACK_WEBHOOK_URL", "")

        # Logging Stream Names
        self.APP_LOGS_STREAM_NAME = os.getenv("APP_LOGS_STREAM_NAME", "")
        self.AUDIT_LOGS_STREAM_NAME = os.getenv("AUDIT_LOGS_STREAM_NAME", "")
        self.LOG_BUFFER_TIMEOUT = int(os.getenv("LOG_BUFFER_TIMEOUT", "600"))

        # Logging Buffer Sizes
        self.APP_LOGS_CAPACITY = int(os.getenv("APP_LOGS_CAPACITY", "50"))
        self.AUDIT_LOGS_CAPACITY = int(os.getenv("AUDIT_LOGS_CAPACITY", "50"))

        # Firehose settings
        self.FIREHOSE_REGION_NAME = os.getenv("FIREHOSE_REGION_NAME", "ap-south-1")
        self.FIREHOSE_ACCESS_KEY_ID = os.getenv("FIREHOSE_ACCESS_KEY_ID", "")
        self.FIREHOSE_SECRET_ACCESS_KEY = os.getenv("FIREHOSE_SECRET_ACCESS_KEY", "")
        self.FIREHOSE_RETRY_COUNT = int(os.getenv("FIREHOSE_RETRY_COUNT", "3"))
        self.FIREHOSE_RETRY_DELAY = int(os.getenv("FIREHOSE_RETRY_DELAY", "1"))

    def missing_twilio_settings(self) -> list[str]:
        required = {
            "TWILIO_ACCOUNT_SID": self.TWILIO_ACCOUNT_SID,
            "TWILIO_AUTH_TOKEN": self.TWILIO_AUTH_TOKEN,
            "TWILIO_FROM_NUMBER": self.TWILIO_FROM_NUMBER,
        }
        return [name for name, value in required.items() if not value]

    def missing_sendgrid_settings(self) -> list[str]:
        required = {
            "SENDGRID_API_KEY": self.SENDGRID_API_KEY,
            "SENDGRID_FROM_EMAIL": self.SENDGRID_FROM_EMAIL,
        }
        return [name for name, value in required.items() if not value]


def validate_provider_settings(configs: GatewayConfigs | None = None) -> None:
    """
    Check that every provider secret the service needs is present.

    Raises:
        ConfigurationError: listing all missing settings
    """
    configs = configs or GatewayConfigs()
    missing = configs.missing_twilio_settings() + configs.missing_sendgrid_settings()
    if missing:
        raise ConfigurationError(f"Missing required provider settings: {', '.join(missing)}")
