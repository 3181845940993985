import re

from commsgate.logging.utils import get_app_logger
logger = get_app_logger('phone_number_validations')

E164_PATTERN = re.compile(r'^\+[1-9]\d{7,14}$')
SEPARATORS = re.compile(r'[\s\-().]')


def validate_phone_number(phone: str) -> str:
    """Normalise to E.164 (+ and 8-15 digits); separators and a 00 prefix are accepted."""
    if not phone or not phone.strip():
        logger.error("Empty phone number")
        raise ValueError('Phone number is required')

    cleaned = SEPARATORS.sub('', phone.strip())
    if cleaned.startswith('00'):
        cleaned = '+' + cleaned[2:]
    elif not cleaned.startswith('+'):
        cleaned = '+' + cleaned

    if E164_PATTERN.match(cleaned):
        return cleaned
    logger.error(f"Invalid phone number format: {phone}")
    raise ValueError('Invalid phone number format. Expected E.164, e.g. +15551234567')
