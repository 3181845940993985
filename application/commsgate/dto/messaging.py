import re
from pydantic import BaseModel, Field, field_validator, model_validator

from commsgate.dto.phone_validations import validate_phone_number

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
WHATSAPP_PREFIX = "whatsapp:"


class SmsRequest(BaseModel):
    """Request model for a plain SMS"""
    to: str = Field(..., description="Recipient phone number in E.164 format")
    body: str = Field(..., min_length=1, max_length=1600, description="Message text")

    @field_validator('to')
    @classmethod
    def validate_to(cls, v):
        return validate_phone_number(v)


class WhatsAppRequest(SmsRequest):
    """Request model for a WhatsApp message; a leading 'whatsapp:' is accepted"""

    @field_validator('to', mode='before')
    @classmethod
    def strip_channel_prefix(cls, v):
        if isinstance(v, str) and v.lower().startswith(WHATSAPP_PREFIX):
            return v[len(WHATSAPP_PREFIX):]
        return v


class EmailRequest(BaseModel):
    """Request model for a transactional email"""
    to_email: str = Field(..., description="Recipient email address")
    subject: str = Field(..., min_length=1, description="Email subject")
    plain_text_content: str = Field("", description="Plain text body")
    html_content: str = Field("", description="HTML body")

    @field_validator('to_email')
    @classmethod
    def validate_email(cls, v):
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError('Invalid email address')
        return v

    @model_validator(mode='after')
    def require_some_content(self):
        if not self.plain_text_content and not self.html_content:
            raise ValueError('Either plain_text_content or html_content is required')
        return self


class MessageResponse(BaseModel):
    """Response model for relayed messages"""
    success: bool
    message: str
