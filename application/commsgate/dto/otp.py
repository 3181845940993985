from pydantic import BaseModel, Field, field_validator
from commsgate.dto.phone_validations import validate_phone_number


class SendOTPRequest(BaseModel):
    """Request model for sending an OTP"""
    phone_number: str = Field(..., description="Recipient phone number in E.164 format (e.g., +15551234567)")

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, v):
        return validate_phone_number(v)


class VerifyOTPRequest(BaseModel):
    """Request model for verifying an OTP"""
    phone_number: str = Field(..., description="Phone number the OTP was sent to")
    otp: str = Field(..., description="OTP code as received; compared exactly")

    @field_validator('phone_number')
    @classmethod
    def validate_phone(cls, v):
        return validate_phone_number(v)


class OTPResponse(BaseModel):
    """Response model for OTP send/verify"""
    success: bool
    message: str
