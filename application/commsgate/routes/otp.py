from fastapi import APIRouter, Depends, HTTPException, status

from commsgate.core.exceptions import CommsGateError, DeliveryError, VerificationError
from commsgate.dto.otp import SendOTPRequest, VerifyOTPRequest, OTPResponse
from commsgate.logging.utils import get_app_logger, mask_phone
from commsgate.services.factory import get_otp_service
from commsgate.services.otp_service import OTPService

logger = get_app_logger(__name__)

otp_router = APIRouter(prefix="/otp", tags=["otp"])


@otp_router.post("/send-otp", response_model=OTPResponse)
async def send_otp(request: SendOTPRequest, otp_service: OTPService = Depends(get_otp_service)):
    """
    Send an OTP to the given phone number.
    Steps:
    1. Validate phone number
    2. Generate OTP
    3. Deliver it by SMS
    4. Store it for verification
    """
    phone_number = request.phone_number
    try:
        sent = await otp_service.send_otp(phone_number)
        if not sent:
            raise DeliveryError("Failed to send OTP", provider="twilio")

        logger.info(f"OTP request successful for phone: {mask_phone(phone_number)}")
        return OTPResponse(success=True, message="OTP sent successfully")

    except (HTTPException, CommsGateError):
        raise
    except Exception as e:
        logger.error(f"Error occurred while sending OTP to {mask_phone(phone_number)}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred while sending OTP")


@otp_router.post("/verify-otp", response_model=OTPResponse)
async def verify_otp(request: VerifyOTPRequest, otp_service: OTPService = Depends(get_otp_service)):
    """Check a submitted OTP against the last one sent to the phone number."""
    phone_number = request.phone_number
    try:
        if not otp_service.verify_otp(phone_number, request.otp):
            raise VerificationError("Invalid OTP")

        logger.info(f"OTP verification successful for phone: {mask_phone(phone_number)}")
        return OTPResponse(success=True, message="OTP verified successfully")

    except (HTTPException, CommsGateError):
        raise
    except Exception as e:
        logger.error(f"Error occurred while verifying OTP for {mask_phone(phone_number)}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred while verifying OTP")
