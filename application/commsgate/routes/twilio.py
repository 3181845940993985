from fastapi import APIRouter, Depends, HTTPException, status

from commsgate.core.exceptions import CommsGateError, DeliveryError
from commsgate.dto.messaging import SmsRequest, WhatsAppRequest, MessageResponse
from commsgate.logging.utils import get_app_logger, mask_phone
from commsgate.services.factory import get_text_messaging_service
from commsgate.services.messaging_service import MessagingService

logger = get_app_logger(__name__)

twilio_router = APIRouter(prefix="/twilio", tags=["twilio"])


@twilio_router.post("/send-sms", response_model=MessageResponse)
async def send_sms(request: SmsRequest, messaging: MessagingService = Depends(get_text_messaging_service)):
    try:
        if not await messaging.send_sms(request.to, request.body):
            raise DeliveryError("Failed to send SMS.", provider="twilio")

        logger.info(f"SMS sent successfully to {mask_phone(request.to)}")
        return MessageResponse(success=True, message="Message sent successfully")

    except (HTTPException, CommsGateError):
        raise
    except Exception as e:
        logger.error(f"Error while sending SMS: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred while sending SMS.")


@twilio_router.post("/send-whatsapp-sms", response_model=MessageResponse)
async def send_whatsapp_sms(request: WhatsAppRequest, messaging: MessagingService = Depends(get_text_messaging_service)):
    try:
        if not await messaging.send_whatsapp(request.to, request.body):
            raise DeliveryError("Failed to send WhatsApp message.", provider="twilio")

        logger.info(f"WhatsApp message sent successfully to {mask_phone(request.to)}")
        return MessageResponse(success=True, message="Message sent successfully")

    except (HTTPException, CommsGateError):
        raise
    except Exception as e:
        logger.error(f"Error while sending WhatsApp message: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred while sending WhatsApp message.")
