from fastapi import APIRouter, Depends, HTTPException, status

from commsgate.core.exceptions import CommsGateError, DeliveryError
from commsgate.dto.messaging import EmailRequest, MessageResponse
from commsgate.logging.utils import get_app_logger, mask_email
from commsgate.services.factory import get_email_service
from commsgate.services.messaging_service import MessagingService

logger = get_app_logger(__name__)

sendgrid_router = APIRouter(prefix="/sendgrid", tags=["sendgrid"])


@sendgrid_router.post("/send-email", response_model=MessageResponse)
async def send_email(request: EmailRequest, messaging: MessagingService = Depends(get_email_service)):
    try:
        sent = await messaging.send_email(
            request.to_email,
            request.subject,
            request.plain_text_content,
            request.html_content,
        )
        if not sent:
            raise DeliveryError("Failed to send email.", provider="sendgrid")

        logger.info(f"Email sent successfully to {mask_email(request.to_email)}")
        return MessageResponse(success=True, message="Email sent successfully")

    except (HTTPException, CommsGateError):
        raise
    except Exception as e:
        logger.error(f"Error while sending email: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An error occurred while sending email.")
