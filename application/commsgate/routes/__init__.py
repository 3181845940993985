from fastapi import APIRouter
from commsgate.routes.otp import otp_router
from commsgate.routes.twilio import twilio_router
from commsgate.routes.sendgrid import sendgrid_router

api_router = APIRouter()
api_router.include_router(otp_router)
api_router.include_router(twilio_router)
api_router.include_router(sendgrid_router)
