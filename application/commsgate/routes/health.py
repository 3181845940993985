from fastapi import APIRouter
from fastapi.responses import JSONResponse

from commsgate.config.settings import GatewayConfigs

configs = GatewayConfigs()

router = APIRouter()


@router.get("/health")
async def health_check():
    details = {
        "status": "healthy",
        "version": configs.APP_VERSION,
        "service": configs.APP_NAME,
        "otp_store": configs.OTP_STORE_BACKEND,
    }
    return JSONResponse(content=details)
