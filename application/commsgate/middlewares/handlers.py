from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse

from commsgate.config.sentry import capture_exception, add_breadcrumb
from commsgate.config.settings import GatewayConfigs
from commsgate.core.exceptions import ConfigurationError, DeliveryError, VerificationError
from commsgate.logging.utils import get_app_logger
from commsgate.middlewares.request_context import request_context

logger = get_app_logger(__name__)
configs = GatewayConfigs()

DEBUG = configs.DEBUG


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 with a readable summary of the failing fields."""
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"validation_error | method={request.method} path={request.url.path} errors={exc.errors()}")

    if not DEBUG:
        payload = {"message": "Invalid request data"}
    else:
        error_messages = []
        for err in exc.errors():
            field_path = " -> ".join(str(loc) for loc in err.get("loc", []))
            error_messages.append(f"{field_path}: {err.get('msg', 'Invalid input')}")
        if len(error_messages) == 1:
            payload = {"message": error_messages[0]}
        else:
            payload = {"message": "Validation errors", "errors": error_messages}

    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=payload)


async def _delivery_exception_handler(request: Request, exc: DeliveryError):
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"delivery_error | method={request.method} path={request.url.path} provider={exc.provider} detail={str(exc)}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)})


async def _verification_exception_handler(request: Request, exc: VerificationError):
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"verification_error | method={request.method} path={request.url.path} detail={str(exc)}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)})


async def _configuration_exception_handler(request: Request, exc: ConfigurationError):
    request_context.module_name = 'middleware_handlers'
    logger.critical(f"configuration_error | method={request.method} path={request.url.path} detail={str(exc)}")
    capture_exception(exc)
    message = f"Service is not configured: {str(exc)}" if DEBUG else "Service is not configured"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": message})


async def _http_exception_handler(request: Request, exc: HTTPException):
    request_context.module_name = 'middleware_handlers'
    status_code = exc.status_code
    detail = exc.detail
    if status_code >= 500:
        logger.error(f"http_exception | method={request.method} path={request.url.path} status_code={status_code} detail={detail}")
        add_breadcrumb(
            message=f"HTTP {status_code} error on {request.method} {request.url.path}",
            category="http",
            level="error",
            data={"status_code": status_code, "detail": detail},
        )
    else:
        logger.warning(f"http_exception | method={request.method} path={request.url.path} status_code={status_code} detail={detail}")

    # route details are already user-facing; only unknown 5xx get a generic text
    if not DEBUG and status_code >= 500 and not isinstance(detail, str):
        detail = "Something went wrong"
    return JSONResponse(status_code=status_code, content={"message": detail})


async def _general_exception_handler(request: Request, exc: Exception):
    request_context.module_name = 'middleware_handlers'
    logger.error(
        f"unhandled_exception | method={request.method} path={request.url.path} exception_type={type(exc).__name__} exception_message={str(exc)}",
        exc_info=exc,
    )
    add_breadcrumb(
        message=f"Unhandled exception on {request.method} {request.url.path}",
        category="exception",
        level="error",
        data={"exception_type": type(exc).__name__},
    )
    capture_exception(exc)

    payload = {"message": f"Internal server error: {str(exc)}"} if DEBUG else {"message": "Something went wrong"}
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the given FastAPI instance."""
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(DeliveryError, _delivery_exception_handler)
    app.add_exception_handler(VerificationError, _verification_exception_handler)
    app.add_exception_handler(ConfigurationError, _configuration_exception_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _general_exception_handler)
