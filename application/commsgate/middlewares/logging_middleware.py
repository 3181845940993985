"""
Request/audit logging middleware.

Sets up the per-request logging context and, when AUDIT_LOGGING_ENABLED is
on, writes one audit record per request with secrets masked.
"""
import json
import socket
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from commsgate.config.settings import GatewayConfigs
from commsgate.logging.config import LoggingConfig
from commsgate.logging.utils import get_app_logger, get_audit_logger
from commsgate.middlewares.request_context import create_request_id, request_context, clear_request_context

configs = GatewayConfigs()

MASKED_HEADERS = {'authorization', 'cookie', 'x-api-key'}
MASKED_BODY_FIELDS = {'otp', 'code', 'password', 'token'}
MAX_BODY_CHARS = 1000


def mask_body(data):
    if isinstance(data, dict):
        return {k: ('****' if k.lower() in MASKED_BODY_FIELDS else mask_body(v)) for k, v in data.items()}
    if isinstance(data, list):
        return [mask_body(item) for item in data]
    return data


class AuditMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.logger = get_app_logger('commsgate.requests')
        self.exclude_audit_paths = exclude_paths or ['/health', '/docs', '/redoc', '/openapi.json']
        self.hostname = socket.gethostname()
        self.app_name = configs.APP_NAME
        self.version = configs.APP_VERSION

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        clear_request_context()
        request_id = create_request_id()
        request_context.request_method = request.method
        request_context.request_path = request.url.path
        request_context.client_ip = request.client.host if request.client else ''

        should_audit = LoggingConfig.AUDIT_LOGGING_ENABLED and not any(
            request.url.path.startswith(p) for p in self.exclude_audit_paths
        )
        body_bytes = await request.body() if should_audit else b''
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = (time.time() - start_time) * 1000
            self.logger.error(
                f"Exception: {request.method} {request.url.path} - {exc.__class__.__name__} ({duration:.0f}ms)",
                exc_info=True,
            )
            if should_audit:
                audit_data = self._build_audit_data(request, 500, body_bytes, duration)
                audit_data['exception'] = exc.__class__.__name__
                get_audit_logger().info("Audit log (exception)", extra=audit_data)
            raise

        response.headers['X-Request-ID'] = request_id
        if should_audit:
            response_data = ''
            if LoggingConfig.CAPTURE_RESPONSE_BODY and not 200 <= response.status_code < 300:
                response, response_data = await self._capture_response(response)
            duration = (time.time() - start_time) * 1000
            audit_data = self._build_audit_data(request, response.status_code, body_bytes, duration)
            audit_data['response'] = response_data
            audit_data['size_in_bytes'] = int(response.headers.get('content-length', 0) or 0)
            get_audit_logger().info("Audit log", extra=audit_data)
        return response

    async def _capture_response(self, response: Response):
        """Drain the streamed body so it can be logged, and hand back an equivalent response"""
        chunks = [chunk async for chunk in response.body_iterator]
        body = b''.join(c if isinstance(c, bytes) else c.encode('utf-8') for c in chunks)
        replay = Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )
        text = body.decode('utf-8', errors='replace')
        if 'application/json' in response.headers.get('content-type', ''):
            try:
                return replay, mask_body(json.loads(text))
            except ValueError:
                pass
        return replay, text[:MAX_BODY_CHARS]

    def _mask_headers(self, headers) -> dict:
        return {k: ('****' if k.lower() in MASKED_HEADERS else v) for k, v in headers.items()}

    def _parse_body(self, request: Request, body_bytes: bytes):
        if not body_bytes:
            return {}
        text = body_bytes.decode('utf-8', errors='replace')
        if 'application/json' in request.headers.get('content-type', ''):
            try:
                return mask_body(json.loads(text))
            except ValueError:
                pass
        return text[:MAX_BODY_CHARS]

    def _build_audit_data(self, request: Request, status_code: int, body_bytes: bytes, duration: float) -> dict:
        return {
            'duration': round(duration, 2),
            'hostname': self.hostname,
            'app_name': self.app_name,
            'version': self.version,
            'request': {
                "QUERY": dict(request.query_params),
                "BODY": self._parse_body(request, body_bytes),
                "HEADERS": self._mask_headers(dict(request.headers)),
            },
            'status_code': status_code,
            'module_name': request_context.module_name or '',
        }
