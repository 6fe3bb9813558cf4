"""
Audit and request logging middleware for the OTP service.
"""
import json
import socket
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from otp_service.logging.utils import get_app_logger, init_audit_logger
from otp_service.logging.config import LoggingConfig
from otp_service.middlewares.request_context import create_request_id, request_context, clear_request_context

from otp_service.config.settings import OTPServiceConfigs
configs = OTPServiceConfigs()

MASKED_QUERY_PARAMS = {'pin'}
MASKED_HEADERS = {'authorization', 'cookie', 'x-api-key'}


class AuditMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.logger = get_app_logger('otp_service.requests')
        self.exclude_audit_paths = exclude_paths or ['/health', '/docs', '/redoc', '/openapi.json']
        self.hostname = socket.gethostname()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = create_request_id()
        start_time = time.time()
        body_bytes = await request.body()

        request_context.request_method = request.method
        request_context.request_path = request.url.path
        request_context.client_version = request.headers.get('x-client-version', '')

        should_audit = LoggingConfig.AUDIT_LOGGING_ENABLED and not any(
            request.url.path.startswith(p) for p in self.exclude_audit_paths
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = (time.time() - start_time) * 1000
            self.logger.error(
                f"Exception: {request.method} {request.url.path} - {exc.__class__.__name__} ({duration:.0f}ms)",
                exc_info=True,
            )
            if should_audit:
                audit_data = self._build_audit_data(request, Response(status_code=500), body_bytes, duration, request_id)
                audit_data['exception'] = exc.__class__.__name__
                init_audit_logger().info("Audit log (exception)", extra=audit_data)
            clear_request_context()
            raise

        duration = (time.time() - start_time) * 1000
        response.headers['X-Request-ID'] = request_id
        if should_audit:
            audit_data = self._build_audit_data(request, response, body_bytes, duration, request_id)
            init_audit_logger().info("Audit log", extra=audit_data)
        clear_request_context()
        return response

    def _mask_headers(self, headers) -> dict:
        return {k: ('****' if k.lower() in MASKED_HEADERS else v) for k, v in headers.items()}

    def _mask_query(self, params) -> dict:
        return {k: ('****' if k.lower() in MASKED_QUERY_PARAMS else v) for k, v in params.items()}

    def _build_audit_data(self, request: Request, response: Response, body_bytes: bytes, duration: float, request_id: str) -> dict:
        body_data = {}
        if body_bytes:
            try:
                if 'application/json' in request.headers.get('content-type', ''):
                    body_data = json.loads(body_bytes.decode('utf-8'))
                else:
                    body_data = body_bytes.decode('utf-8')[:1000]
            except (UnicodeDecodeError, ValueError):
                body_data = {}

        # streamed responses cannot be read here without consuming them
        response_data = ''
        status_code = getattr(response, 'status_code', 0)
        if LoggingConfig.CAPTURE_RESPONSE_BODY and not 200 <= status_code < 300:
            body = getattr(response, 'body', None)
            if body is not None:
                response_data = body.decode('utf-8', errors='replace')[:1000]

        return {
            'duration': round(duration, 2),
            'hostname': self.hostname,
            'app_name': configs.APP_NAME,
            'module_name': request_context.module_name,
            'request': {
                "GET": self._mask_query(dict(request.query_params)),
                "BODY": body_data,
                "HEADERS": self._mask_headers(dict(request.headers)),
            },
            'request_id': request_id,
            'request_method': request.method,
            'request_path': request.url.path,
            'response': response_data,
            'status_code': status_code,
            'version': configs.APP_VERSION,
            'client_version': request_context.client_version,
        }
