from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from otp_service.config.sentry import capture_exception, add_breadcrumb
from otp_service.config.settings import OTPServiceConfigs
from otp_service.core.constants import FaultReason
from otp_service.core.exceptions import OTPException
from otp_service.dto.otp import FaultResponse, OTPResponse
from otp_service.logging.utils import get_app_logger
from otp_service.middlewares.request_context import request_context

logger = get_app_logger(__name__)
configs = OTPServiceConfigs()

FAULT_STATUS_CODES = {
    FaultReason.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FaultReason.INVALID_PIN: status.HTTP_400_BAD_REQUEST,
    FaultReason.INVALID_STATUS: status.HTTP_400_BAD_REQUEST,
    FaultReason.EXPIRED: status.HTTP_400_BAD_REQUEST,
    FaultReason.TOO_MANY_ATTEMPTS: status.HTTP_429_TOO_MANY_REQUESTS,
    FaultReason.CUSTOMER_ERROR: status.HTTP_424_FAILED_DEPENDENCY,
    FaultReason.NUMBER_INFORMATION_ERROR: status.HTTP_424_FAILED_DEPENDENCY,
    FaultReason.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def _otp_exception_handler(request: Request, exc: OTPException):
    """Translate a fault reason into its HTTP status and a FaultResponse body."""
    request_context.module_name = 'middleware_handlers'
    status_code = FAULT_STATUS_CODES.get(exc.fault_reason, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if status_code >= 500:
        logger.error(f"otp_fault | method={request.method} url={request.url.path} fault_reason={exc.fault_reason} message={exc.message}", exc_info=exc)
        add_breadcrumb(
            message=f"OTP fault on {request.method} {request.url.path}",
            category="otp",
            level="error",
            data={"fault_reason": exc.fault_reason}
        )
        capture_exception(exc)
    else:
        logger.warning(f"otp_fault | method={request.method} url={request.url.path} fault_reason={exc.fault_reason} message={exc.message}")

    payload = FaultResponse(
        message=exc.message,
        fault_reason=exc.fault_reason,
        otp=OTPResponse.from_schema(exc.otp) if exc.carries_state else None,
    )
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json", exclude_none=True))


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"validation_error | method={request.method} url={request.url.path} errors={exc.errors()}")

    if not configs.DEBUG:
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


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    status_code = exc.status_code
    if status_code >= 500:
        logger.error(f"http_exception | method={request.method} url={request.url.path} status_code={status_code} detail={exc.detail}")
        capture_exception(exc)
    else:
        logger.warning(f"http_exception | method={request.method} url={request.url.path} status_code={status_code} detail={exc.detail}")

    if not configs.DEBUG:
        if status_code == 404:
            message = "Resource not found"
        elif 400 <= status_code < 500:
            message = "Invalid request"
        else:
            message = "Something went wrong"
        payload = {"message": message}
    else:
        payload = {"message": exc.detail}

    return JSONResponse(status_code=status_code, content=payload)


async def _general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    logger.error(
        f"unhandled_exception | method={request.method} url={request.url.path} exception_type={type(exc).__name__} exception_message={exc}",
        exc_info=exc,
    )
    add_breadcrumb(
        message=f"Unhandled exception on {request.method} {request.url.path}",
        category="exception",
        level="error",
        data={"exception_type": type(exc).__name__}
    )
    capture_exception(exc)

    if not configs.DEBUG:
        payload = {"message": "Something went wrong"}
    else:
        payload = {"message": f"Internal server error: {exc}"}

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the given FastAPI instance."""
    app.add_exception_handler(OTPException, _otp_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _general_exception_handler)
