import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from site_builder.core.errors import (
    GatewayError,
    NoCredentialsError,
    ProviderUnavailableError,
)
from site_builder.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

_CLIENT_ERRORS = (NoCredentialsError, ProviderUnavailableError)


def gateway_error_status(exc: GatewayError) -> int:
    """Caller-actionable problems are 400; anything the provider did wrong is 502."""
    if isinstance(exc, _CLIENT_ERRORS):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_502_BAD_GATEWAY


def error_envelope(status_code: int, error: str, user_message: str) -> JSONResponse:
    body = ErrorResponse(error=error, response=user_message)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return error_envelope(gateway_error_status(exc), exc.message, exc.user_message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        GatewayError.user_message,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
