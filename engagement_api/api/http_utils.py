import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from engagement_api.core.errors import ApiError, InternalError
from engagement_api.models.common import ErrorResponse

log = logging.getLogger(__name__)


def error_response(status_code: int, message: str, errors=None) -> JSONResponse:
    body = ErrorResponse(
        status_code=status_code,
        message=message,
        errors=errors or [],
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True)),
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        log.error(
            "api_error",
            extra={"path": request.url.path, "error": type(exc).__name__},
        )
    return error_response(int(exc.status_code), exc.message, exc.errors)


async def request_validation_handler(
        request: Request,
        exc: RequestValidationError) -> JSONResponse:
    return error_response(
        HTTPStatus.UNPROCESSABLE_ENTITY,
        "Request validation failed",
        exc.errors(),
    )


async def unhandled_error_handler(
        request: Request,
        exc: Exception) -> JSONResponse:
    # текст исключения наружу не уходит, только в лог
    log.exception("unhandled_error", extra={"path": request.url.path})
    internal = InternalError()
    return error_response(int(internal.status_code), internal.message)


def install_error_handlers(app: FastAPI) -> None:
    """Every failure leaves the service in the error envelope."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError,
                              request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
