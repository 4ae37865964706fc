"""HTTP error mapping

Use cases return Error values; routes raise ClientError with them and the
handlers registered here render ``{"error": {"code", "message", "reason"}}``.
"""

import logging
from typing import Optional
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from libs.result import Error
from src.domain.errors import ErrorCode, ErrorKind, kind_of

logger = logging.getLogger(__name__)

VALIDATION_ERROR = "VALIDATION_ERROR"
UNAUTHORIZED = "UNAUTHORIZED"

KIND_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INSUFFICIENT_BALANCE: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorKind.CODE_UNUSABLE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.EXPIRED: status.HTTP_410_GONE,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.STORAGE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.SIGNATURE_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PARTIAL_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Codes whose status differs from their kind's default
CODE_STATUS = {
    ErrorCode.DUPLICATE_REGISTRATION.value: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_ORDER_STATE.value: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_REGISTRATION_STATE.value: status.HTTP_409_CONFLICT,
    ErrorCode.PROVIDER_ERROR.value: status.HTTP_502_BAD_GATEWAY,
    VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
}


def status_for(code: str) -> int:
    if code in CODE_STATUS:
        return CODE_STATUS[code]
    return KIND_STATUS[kind_of(code)]


class ClientError(HTTPException):
    """
    HTTPException carrying a use-case Error

    The status code is derived from the error code unless given explicitly.
    """

    def __init__(self, error: Error, status_code: Optional[int] = None):
        self.error = error
        super().__init__(status_code=status_code or status_for(error.code), detail=error.message)


def error_body(error: Error) -> dict:
    return {"error": error.model_dump()}


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.error.code} {exc.error.message} ({exc.error.reason})"
        )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.error))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    reason = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    error = Error(code=VALIDATION_ERROR, message="Invalid request parameters", reason=reason)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(error))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ClientError, client_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
