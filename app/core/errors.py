import logging
from typing import List, Optional
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    """Base for every error the API surfaces on purpose.

    ``errors`` carries field-level messages as ``{"field": ..., "message": ...}``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[dict]] = None, headers=None):
        self.message = message or self.message
        self.errors = errors or []
        super().__init__(status_code=self.status_code, detail=self.message, headers=headers)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[dict]] = None):
        super().__init__(message, errors, headers={"WWW-Authenticate": "Bearer"})


class InvalidToken(AuthenticationError):
    message = "Invalid token"


class ExpiredToken(AuthenticationError):
    message = "Token expired"


class MalformedClaims(AuthenticationError):
    message = "Invalid token format"


class PermissionDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Permission denied"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ServerError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"


def _error_response(status_code: int, message: str, errors: List[dict], headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "errors": errors},
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError):
    return _error_response(exc.status_code, exc.message, exc.errors, exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # drop the leading "body"/"query"/"path" location
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return _error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {str(exc)}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, ServerError.message, [])


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, ServerError.message, [])


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
