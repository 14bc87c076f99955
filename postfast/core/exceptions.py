# postfast/core/exceptions.py
"""
Application errors and their HTTP mapping.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class PostFastError(Exception):
    """Base error for everything raised by the post core"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal Server Error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.error


class NotFoundError(PostFastError):
    """Unknown id/slug, or a non-public post hidden from the requester"""
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"


class ForbiddenError(PostFastError):
    """Requester is neither the owner nor an administrator"""
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"


class UnauthorizedError(ForbiddenError):
    """No authenticated requester where one is required"""
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"


class ValidationFailedError(PostFastError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation Failed"


class UnavailableError(PostFastError):
    """Transient store failure"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "Service Unavailable"


class SlugGenerationError(PostFastError):
    """No free slug within the attempt cap"""
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"


def _body(code: int, error: str, message: str, request: Request) -> dict:
    return {"status": code, "error": error, "message": message, "path": request.url.path}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PostFastError)
    async def handle_postfast_error(request: Request, exc: PostFastError):
        logger.warning("%s: %s", exc.error, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_body(exc.status_code, exc.error, exc.message, request),
            headers=headers,
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: Request, exc: SQLAlchemyError):
        logger.error("Post store error on %s", request.url.path, exc_info=exc)
        code = status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(
            status_code=code,
            content=_body(code, UnavailableError.error, "Post store unavailable", request),
        )


__all__ = [
    "PostFastError",
    "NotFoundError",
    "ForbiddenError",
    "UnauthorizedError",
    "ValidationFailedError",
    "UnavailableError",
    "SlugGenerationError",
    "register_exception_handlers",
]
