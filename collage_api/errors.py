import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class PostsError(Exception):
    """Base class for errors raised while handling posts."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PostValidationError(PostsError):
    status_code = status.HTTP_400_BAD_REQUEST


class PostNotFound(PostsError):
    status_code = status.HTTP_404_NOT_FOUND


class StorageError(PostsError):
    """Cloudinary or CDN failure."""


class BlobNotFound(StorageError):
    status_code = status.HTTP_404_NOT_FOUND


class BlobFormatError(StorageError):
    pass


def error_body(message) -> dict:
    return {"error": message}


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": message}``."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("Invalid request body"),
        )

    @app.exception_handler(PostsError)
    async def posts_error_handler(request: Request, exc: PostsError):
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(str(exc) or "Unknown error"),
        )
