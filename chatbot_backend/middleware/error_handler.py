"""Global error handling middleware and exception handlers"""
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.middleware.base import BaseHTTPMiddleware
import traceback
import logging

from chatbot_backend.utils.errors import ApiError, ValidationFailed, error_response, storage_error

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Global error handler middleware"""

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            logger.error(f"Unhandled error: {exc}")
            logger.error(traceback.format_exc())

            content = {
                "error": "Internal server error",
                "detail": str(exc) if self.debug else "An unexpected error occurred"
            }
            if self.debug:
                content["stack"] = traceback.format_exc()

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=content
            )


def _describe(errors) -> str:
    """Human-readable summary of the first validation error"""
    if not errors:
        return "Validation failed"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else first.get("msg", "Validation failed")


def register_exception_handlers(app: FastAPI, debug: bool = False):
    """Map the API error taxonomy, request validation and stray driver errors to responses"""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return error_response(exc, debug)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        return error_response(ValidationFailed(_describe(errors), details=errors), debug)

    @app.exception_handler(PyMongoError)
    async def storage_error_handler(request: Request, exc: PyMongoError):
        logger.error(f"Unmapped database error on {request.url.path}: {exc}")
        return error_response(storage_error(exc), debug)
