"""
Error taxonomy shared by every route.

Handlers raise one of the ApiError subclasses below; error_response() is the
only place that turns them into HTTP responses.
"""
import traceback
from typing import Any, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    DuplicateKeyError,
    ExecutionTimeout,
    NetworkTimeout,
    PyMongoError,
    ServerSelectionTimeoutError,
)

RETRY_AFTER_SECONDS = 5


class ApiError(Exception):
    """Base class for errors that map onto an HTTP response"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationFailed(ApiError):
    """Malformed or missing field, bad enum value or bad identifier"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class DuplicateKey(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Duplicate key"


class StorageUnavailable(ApiError):
    """The database could not be reached in time; the caller may retry"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Database temporarily unavailable, please retry"


class InternalError(ApiError):
    pass


def storage_error(exc: PyMongoError) -> ApiError:
    """Translate a driver exception into the API taxonomy"""
    if isinstance(exc, DuplicateKeyError):
        return DuplicateKey("A record with the same unique key already exists")
    if isinstance(exc, (ServerSelectionTimeoutError, NetworkTimeout, ExecutionTimeout,
                        AutoReconnect, ConnectionFailure)):
        return StorageUnavailable()
    return InternalError(str(exc))


def error_response(exc: ApiError, debug: bool = False) -> JSONResponse:
    """Render an ApiError as a JSON response"""
    content = {"error": exc.message}
    headers = None

    if exc.details is not None:
        content["details"] = exc.details

    if isinstance(exc, StorageUnavailable):
        content["retryAfter"] = RETRY_AFTER_SECONDS
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}

    if debug:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)
