"""
Error types for the synchronization core and HTTP error handling
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import traceback
from datetime import datetime
from loguru import logger

from cursor_sync.core.config import get_settings


class CursorSyncError(Exception):
    """Base error for the cursor sync server"""
    def __init__(self, message: str, error_code: str = None):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ArbitrationError(CursorSyncError):
    """An ownership request that the arbiter refused"""
    def __init__(self, object_id: str, reason: str, error_code: str = "ARBITRATION_REJECTED"):
        super().__init__(reason, error_code=error_code)
        self.object_id = object_id
        self.reason = reason


class ObjectNotFound(ArbitrationError):
    def __init__(self, object_id: str):
        super().__init__(object_id, "not found", error_code="OBJECT_NOT_FOUND")


class ObjectOwnedByAnotherUser(ArbitrationError):
    def __init__(self, object_id: str, owner_id: str):
        super().__init__(object_id, "owned by another user", error_code="OBJECT_OWNED")
        self.owner_id = owner_id


class UnknownConnection(ArbitrationError):
    def __init__(self, object_id: str, connection_id: str):
        super().__init__(object_id, "unknown connection", error_code="UNKNOWN_CONNECTION")
        self.connection_id = connection_id


class NotObjectOwner(ArbitrationError):
    """move/drop from a connection that does not hold the object"""
    def __init__(self, object_id: str, requester: str):
        super().__init__(object_id, "does not own object", error_code="NOT_OWNER")
        self.requester = requester


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = None,
    details: dict = None
) -> JSONResponse:
    """Create standardized error response"""
    settings = get_settings()

    error_response = {
        "error": {
            "message": message,
            "status_code": status_code,
            "timestamp": datetime.utcnow().isoformat(),
        }
    }

    if error_code:
        error_response["error"]["error_code"] = error_code

    if details and settings.environment != "production":
        error_response["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=error_response
    )


# Exception handlers
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions"""
    logger.warning(f"HTTP Exception: {exc.detail} (Status: {exc.status_code})")

    return create_error_response(
        status_code=exc.status_code,
        message=exc.detail or "An error occurred",
        error_code="HTTP_ERROR"
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions"""
    settings = get_settings()

    error_id = f"ERR_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}_{id(exc)}"

    logger.error(
        f"Unhandled Exception [{error_id}]: {str(exc)}\n"
        f"Request: {request.method} {request.url}\n"
        f"Traceback: {''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )

    details = None
    if settings.environment == "development":
        details = {
            "error_id": error_id,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc)
        }

    return create_error_response(
        status_code=500,
        message="An internal error occurred",
        error_code="INTERNAL_ERROR",
        details=details
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers on a FastAPI app"""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
