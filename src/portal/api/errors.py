"""Error responses for the portal API.

Every failure answers with the same body:

    {"messages": [{"code": "NotFound", "messageType": "Error",
                   "text": "Student with identifier 'SV001' not found",
                   "timestamp": "2026-01-10T12:34:56+00:00"}]}

Domain errors are raised as ``PortalApiError`` subclasses. Cache-layer faults
and anything else unexpected become a 500 with a fixed text; the details
only go to the log.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import ClassVar

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from portal.cache.errors import CacheError

logger = logging.getLogger(__name__)


class MessageType(str, Enum):
    ERROR = "Error"
    WARNING = "Warning"
    INFO = "Info"
    EXCEPTION = "Exception"


class Message(BaseModel):
    model_config = {"extra": "forbid", "populate_by_name": True}

    code: str
    message_type: MessageType = Field(alias="messageType")
    text: str
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())


class Result(BaseModel):
    """Body of every error response."""

    model_config = {"extra": "forbid"}

    messages: list[Message]


def _result_response(status_code: int, code: str, text: str, kind: MessageType) -> JSONResponse:
    result = Result(messages=[Message(code=code, message_type=kind, text=text)])
    return JSONResponse(
        status_code=status_code, content=result.model_dump(by_alias=True, mode="json")
    )


class PortalApiError(HTTPException):
    """Base exception for portal API errors.

    Subclasses fix the status code and message code; instances carry the text.
    """

    status: ClassVar[int] = 500
    code: ClassVar[str] = "InternalServerError"
    message_type: ClassVar[MessageType] = MessageType.ERROR

    def __init__(self, text: str):
        self.text = text
        super().__init__(status_code=self.status, detail=text)

    def to_result(self) -> Result:
        return Result(
            messages=[Message(code=self.code, message_type=self.message_type, text=self.text)]
        )


class NotFoundError(PortalApiError):
    """Entity not found (404).

    A domain-level absence. Cache misses never surface as this error.
    """

    status = 404
    code = "NotFound"

    def __init__(self, resource_type: str, identifier: object | None = None):
        if identifier is None:
            super().__init__(f"No {resource_type} found")
        else:
            super().__init__(f"{resource_type} with identifier '{identifier}' not found")


class ConflictError(PortalApiError):
    status = 409
    code = "Conflict"

    def __init__(self, resource_type: str, identifier: object):
        super().__init__(f"{resource_type} with identifier '{identifier}' already exists")


class BadRequestError(PortalApiError):
    status = 400
    code = "BadRequest"


class InternalServerError(PortalApiError):
    message_type = MessageType.EXCEPTION

    def __init__(self, text: str = "An unexpected error occurred"):
        super().__init__(text)


async def portal_api_exception_handler(request: Request, exc: PortalApiError) -> JSONResponse:
    return _result_response(exc.status_code, exc.code, exc.text, exc.message_type)


async def cache_exception_handler(request: Request, exc: CacheError) -> JSONResponse:
    """Cache store faults: logged with their cause, answered with a bare 500."""
    logger.error(
        f"Cache failure on {request.method} {request.url.path}: {exc}",
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    error = InternalServerError()
    return _result_response(error.status_code, error.code, error.text, error.message_type)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected, database faults included. No partial result is returned."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}",
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    error = InternalServerError()
    return _result_response(error.status_code, error.code, error.text, error.message_type)
