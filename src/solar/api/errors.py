"""Error responses for the planet catalog API.

Every error body has the same Result/Message shape:

    {"messages": [{"code": "NotFound", "messageType": "Error",
                   "text": "Can't find a planet by id: ...", "timestamp": "..."}]}

NotFound and Throttled carry their own message. Every other failure is
reported as a generic internal error; its details only go to the log.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from solar.core.errors import NotFoundError, SolarError, ThrottledError

logger = logging.getLogger(__name__)

GENERIC_ERROR_TEXT = "An unexpected error occurred"


class MessageType(str, Enum):
    """Type of message in error response."""

    ERROR = "Error"
    EXCEPTION = "Exception"


class Message(BaseModel):
    """Error message."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    code: str
    message_type: MessageType = Field(alias="messageType")
    text: str
    timestamp: str | None = None


class Result(BaseModel):
    """Result wrapper for errors."""

    model_config = {"extra": "forbid"}

    messages: list[Message]


def error_result(code: str, text: str, message_type: MessageType = MessageType.ERROR) -> Result:
    return Result(
        messages=[
            Message(
                code=code,
                messageType=message_type,
                text=text,
                timestamp=datetime.now(UTC).isoformat(),
            )
        ]
    )


def status_for(exc: SolarError) -> int:
    """HTTP status code for a domain error."""
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ThrottledError):
        return 429
    return 500


async def solar_exception_handler(request: Request, exc: SolarError) -> JSONResponse:
    """Exception handler for service-layer errors."""
    status_code = status_for(exc)

    if status_code == 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
        result = error_result("InternalServerError", GENERIC_ERROR_TEXT, MessageType.EXCEPTION)
    else:
        logger.info(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
        result = error_result(exc.kind, exc.message)

    return JSONResponse(status_code=status_code, content=result.model_dump(by_alias=True))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    result = error_result("InternalServerError", GENERIC_ERROR_TEXT, MessageType.EXCEPTION)
    return JSONResponse(status_code=500, content=result.model_dump(by_alias=True))
