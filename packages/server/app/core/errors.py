"""
Business errors and their HTTP rendering.

Every business rule violation is raised as a BizException carrying a
BizError. They are request-terminating and never retried.
"""

from __future__ import annotations

from enum import Enum

import structlog
from fastapi import FastAPI, HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

log = structlog.get_logger()


class BizError(Enum):
    NOT_AUTHORIZED = (403, "You are not allowed to perform this operation.")
    INVALID_GROUP_ID = (400, "Group does not exist in your organization.")
    CANNOT_LEAVE_GROUP = (400, "The only admin of a group cannot leave it.")
    CANNOT_REMOVE_MYSELF = (400, "Use leave group to remove yourself.")
    CANNOT_DELETE_SYSTEM_GROUP = (400, "System groups cannot be deleted.")
    QUOTA_EXCEEDED = (403, "Your organization has reached its group limit.")
    INVALID_ROLE = (400, "Unknown member role.")
    INVALID_USER_ID = (400, "User does not exist.")

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message

    @property
    def code(self) -> str:
        return self.name


class BizException(HTTPException):
    """HTTPException tagged with a business error code."""

    def __init__(self, error: BizError, message: str | None = None):
        super().__init__(status_code=error.status, detail=message or error.message)
        self.error = error

    @property
    def code(self) -> str:
        return self.error.code

    def __repr__(self) -> str:
        return f"BizException({self.code}, {self.detail!r})"


async def biz_exception_handler(request: Request, exc: BizException) -> JSONResponse:
    log.info("request.rejected", code=exc.code, status=exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.detail,
                "status": exc.status_code,
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BizException, biz_exception_handler)
