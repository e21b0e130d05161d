"""
Waitlist error catalogue.

Every failure the waitlist surfaces to a caller is a WaitlistError carrying
one ErrorCode. The application handler renders it as {"code", "message"}
with the code's HTTP status (or an explicit override).
"""
from __future__ import annotations

import enum
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class ErrorCode(str, enum.Enum):
    WAITLIST_NOT_ENABLED = "WAITLIST_NOT_ENABLED"
    EMAIL_ALREADY_IN_WAITLIST = "EMAIL_ALREADY_IN_WAITLIST"
    WAITLIST_FULL = "WAITLIST_FULL"
    DOMAIN_NOT_ALLOWED = "DOMAIN_NOT_ALLOWED"
    INVALID_ENTRY = "INVALID_ENTRY"
    INVALID_QUERY = "INVALID_QUERY"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    WAITLIST_ENTRY_NOT_FOUND = "WAITLIST_ENTRY_NOT_FOUND"
    WAITLIST_ENTRY_ALREADY_PROCESSED = "WAITLIST_ENTRY_ALREADY_PROCESSED"
    WAITLIST_APPROVAL_REQUIRED = "WAITLIST_APPROVAL_REQUIRED"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.WAITLIST_NOT_ENABLED:             "Waitlist is not enabled",
    ErrorCode.EMAIL_ALREADY_IN_WAITLIST:        "Email already in waitlist",
    ErrorCode.WAITLIST_FULL:                    "Waitlist is full",
    ErrorCode.DOMAIN_NOT_ALLOWED:               "Email domain not allowed",
    ErrorCode.INVALID_ENTRY:                    "Invalid entry data",
    ErrorCode.INVALID_QUERY:                    "Invalid waitlist query",
    ErrorCode.UNAUTHORIZED:                     "You are not authorized to perform this action",
    ErrorCode.FORBIDDEN:                        "Not enough permissions to perform this action",
    ErrorCode.WAITLIST_ENTRY_NOT_FOUND:         "Waitlist entry not found",
    ErrorCode.WAITLIST_ENTRY_ALREADY_PROCESSED: "Waitlist entry has already been processed",
    ErrorCode.WAITLIST_APPROVAL_REQUIRED:       "An approved waitlist entry is required",
}

ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.WAITLIST_NOT_ENABLED:             status.HTTP_403_FORBIDDEN,
    ErrorCode.EMAIL_ALREADY_IN_WAITLIST:        status.HTTP_403_FORBIDDEN,
    ErrorCode.WAITLIST_FULL:                    status.HTTP_403_FORBIDDEN,
    ErrorCode.DOMAIN_NOT_ALLOWED:               status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_ENTRY:                    status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INVALID_QUERY:                    status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.UNAUTHORIZED:                     status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN:                        status.HTTP_403_FORBIDDEN,
    ErrorCode.WAITLIST_ENTRY_NOT_FOUND:         status.HTTP_404_NOT_FOUND,
    ErrorCode.WAITLIST_ENTRY_ALREADY_PROCESSED: status.HTTP_409_CONFLICT,
    ErrorCode.WAITLIST_APPROVAL_REQUIRED:       status.HTTP_403_FORBIDDEN,
}


class WaitlistError(Exception):
    def __init__(
        self,
        code: ErrorCode,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.code = code
        self.status_code = status_code or ERROR_STATUS[code]
        self.message = message or ERROR_MESSAGES[code]
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}


async def waitlist_error_handler(request: Request, exc: WaitlistError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED and exc.code == ErrorCode.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)
