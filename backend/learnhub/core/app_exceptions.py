"""Application errors rendered into the standard error envelope."""

from enum import Enum
from typing import Any

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned as `error_code`."""

    IDENTITY_REQUIRED = "IDENTITY_REQUIRED"
    INVALID_XP_AMOUNT = "INVALID_XP_AMOUNT"
    INVALID_XP_TYPE = "INVALID_XP_TYPE"
    INVALID_SCORE = "INVALID_SCORE"


class AppError(HTTPException):
    """HTTPException carrying an error code, message and optional details."""

    def __init__(
        self,
        status_code: int,
        code: ErrorCode | str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.message = message
        self.details = details
        super().__init__(
            status_code=status_code,
            detail={"code": self.code, "message": message, "details": details},
        )


def raise_app_error(
    status_code: int,
    code: ErrorCode | str,
    message: str,
    details: dict[str, Any] | list[Any] | None = None,
) -> None:
    raise AppError(status_code=status_code, code=code, message=message, details=details)


def bad_request(code: ErrorCode, message: str, **details: Any) -> AppError:
    """400 with the offending values as details."""
    return AppError(status.HTTP_400_BAD_REQUEST, code, message, details=details or None)
