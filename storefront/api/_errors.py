"""
Error mapping — domain errors to HTTP responses.

Routes raise the error a service returned (``unwrap_or_raise``); one handler
turns it into ``{"error": code, "message": message}`` with the mapped
status. Storage faults are logged with their cause and never leak details.
"""

from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import Request
from fastapi.responses import JSONResponse
from kungfu import Result, Ok, Error

from storefront.errors import (
    StorefrontError,
    StorageError,
    NotFoundError,
    EmptyCartError,
    InvalidQuantityError,
    CouponError,
    InvalidCouponError,
    DuplicateCouponError,
    InvalidTransitionError,
    InvalidStatusError,
    AccessDeniedError,
    IdempotencyConflictError,
    IdempotencyMismatchError,
    InvalidConfirmationError,
    InvalidReviewError,
    InvalidWhitelistRequestError,
    DuplicateWhitelistRequestError,
    AlreadyDecidedError,
)

logger = logging.getLogger(__name__)


STATUS_CODES: dict[type[StorefrontError], int] = {
    StorageError: 500,
    NotFoundError: 404,
    EmptyCartError: 400,
    InvalidQuantityError: 400,
    CouponError: 400,
    InvalidCouponError: 400,
    DuplicateCouponError: 409,
    InvalidTransitionError: 400,
    InvalidStatusError: 400,
    AccessDeniedError: 403,
    IdempotencyConflictError: 409,
    IdempotencyMismatchError: 422,
    InvalidConfirmationError: 400,
    InvalidReviewError: 400,
    InvalidWhitelistRequestError: 400,
    DuplicateWhitelistRequestError: 409,
    AlreadyDecidedError: 409,
}


def status_for(error: StorefrontError) -> int:
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def error_response(error: StorefrontError, status: int | None = None) -> JSONResponse:
    status = status or status_for(error)

    if status >= 500:
        cause = error.cause if isinstance(error, StorageError) else None
        logger.error("Request failed: %s", error.message, exc_info=cause or error)
        return JSONResponse(
            status_code=status,
            content={"error": error.code, "message": "Internal server error"},
        )

    return JSONResponse(
        status_code=status,
        content={"error": error.code, "message": error.message},
    )


async def storefront_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # registered for StorefrontError only
    return error_response(cast(StorefrontError, exc))


def unwrap_or_raise[T](result: Result[T, Any]) -> T:
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise e


__all__ = (
    "STATUS_CODES",
    "status_for",
    "error_response",
    "storefront_error_handler",
    "unwrap_or_raise",
)
