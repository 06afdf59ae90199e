#!/usr/bin/env python3
"""
Error handlers for the web application.

Engine errors from ``core.exceptions`` are rendered as
``{"success": false, "error": ..., "type": ...}`` with a matching status.
"""

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse

from core.exceptions import (
    ConcurrentModificationError,
    DispatchError,
    InvalidStateError,
    MatchingTimeoutError,
    NoSuitableVendorsError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

STATUS_CODES: Dict[Type[DispatchError], int] = {
    NotFoundError: 404,
    InvalidStateError: 409,
    ConcurrentModificationError: 409,
    NoSuitableVendorsError: 422,
    MatchingTimeoutError: 504,
}


def status_code_for(exc: DispatchError) -> int:
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


def _error_response(status_code: int, error: str, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "type": error_type
        }
    )


async def dispatch_exception_handler(
    request: Request,
    exc: DispatchError
) -> JSONResponse:
    """
    Handle engine exceptions.

    Args:
        request: The FastAPI request.
        exc: The engine exception.

    Returns:
        JSONResponse with error details.
    """
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"Request to {request.url.path} refused: {exc}")

    return _error_response(status_code, str(exc), exc.__class__.__name__)


async def value_error_handler(
    request: Request,
    exc: ValueError
) -> JSONResponse:
    """Invalid argument values (negative quote, bad response) become 400."""
    return _error_response(400, str(exc), exc.__class__.__name__)


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.
    """
    return _error_response(exc.status_code, exc.detail, "HTTPException")


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    logger.exception(f"Unexpected error in {request.url.path}")
    return _error_response(500, "Internal server error", "InternalError")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DispatchError, dispatch_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
