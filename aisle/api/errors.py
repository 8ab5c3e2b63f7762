"""
Error responses. Every non-2xx body is {error, details?}.
"""

import logging
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..services.tenants import TenantNotFoundError

logger = logging.getLogger(__name__)


def api_error(
    status_code: int,
    error: str,
    details: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    body = {"error": error}
    if details:
        body["details"] = details
    return HTTPException(status_code=status_code, detail=body, headers=headers)


def turn_error(e: Exception, error: str = "Failed to get response") -> HTTPException:
    """Map a failed turn to the HTTP error the client sees."""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, TenantNotFoundError):
        return api_error(status.HTTP_404_NOT_FOUND, "Tenant not found")
    logger.exception("%s: %s", error, e)
    return api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, error, str(e) or type(e).__name__)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    body = exc.detail if isinstance(exc.detail, dict) else {"error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "details": details},
    )
