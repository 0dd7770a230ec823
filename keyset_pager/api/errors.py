"""Map listing errors onto HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..core.errors import ExecutionFailed, ListingError

logger = logging.getLogger(__name__)


def _error_body(exc: BaseException, detail: str) -> dict[str, str]:
    return {"error": type(exc).__name__, "detail": detail}


async def listing_error_handler(request: Request, exc: ListingError) -> JSONResponse:
    """Validation errors become 400; store failures become 500.

    Store failure details stay in the log; the client only sees the class.
    """

    if isinstance(exc, ExecutionFailed):
        logger.error(
            "Listing failed",
            extra={
                "path": request.url.path,
                "cause": type(exc.cause).__name__ if exc.cause else None,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(exc, "page query failed"),
        )

    logger.info(
        "Rejected listing request",
        extra={"path": request.url.path, "exception_type": type(exc).__name__},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(exc, str(exc)),
    )


async def timeout_error_handler(request: Request, exc: TimeoutError) -> JSONResponse:
    logger.warning("Listing timed out", extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content=_error_body(exc, "page query timed out"),
    )


def configure_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ListingError, listing_error_handler)
    app.add_exception_handler(TimeoutError, timeout_error_handler)
