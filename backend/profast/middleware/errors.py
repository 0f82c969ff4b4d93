"""
ProFast Parcel API — Unhandled Error Middleware
=================================================

What:  Turns any exception no handler claimed into the standard 500 body.
How:   Installed innermost, so the response still passes back through the
       CORS, access-log and request-id middleware. FastAPI's own
       `Exception` handler runs on Starlette's outermost ServerErrorMiddleware,
       where the request id is already gone and CORS headers are never added.
"""

import logging
from typing import Optional

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from profast.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Build the `{error, message, request_id, details?}` body every failure uses."""
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                request_id_var.get(""),
                request.method,
                request.url.path,
                exc,
                exc_info=True,
            )
            return error_response(
                500,
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            )
