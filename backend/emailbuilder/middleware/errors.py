"""
Email Builder Backend — Unexpected Error Middleware
====================================================

What:  Turns any exception the exception handlers did not claim into the
       standard `{"error": ..., "request_id": ...}` 500 response.
How:   Wraps the route stack directly below CORSMiddleware, so the 500 still
       passes back through CORS and the browser can read its body.
"""

import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from emailbuilder.middleware.request_id import REQUEST_ID_HEADER, request_id_var

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An unexpected error occurred."


class UnexpectedErrorMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            rid = request_id_var.get("")
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                rid,
                request.method,
                request.url.path,
                str(e),
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={"error": GENERIC_ERROR, "request_id": rid},
                headers={REQUEST_ID_HEADER: rid} if rid else None,
            )
