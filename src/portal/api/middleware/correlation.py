"""Request and correlation ids for every HTTP request.

``x-request-id`` identifies one request and is generated when the client
sends none. ``x-correlation-id`` ties requests of one client operation
together and falls back to the request id. Both are echoed on the response
and set in the logging context while the request is handled.
"""

from __future__ import annotations

from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from portal.observability.logging import LogContext

REQUEST_ID_HEADER = "x-request-id"
CORRELATION_ID_HEADER = "x-correlation-id"


class CorrelationMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ids = {
            REQUEST_ID_HEADER: request.headers.get(REQUEST_ID_HEADER) or str(uuid4()),
        }
        ids[CORRELATION_ID_HEADER] = (
            request.headers.get(CORRELATION_ID_HEADER) or ids[REQUEST_ID_HEADER]
        )
        request.state.request_id = ids[REQUEST_ID_HEADER]
        request.state.correlation_id = ids[CORRELATION_ID_HEADER]

        with LogContext(
            request_id=ids[REQUEST_ID_HEADER], correlation_id=ids[CORRELATION_ID_HEADER]
        ):
            response = await call_next(request)

        response.headers.update(ids)
        return response
