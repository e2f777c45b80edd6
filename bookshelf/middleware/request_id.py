"""
Bookshelf Backend — Request ID Middleware
===========================================

What:  Assigns a correlation ID to each request and echoes it in the response.
Why:   Every log line for one request (access log, gate rejections, service
       errors) shares the ID, and error bodies return it so a client report can
       be matched to server logs.
How:   Stored in a ContextVar for loggers and handlers, and on request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ContextVar, not threading.local: concurrent requests share one thread under asyncio
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"
MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Reuse the client's X-Request-ID when present and reasonably short
        2. Otherwise generate an 8-char ID from a UUID4
        3. Publish it via request_id_var and request.state.request_id
        4. Add it to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        client_rid = request.headers.get(REQUEST_ID_HEADER, "")
        if client_rid and len(client_rid) <= MAX_CLIENT_ID_LENGTH:
            rid = client_rid
        else:
            rid = str(uuid.uuid4())[:8]

        # Not reset afterwards: the catch-all 500 handler runs outside this
        # middleware and still needs the ID
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
