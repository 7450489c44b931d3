"""Request correlation: every response carries an x-request-id, every log line the same id."""

import re
import time
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware

from sitewright.core.logging import latency_bucket_ms, log_event, request_id_ctx_var

REQUEST_ID_HEADER = "x-request-id"

# Client-supplied ids end up in every log line for the request
_ACCEPTED_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

# Probes hit these every few seconds; keep them out of the info log
_QUIET_PATHS = ("/healthz", "/readyz")


def resolve_request_id(incoming) -> str:
    if incoming and _ACCEPTED_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid
        token = request_id_ctx_var.set(rid)

        start = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            log_event(
                "debug" if request.url.path in _QUIET_PATHS else "info",
                "request.complete",
                event_type="request.complete",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "latency_bucket": latency_bucket_ms((time.perf_counter() - start) * 1000),
                },
            )
            return response
        finally:
            request_id_ctx_var.reset(token)
