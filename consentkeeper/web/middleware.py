from __future__ import annotations

import time
import uuid
from typing import Optional

from fastapi import Request

from consentkeeper.core.events import EventLogger


def requester_origin(request: Request) -> Optional[str]:
    """Best-effort origin: socket peer, then first X-Forwarded-For hop."""
    host = getattr(getattr(request, "client", None), "host", None)
    if host:
        return str(host)
    fwd = request.headers.get("X-Forwarded-For", "")
    first = fwd.split(",")[0].strip() if fwd else ""
    return first or None


class RequestContextMiddleware:
    """
    Per-request context:
    1) trace_id + requester origin on request.state
    2) access log line (METHOD path status ms)
    3) web.request event
    """

    def __init__(self, *, logger, event_logger: Optional[EventLogger] = None, access_log: bool = True):
        self.logger = logger
        self.event_logger = event_logger
        self.access_log = access_log

    async def __call__(self, request: Request, call_next):  # noqa: ANN001
        trace_id = uuid.uuid4().hex
        request.state.trace_id = trace_id
        request.state.requester = requester_origin(request)
        t0 = time.time()

        response = await call_next(request)

        ms = (time.time() - t0) * 1000.0
        response.headers["X-Trace-Id"] = trace_id
        if self.access_log and self.logger is not None:
            self.logger.info(f"{request.method} {request.url.path} {response.status_code} {ms:.3f} ms")
        if self.event_logger is not None:
            self.event_logger.log(
                trace_id,
                "web.request",
                {"method": request.method, "path": request.url.path, "status": response.status_code, "client_host": request.state.requester, "ms": round(ms, 3)},
            )
        return response
