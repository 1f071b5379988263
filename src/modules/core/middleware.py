"""Request correlation for structured logs.

Every log line emitted while a request is handled (validation failures,
stock reservations, unit-of-work rollbacks) carries the same
``correlation_id``, which is echoed back in ``X-Request-ID``.
"""

import re
import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"[A-Za-z0-9._:-]{1,128}")

logger = structlog.get_logger(__name__)


def _request_id(request: HttpRequest) -> str:
    """Client-supplied id when well-formed, a fresh UUID4 otherwise."""
    supplied = request.headers.get(REQUEST_ID_HEADER, "")
    if supplied and _REQUEST_ID_RE.fullmatch(supplied):
        return supplied
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = _request_id(request)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=cid, method=request.method, path=request.path
        )

        started = time.monotonic()
        logger.info("request.started")
        response = self.get_response(request)

        elapsed_ms = round((time.monotonic() - started) * 1000, 2)
        log = logger.warning if response.status_code >= 500 else logger.info
        log("request.finished", status_code=response.status_code, duration_ms=elapsed_ms)

        response[REQUEST_ID_HEADER] = cid
        return response
