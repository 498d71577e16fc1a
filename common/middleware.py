"""
common.middleware
~~~~~~~~~~~~~~~~~
Structured JSON request-logging middleware powered by structlog.

Binds a request id into structlog's contextvars so every log line emitted
while serving the request (including Edge client calls) carries it, then
logs one summary record per request.
"""
import time
import uuid

import structlog

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class StructuredLoggingMiddleware:
    """
    Middleware that emits one structured log record per HTTP request.

    Log record fields:
        event       – "http_request"
        request_id  – incoming ``X-Request-ID`` or a fresh UUID4
        method      – HTTP verb (GET, POST, …)
        path        – URL path
        route       – name of the matched route, if any
        status      – HTTP response status code (int)
        duration_ms – Round-trip duration in milliseconds (float, 2 dp)
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.monotonic()
        response = self.get_response(request)
        duration_ms = round((time.monotonic() - start) * 1000, 2)

        match = getattr(request, "resolver_match", None)
        logger.info(
            "http_request",
            method=request.method,
            path=request.get_full_path(),
            route=match.url_name if match else None,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        response[REQUEST_ID_HEADER] = request_id
        structlog.contextvars.clear_contextvars()
        return response
