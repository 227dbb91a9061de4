# coursemarket/middleware/logging.py
"""Per-request logging: a request id bound for the whole request, plus start/finish events."""

import time
import uuid

import structlog
from fastapi import Request

from coursemarket.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def logging_middleware(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    start_time = time.perf_counter()
    logger.info(
        "request started",
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else None,
    )

    response = await call_next(request)

    duration = time.perf_counter() - start_time
    logger.info(
        "request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration * 1000, 2),
    )
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
