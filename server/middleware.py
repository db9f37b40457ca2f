"""Request correlation middleware and header redaction for request logs."""

import time
import uuid
from collections.abc import Mapping

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from utils.logger import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SENSITIVE_HEADERS = {"x-api-key", "authorization", "cookie"}


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of ``headers`` with API keys and credentials masked."""
    return {
        key: "[REDACTED]" if key.lower() in SENSITIVE_HEADERS and value else value
        for key, value in headers.items()
    }


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Echo the caller's X-Request-ID (or generate one) and log each request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.time()
        response = await call_next(request)
        latency_ms = int((time.time() - start) * 1000)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "latency_ms": latency_ms,
                }
            },
        )
        logger.debug(
            "Request headers",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "headers": redact_sensitive_headers(dict(request.headers)),
                }
            },
        )
        return response
