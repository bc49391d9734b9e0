"""Request ID middleware: tags every request and its log lines."""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from learnhub.core.logging import get_logger, request_id_var, tenant_id_var, user_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Accept or mint a request id, expose it on request.state and echo it back.

    Tenant and user headers are copied into the logging context so service
    log lines can be traced to a caller without passing ids around.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        tokens = [
            (request_id_var, request_id_var.set(request_id)),
            (tenant_id_var, tenant_id_var.set(request.headers.get("X-Tenant-Id"))),
            (user_id_var, user_id_var.set(request.headers.get("X-User-Id"))),
        ]
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "latency_ms": int((time.perf_counter() - started) * 1000),
                },
            )
            raise
        else:
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "Request completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "latency_ms": int((time.perf_counter() - started) * 1000),
                },
            )
            return response
        finally:
            for var, token in reversed(tokens):
                var.reset(token)
