"""
Middleware для сбора метрик Prometheus.
"""
import re
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.utils.metrics import (
    http_requests_total,
    http_request_duration_seconds,
)

_ID_SEGMENT = re.compile(
    r"^([0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}|\d+)$"
)


def normalize_path(path: str) -> str:
    """Замена идентификаторов в пути на {id}, чтобы не плодить метки."""
    return "/".join(
        "{id}" if _ID_SEGMENT.match(part) else part
        for part in path.split("/")
    )


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware для сбора HTTP метрик."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        endpoint = normalize_path(request.url.path)
        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response
