"""
Middleware для логирования запросов с идентификатором запроса.
"""
import time
from uuid import uuid4

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class QueryLoggerMiddleware(BaseHTTPMiddleware):
    """
    Логирование времени выполнения запросов.

    Идентификатор запроса (из заголовка X-Request-ID или новый) попадает
    во все записи лога, сделанные при обработке запроса, и в ответ.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        log_kwargs = dict(
            path=request.url.path,
            method=request.method,
            duration=round(duration, 4),
            status_code=response.status_code,
        )
        if duration > settings.SLOW_REQUEST_THRESHOLD:
            logger.warning(
                "Slow request detected",
                client_ip=request.client.host if request.client else "unknown",
                **log_kwargs,
            )
        else:
            logger.debug("Request processed", **log_kwargs)

        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        response.headers[REQUEST_ID_HEADER] = request_id
        structlog.contextvars.clear_contextvars()
        return response
