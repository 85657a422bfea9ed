"""
Middleware для rate limiting.
"""
import re

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.exceptions import error_response
from app.core.redis import get_redis
from app.core.logging import get_logger

logger = get_logger(__name__)

# Загрузки и валидация читают файлы и пишут много строк в БД
HEAVY_PATHS = [
    re.compile(r"^/api/v1/(bom-checks|doc-checks|reference-files)/upload$"),
    re.compile(r"^/api/v1/bom-checks/[^/]+/validate$"),
]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware для ограничения частоты запросов."""

    def __init__(self, app, calls: int | None = None, period: int | None = None):
        """
        Инициализация rate limiter.

        Args:
            app: ASGI приложение
            calls: Количество разрешенных запросов (по умолчанию из настроек)
            period: Период времени в секундах (по умолчанию из настроек)
        """
        super().__init__(app)
        self.calls = calls or settings.RATE_LIMIT_CALLS
        self.period = period or settings.RATE_LIMIT_PERIOD

    def _limit_for(self, path: str) -> tuple[str, int]:
        if any(pattern.match(path) for pattern in HEAVY_PATHS):
            return "heavy", settings.UPLOAD_RATE_LIMIT_CALLS
        return "default", self.calls

    async def dispatch(self, request: Request, call_next):
        """Проверка rate limit перед обработкой запроса."""
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        bucket, calls = self._limit_for(request.url.path)
        key = f"rate_limit:{bucket}:{client_ip}"

        try:
            redis = await get_redis()
            pipe = redis.pipeline()
            pipe.incr(key)
            pipe.expire(key, self.period, nx=True)
            current, _ = await pipe.execute()
        except Exception as e:
            # Без Redis запросы не ограничиваются
            logger.error("Error checking rate limit", error=str(e))
            return await call_next(request)

        if int(current) > calls:
            logger.warning(
                "Rate limit exceeded",
                client_ip=client_ip,
                path=request.url.path,
                bucket=bucket,
                calls=calls,
                period=self.period,
            )
            return error_response(
                status.HTTP_429_TOO_MANY_REQUESTS,
                "RATE_LIMIT_EXCEEDED",
                f"Превышен лимит запросов. Максимум {calls} запросов за {self.period} секунд.",
                headers={"Retry-After": str(self.period)},
            )

        return await call_next(request)
