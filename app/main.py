"""
Точка входа BOMAudit API.

Запуск: uvicorn app.main:app
"""
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.database import close_db, get_db
from app.core.exceptions import (
    APIException,
    api_exception_handler,
    general_exception_handler,
    validation_exception_handler,
)
from app.core.logging import get_logger, setup_logging
from app.core.redis import close_redis, init_redis, ping_redis
from app.middleware.metrics import MetricsMiddleware
from app.middleware.query_logger import QueryLoggerMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.security import SecurityHeadersMiddleware
from app.utils.metrics import get_metrics_response

VERSION = "1.0.0"

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting BOMAudit API",
        version=VERSION,
        validation_async=settings.VALIDATION_ASYNC,
        storage=settings.FILE_STORAGE_PATH,
    )
    await init_redis()

    yield

    await close_redis()
    await close_db()
    logger.info("BOMAudit API stopped")


def register_middleware(app: FastAPI) -> None:
    """
    Подключение middleware.

    Добавленный последним выполняется первым: CORS, затем логирование
    запроса с привязкой request_id, затем остальные.
    """
    if not settings.DEBUG:
        app.add_middleware(RateLimitMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(QueryLoggerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )


app = FastAPI(
    title="BOMAudit API",
    description="Проверка спецификаций BOM и технических документов на соответствие терминологии",
    version=VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

register_middleware(app)

app.add_exception_handler(APIException, api_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(api_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    return {"message": "BOMAudit API", "version": VERSION, "docs": "/api/docs"}


@app.get("/health", tags=["service"])
async def health_check():
    """Процесс жив и отвечает."""
    return {"status": "ok"}


@app.get("/health/ready", tags=["service"])
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Готовность принимать запросы: доступны БД и Redis."""
    checks = {"database": "ok", "redis": "ok"}

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database readiness check failed", error=str(e))
        checks["database"] = "unavailable"

    if not await ping_redis():
        checks["redis"] = "unavailable"

    ready = all(value == "ok" for value in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "not_ready", **checks},
    )


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return get_metrics_response()
