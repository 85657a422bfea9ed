"""
Celery задачи для валидации BOM в фоне.
"""
import asyncio
from uuid import UUID

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.core.celery_app import celery_app
from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.logging import get_logger
from app.core.redis import close_redis
from app.services.bom_validation import BomValidationService

logger = get_logger(__name__)

# Каждая задача выполняется в собственном event loop, поэтому без пула соединений
db_engine = create_async_engine(settings.DATABASE_URL, echo=False, poolclass=NullPool)
SessionLocal = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@celery_app.task(
    bind=True,
    name="validate_bom_check",
    max_retries=3,
    default_retry_delay=30,
)
def validate_bom_check(self, check_id: str) -> dict:
    """
    Валидация BOM в фоне.

    Args:
        check_id: UUID проверки в виде строки

    Returns:
        Итог валидации
    """
    try:
        return asyncio.run(_validate_async(UUID(check_id)))
    except NotFoundError:
        logger.warning("BOM check not found for validation task", check_id=check_id)
        return {"success": False, "check_id": check_id, "error": "not_found"}
    except Exception as exc:
        logger.error(
            "Error validating BOM check",
            check_id=check_id,
            error=str(exc),
            retries=self.request.retries,
        )
        # Повторная попытка с экспоненциальной задержкой
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)


async def _validate_async(check_id: UUID) -> dict:
    """Асинхронная часть валидации."""
    try:
        async with SessionLocal() as db:
            result = await BomValidationService.run_validation(db, check_id)
            return result.model_dump(mode="json")
    finally:
        # Клиент Redis привязан к event loop задачи
        await close_redis()
