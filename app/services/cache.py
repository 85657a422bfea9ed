"""
JSON-кеш в Redis для словаря терминов и сводок.
"""
import json
from typing import Optional, Any

from app.core.config import settings
from app.core.redis import get_redis
from app.core.logging import get_logger
from app.utils.metrics import cache_requests_total

logger = get_logger(__name__)


class CacheService:
    """
    Сервис для работы с кешем.

    Ключи хранятся с префиксом CACHE_KEY_PREFIX, чтобы несколько окружений
    могли делить один Redis. Недоступность Redis не прерывает запрос:
    чтение считается промахом, запись пропускается.
    """

    @staticmethod
    def _key(key: str) -> str:
        return f"{settings.CACHE_KEY_PREFIX}:{key}"

    @staticmethod
    async def get(key: str) -> Optional[Any]:
        """
        Получение значения из кеша.

        Args:
            key: Ключ без префикса

        Returns:
            Значение или None при промахе или ошибке
        """
        try:
            redis = await get_redis()
            raw = await redis.get(CacheService._key(key))
        except Exception as e:
            cache_requests_total.labels(result="error").inc()
            logger.warning("Cache read failed", key=key, error=str(e))
            return None

        if raw is None:
            cache_requests_total.labels(result="miss").inc()
            return None

        cache_requests_total.labels(result="hit").inc()
        return json.loads(raw)

    @staticmethod
    async def set(key: str, value: Any, ttl: int) -> bool:
        """
        Сохранение JSON-сериализуемого значения на ttl секунд.

        Returns:
            True если значение записано
        """
        payload = json.dumps(value, ensure_ascii=False, default=str)
        try:
            redis = await get_redis()
            await redis.setex(CacheService._key(key), ttl, payload)
        except Exception as e:
            logger.warning("Cache write failed", key=key, error=str(e))
            return False
        return True

    @staticmethod
    async def delete(key: str) -> None:
        try:
            redis = await get_redis()
            await redis.delete(CacheService._key(key))
        except Exception as e:
            logger.warning("Cache delete failed", key=key, error=str(e))
