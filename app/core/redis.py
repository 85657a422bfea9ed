"""
Подключение к Redis: кеш словаря терминов и сводок, rate limiting.
"""
import redis.asyncio as redis
from redis.asyncio import Redis

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """Создание клиента; соединения открываются при первой команде."""
    global redis_client
    redis_client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    )
    return redis_client


async def get_redis() -> Redis:
    if redis_client is None:
        return await init_redis()
    return redis_client


async def ping_redis() -> bool:
    """Доступность Redis для проверки готовности."""
    try:
        client = await get_redis()
        return bool(await client.ping())
    except Exception as e:
        logger.warning("Redis ping failed", error=str(e))
        return False


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
