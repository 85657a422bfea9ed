"""
Скрипт для инициализации базы данных и файлового хранилища.
Используется для создания таблиц без миграций (для разработки).
"""
import argparse
import asyncio
from uuid import UUID

from app.core.database import init_db, engine
from app.core.logging import setup_logging, get_logger
from app.models import *  # noqa: F401, F403
from app.utils.file import (
    BOM_UPLOADS_BUCKET,
    CORRECTED_FILES_BUCKET,
    DOC_UPLOADS_BUCKET,
    get_bucket_path,
)
from app.utils.jwt import create_access_token

logger = get_logger("scripts.init_db")


async def main(dev_user: UUID | None = None):
    """Создание таблиц и каталогов бакетов."""
    logger.info("Initializing database...")
    await init_db()
    await engine.dispose()

    for bucket in (BOM_UPLOADS_BUCKET, DOC_UPLOADS_BUCKET, CORRECTED_FILES_BUCKET):
        path = get_bucket_path(bucket)
        path.mkdir(parents=True, exist_ok=True)
        logger.info("Bucket ready", bucket=bucket, path=str(path))

    logger.info("Database initialized successfully")

    if dev_user:
        # Токен для локальной работы без внешнего identity provider
        print(create_access_token({"sub": str(dev_user)}))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Инициализация БД BOMAudit")
    parser.add_argument(
        "--dev-token",
        type=UUID,
        metavar="USER_ID",
        help="Выпустить токен доступа для указанного пользователя",
    )
    args = parser.parse_args()

    setup_logging()
    asyncio.run(main(args.dev_token))
