"""
Утилиты для работы с файловым хранилищем.

Хранилище разбито на бакеты (подкаталоги FILE_STORAGE_PATH):
загруженные BOM, загруженные документы и исправленные файлы.
"""
import hashlib
import os
import uuid
from pathlib import Path
from typing import List, Tuple

import aiofiles
from fastapi import UploadFile, HTTPException, status

from app.core.config import settings
from app.core.logging import get_logger
from app.utils.validation import sanitize_filename, validate_file_path

logger = get_logger(__name__)

BOM_UPLOADS_BUCKET = "bom-uploads"
DOC_UPLOADS_BUCKET = "doc-uploads"
CORRECTED_FILES_BUCKET = "corrected-files"


def get_bucket_path(bucket: str) -> Path:
    """Путь к каталогу бакета."""
    return Path(settings.FILE_STORAGE_PATH) / bucket


def get_file_path(bucket: str, stored_filename: str) -> str:
    """
    Получение полного пути к файлу.

    Args:
        bucket: Имя бакета
        stored_filename: Имя файла внутри бакета (может содержать подкаталог)

    Returns:
        Полный путь к файлу

    Raises:
        HTTPException: Если путь выходит за пределы бакета
    """
    bucket_path = get_bucket_path(bucket)
    if not validate_file_path(stored_filename, str(bucket_path)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Недопустимый путь к файлу",
        )
    return str(bucket_path / stored_filename)


async def calculate_file_hash(file_content: bytes) -> str:
    """Вычисление SHA-256 хеша содержимого в hex формате."""
    return hashlib.sha256(file_content).hexdigest()


def build_stored_filename(original_filename: str) -> str:
    """Уникальное имя для хранения с сохранением расширения."""
    return f"{uuid.uuid4()}{Path(original_filename).suffix.lower()}"


async def save_file(bucket: str, stored_filename: str, file_content: bytes) -> str:
    """
    Сохранение файла в бакет.

    Args:
        bucket: Имя бакета
        stored_filename: Имя файла внутри бакета
        file_content: Содержимое файла

    Returns:
        Полный путь к сохраненному файлу
    """
    file_path = Path(get_file_path(bucket, stored_filename))
    file_path.parent.mkdir(parents=True, exist_ok=True)

    async with aiofiles.open(file_path, "wb") as f:
        await f.write(file_content)

    logger.info("File saved", bucket=bucket, stored_filename=stored_filename)
    return str(file_path)


async def read_file(file_path: str) -> bytes:
    """
    Чтение файла с диска.

    Raises:
        FileNotFoundError: Если файл отсутствует
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Файл не найден: {file_path}")

    async with aiofiles.open(file_path, "rb") as f:
        return await f.read()


async def delete_file(file_path: str) -> None:
    """Удаление файла с диска; ошибки только логируются."""
    try:
        if os.path.exists(file_path):
            os.remove(file_path)
            logger.info("File deleted", file_path=file_path)
    except OSError as e:
        logger.error("Error deleting file", file_path=file_path, error=str(e))


def decode_text(file_content: bytes) -> str:
    """
    Декодирование текстового файла (UTF-8, допускается BOM-маркер).

    Raises:
        UnicodeDecodeError: Если файл не в UTF-8
    """
    return file_content.decode("utf-8-sig")


async def validate_upload_file(
    file: UploadFile,
    allowed_extensions: List[str],
) -> Tuple[bytes, str]:
    """
    Валидация и чтение загружаемого файла.

    Args:
        file: Загружаемый файл
        allowed_extensions: Разрешенные расширения

    Returns:
        Кортеж (file_content, sanitized_filename)

    Raises:
        HTTPException: Если файл невалиден
    """
    filename = sanitize_filename(file.filename or "")
    extension = Path(filename).suffix.lower()

    if extension not in allowed_extensions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Тип файла не разрешен. Разрешенные расширения: {', '.join(allowed_extensions)}",
        )

    file_content = await file.read()

    if not file_content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Файл пуст",
        )

    if len(file_content) > settings.MAX_FILE_SIZE:
        max_size_mb = settings.MAX_FILE_SIZE / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Размер файла превышает максимально допустимый ({max_size_mb} МБ)",
        )

    return file_content, filename
