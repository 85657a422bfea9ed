"""
Словарь терминов: встроенная таблица исправлений и пользовательские словари.
"""
from typing import Any, Dict, Iterable, Mapping, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.config import settings
from app.core.logging import get_logger
from app.models.reference_file import ReferenceFile, ReferenceFileType
from app.services.cache import CacheService

logger = get_logger(__name__)

TERMINOLOGY_CACHE_KEY = "terminology:map"

# Ошибочное написание или сокращение -> канонический термин
COMMON_TERMS: Tuple[Tuple[str, str], ...] = (
    ("Blad", "Blade"),
    ("Blad3", "Blade 3"),
    ("blde", "blade"),
    ("Hubm", "Hub"),
    ("Nacele", "Nacelle"),
    ("nacell", "nacelle"),
    ("Gearbox", "Gearbox"),
    ("grbx", "gearbox"),
    ("Generator", "Generator"),
    ("genrtr", "generator"),
    ("Rotor", "Rotor"),
    ("rotr", "rotor"),
    ("Tower", "Tower"),
    ("towr", "tower"),
    ("Foundation", "Foundation"),
    ("foundtn", "foundation"),
    ("Stator", "Stator"),
    ("Bearing", "Bearing"),
    ("brng", "bearing"),
)


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def build_terminology_map(reference_files: Iterable[Any]) -> Dict[str, str]:
    """
    Построение словаря терминов.

    Ключи приводятся к нижнему регистру, значения сохраняют регистр.
    Записи пользовательских словарей перекрывают встроенную таблицу,
    более поздние записи перекрывают более ранние.

    Args:
        reference_files: Справочные файлы (модели или словари с полями
            type и parsed_content)

    Returns:
        Словарь ошибочный термин -> канонический термин
    """
    terminology: Dict[str, str] = {wrong.lower(): correct for wrong, correct in COMMON_TERMS}

    for reference in reference_files:
        file_type = _field(reference, "type")
        if file_type not in (ReferenceFileType.DICTIONARY, ReferenceFileType.DICTIONARY.value):
            continue

        content = _field(reference, "parsed_content")
        if not isinstance(content, list):
            continue

        for item in content:
            if not isinstance(item, Mapping):
                continue
            incorrect = item.get("incorrect")
            correct = item.get("correct")
            if incorrect and correct:
                terminology[str(incorrect).lower()] = str(correct)

    return terminology


class TerminologyService:
    """Сервис получения словаря терминов."""

    @staticmethod
    async def get_terminology_map(db: AsyncSession) -> Dict[str, str]:
        """
        Получение словаря терминов с учетом справочных файлов из БД.

        Args:
            db: Сессия БД

        Returns:
            Словарь терминов
        """
        cached = await CacheService.get(TERMINOLOGY_CACHE_KEY)
        if cached:
            return cached

        result = await db.execute(
            select(ReferenceFile)
            .where(
                ReferenceFile.type.in_([
                    ReferenceFileType.STANDARD,
                    ReferenceFileType.DICTIONARY,
                    ReferenceFileType.BOM_RULES,
                ])
            )
            .order_by(ReferenceFile.created_at.asc())
        )
        reference_files = result.scalars().all()

        terminology = build_terminology_map(reference_files)
        logger.info(
            "Terminology map built",
            reference_files=len(reference_files),
            terms=len(terminology),
        )

        await CacheService.set(TERMINOLOGY_CACHE_KEY, terminology, ttl=settings.TERMINOLOGY_CACHE_TTL)
        return terminology

    @staticmethod
    async def invalidate() -> None:
        """Сброс кеша словаря после изменения справочных файлов."""
        await CacheService.delete(TERMINOLOGY_CACHE_KEY)
