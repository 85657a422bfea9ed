"""
Сервис справочной библиотеки: стандарты, словари терминов, правила BOM.
"""
import json
from pathlib import Path
from typing import Any, List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidContentError
from app.core.logging import get_logger
from app.models.reference_file import ReferenceFile, ReferenceFileType
from app.schemas.reference import DictionaryEntry
from app.services.terminology import TerminologyService
from app.utils.bom_parser import parse_bom_file

logger = get_logger(__name__)


def _parse_dictionary(rows: Any) -> List[dict]:
    if not isinstance(rows, list):
        raise InvalidContentError("Словарь должен быть списком записей {incorrect, correct}")

    entries = []
    for index, row in enumerate(rows):
        if isinstance(row, dict):
            # Заголовки CSV допускаются в любом регистре
            row = {str(key).strip().lower(): value for key, value in row.items()}
        try:
            entry = DictionaryEntry.model_validate(row)
        except ValidationError as e:
            raise InvalidContentError(
                f"Некорректная запись словаря в позиции {index}",
                details={"index": index, "errors": e.errors(include_url=False)},
            )
        entries.append(entry.model_dump())

    return entries


def parse_reference_content(file_type: ReferenceFileType, filename: str, text: str) -> Any:
    """
    Разбор содержимого справочного файла.

    JSON загружается как есть, CSV превращается в список словарей по
    заголовкам. Для словарей терминов каждая запись проверяется на
    наличие полей incorrect и correct.

    Args:
        file_type: Тип справочного файла
        filename: Имя файла (определяет формат по расширению)
        text: Текст файла

    Returns:
        Разобранное содержимое

    Raises:
        InvalidContentError: Если содержимое не удалось разобрать
    """
    if Path(filename).suffix.lower() == ".json":
        try:
            content = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidContentError(f"Некорректный JSON: {e.msg}", details={"line": e.lineno})
    else:
        content = parse_bom_file(text)

    if file_type == ReferenceFileType.DICTIONARY:
        return _parse_dictionary(content)
    return content


class ReferenceService:
    """Сервис для работы со справочными файлами."""

    @staticmethod
    async def create_reference_file(
        db: AsyncSession,
        uploaded_by: UUID,
        name: str,
        file_type: ReferenceFileType,
        original_filename: str,
        parsed_content: Any,
    ) -> ReferenceFile:
        """
        Сохранение справочного файла; кеш словаря терминов сбрасывается.

        Returns:
            Созданный справочный файл
        """
        reference = ReferenceFile(
            uploaded_by=uploaded_by,
            name=name,
            type=file_type,
            original_filename=original_filename,
            parsed_content=parsed_content,
        )
        db.add(reference)
        await db.commit()
        await db.refresh(reference)

        await TerminologyService.invalidate()
        logger.info(
            "Reference file created",
            reference_id=str(reference.id),
            type=file_type.value,
            uploaded_by=str(uploaded_by),
        )
        return reference

    @staticmethod
    async def list_reference_files(
        db: AsyncSession,
        file_type: Optional[str] = None,
    ) -> List[ReferenceFile]:
        """Справочные файлы библиотеки, новые первыми."""
        query = select(ReferenceFile)
        if file_type:
            try:
                query = query.where(ReferenceFile.type == ReferenceFileType(file_type))
            except ValueError:
                pass
        query = query.order_by(ReferenceFile.created_at.desc())

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def delete_reference_file(
        db: AsyncSession,
        reference_id: UUID,
        user_id: UUID,
    ) -> bool:
        """
        Удаление справочного файла, загруженного пользователем.

        Returns:
            True если файл удален, False если не найден
        """
        result = await db.execute(
            select(ReferenceFile).where(
                ReferenceFile.id == reference_id,
                ReferenceFile.uploaded_by == user_id,
            )
        )
        reference = result.scalar_one_or_none()
        if not reference:
            return False

        await db.delete(reference)
        await db.commit()
        await TerminologyService.invalidate()
        logger.info("Reference file deleted", reference_id=str(reference_id), user_id=str(user_id))
        return True
