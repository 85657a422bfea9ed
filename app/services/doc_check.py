"""
Сервис проверки технических документов по словарю терминов.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.doc_check import DocCheck, DocCheckStatus
from app.services.terminology import TerminologyService
from app.services.validator import check_document_text
from app.utils.file import (
    CORRECTED_FILES_BUCKET,
    DOC_UPLOADS_BUCKET,
    build_stored_filename,
    decode_text,
    save_file,
)
from app.utils.metrics import doc_checks_processed_total

logger = get_logger(__name__)


class DocCheckService:
    """Сервис для проверок документов."""

    @staticmethod
    async def run_document_check(
        db: AsyncSession,
        user_id: UUID,
        original_filename: str,
        file_content: bytes,
    ) -> DocCheck:
        """
        Сохранение документа и его проверка.

        Ошибки обработки не пробрасываются: проверка сохраняется со
        статусом failed и текстом ошибки.

        Args:
            db: Сессия БД
            user_id: ID пользователя
            original_filename: Имя загруженного файла
            file_content: Содержимое файла

        Returns:
            Проверка документа
        """
        stored_filename = build_stored_filename(original_filename)
        await save_file(DOC_UPLOADS_BUCKET, f"{user_id}/{stored_filename}", file_content)

        doc_check = DocCheck(
            user_id=user_id,
            original_filename=original_filename,
            stored_filename=f"{user_id}/{stored_filename}",
            file_size=len(file_content),
            status=DocCheckStatus.PROCESSING,
        )
        db.add(doc_check)
        await db.commit()
        await db.refresh(doc_check)
        doc_check_id = doc_check.id

        try:
            text = decode_text(file_content)
            terminology = await TerminologyService.get_terminology_map(db)
            result = check_document_text(text, terminology)

            corrected_filename = f"{user_id}/{doc_check_id}_corrected.txt"
            await save_file(CORRECTED_FILES_BUCKET, corrected_filename, result.corrected_text.encode("utf-8"))

            issues = [issue.model_dump(mode="json") for issue in result.issues]
            doc_check.status = DocCheckStatus.COMPLETED
            doc_check.quality_score = result.quality_score
            doc_check.lines_checked = result.lines_checked
            doc_check.issues_found = issues
            doc_check.corrections_made = [issue for issue in issues if issue["auto_corrected"]]
            doc_check.corrected_file_path = corrected_filename
            doc_check.completed_at = datetime.utcnow()
            await db.commit()

        except Exception as e:
            await db.rollback()
            doc_check = await DocCheckService.get_doc_check_by_id(db, doc_check_id)
            doc_check.status = DocCheckStatus.FAILED
            doc_check.error_message = str(e)
            await db.commit()
            doc_checks_processed_total.labels(status="failed").inc()
            logger.error("Document check failed", doc_check_id=str(doc_check_id), error=str(e))
            await db.refresh(doc_check)
            return doc_check

        await db.refresh(doc_check)
        doc_checks_processed_total.labels(status="completed").inc()
        logger.info(
            "Document check completed",
            doc_check_id=str(doc_check_id),
            lines_checked=result.lines_checked,
            issues=len(result.issues),
            quality_score=result.quality_score,
        )
        return doc_check

    @staticmethod
    async def get_doc_check_by_id(
        db: AsyncSession,
        doc_check_id: UUID,
        user_id: Optional[UUID] = None,
    ) -> Optional[DocCheck]:
        """Проверка документа по ID с опциональной проверкой владельца."""
        query = select(DocCheck).where(DocCheck.id == doc_check_id)
        if user_id:
            query = query.where(DocCheck.user_id == user_id)

        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_doc_checks_by_user(db: AsyncSession, user_id: UUID) -> List[DocCheck]:
        """Проверки документов пользователя, новые первыми."""
        result = await db.execute(
            select(DocCheck)
            .where(DocCheck.user_id == user_id)
            .order_by(DocCheck.created_at.desc())
        )
        return list(result.scalars().all())
