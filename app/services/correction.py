"""
Сервис согласования исправлений BOM.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.logging import get_logger
from app.models.bom_check import BomCheck
from app.models.bom_correction import BomCorrection, CorrectionStatus
from app.utils.metrics import corrections_reviewed_total

logger = get_logger(__name__)


class CorrectionService:
    """Сервис для работы с исправлениями BOM."""

    @staticmethod
    async def get_correction_by_id(
        db: AsyncSession,
        correction_id: UUID,
        user_id: Optional[UUID] = None,
    ) -> Optional[BomCorrection]:
        """
        Получение исправления по ID.

        Args:
            db: Сессия БД
            correction_id: ID исправления
            user_id: ID пользователя (доступ только к исправлениям своих BOM)

        Returns:
            Исправление или None
        """
        query = select(BomCorrection).where(BomCorrection.id == correction_id)
        if user_id:
            query = query.join(BomCheck).where(BomCheck.user_id == user_id)

        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def review_correction(
        db: AsyncSession,
        correction_id: UUID,
        reviewer_id: UUID,
        decision: CorrectionStatus,
    ) -> BomCorrection:
        """
        Согласование или отклонение исправления.

        Args:
            db: Сессия БД
            correction_id: ID исправления
            reviewer_id: ID пользователя, принимающего решение
            decision: approved или rejected

        Returns:
            Обновленное исправление

        Raises:
            NotFoundError: Если исправление не найдено
            ConflictError: Если исправление уже рассмотрено
        """
        if decision == CorrectionStatus.PENDING:
            raise ValueError("Решение должно быть approved или rejected")

        correction = await CorrectionService.get_correction_by_id(db, correction_id, reviewer_id)
        if not correction:
            raise NotFoundError("Исправление не найдено", details={"correction_id": str(correction_id)})

        if correction.status != CorrectionStatus.PENDING:
            raise ConflictError(
                "Исправление уже рассмотрено",
                details={"correction_id": str(correction_id), "status": correction.status.value},
            )

        # Решение записывается, только если исправление все еще pending
        result = await db.execute(
            update(BomCorrection)
            .where(
                BomCorrection.id == correction.id,
                BomCorrection.status == CorrectionStatus.PENDING,
            )
            .values(status=decision, approved_by=reviewer_id, approved_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            await db.refresh(correction)
            logger.warning(
                "BOM correction already reviewed concurrently",
                correction_id=str(correction_id),
                status=correction.status.value,
            )
            raise ConflictError(
                "Исправление уже рассмотрено",
                details={"correction_id": str(correction_id), "status": correction.status.value},
            )

        await db.commit()
        await db.refresh(correction)

        corrections_reviewed_total.labels(decision=decision.value).inc()
        logger.info(
            "BOM correction reviewed",
            correction_id=str(correction_id),
            reviewer_id=str(reviewer_id),
            decision=decision.value,
        )
        return correction
