"""
Сервис для работы с проверками BOM.
"""
from uuid import UUID
from typing import Optional, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_

from app.models.bom_check import BomCheck, BomCheckStatus
from app.models.bom_item import BomItem, BomItemStatus
from app.models.bom_correction import BomCorrection
from app.models.validation_issue import ValidationIssue, IssueType, Severity
from app.schemas.bom import BomCheckFilterParams
from app.core.logging import get_logger

logger = get_logger(__name__)


class BomCheckService:
    """Сервис для работы с проверками BOM."""

    @staticmethod
    async def create_check(
        db: AsyncSession,
        user_id: UUID,
        original_filename: str,
        stored_filename: str,
        file_size: int,
        file_hash: str,
    ) -> BomCheck:
        """
        Создание записи о проверке BOM.

        Args:
            db: Сессия БД
            user_id: ID пользователя
            original_filename: Оригинальное имя файла
            stored_filename: Имя файла в бакете загрузок
            file_size: Размер файла
            file_hash: SHA-256 хеш файла

        Returns:
            Созданная проверка
        """
        check = BomCheck(
            user_id=user_id,
            original_filename=original_filename,
            stored_filename=stored_filename,
            file_size=file_size,
            file_hash=file_hash,
            status=BomCheckStatus.PENDING,
        )

        db.add(check)
        await db.commit()
        await db.refresh(check)
        logger.info("BOM check created", check_id=str(check.id), user_id=str(user_id))
        return check

    @staticmethod
    async def get_check_by_id(
        db: AsyncSession,
        check_id: UUID,
        user_id: Optional[UUID] = None,
    ) -> Optional[BomCheck]:
        """
        Получение проверки по ID.

        Args:
            db: Сессия БД
            check_id: ID проверки
            user_id: ID пользователя (для проверки прав доступа)

        Returns:
            Проверка или None
        """
        query = select(BomCheck).where(BomCheck.id == check_id)
        if user_id:
            query = query.where(BomCheck.user_id == user_id)

        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_checks_by_user(
        db: AsyncSession,
        user_id: UUID,
        filters: BomCheckFilterParams,
    ) -> Tuple[List[BomCheck], int]:
        """
        Получение списка проверок пользователя с фильтрацией и пагинацией.

        Args:
            db: Сессия БД
            user_id: ID пользователя
            filters: Параметры фильтрации

        Returns:
            Кортеж (список проверок, общее количество)
        """
        conditions = [BomCheck.user_id == user_id]

        if filters.status:
            try:
                conditions.append(BomCheck.status == BomCheckStatus(filters.status))
            except ValueError:
                pass  # Игнорируем невалидный статус

        if filters.min_score is not None:
            conditions.append(BomCheck.quality_score >= filters.min_score)
        if filters.max_score is not None:
            conditions.append(BomCheck.quality_score <= filters.max_score)

        count_query = select(func.count()).select_from(BomCheck).where(and_(*conditions))
        total_result = await db.execute(count_query)
        total = total_result.scalar() or 0

        order_column = getattr(BomCheck, filters.order_by, BomCheck.created_at)
        query = select(BomCheck).where(and_(*conditions))
        if filters.order_direction == "desc":
            query = query.order_by(order_column.desc())
        else:
            query = query.order_by(order_column.asc())

        offset = (filters.page - 1) * filters.page_size
        query = query.offset(offset).limit(filters.page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    @staticmethod
    async def check_duplicate_by_hash(
        db: AsyncSession,
        file_hash: str,
        user_id: UUID,
    ) -> Optional[BomCheck]:
        """
        Проверка наличия BOM с таким же хешем у пользователя.

        Args:
            db: Сессия БД
            file_hash: SHA-256 хеш файла
            user_id: ID пользователя

        Returns:
            Существующая проверка или None
        """
        result = await db.execute(
            select(BomCheck).where(
                and_(
                    BomCheck.file_hash == file_hash,
                    BomCheck.user_id == user_id,
                )
            ).limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def delete_check(
        db: AsyncSession,
        check_id: UUID,
        user_id: UUID,
    ) -> bool:
        """
        Удаление проверки вместе со строками, замечаниями и исправлениями.

        Returns:
            True если проверка удалена, False если не найдена
        """
        check = await BomCheckService.get_check_by_id(db, check_id, user_id)
        if not check:
            return False

        await db.delete(check)
        await db.commit()
        logger.info("BOM check deleted", check_id=str(check_id), user_id=str(user_id))
        return True

    @staticmethod
    async def update_check_status(
        db: AsyncSession,
        check_id: UUID,
        status: BomCheckStatus,
        error_message: Optional[str] = None,
    ) -> Optional[BomCheck]:
        """
        Обновление статуса проверки.

        Args:
            db: Сессия БД
            check_id: ID проверки
            status: Новый статус
            error_message: Сообщение об ошибке (для статуса failed)

        Returns:
            Обновленная проверка или None
        """
        check = await BomCheckService.get_check_by_id(db, check_id)
        if not check:
            return None

        check.status = status
        check.error_message = error_message
        await db.commit()
        await db.refresh(check)
        logger.info("BOM check status updated", check_id=str(check_id), status=status.value)
        return check

    @staticmethod
    async def get_items(
        db: AsyncSession,
        check_id: UUID,
        status: Optional[str] = None,
    ) -> List[BomItem]:
        """Строки BOM в порядке файла, с фильтром по статусу."""
        query = select(BomItem).where(BomItem.check_id == check_id)
        if status:
            try:
                query = query.where(BomItem.status == BomItemStatus(status))
            except ValueError:
                pass
        query = query.order_by(BomItem.row_index.asc())

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_issues(
        db: AsyncSession,
        check_id: UUID,
        severity: Optional[str] = None,
        issue_type: Optional[str] = None,
    ) -> List[ValidationIssue]:
        """Замечания проверки с фильтрами по серьезности и типу."""
        query = select(ValidationIssue).where(ValidationIssue.check_id == check_id)
        if severity:
            try:
                query = query.where(ValidationIssue.severity == Severity(severity.lower()))
            except ValueError:
                pass
        if issue_type:
            try:
                query = query.where(ValidationIssue.issue_type == IssueType(issue_type.lower()))
            except ValueError:
                pass
        query = query.order_by(ValidationIssue.position.asc())

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_latest_correction(
        db: AsyncSession,
        check_id: UUID,
    ) -> Optional[BomCorrection]:
        """Последнее исправление, созданное для проверки."""
        result = await db.execute(
            select(BomCorrection)
            .where(BomCorrection.check_id == check_id)
            .order_by(BomCorrection.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()
