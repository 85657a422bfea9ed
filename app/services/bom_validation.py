"""
Конвейер валидации BOM: разбор файла, проверка строк, сохранение
результатов, исправленный CSV и запись исправления на согласование.
"""
import time
from datetime import datetime
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationPipelineError
from app.core.logging import get_logger
from app.models.bom_check import BomCheck, BomCheckStatus
from app.models.bom_correction import BomCorrection, CorrectionStatus
from app.models.bom_item import BomItem
from app.models.validation_issue import ValidationIssue
from app.schemas.bom import ValidationRunResponse
from app.schemas.validation import EntryValidationResult
from app.services.bom_check import BomCheckService
from app.services.stats import StatsService
from app.services.terminology import TerminologyService
from app.services.validator import (
    build_rule_violations,
    build_suggested_corrections,
    calculate_quality_score,
    determine_item_status,
    validate_bom_entry,
)
from app.utils.bom_parser import generate_csv, parse_bom_file, parse_quantity
from app.utils.file import (
    BOM_UPLOADS_BUCKET,
    CORRECTED_FILES_BUCKET,
    decode_text,
    delete_file,
    get_file_path,
    read_file,
    save_file,
)
from app.utils.metrics import (
    bom_checks_processed_total,
    bom_entries_validated_total,
    bom_quality_score,
    bom_validation_duration_seconds,
    validation_issues_detected_total,
)

logger = get_logger(__name__)


def _summary_row(entry: dict, default_part_number: str) -> dict:
    return {
        "part_number": entry.get("partNumber") or default_part_number,
        "description": entry.get("description") or entry.get("partName") or "",
        "quantity": parse_quantity(entry.get("quantity")),
    }


class BomValidationService:
    """Сервис валидации загруженных BOM."""

    @staticmethod
    def build_records(
        check_id: UUID,
        results: List[EntryValidationResult],
    ) -> Tuple[List[BomItem], List[ValidationIssue]]:
        """
        Формирование строк BOM и замечаний для сохранения.

        Args:
            check_id: ID проверки
            results: Результаты валидации строк

        Returns:
            Кортеж (строки BOM, замечания)
        """
        items: List[BomItem] = []
        issues: List[ValidationIssue] = []
        position = 0

        for row_index, result in enumerate(results):
            summary = _summary_row(result.entry, "Unknown")
            items.append(BomItem(
                check_id=check_id,
                row_index=row_index,
                part_number=summary["part_number"],
                description=summary["description"],
                quantity=summary["quantity"],
                status=determine_item_status(result.issues),
                rule_violations=build_rule_violations(result.issues),
                suggested_corrections=build_suggested_corrections(result),
            ))

            for issue in result.issues:
                issues.append(ValidationIssue(
                    check_id=check_id,
                    check_type="bom",
                    row_index=row_index,
                    position=position,
                    issue_type=issue.type,
                    severity=issue.severity,
                    field_name=issue.field,
                    original_value=issue.original,
                    suggested_value=issue.suggestion,
                    auto_corrected=issue.auto_corrected,
                    description=issue.description,
                ))
                position += 1

        return items, issues

    @staticmethod
    def build_correction(
        check_id: UUID,
        results: List[EntryValidationResult],
    ) -> BomCorrection:
        """Запись исправления со сравнением исходных и исправленных строк."""
        changes = []
        for index, result in enumerate(results):
            if not result.has_corrections:
                continue
            changes.append({
                "index": index,
                "changes": [
                    {
                        "field": issue.field,
                        "original": issue.original,
                        "corrected": issue.suggestion,
                    }
                    for issue in result.issues
                    if issue.auto_corrected
                ],
            })

        return BomCorrection(
            check_id=check_id,
            original_data={"items": [_summary_row(r.entry, "") for r in results]},
            corrected_data={"items": [_summary_row(r.corrected, "") for r in results]},
            changes=changes,
            status=CorrectionStatus.PENDING,
        )

    @staticmethod
    async def _reset_results(db: AsyncSession, check: BomCheck) -> None:
        """Удаление результатов предыдущего запуска валидации."""
        await db.execute(delete(BomItem).where(BomItem.check_id == check.id))
        await db.execute(delete(ValidationIssue).where(ValidationIssue.check_id == check.id))
        await db.execute(delete(BomCorrection).where(BomCorrection.check_id == check.id))

        if check.corrected_file_path:
            await delete_file(get_file_path(CORRECTED_FILES_BUCKET, check.corrected_file_path))

        check.quality_score = None
        check.total_entries = 0
        check.issues_found = 0
        check.issues_corrected = 0
        check.validation_result = None
        check.corrected_file_path = None
        check.error_message = None
        check.completed_at = None

    @staticmethod
    async def run_validation(db: AsyncSession, check_id: UUID) -> ValidationRunResponse:
        """
        Валидация загруженного BOM.

        Args:
            db: Сессия БД
            check_id: ID проверки

        Returns:
            Итог валидации

        Raises:
            NotFoundError: Если проверка не найдена
            ValidationPipelineError: При любой ошибке обработки; проверка
                помечается как failed
        """
        check = await BomCheckService.get_check_by_id(db, check_id)
        if not check:
            raise NotFoundError("Проверка BOM не найдена", details={"check_id": str(check_id)})

        user_id = check.user_id
        started = time.perf_counter()
        corrected_filename = None
        try:
            await BomValidationService._reset_results(db, check)
            check.status = BomCheckStatus.PROCESSING
            await db.commit()

            raw = await read_file(get_file_path(BOM_UPLOADS_BUCKET, check.stored_filename))
            entries = parse_bom_file(decode_text(raw))

            terminology = await TerminologyService.get_terminology_map(db)
            results = [validate_bom_entry(entry, terminology) for entry in entries]

            items, issues = BomValidationService.build_records(check.id, results)
            db.add_all(items)
            db.add_all(issues)

            corrected_filename = f"{check.user_id}/{int(time.time() * 1000)}_corrected.csv"
            corrected_csv = generate_csv([result.corrected for result in results])
            await save_file(CORRECTED_FILES_BUCKET, corrected_filename, corrected_csv.encode("utf-8"))

            db.add(BomValidationService.build_correction(check.id, results))

            total_issues = len(issues)
            corrected_issues = sum(1 for issue in issues if issue.auto_corrected)
            quality_score = calculate_quality_score(total_issues, len(entries))

            check.status = BomCheckStatus.COMPLETED
            check.quality_score = quality_score
            check.total_entries = len(entries)
            check.issues_found = total_issues
            check.issues_corrected = corrected_issues
            check.validation_result = {
                "results": [result.model_dump(mode="json") for result in results],
            }
            check.corrected_file_path = corrected_filename
            check.completed_at = datetime.utcnow()

            await db.commit()
            await db.refresh(check)

        except Exception as e:
            await db.rollback()
            if corrected_filename:
                await delete_file(get_file_path(CORRECTED_FILES_BUCKET, corrected_filename))
            await BomCheckService.update_check_status(
                db, check_id, BomCheckStatus.FAILED, error_message=str(e)
            )
            await StatsService.invalidate(user_id)
            bom_checks_processed_total.labels(status="failed").inc()
            logger.error(
                "BOM validation failed",
                check_id=str(check_id),
                error=str(e),
                exc_info=True,
            )
            raise ValidationPipelineError(
                "Ошибка при валидации BOM",
                details={"check_id": str(check_id), "reason": str(e)},
            ) from e

        await StatsService.invalidate(user_id)

        bom_checks_processed_total.labels(status="completed").inc()
        bom_entries_validated_total.inc(len(entries))
        bom_quality_score.observe(quality_score)
        bom_validation_duration_seconds.observe(time.perf_counter() - started)
        for issue in issues:
            validation_issues_detected_total.labels(
                issue_type=issue.issue_type.value,
                severity=issue.severity.value,
            ).inc()

        logger.info(
            "BOM check completed",
            check_id=str(check_id),
            total_entries=len(entries),
            total_issues=total_issues,
            corrected_issues=corrected_issues,
            quality_score=quality_score,
        )

        return ValidationRunResponse(
            check_id=check_id,
            quality_score=quality_score,
            total_entries=len(entries),
            total_issues=total_issues,
            corrected_issues=corrected_issues,
        )
