"""
Endpoints для проверок BOM.
"""
import math
import os
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Request, Query
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import CurrentUser, get_current_user
from app.core.logging import get_logger
from app.models.bom_check import BomCheck
from app.schemas.bom import (
    BomCheckFilterParams,
    BomCheckListResponse,
    BomCheckResponse,
    BomCheckUploadResponse,
    BomItemResponse,
    ComplianceSummaryResponse,
    ValidationIssueResponse,
    ValidationRunResponse,
)
from app.schemas.correction import BomCorrectionResponse
from app.services.bom_check import BomCheckService
from app.services.bom_validation import BomValidationService
from app.services.stats import StatsService
from app.utils.file import (
    BOM_UPLOADS_BUCKET,
    CORRECTED_FILES_BUCKET,
    build_stored_filename,
    calculate_file_hash,
    decode_text,
    delete_file,
    get_file_path,
    save_file,
    validate_upload_file,
)
from app.utils.metrics import bom_checks_uploaded_total

logger = get_logger(__name__)

router = APIRouter()


async def _get_owned_check(db: AsyncSession, check_id: UUID, user: CurrentUser) -> BomCheck:
    check = await BomCheckService.get_check_by_id(db, check_id, user.id)
    if not check:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Проверка BOM не найдена",
        )
    return check


@router.post(
    "/upload",
    response_model=BomCheckUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Загрузка BOM",
    description="Загрузка CSV-файла BOM и запуск его валидации",
)
async def upload_bom(
    request: Request,
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BomCheckUploadResponse:
    """
    Загрузка BOM.

    Валидация выполняется в запросе либо ставится в очередь Celery,
    если включен VALIDATION_ASYNC.

    Raises:
        HTTPException: Если файл невалиден или дубликат
    """
    file_content, filename = await validate_upload_file(file, settings.bom_extensions_list)

    try:
        decode_text(file_content)
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Файл BOM должен быть в кодировке UTF-8",
        )

    file_hash = await calculate_file_hash(file_content)
    existing = await BomCheckService.check_duplicate_by_hash(db, file_hash, current_user.id)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="BOM с таким содержимым уже существует",
        )

    stored_filename = f"{current_user.id}/{build_stored_filename(filename)}"
    file_path = await save_file(BOM_UPLOADS_BUCKET, stored_filename, file_content)

    try:
        check = await BomCheckService.create_check(
            db=db,
            user_id=current_user.id,
            original_filename=filename,
            stored_filename=stored_filename,
            file_size=len(file_content),
            file_hash=file_hash,
        )
    except Exception as e:
        await delete_file(file_path)
        logger.error("Error uploading BOM", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Ошибка при загрузке BOM",
        )

    bom_checks_uploaded_total.inc()
    logger.info(
        "BOM uploaded",
        check_id=str(check.id),
        user_id=str(current_user.id),
        filename=filename,
        file_size=len(file_content),
        ip_address=request.client.host if request.client else "unknown",
    )

    if settings.VALIDATION_ASYNC:
        from app.tasks.validation_tasks import validate_bom_check

        validate_bom_check.delay(str(check.id))
        message = "BOM загружен, валидация поставлена в очередь"
    else:
        await BomValidationService.run_validation(db, check.id)
        check = await BomCheckService.get_check_by_id(db, check.id)
        message = "BOM успешно загружен и проверен"

    await StatsService.invalidate(current_user.id)

    response_data = BomCheckResponse.model_validate(check)
    return BomCheckUploadResponse(**response_data.model_dump(), message=message)


@router.get(
    "/",
    response_model=BomCheckListResponse,
    summary="Список проверок BOM",
    description="Получение списка проверок пользователя с пагинацией и фильтрацией",
)
async def list_bom_checks(
    status: str | None = None,
    min_score: float | None = Query(None, ge=0, le=100),
    max_score: float | None = Query(None, ge=0, le=100),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    order_by: str = Query("created_at", pattern="^(created_at|quality_score|issues_found|original_filename)$"),
    order_direction: str = Query("desc", pattern="^(asc|desc)$"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BomCheckListResponse:
    """
    Получение списка проверок BOM.

    Args:
        status: Фильтр по статусу (pending, processing, completed, failed)
        min_score: Минимальная оценка качества
        max_score: Максимальная оценка качества
        page: Номер страницы
        page_size: Размер страницы
        order_by: Поле для сортировки
        order_direction: Направление сортировки (asc/desc)
    """
    filters = BomCheckFilterParams(
        status=status,
        min_score=min_score,
        max_score=max_score,
        page=page,
        page_size=page_size,
        order_by=order_by,
        order_direction=order_direction,
    )

    checks, total = await BomCheckService.get_checks_by_user(db, current_user.id, filters)
    pages = math.ceil(total / page_size) if total > 0 else 0

    return BomCheckListResponse(
        items=[BomCheckResponse.model_validate(check) for check in checks],
        total=total,
        page=page,
        page_size=page_size,
        pages=pages,
    )


@router.get(
    "/summary",
    response_model=ComplianceSummaryResponse,
    summary="Сводка соответствия",
    description="Показатели соответствия по проверкам BOM и документов пользователя",
)
async def get_compliance_summary(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ComplianceSummaryResponse:
    return await StatsService.get_compliance_summary(db, current_user.id)


@router.get(
    "/{check_id}",
    response_model=BomCheckResponse,
    summary="Информация о проверке BOM",
)
async def get_bom_check(
    check_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BomCheckResponse:
    """
    Получение информации о проверке.

    Raises:
        HTTPException: Если проверка не найдена или нет прав доступа
    """
    check = await _get_owned_check(db, check_id, current_user)
    return BomCheckResponse.model_validate(check)


@router.delete(
    "/{check_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удаление проверки BOM",
    description="Удаление проверки, ее результатов и связанных файлов",
)
async def delete_bom_check(
    check_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Удаление проверки BOM.

    Raises:
        HTTPException: Если проверка не найдена или нет прав доступа
    """
    check = await _get_owned_check(db, check_id, current_user)

    await delete_file(get_file_path(BOM_UPLOADS_BUCKET, check.stored_filename))
    if check.corrected_file_path:
        await delete_file(get_file_path(CORRECTED_FILES_BUCKET, check.corrected_file_path))

    deleted = await BomCheckService.delete_check(db, check_id, current_user.id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Проверка BOM не найдена",
        )

    await StatsService.invalidate(current_user.id)


@router.post(
    "/{check_id}/validate",
    response_model=ValidationRunResponse,
    summary="Повторная валидация BOM",
    description="Запуск валидации загруженного BOM; результаты предыдущего запуска заменяются",
)
async def validate_bom(
    check_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ValidationRunResponse:
    """
    Валидация BOM.

    Raises:
        HTTPException: Если проверка не найдена
        ValidationPipelineError: Если валидация завершилась ошибкой
    """
    await _get_owned_check(db, check_id, current_user)
    return await BomValidationService.run_validation(db, check_id)


@router.get(
    "/{check_id}/items",
    response_model=List[BomItemResponse],
    summary="Строки BOM",
    description="Строки BOM с результатами проверки, фильтр по статусу (valid, warning, error)",
)
async def get_bom_items(
    check_id: UUID,
    status: str | None = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[BomItemResponse]:
    await _get_owned_check(db, check_id, current_user)
    items = await BomCheckService.get_items(db, check_id, status)
    return [BomItemResponse.model_validate(item) for item in items]


@router.get(
    "/{check_id}/issues",
    response_model=List[ValidationIssueResponse],
    summary="Замечания проверки BOM",
)
async def get_bom_issues(
    check_id: UUID,
    severity: str | None = None,
    issue_type: str | None = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[ValidationIssueResponse]:
    """
    Замечания проверки.

    Args:
        check_id: ID проверки
        severity: Фильтр по серьезности (critical, high, medium, low)
        issue_type: Фильтр по типу (spelling, terminology, missing_field, ...)
    """
    await _get_owned_check(db, check_id, current_user)
    issues = await BomCheckService.get_issues(db, check_id, severity, issue_type)
    return [ValidationIssueResponse.model_validate(issue) for issue in issues]


@router.get(
    "/{check_id}/corrected",
    summary="Скачивание исправленного BOM",
    description="Скачивание CSV с автоматически исправленными значениями",
)
async def download_corrected_bom(
    check_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FileResponse:
    check = await _get_owned_check(db, check_id, current_user)
    if not check.corrected_file_path:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Исправленный файл еще не сформирован",
        )

    file_path = get_file_path(CORRECTED_FILES_BUCKET, check.corrected_file_path)
    if not os.path.exists(file_path):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Файл не найден на сервере",
        )

    base_name = os.path.splitext(check.original_filename)[0]
    return FileResponse(
        path=file_path,
        filename=f"{base_name}_corrected.csv",
        media_type="text/csv",
    )


@router.get(
    "/{check_id}/correction",
    response_model=BomCorrectionResponse,
    summary="Исправление BOM",
    description="Последнее исправление, ожидающее согласования или уже рассмотренное",
)
async def get_bom_correction(
    check_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BomCorrectionResponse:
    await _get_owned_check(db, check_id, current_user)
    correction = await BomCheckService.get_latest_correction(db, check_id)
    if not correction:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Исправление не найдено",
        )
    return BomCorrectionResponse.model_validate(correction)
