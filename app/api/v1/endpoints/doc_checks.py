"""
Endpoints для проверки технических документов.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import CurrentUser, get_current_user
from app.core.logging import get_logger
from app.schemas.doc_check import DocCheckListResponse, DocCheckResponse
from app.services.doc_check import DocCheckService
from app.services.stats import StatsService
from app.utils.file import validate_upload_file

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/upload",
    response_model=DocCheckResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Проверка документа",
    description="Загрузка текстового документа и проверка орфографии и терминологии",
)
async def upload_document(
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DocCheckResponse:
    """
    Загрузка и проверка документа.

    Ошибка обработки не приводит к ошибке запроса: возвращается
    проверка со статусом failed.

    Raises:
        HTTPException: Если файл невалиден
    """
    file_content, filename = await validate_upload_file(file, settings.doc_extensions_list)

    doc_check = await DocCheckService.run_document_check(
        db=db,
        user_id=current_user.id,
        original_filename=filename,
        file_content=file_content,
    )
    await StatsService.invalidate(current_user.id)

    logger.info(
        "Document uploaded",
        doc_check_id=str(doc_check.id),
        user_id=str(current_user.id),
        status=doc_check.status.value,
    )
    return DocCheckResponse.model_validate(doc_check)


@router.get(
    "/",
    response_model=DocCheckListResponse,
    summary="Список проверок документов",
)
async def list_doc_checks(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DocCheckListResponse:
    doc_checks = await DocCheckService.get_doc_checks_by_user(db, current_user.id)
    return DocCheckListResponse(
        items=[DocCheckResponse.model_validate(d) for d in doc_checks],
        total=len(doc_checks),
    )


@router.get(
    "/{doc_check_id}",
    response_model=DocCheckResponse,
    summary="Информация о проверке документа",
)
async def get_doc_check(
    doc_check_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DocCheckResponse:
    doc_check = await DocCheckService.get_doc_check_by_id(db, doc_check_id, current_user.id)
    if not doc_check:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Проверка документа не найдена",
        )
    return DocCheckResponse.model_validate(doc_check)
