"""
Endpoints справочной библиотеки.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import CurrentUser, get_current_user
from app.models.reference_file import ReferenceFileType
from app.schemas.reference import ReferenceFileListResponse, ReferenceFileResponse
from app.services.reference import ReferenceService, parse_reference_content
from app.utils.file import decode_text, validate_upload_file
from app.utils.validation import sanitize_string

router = APIRouter()


@router.post(
    "/upload",
    response_model=ReferenceFileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Загрузка справочного файла",
    description="Загрузка стандарта, словаря терминов или правил BOM в формате JSON или CSV",
)
async def upload_reference_file(
    name: str = Form(..., min_length=1, max_length=255),
    type: ReferenceFileType = Form(...),
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ReferenceFileResponse:
    """
    Загрузка справочного файла.

    Словари терминов сразу участвуют в проверках BOM и документов.

    Raises:
        HTTPException: Если файл невалиден
        InvalidContentError: Если содержимое не удалось разобрать
    """
    file_content, filename = await validate_upload_file(file, settings.reference_extensions_list)

    try:
        text = decode_text(file_content)
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Справочный файл должен быть в кодировке UTF-8",
        )

    parsed_content = parse_reference_content(type, filename, text)

    reference = await ReferenceService.create_reference_file(
        db=db,
        uploaded_by=current_user.id,
        name=sanitize_string(name, max_length=255),
        file_type=type,
        original_filename=filename,
        parsed_content=parsed_content,
    )
    return ReferenceFileResponse.model_validate(reference)


@router.get(
    "/",
    response_model=ReferenceFileListResponse,
    summary="Список справочных файлов",
)
async def list_reference_files(
    type: str | None = None,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ReferenceFileListResponse:
    references = await ReferenceService.list_reference_files(db, type)
    return ReferenceFileListResponse(
        items=[ReferenceFileResponse.model_validate(ref) for ref in references],
        total=len(references),
    )


@router.delete(
    "/{reference_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Удаление справочного файла",
    description="Удалить можно только файл, загруженный текущим пользователем",
)
async def delete_reference_file(
    reference_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    deleted = await ReferenceService.delete_reference_file(db, reference_id, current_user.id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Справочный файл не найден",
        )
