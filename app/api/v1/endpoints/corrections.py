"""
Endpoints для согласования исправлений BOM.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import CurrentUser, get_current_user
from app.models.bom_correction import CorrectionStatus
from app.schemas.correction import BomCorrectionResponse
from app.services.correction import CorrectionService

router = APIRouter()


@router.get(
    "/{correction_id}",
    response_model=BomCorrectionResponse,
    summary="Информация об исправлении",
)
async def get_correction(
    correction_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BomCorrectionResponse:
    correction = await CorrectionService.get_correction_by_id(db, correction_id, current_user.id)
    if not correction:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Исправление не найдено",
        )
    return BomCorrectionResponse.model_validate(correction)


@router.post(
    "/{correction_id}/approve",
    response_model=BomCorrectionResponse,
    summary="Согласование исправления",
    description="Принятие автоматических исправлений BOM. Рассмотренное исправление изменить нельзя",
)
async def approve_correction(
    correction_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BomCorrectionResponse:
    correction = await CorrectionService.review_correction(
        db, correction_id, current_user.id, CorrectionStatus.APPROVED
    )
    return BomCorrectionResponse.model_validate(correction)


@router.post(
    "/{correction_id}/reject",
    response_model=BomCorrectionResponse,
    summary="Отклонение исправления",
)
async def reject_correction(
    correction_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BomCorrectionResponse:
    """
    Отклонение автоматических исправлений BOM.

    Raises:
        NotFoundError: Если исправление не найдено
        ConflictError: Если исправление уже рассмотрено
    """
    correction = await CorrectionService.review_correction(
        db, correction_id, current_user.id, CorrectionStatus.REJECTED
    )
    return BomCorrectionResponse.model_validate(correction)
