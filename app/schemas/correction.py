"""
Pydantic схемы для исправлений BOM.
"""
from datetime import datetime
from uuid import UUID
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.models.bom_correction import CorrectionStatus


class FieldChange(BaseModel):
    """Автоматическое исправление поля."""

    field: str
    original: str
    corrected: str


class RowChanges(BaseModel):
    """Исправления одной строки BOM."""

    index: int
    changes: List[FieldChange]


class BomCorrectionResponse(BaseModel):
    """Схема ответа с исправлением BOM."""

    id: UUID
    check_id: UUID
    original_data: Dict[str, Any] = Field(default_factory=dict)
    corrected_data: Dict[str, Any] = Field(default_factory=dict)
    changes: List[RowChanges] = Field(default_factory=list)
    status: CorrectionStatus
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
