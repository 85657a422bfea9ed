"""
Pydantic схемы для справочных файлов.
"""
from datetime import datetime
from uuid import UUID
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from app.models.reference_file import ReferenceFileType


class DictionaryEntry(BaseModel):
    """Запись пользовательского словаря терминов."""

    incorrect: str = Field(..., min_length=1, description="Ошибочное написание")
    correct: str = Field(..., min_length=1, description="Канонический термин")


class ReferenceFileResponse(BaseModel):
    """Схема ответа со справочным файлом."""

    id: UUID
    uploaded_by: UUID
    name: str
    type: ReferenceFileType
    original_filename: str
    parsed_content: Optional[Any] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ReferenceFileListResponse(BaseModel):
    """Схема ответа со списком справочных файлов."""

    items: List[ReferenceFileResponse]
    total: int
