"""
Pydantic схемы для проверок документов.
"""
from datetime import datetime
from uuid import UUID
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.doc_check import DocCheckStatus
from app.schemas.validation import DocIssueItem


class DocCheckResponse(BaseModel):
    """Схема ответа с проверкой документа."""

    id: UUID
    user_id: UUID
    original_filename: str
    file_size: int
    status: DocCheckStatus
    quality_score: Optional[float] = None
    lines_checked: int = 0
    issues_found: List[DocIssueItem] = Field(default_factory=list)
    corrections_made: List[DocIssueItem] = Field(default_factory=list)
    corrected_file_path: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DocCheckListResponse(BaseModel):
    """Схема ответа со списком проверок документов."""

    items: List[DocCheckResponse]
    total: int
