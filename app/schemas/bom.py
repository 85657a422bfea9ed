"""
Pydantic схемы для проверок BOM.
"""
from datetime import datetime
from uuid import UUID
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.models.bom_check import BomCheckStatus
from app.models.bom_item import BomItemStatus
from app.models.validation_issue import IssueType, Severity


class BomCheckResponse(BaseModel):
    """Схема ответа с информацией о проверке BOM."""

    id: UUID
    user_id: UUID
    original_filename: str
    file_size: int
    status: BomCheckStatus
    quality_score: Optional[float] = None
    total_entries: int = 0
    issues_found: int = 0
    issues_corrected: int = 0
    corrected_file_path: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BomCheckUploadResponse(BomCheckResponse):
    """Схема ответа после загрузки BOM."""

    message: str = Field(default="BOM успешно загружен", description="Сообщение")


class BomCheckListResponse(BaseModel):
    """Схема ответа со списком проверок."""

    items: List[BomCheckResponse] = Field(..., description="Список проверок")
    total: int = Field(..., description="Общее количество проверок")
    page: int = Field(..., description="Текущая страница")
    page_size: int = Field(..., description="Размер страницы")
    pages: int = Field(..., description="Общее количество страниц")


class BomCheckFilterParams(BaseModel):
    """Параметры фильтрации проверок BOM."""

    status: Optional[str] = Field(None, description="Фильтр по статусу")
    min_score: Optional[float] = Field(None, ge=0, le=100, description="Минимальная оценка качества")
    max_score: Optional[float] = Field(None, ge=0, le=100, description="Максимальная оценка качества")
    page: int = Field(default=1, ge=1, description="Номер страницы")
    page_size: int = Field(default=20, ge=1, le=100, description="Размер страницы")
    order_by: str = Field(
        default="created_at",
        pattern="^(created_at|quality_score|issues_found|original_filename)$",
        description="Поле для сортировки",
    )
    order_direction: str = Field(default="desc", pattern="^(asc|desc)$", description="Направление сортировки")


class BomItemResponse(BaseModel):
    """Схема строки BOM."""

    id: UUID
    check_id: UUID
    row_index: int
    part_number: str
    description: Optional[str] = None
    quantity: int
    status: BomItemStatus
    rule_violations: List[Dict[str, Any]] = Field(default_factory=list)
    suggested_corrections: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        from_attributes = True


class ValidationIssueResponse(BaseModel):
    """Схема замечания валидации."""

    id: UUID
    check_id: UUID
    row_index: Optional[int] = None
    issue_type: IssueType
    severity: Severity
    field_name: str
    original_value: Optional[str] = None
    suggested_value: Optional[str] = None
    auto_corrected: bool
    description: str

    class Config:
        from_attributes = True


class ValidationRunResponse(BaseModel):
    """Итог запуска валидации BOM."""

    success: bool = True
    check_id: UUID
    quality_score: float
    total_entries: int
    total_issues: int
    corrected_issues: int


class ComplianceSummaryResponse(BaseModel):
    """Сводка соответствия для пользователя."""

    total_bom_checks: int = 0
    completed_bom_checks: int = 0
    compliant_boms: int = 0
    boms_requiring_review: int = 0
    correction_confidence: float = 0.0
    avg_quality_score: float = 0.0
    total_docs_uploaded: int = 0
    total_docs_checked: int = 0
    docs_fully_corrected: int = 0
    spelling_issues_found: int = 0
    spelling_issues_corrected: int = 0
    terminology_violations: int = 0
    avg_doc_quality_score: float = 0.0
