"""
Pydantic схемы результатов валидации BOM и документов.
"""
from typing import Dict, List

from pydantic import BaseModel, Field

from app.models.validation_issue import IssueType, Severity


class IssueItem(BaseModel):
    """Замечание по одному полю строки BOM."""

    type: IssueType = Field(..., description="Тип замечания")
    severity: Severity = Field(..., description="Серьезность")
    field: str = Field(..., description="Имя поля")
    original: str = Field(default="", description="Исходное значение (слово)")
    suggestion: str = Field(default="", description="Предлагаемое значение")
    description: str = Field(..., description="Описание замечания")
    auto_corrected: bool = Field(default=False, description="Исправлено автоматически")


class EntryValidationResult(BaseModel):
    """Результат валидации строки BOM."""

    entry: Dict[str, str] = Field(..., description="Исходная строка")
    issues: List[IssueItem] = Field(default_factory=list, description="Замечания")
    corrected: Dict[str, str] = Field(..., description="Исправленная строка")

    @property
    def has_corrections(self) -> bool:
        return any(issue.auto_corrected for issue in self.issues)


class DocIssueItem(BaseModel):
    """Замечание в техническом документе."""

    type: IssueType
    severity: Severity
    location: str = Field(..., description="Место в документе, например 'Line 3'")
    original: str
    suggestion: str
    description: str
    auto_corrected: bool = True


class DocumentCheckResult(BaseModel):
    """Результат проверки текста документа."""

    issues: List[DocIssueItem] = Field(default_factory=list)
    corrected_text: str = ""
    lines_checked: int = 0
    quality_score: float = 100.0
