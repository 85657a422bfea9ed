"""
Модели базы данных.
"""
from app.models.bom_check import BomCheck, BomCheckStatus
from app.models.bom_item import BomItem, BomItemStatus
from app.models.validation_issue import ValidationIssue, IssueType, Severity
from app.models.bom_correction import BomCorrection, CorrectionStatus
from app.models.reference_file import ReferenceFile, ReferenceFileType
from app.models.doc_check import DocCheck, DocCheckStatus

__all__ = [
    "BomCheck",
    "BomCheckStatus",
    "BomItem",
    "BomItemStatus",
    "ValidationIssue",
    "IssueType",
    "Severity",
    "BomCorrection",
    "CorrectionStatus",
    "ReferenceFile",
    "ReferenceFileType",
    "DocCheck",
    "DocCheckStatus",
]
