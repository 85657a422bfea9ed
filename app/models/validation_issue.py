"""
Модель замечания валидации.
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Enum, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base


class IssueType(str, enum.Enum):
    """Типы замечаний."""

    SPELLING = "spelling"
    TERMINOLOGY = "terminology"
    FORMATTING = "formatting"
    INCONSISTENCY = "inconsistency"
    MISSING_FIELD = "missing_field"


class Severity(str, enum.Enum):
    """Уровни серьезности замечаний."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ValidationIssue(Base):
    """Модель замечания, найденного при проверке BOM."""

    __tablename__ = "validation_issues"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    check_id = Column(UUID(as_uuid=True), ForeignKey("bom_checks.id", ondelete="CASCADE"), nullable=False, index=True)
    check_type = Column(String(20), nullable=False, default="bom")
    row_index = Column(Integer, nullable=True)
    position = Column(Integer, nullable=False, default=0)  # Порядок замечания внутри проверки
    issue_type = Column(Enum(IssueType), nullable=False, index=True)
    severity = Column(Enum(Severity), nullable=False, index=True)
    field_name = Column(String(255), nullable=False)
    original_value = Column(Text, nullable=True)
    suggested_value = Column(Text, nullable=True)
    auto_corrected = Column(Boolean, nullable=False, default=False)
    description = Column(String(1000), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        {"comment": "Замечания, выявленные при проверке BOM"}
    )

    # Связи
    check = relationship("BomCheck", back_populates="issues")

    def __repr__(self) -> str:
        return f"<ValidationIssue(id={self.id}, type={self.issue_type}, severity={self.severity})>"
