"""
Модель проверки технического документа.
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Integer, Float, DateTime, Enum, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
import enum

from app.core.database import Base


class DocCheckStatus(str, enum.Enum):
    """Статусы проверки документа."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class DocCheck(Base):
    """Модель проверки документа."""

    __tablename__ = "doc_checks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    original_filename = Column(String(500), nullable=False)
    stored_filename = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    status = Column(Enum(DocCheckStatus), default=DocCheckStatus.PROCESSING, nullable=False, index=True)
    quality_score = Column(Float, nullable=True)
    lines_checked = Column(Integer, nullable=False, default=0)
    issues_found = Column(JSON, nullable=False, default=list)
    corrections_made = Column(JSON, nullable=False, default=list)
    corrected_file_path = Column(String(500), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<DocCheck(id={self.id}, filename={self.original_filename}, status={self.status})>"
