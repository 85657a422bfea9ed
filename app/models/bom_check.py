"""
Модель проверки BOM.
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Integer, Float, DateTime, Enum, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base


class BomCheckStatus(str, enum.Enum):
    """Статусы проверки BOM."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class BomCheck(Base):
    """Модель проверки BOM: загруженный файл и итог его валидации."""

    __tablename__ = "bom_checks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    original_filename = Column(String(500), nullable=False)
    stored_filename = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_hash = Column(String(64), nullable=False, index=True)  # SHA-256
    status = Column(Enum(BomCheckStatus), default=BomCheckStatus.PENDING, nullable=False, index=True)

    # Итог валидации
    quality_score = Column(Float, nullable=True)
    total_entries = Column(Integer, nullable=False, default=0)
    issues_found = Column(Integer, nullable=False, default=0)
    issues_corrected = Column(Integer, nullable=False, default=0)
    validation_result = Column(JSON, nullable=True)
    corrected_file_path = Column(String(500), nullable=True)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    # Связи
    items = relationship("BomItem", back_populates="check", cascade="all, delete-orphan")
    issues = relationship("ValidationIssue", back_populates="check", cascade="all, delete-orphan")
    corrections = relationship("BomCorrection", back_populates="check", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<BomCheck(id={self.id}, filename={self.original_filename}, status={self.status})>"
