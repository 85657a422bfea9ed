"""
Модель исправления BOM, ожидающего согласования.
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Enum, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base


class CorrectionStatus(str, enum.Enum):
    """Статусы согласования исправления."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BomCorrection(Base):
    """Модель исправления BOM."""

    __tablename__ = "bom_corrections"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    check_id = Column(UUID(as_uuid=True), ForeignKey("bom_checks.id", ondelete="CASCADE"), nullable=False, index=True)
    original_data = Column(JSON, nullable=False, default=dict)
    corrected_data = Column(JSON, nullable=False, default=dict)
    changes = Column(JSON, nullable=False, default=list)
    status = Column(Enum(CorrectionStatus), default=CorrectionStatus.PENDING, nullable=False, index=True)
    approved_by = Column(UUID(as_uuid=True), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Связи
    check = relationship("BomCheck", back_populates="corrections")

    def __repr__(self) -> str:
        return f"<BomCorrection(id={self.id}, check_id={self.check_id}, status={self.status})>"
