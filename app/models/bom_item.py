"""
Модель строки BOM.
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base


class BomItemStatus(str, enum.Enum):
    """Статус строки BOM по итогам валидации."""

    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


class BomItem(Base):
    """Модель строки BOM."""

    __tablename__ = "bom_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    check_id = Column(UUID(as_uuid=True), ForeignKey("bom_checks.id", ondelete="CASCADE"), nullable=False, index=True)
    row_index = Column(Integer, nullable=False)
    part_number = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    status = Column(Enum(BomItemStatus), nullable=False, index=True)
    rule_violations = Column(JSON, nullable=False, default=list)
    suggested_corrections = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Связи
    check = relationship("BomCheck", back_populates="items")

    def __repr__(self) -> str:
        return f"<BomItem(id={self.id}, part_number={self.part_number}, status={self.status})>"
