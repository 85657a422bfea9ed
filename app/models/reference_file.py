"""
Модель справочного файла (стандарты, словари терминов, правила BOM).
"""
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Enum, JSON
from sqlalchemy.dialects.postgresql import UUID
import enum

from app.core.database import Base


class ReferenceFileType(str, enum.Enum):
    """Типы справочных файлов."""

    STANDARD = "standard"
    DICTIONARY = "dictionary"
    BOM_RULES = "bom_rules"


class ReferenceFile(Base):
    """Модель справочного файла."""

    __tablename__ = "reference_files"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    uploaded_by = Column(UUID(as_uuid=True), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(Enum(ReferenceFileType), nullable=False, index=True)
    original_filename = Column(String(500), nullable=False)
    parsed_content = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<ReferenceFile(id={self.id}, name={self.name}, type={self.type})>"
