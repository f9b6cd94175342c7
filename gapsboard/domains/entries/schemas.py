from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
import uuid
from datetime import datetime

from gapsboard.domains.entities.entry import Entry, EntryContent, Section


class EntryContentBase(BaseModel):
    """Базовая схема содержимого записи"""
    content: str = Field(..., min_length=1, max_length=10000)
    tags: List[str] = Field(default_factory=list)
    priority: Optional[str] = Field(None, max_length=32)
    status: Optional[str] = Field("pending", max_length=32)
    ai_generated: bool = False
    confidence: Optional[float] = Field(None, ge=0, le=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('Content cannot be empty')
        return v.strip()

    def to_content(self) -> EntryContent:
        return EntryContent(
            text=self.content,
            tags=self.tags,
            priority=self.priority,
            status=self.status,
            ai_generated=self.ai_generated,
            confidence=self.confidence,
            metadata=self.metadata
        )


class EntryCreate(EntryContentBase):
    """Схема для создания записи"""
    section: Section


class EntryUpdate(EntryContentBase):
    """Схема для обновления содержимого записи"""
    pass


class EntryMove(BaseModel):
    """Схема для перемещения записи"""
    target_section: Section
    target_index: int


class BulkReorderRequest(BaseModel):
    """Схема для полной перестановки раздела"""
    ordered_ids: List[uuid.UUID]


class EntryResponse(BaseModel):
    """Схема для ответа с данными записи.

    Поля без ограничений: ответ отдает то, что лежит в базе.
    """
    uuid: uuid.UUID
    board_id: uuid.UUID
    section: Section
    position: int
    content: str
    tags: List[str] = []
    priority: Optional[str] = None
    status: Optional[str] = None
    ai_generated: bool = False
    confidence: Optional[float] = None
    metadata: Dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, entry: Entry) -> "EntryResponse":
        return cls(
            uuid=entry.uuid,
            board_id=entry.board_id,
            section=entry.section,
            position=entry.position,
            content=entry.content.text,
            tags=entry.content.tags,
            priority=entry.content.priority,
            status=entry.content.status,
            ai_generated=entry.content.ai_generated,
            confidence=entry.content.confidence,
            metadata=entry.content.metadata,
            created_at=entry.created_at,
            updated_at=entry.updated_at
        )


class SectionResponse(BaseModel):
    """Схема для записей одного раздела"""
    section: Section
    entries: List[EntryResponse]


class InvariantReport(BaseModel):
    """Схема для отчета о проверке позиций доски"""
    board_id: uuid.UUID
    ok: bool
    violations: Dict[str, List[str]]
