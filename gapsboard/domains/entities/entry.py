import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any

from gapsboard.core.errors import InvalidArgumentError


class Section(Enum):
    """Разделы доски GAPS"""
    GOAL = "goal"
    ANALYSIS = "analysis"
    PLAN = "plan"
    STATUS = "status"

    @classmethod
    def parse(cls, value) -> "Section":
        """Разбор идентификатора раздела"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidArgumentError(f"Unknown section: {value!r}")


@dataclass
class EntryContent:
    """Непрозрачное содержимое записи: текст и необязательные метаданные"""
    text: str
    tags: List[str] = field(default_factory=list)
    priority: Optional[str] = None
    status: Optional[str] = "pending"
    ai_generated: bool = False
    confidence: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PositionShift:
    """Сдвиг позиций в разделе: все позиции в [start, end] меняются на delta.

    end=None означает открытый диапазон до конца раздела.
    """
    section: Section
    start: int
    end: Optional[int]
    delta: int


@dataclass
class MovePlan:
    """План перемещения записи"""
    entry_id: uuid.UUID
    source_section: Section
    source_index: int
    target_section: Section
    target_index: int
    shifts: List[PositionShift] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return self.source_section == self.target_section and self.source_index == self.target_index

    @property
    def crosses_sections(self) -> bool:
        return self.source_section != self.target_section


class Entry:
    """Сущность записи на доске"""

    def __init__(
        self,
        uuid: uuid.UUID,
        board_id: uuid.UUID,
        section: Section,
        position: int,
        content: EntryContent,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.board_id = board_id
        self.section = section
        self.position = position
        self.content = content
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = updated_at or datetime.now(timezone.utc)

    @classmethod
    def create_entry(
        cls,
        board_id: uuid.UUID,
        section: Section,
        position: int,
        content: EntryContent
    ) -> "Entry":
        """Создание новой записи"""
        return cls(
            uuid=uuid.uuid4(),
            board_id=board_id,
            section=section,
            position=position,
            content=content
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Entry):
            return False
        return self.uuid == other.uuid

    def __hash__(self) -> int:
        return hash(self.uuid)

    def __repr__(self) -> str:
        return f"Entry(uuid={self.uuid}, section={self.section.value}, position={self.position})"
