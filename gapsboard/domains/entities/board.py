import uuid
from datetime import datetime, timezone
from typing import Optional


class Board:
    """Сущность доски"""
    
    def __init__(
        self,
        uuid: uuid.UUID,
        title: str,
        description: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.title = title
        self.description = description
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = updated_at or datetime.now(timezone.utc)
    
    @classmethod
    def create_board(cls, title: str, description: Optional[str] = None) -> "Board":
        """Создание новой доски"""
        return cls(
            uuid=uuid.uuid4(),
            title=title,
            description=description
        )
    
    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return False
        return self.uuid == other.uuid
    
    def __repr__(self) -> str:
        return f"Board(uuid={self.uuid}, title={self.title})"
