from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, Dict, List
import uuid
from datetime import datetime

from gapsboard.domains.entries.schemas import EntryResponse


class BoardCreate(BaseModel):
    """Схема для создания доски"""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=10000)
    
    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()


class BoardResponse(BaseModel):
    """Схема для ответа с данными доски"""
    uuid: uuid.UUID
    title: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class BoardEntriesResponse(BaseModel):
    """Схема для доски со всеми записями по разделам"""
    board: BoardResponse
    sections: Dict[str, List[EntryResponse]]
