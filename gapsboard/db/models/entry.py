from sqlalchemy import Column, String, Text, Integer, Float, Boolean, ForeignKey, JSON, Uuid, Index
from sqlalchemy.orm import relationship

from gapsboard.db.base import BaseModel


class Entry(BaseModel):
    __tablename__ = "entries"
    
    board_id = Column(Uuid(as_uuid=True), ForeignKey("boards.uuid", ondelete="CASCADE"), nullable=False)
    section = Column(String(32), nullable=False)
    position = Column(Integer, nullable=False)
    
    # Содержимое записи, движок порядка его не читает
    content = Column(Text, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)
    priority = Column(String(32), nullable=True)
    status = Column(String(32), nullable=True)
    ai_generated = Column(Boolean, nullable=False, default=False)
    confidence = Column(Float, nullable=True)
    extra = Column("metadata", JSON, nullable=False, default=dict)
    
    # Relationships
    board = relationship("Board", back_populates="entries")
    
    __table_args__ = (
        Index("ix_entries_board_section_position", "board_id", "section", "position"),
    )
