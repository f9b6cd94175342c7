from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship

from gapsboard.db.base import BaseModel


class Board(BaseModel):
    __tablename__ = "boards"
    
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    
    # Relationships
    entries = relationship("Entry", back_populates="board", cascade="all, delete-orphan", passive_deletes=True)
