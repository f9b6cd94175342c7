from gapsboard.db.models.board import Board
from gapsboard.db.models.entry import Entry

__all__ = [
    "Board",
    "Entry"
]
