from gapsboard.db.repositories.board_repository import BoardRepository
from gapsboard.db.repositories.entry_repository import EntryRepository

__all__ = [
    "BoardRepository",
    "EntryRepository"
]
