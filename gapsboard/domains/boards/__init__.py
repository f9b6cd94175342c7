from gapsboard.domains.entities.board import Board
from gapsboard.domains.boards.schemas import BoardCreate, BoardResponse, BoardEntriesResponse
from gapsboard.domains.boards.services import BoardService, get_board_service

__all__ = [
    "Board",
    "BoardCreate", "BoardResponse", "BoardEntriesResponse",
    "BoardService", "get_board_service"
]
