import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from gapsboard.core.errors import NotFoundError
from gapsboard.db.repositories.board_repository import BoardRepository
from gapsboard.domains.entities.board import Board
from gapsboard.domains.entries.store import TransactionalStore, get_store

logger = logging.getLogger(__name__)


class BoardService:
    """Сервис для работы с досками"""
    
    def __init__(self, store: TransactionalStore):
        self.store = store
    
    async def create_board(self, title: str, description: Optional[str] = None) -> Board:
        """Создание новой доски"""
        board = Board.create_board(title=title, description=description)
        
        async def work(session: AsyncSession) -> Board:
            return await BoardRepository(session).create(board)
        
        created = await self.store.write(work)
        logger.info(f"Created board {created.uuid}")
        return created
    
    async def get_board(self, board_id: uuid.UUID) -> Board:
        """Получение доски по UUID"""
        
        async def work(session: AsyncSession) -> Board:
            board = await BoardRepository(session).get_by_uuid(board_id)
            if board is None:
                raise NotFoundError(f"Board {board_id} not found")
            return board
        
        return await self.store.read(work)


def get_board_service() -> BoardService:
    return BoardService(get_store())
