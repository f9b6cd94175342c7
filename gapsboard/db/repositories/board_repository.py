from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import uuid

from gapsboard.db.models.board import Board as BoardModel
from gapsboard.domains.entities.board import Board


class BoardRepository:
    """Репозиторий для работы с досками"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def create(self, board: Board) -> Board:
        """Создание новой доски"""
        db_board = BoardModel(
            uuid=board.uuid,
            title=board.title,
            description=board.description
        )
        
        self.session.add(db_board)
        await self.session.flush()
        await self.session.refresh(db_board)
        return self._to_domain(db_board)
    
    async def get_by_uuid(self, board_uuid: uuid.UUID) -> Optional[Board]:
        """Получение доски по UUID"""
        result = await self.session.execute(
            select(BoardModel).where(BoardModel.uuid == board_uuid)
        )
        db_board = result.scalar_one_or_none()
        return self._to_domain(db_board) if db_board else None
    
    async def lock(self, board_uuid: uuid.UUID) -> bool:
        """Блокировка строки доски до конца транзакции.

        Возвращает False, если доски нет.
        """
        result = await self.session.execute(
            select(BoardModel.uuid)
            .where(BoardModel.uuid == board_uuid)
            .with_for_update()
        )
        return result.scalar_one_or_none() is not None
    
    def _to_domain(self, db_board: BoardModel) -> Board:
        """Преобразование модели БД в доменную сущность"""
        return Board(
            uuid=db_board.uuid,
            title=db_board.title,
            description=db_board.description,
            created_at=db_board.created_at,
            updated_at=db_board.updated_at
        )
