import asyncio
import logging
import uuid
import weakref
from functools import lru_cache
from typing import Awaitable, Callable, Dict, List, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from gapsboard.core.config import settings
from gapsboard.core.db import SessionLocal
from gapsboard.core.errors import (
    ConflictError, InvariantViolationError, NotFoundError, StoreUnavailableError
)
from gapsboard.db.repositories.board_repository import BoardRepository
from gapsboard.db.repositories.entry_repository import EntryRepository
from gapsboard.domains.entities.entry import Section
from gapsboard.domains.entries.ordering import check_invariant, find_violations

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLSTATE: serialization_failure, deadlock_detected
CONFLICT_SQLSTATES = {"40001", "40P01"}
CONFLICT_MESSAGES = ("database is locked", "deadlock", "could not serialize")


def is_conflict(exc: DBAPIError) -> bool:
    """Ошибка вызвана параллельной транзакцией и может быть повторена"""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in CONFLICT_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in CONFLICT_MESSAGES)


class BoardLockRegistry:
    """Блокировки в пределах процесса, по одной на доску"""

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = weakref.WeakValueDictionary()

    def for_board(self, board_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(board_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[board_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


class TransactionalStore:
    """Атомарное выполнение плана сдвигов вместе с основной операцией.

    Операции одной доски сериализуются: блокировкой в процессе и
    блокировкой строки доски (SELECT ... FOR UPDATE) в базе. Конфликт
    транзакций повторяется целиком, так что план всегда строится
    заново по свежим данным.
    """

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        locks: Optional[BoardLockRegistry] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        verify_invariant: Optional[bool] = None
    ):
        self.session_factory = session_factory
        self.locks = locks or BoardLockRegistry()
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.retry_backoff = settings.retry_backoff if retry_backoff is None else retry_backoff
        self.verify_invariant = settings.verify_invariant if verify_invariant is None else verify_invariant

    async def run(
        self,
        board_id: uuid.UUID,
        work: Callable[[AsyncSession], Awaitable[T]]
    ) -> T:
        """Выполнение work в транзакции под блокировкой доски"""
        attempt = 0
        while True:
            attempt += 1
            try:
                async with self.locks.for_board(board_id):
                    return await self._run_once(board_id, work)
            except ConflictError:
                if attempt > self.max_retries:
                    logger.error(f"Giving up on board {board_id} after {attempt} conflicting attempts")
                    raise
                logger.warning(f"Transaction conflict on board {board_id}, retry {attempt}/{self.max_retries}")
                await asyncio.sleep(self.retry_backoff * attempt)

    async def write(self, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Транзакция без блокировки доски, для полей вне алгебры позиций"""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    return await work(session)
        except SQLAlchemyError as e:
            raise self._translate(e) from e

    async def read(self, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Чтение без блокировок"""
        try:
            async with self.session_factory() as session:
                return await work(session)
        except SQLAlchemyError as e:
            raise self._translate(e) from e

    async def _run_once(
        self,
        board_id: uuid.UUID,
        work: Callable[[AsyncSession], Awaitable[T]]
    ) -> T:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    if not await BoardRepository(session).lock(board_id):
                        raise NotFoundError(f"Board {board_id} not found")

                    result = await work(session)

                    if self.verify_invariant:
                        violations = await self.find_violations(session, board_id)
                        if violations:
                            raise InvariantViolationError(
                                f"Position invariant violated on board {board_id}: {violations}"
                            )

                    return result
        except SQLAlchemyError as e:
            raise self._translate(e) from e

    async def find_violations(self, session: AsyncSession, board_id: uuid.UUID) -> Dict[Section, List[str]]:
        """Нарушения инварианта по разделам доски"""
        positions = await EntryRepository(session).get_positions(board_id)
        violations = {}
        for section, section_positions in positions.items():
            if not check_invariant(section_positions):
                violations[section] = find_violations(section_positions)
        return violations

    def _translate(self, error: SQLAlchemyError) -> Exception:
        if isinstance(error, DBAPIError) and is_conflict(error):
            return ConflictError(f"Concurrent modification: {error.orig}")
        logger.error(f"Store failure: {error}")
        return StoreUnavailableError(str(error))


@lru_cache
def get_store() -> TransactionalStore:
    """Общее хранилище процесса: блокировки досок должны быть одни на всех"""
    return TransactionalStore()
