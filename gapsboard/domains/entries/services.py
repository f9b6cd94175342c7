import logging
import uuid
from typing import Dict, List, Optional, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession

from gapsboard.core.errors import InvalidArgumentError, NotFoundError
from gapsboard.db.repositories.board_repository import BoardRepository
from gapsboard.db.repositories.entry_repository import EntryRepository
from gapsboard.domains.entities.entry import Entry, EntryContent, Section
from gapsboard.domains.entries.ordering import OrderingEngine
from gapsboard.domains.entries.store import TransactionalStore, get_store

logger = logging.getLogger(__name__)

SectionLike = Union[Section, str]


class EntryService:
    """Сервис для работы с записями доски.

    Единственный путь изменения полей section и position.
    """

    def __init__(self, store: TransactionalStore, engine: Optional[OrderingEngine] = None):
        self.store = store
        self.engine = engine or OrderingEngine()

    async def create_entry(self, board_id: uuid.UUID, section: SectionLike, content: EntryContent) -> Entry:
        """Добавление записи в конец раздела"""
        section = Section.parse(section)

        async def work(session: AsyncSession) -> Entry:
            repository = EntryRepository(session)
            count = await repository.count_in_section(board_id, section)
            entry = Entry.create_entry(
                board_id=board_id,
                section=section,
                position=self.engine.plan_insert(count),
                content=content
            )
            return await repository.create(entry)

        entry = await self.store.run(board_id, work)
        logger.info(f"Created entry {entry.uuid} in {section.value} @ {entry.position} on board {board_id}")
        return entry

    async def move_entry(self, entry_id: uuid.UUID, target_section: SectionLike, target_index: int) -> Entry:
        """Перемещение записи внутри раздела или в другой раздел"""
        target_section = Section.parse(target_section)
        board_id = await self._board_of(entry_id)

        async def work(session: AsyncSession) -> Entry:
            repository = EntryRepository(session)
            entry = await self._require(repository, entry_id)
            target_count = await repository.count_in_section(entry.board_id, target_section)
            plan = self.engine.plan_move(entry, target_section, target_index, target_count)

            if plan.is_noop:
                return entry

            for shift in plan.shifts:
                await repository.shift(entry.board_id, shift)
            await repository.place(entry.uuid, plan.target_section, plan.target_index)

            return await repository.get_by_uuid(entry.uuid)

        entry = await self.store.run(board_id, work)
        logger.info(f"Moved entry {entry_id} to {target_section.value} @ {entry.position}")
        return entry

    async def delete_entry(self, entry_id: uuid.UUID) -> None:
        """Удаление записи с уплотнением позиций раздела.

        Повторное удаление завершается NotFoundError.
        """
        board_id = await self._board_of(entry_id)

        async def work(session: AsyncSession) -> Entry:
            repository = EntryRepository(session)
            entry = await self._require(repository, entry_id)
            await repository.delete(entry.uuid)
            for shift in self.engine.plan_delete(entry):
                await repository.shift(entry.board_id, shift)
            return entry

        entry = await self.store.run(board_id, work)
        logger.info(f"Deleted entry {entry_id} from {entry.section.value} @ {entry.position}")

    async def bulk_reorder(
        self,
        board_id: uuid.UUID,
        section: SectionLike,
        ordered_ids: Sequence[Union[uuid.UUID, str]]
    ) -> None:
        """Полная перестановка записей раздела"""
        section = Section.parse(section)
        try:
            ordered = [entry_id if isinstance(entry_id, uuid.UUID) else uuid.UUID(str(entry_id)) for entry_id in ordered_ids]
        except ValueError:
            raise InvalidArgumentError("Order contains malformed ids")

        async def work(session: AsyncSession) -> None:
            repository = EntryRepository(session)
            current = await repository.get_section_ids(board_id, section)
            positions = self.engine.plan_bulk_reorder(current, ordered)
            for entry_id, position in positions.items():
                await repository.place(entry_id, section, position)

        await self.store.run(board_id, work)
        logger.info(f"Reordered {len(ordered)} entries in {section.value} on board {board_id}")

    async def update_content(self, entry_id: uuid.UUID, content: EntryContent) -> Entry:
        """Обновление содержимого без изменения раздела и позиции"""

        async def work(session: AsyncSession) -> Entry:
            repository = EntryRepository(session)
            if not await repository.update_content(entry_id, content):
                raise NotFoundError(f"Entry {entry_id} not found")
            return await repository.get_by_uuid(entry_id)

        return await self.store.write(work)

    async def get_entry(self, entry_id: uuid.UUID) -> Entry:
        """Получение записи по UUID"""

        async def work(session: AsyncSession) -> Entry:
            return await self._require(EntryRepository(session), entry_id)

        return await self.store.read(work)

    async def list_section(self, board_id: uuid.UUID, section: SectionLike) -> List[Entry]:
        """Записи раздела в порядке позиций"""
        section = Section.parse(section)

        async def work(session: AsyncSession) -> List[Entry]:
            return await EntryRepository(session).get_section(board_id, section)

        return await self.store.read(work)

    async def get_board_entries(self, board_id: uuid.UUID) -> Dict[Section, List[Entry]]:
        """Записи доски, сгруппированные по всем разделам"""

        async def work(session: AsyncSession) -> Dict[Section, List[Entry]]:
            if await BoardRepository(session).get_by_uuid(board_id) is None:
                raise NotFoundError(f"Board {board_id} not found")
            entries = await EntryRepository(session).get_by_board(board_id)
            grouped: Dict[Section, List[Entry]] = {section: [] for section in Section}
            for entry in entries:
                grouped[entry.section].append(entry)
            return grouped

        return await self.store.read(work)

    async def verify_board(self, board_id: uuid.UUID) -> Dict[Section, List[str]]:
        """Проверка инварианта позиций без исправления"""

        async def work(session: AsyncSession) -> Dict[Section, List[str]]:
            if await BoardRepository(session).get_by_uuid(board_id) is None:
                raise NotFoundError(f"Board {board_id} not found")
            return await self.store.find_violations(session, board_id)

        violations = await self.store.read(work)
        if violations:
            logger.warning(f"Board {board_id} violates position invariant: {violations}")
        return violations

    async def _board_of(self, entry_id: uuid.UUID) -> uuid.UUID:
        """Доска записи; запись никогда не переходит на другую доску"""
        entry = await self.get_entry(entry_id)
        return entry.board_id

    async def _require(self, repository: EntryRepository, entry_id: uuid.UUID) -> Entry:
        entry = await repository.get_by_uuid(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry {entry_id} not found")
        return entry


def get_entry_service() -> EntryService:
    return EntryService(get_store())
