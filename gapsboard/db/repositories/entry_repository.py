from typing import Optional, List, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, and_
import uuid

from gapsboard.db.base import utcnow
from gapsboard.db.models.entry import Entry as EntryModel
from gapsboard.domains.entities.entry import Entry, EntryContent, PositionShift, Section


class EntryRepository:
    """Репозиторий для работы с записями доски.

    Репозиторий не фиксирует транзакцию: границы транзакции
    задает TransactionalStore.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: Entry) -> Entry:
        """Создание новой записи"""
        db_entry = EntryModel(
            uuid=entry.uuid,
            board_id=entry.board_id,
            section=entry.section.value,
            position=entry.position,
            **self._content_values(entry.content)
        )

        self.session.add(db_entry)
        await self.session.flush()
        await self.session.refresh(db_entry)
        return self._to_domain(db_entry)

    async def get_by_uuid(self, entry_uuid: uuid.UUID) -> Optional[Entry]:
        """Получение записи по UUID"""
        result = await self.session.execute(
            select(EntryModel)
            .where(EntryModel.uuid == entry_uuid)
            .execution_options(populate_existing=True)
        )
        db_entry = result.scalar_one_or_none()
        return self._to_domain(db_entry) if db_entry else None

    async def count_in_section(self, board_id: uuid.UUID, section: Section) -> int:
        """Подсчет записей в разделе"""
        result = await self.session.execute(
            select(func.count(EntryModel.uuid)).where(
                and_(
                    EntryModel.board_id == board_id,
                    EntryModel.section == section.value
                )
            )
        )
        return result.scalar()

    async def get_section(self, board_id: uuid.UUID, section: Section) -> List[Entry]:
        """Записи раздела в порядке позиций"""
        result = await self.session.execute(
            select(EntryModel)
            .where(
                and_(
                    EntryModel.board_id == board_id,
                    EntryModel.section == section.value
                )
            )
            .order_by(EntryModel.position.asc(), EntryModel.created_at.asc())
            .execution_options(populate_existing=True)
        )
        db_entries = result.scalars().all()
        return [self._to_domain(entry) for entry in db_entries]

    async def get_by_board(self, board_id: uuid.UUID) -> List[Entry]:
        """Все записи доски: по разделу, позиции и времени создания"""
        result = await self.session.execute(
            select(EntryModel)
            .where(EntryModel.board_id == board_id)
            .order_by(
                EntryModel.section.asc(),
                EntryModel.position.asc(),
                EntryModel.created_at.asc()
            )
            .execution_options(populate_existing=True)
        )
        db_entries = result.scalars().all()
        return [self._to_domain(entry) for entry in db_entries]

    async def get_section_ids(self, board_id: uuid.UUID, section: Section) -> List[uuid.UUID]:
        """UUID записей раздела"""
        result = await self.session.execute(
            select(EntryModel.uuid).where(
                and_(
                    EntryModel.board_id == board_id,
                    EntryModel.section == section.value
                )
            )
        )
        return list(result.scalars().all())

    async def get_positions(self, board_id: uuid.UUID) -> Dict[Section, List[int]]:
        """Позиции записей доски, сгруппированные по разделам"""
        result = await self.session.execute(
            select(EntryModel.section, EntryModel.position)
            .where(EntryModel.board_id == board_id)
            .order_by(EntryModel.section.asc(), EntryModel.position.asc())
        )
        positions: Dict[Section, List[int]] = {}
        for section, position in result.all():
            positions.setdefault(Section(section), []).append(position)
        return positions

    async def shift(self, board_id: uuid.UUID, shift: PositionShift) -> int:
        """Сдвиг диапазона позиций в разделе"""
        conditions = [
            EntryModel.board_id == board_id,
            EntryModel.section == shift.section.value,
            EntryModel.position >= shift.start
        ]
        if shift.end is not None:
            conditions.append(EntryModel.position <= shift.end)

        stmt = (
            update(EntryModel)
            .where(and_(*conditions))
            .values(position=EntryModel.position + shift.delta, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def place(self, entry_uuid: uuid.UUID, section: Section, position: int) -> None:
        """Установка раздела и позиции записи"""
        stmt = (
            update(EntryModel)
            .where(EntryModel.uuid == entry_uuid)
            .values(section=section.value, position=position, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def update_content(self, entry_uuid: uuid.UUID, content: EntryContent) -> bool:
        """Обновление содержимого записи без изменения позиции"""
        stmt = (
            update(EntryModel)
            .where(EntryModel.uuid == entry_uuid)
            .values(updated_at=utcnow(), **self._content_values(content))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def delete(self, entry_uuid: uuid.UUID) -> bool:
        """Удаление записи"""
        stmt = (
            delete(EntryModel)
            .where(EntryModel.uuid == entry_uuid)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    def _content_values(self, content: EntryContent) -> dict:
        return {
            "content": content.text,
            "tags": list(content.tags),
            "priority": content.priority,
            "status": content.status,
            "ai_generated": content.ai_generated,
            "confidence": content.confidence,
            "extra": dict(content.metadata)
        }

    def _to_domain(self, db_entry: EntryModel) -> Entry:
        """Преобразование модели БД в доменную сущность"""
        return Entry(
            uuid=db_entry.uuid,
            board_id=db_entry.board_id,
            section=Section(db_entry.section),
            position=db_entry.position,
            content=EntryContent(
                text=db_entry.content,
                tags=list(db_entry.tags or []),
                priority=db_entry.priority,
                status=db_entry.status,
                ai_generated=db_entry.ai_generated,
                confidence=db_entry.confidence,
                metadata=dict(db_entry.extra or {})
            ),
            created_at=db_entry.created_at,
            updated_at=db_entry.updated_at
        )
