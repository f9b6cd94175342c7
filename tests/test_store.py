"""Tests for transaction boundaries, locking and retry of the store."""

import uuid

import pytest
from sqlalchemy.exc import OperationalError

from gapsboard.core.db import build_sessionmaker
from gapsboard.core.errors import (
    ConflictError, InvariantViolationError, NotFoundError, StoreUnavailableError
)
from gapsboard.db.repositories.entry_repository import EntryRepository
from gapsboard.domains.entities.entry import Entry, PositionShift, Section
from gapsboard.domains.entries.store import BoardLockRegistry, TransactionalStore, is_conflict

from .conftest import content, fill, layout


class _PgError(Exception):
    def __init__(self, sqlstate):
        super().__init__("could not complete")
        self.sqlstate = sqlstate


def _db_error(orig: Exception) -> OperationalError:
    return OperationalError("UPDATE entries", {}, orig)


def test_lock_registry_one_lock_per_board():
    locks = BoardLockRegistry()
    first, second = uuid.uuid4(), uuid.uuid4()

    lock = locks.for_board(first)

    assert locks.for_board(first) is lock
    assert locks.for_board(second) is not lock


def test_lock_registry_releases_unused_locks():
    locks = BoardLockRegistry()
    lock = locks.for_board(uuid.uuid4())
    assert len(locks) == 1

    del lock

    assert len(locks) == 0


@pytest.mark.parametrize(
    "orig, expected",
    [
        (Exception("database is locked"), True),
        (Exception("ERROR: deadlock detected"), True),
        (_PgError("40001"), True),
        (_PgError("40P01"), True),
        (_PgError("23505"), False),
        (Exception("disk I/O error"), False),
    ],
)
def test_is_conflict(orig, expected):
    assert is_conflict(_db_error(orig)) is expected


async def test_retries_conflicting_transaction(store, board):
    calls = []

    async def work(session):
        calls.append(1)
        if len(calls) == 1:
            raise _db_error(Exception("database is locked"))
        return "done"

    assert await store.run(board.uuid, work) == "done"
    assert len(calls) == 2


async def test_gives_up_after_max_retries(engine, board):
    store = TransactionalStore(build_sessionmaker(engine), max_retries=2, retry_backoff=0)
    calls = []

    async def work(session):
        calls.append(1)
        raise _db_error(Exception("database is locked"))

    with pytest.raises(ConflictError):
        await store.run(board.uuid, work)
    assert len(calls) == 3


async def test_store_failure_is_not_retried(store, board):
    calls = []

    async def work(session):
        calls.append(1)
        raise _db_error(Exception("disk I/O error"))

    with pytest.raises(StoreUnavailableError):
        await store.run(board.uuid, work)
    assert len(calls) == 1


async def test_unknown_board(store):
    async def work(session):
        raise AssertionError("work must not run without a board")

    with pytest.raises(NotFoundError):
        await store.run(uuid.uuid4(), work)


async def test_failed_work_rolls_back(store, entry_service, board):
    await fill(entry_service, board.uuid, Section.GOAL, "A")

    async def work(session):
        repository = EntryRepository(session)
        await repository.create(
            Entry.create_entry(board_id=board.uuid, section=Section.GOAL, position=1, content=content("B"))
        )
        raise NotFoundError("Entry gone")

    with pytest.raises(NotFoundError):
        await store.run(board.uuid, work)

    assert await layout(entry_service, board.uuid, Section.GOAL) == [(0, "A")]


async def test_broken_invariant_rolls_back(store, entry_service, board):
    await fill(entry_service, board.uuid, Section.GOAL, "A", "B")

    async def work(session):
        await EntryRepository(session).shift(board.uuid, PositionShift(Section.GOAL, 0, None, 1))

    with pytest.raises(InvariantViolationError):
        await store.run(board.uuid, work)

    assert await layout(entry_service, board.uuid, Section.GOAL) == [(0, "A"), (1, "B")]


@pytest.mark.parametrize(
    "shift, expected",
    [
        (PositionShift(Section.GOAL, 1, 2, -1), [0, 0, 1, 3]),
        (PositionShift(Section.GOAL, 2, None, 1), [0, 1, 3, 4]),
        (PositionShift(Section.PLAN, 0, None, 1), [0, 1, 2, 3]),
    ],
)
async def test_shift_touches_only_its_range(store, entry_service, board, shift, expected):
    await fill(entry_service, board.uuid, Section.GOAL, "A", "B", "C", "D")

    async def work(session):
        await EntryRepository(session).shift(board.uuid, shift)
        return await EntryRepository(session).get_section(board.uuid, Section.GOAL)

    unchecked = TransactionalStore(store.session_factory, verify_invariant=False)
    entries = await unchecked.run(board.uuid, work)

    assert sorted(entry.position for entry in entries) == expected


async def test_find_violations_reports_sections(store, entry_service, board):
    await fill(entry_service, board.uuid, Section.PLAN, "A", "B")

    async def work(session):
        await EntryRepository(session).shift(board.uuid, PositionShift(Section.PLAN, 1, None, 1))
        return await store.find_violations(session, board.uuid)

    unchecked = TransactionalStore(store.session_factory, verify_invariant=False)
    violations = await unchecked.run(board.uuid, work)

    assert violations == {Section.PLAN: ["position 2 outside 0..1", "missing positions [1]"]}
    assert await entry_service.verify_board(board.uuid) == {Section.PLAN: violations[Section.PLAN]}
