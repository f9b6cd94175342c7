"""Interleaved structural operations on one board keep positions dense."""

import asyncio
import random

import pytest

from gapsboard.core.db import build_engine, build_sessionmaker
from gapsboard.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from gapsboard.db.repositories.entry_repository import EntryRepository
from gapsboard.domains.entities.entry import Entry, Section
from gapsboard.domains.entries.ordering import OrderingEngine
from gapsboard.domains.entries.services import EntryService
from gapsboard.domains.entries.store import TransactionalStore

from .conftest import content, fill, layout

SECTIONS = list(Section)


async def _snapshot(entry_service, board_id):
    return await entry_service.get_board_entries(board_id)


def _random_op(rng, entry_service, board_id, snapshot):
    """Coroutine for one random operation, built from a possibly stale snapshot."""
    known = [entry for entries in snapshot.values() for entry in entries]
    choice = rng.random()

    if choice < 0.3 or not known:
        section = rng.choice(SECTIONS)
        return entry_service.create_entry(board_id, section, content(f"n{rng.randrange(10_000)}"))
    if choice < 0.6:
        entry = rng.choice(known)
        section = rng.choice(SECTIONS)
        return entry_service.move_entry(entry.uuid, section, rng.randrange(0, 5))
    if choice < 0.8:
        return entry_service.delete_entry(rng.choice(known).uuid)

    section = rng.choice(SECTIONS)
    ids = [entry.uuid for entry in snapshot[section]]
    rng.shuffle(ids)
    return entry_service.bulk_reorder(board_id, section, ids)


async def test_concurrent_operations_keep_invariant(entry_service, board):
    rng = random.Random(2024)
    for section in SECTIONS:
        await fill(entry_service, board.uuid, section, *(f"{section.value}-{i}" for i in range(3)))

    for _ in range(8):
        snapshot = await _snapshot(entry_service, board.uuid)
        ops = [_random_op(rng, entry_service, board.uuid, snapshot) for _ in range(12)]

        results = await asyncio.gather(*ops, return_exceptions=True)

        for result in results:
            if isinstance(result, BaseException):
                assert isinstance(result, (NotFoundError, InvalidArgumentError)), repr(result)

        assert await entry_service.verify_board(board.uuid) == {}
        for section in SECTIONS:
            positions = [position for position, _ in await layout(entry_service, board.uuid, section)]
            assert positions == list(range(len(positions)))


async def test_concurrent_inserts_get_distinct_positions(entry_service, board):
    names = [f"e{i}" for i in range(15)]

    created = await asyncio.gather(
        *(entry_service.create_entry(board.uuid, Section.PLAN, content(name)) for name in names)
    )

    assert sorted(entry.position for entry in created) == list(range(len(names)))
    assert await entry_service.verify_board(board.uuid) == {}


async def test_concurrent_moves_of_same_entry(entry_service, board):
    created = await fill(entry_service, board.uuid, Section.GOAL, "A", "B", "C", "D")
    target = created["A"].uuid

    await asyncio.gather(
        entry_service.move_entry(target, Section.GOAL, 3),
        entry_service.move_entry(target, Section.STATUS, 0),
        entry_service.move_entry(target, Section.GOAL, 1),
    )

    grouped = await entry_service.get_board_entries(board.uuid)
    texts_by_section = {s: [e.content.text for e in entries] for s, entries in grouped.items()}

    assert sum(len(t) for t in texts_by_section.values()) == 4
    assert sorted(texts_by_section[Section.GOAL] + texts_by_section[Section.STATUS]) == ["A", "B", "C", "D"]
    assert [t for t in texts_by_section[Section.GOAL] if t != "A"] == ["B", "C", "D"]
    assert await entry_service.verify_board(board.uuid) == {}


@pytest.fixture
async def worker_stores(engine, database_url):
    """Two stores on one database file, each with its own locks, as two server processes have."""
    second = build_engine(database_url)
    stores = [
        TransactionalStore(build_sessionmaker(db), max_retries=5, retry_backoff=0.01, verify_invariant=False)
        for db in (engine, second)
    ]
    yield stores
    await second.dispose()


def _check_outcome(results):
    """Only a surfaced conflict may fail; returns the entries that were written."""
    written = []
    for result in results:
        if isinstance(result, BaseException):
            assert isinstance(result, ConflictError), repr(result)
        else:
            written.append(result)
    return written


async def test_workers_do_not_plan_from_stale_counts(worker_stores, board):
    first, second = worker_stores
    counted = asyncio.Event()

    async def slow_insert(session):
        repository = EntryRepository(session)
        count = await repository.count_in_section(board.uuid, Section.GOAL)
        counted.set()
        await asyncio.sleep(0.2)
        entry = Entry.create_entry(
            board_id=board.uuid,
            section=Section.GOAL,
            position=OrderingEngine().plan_insert(count),
            content=content("A"),
        )
        return await repository.create(entry)

    slow = asyncio.create_task(first.run(board.uuid, slow_insert))
    await counted.wait()
    results = await asyncio.gather(
        slow,
        EntryService(second).create_entry(board.uuid, Section.GOAL, content("B")),
        return_exceptions=True,
    )
    written = _check_outcome(results)

    service = EntryService(first)
    placed = await layout(service, board.uuid, Section.GOAL)

    assert [position for position, _ in placed] == list(range(len(written)))
    assert sorted(text for _, text in placed) == sorted(entry.content.text for entry in written)
    assert await service.verify_board(board.uuid) == {}


async def test_workers_keep_board_dense(worker_stores, board):
    services = [EntryService(store) for store in worker_stores]
    rng = random.Random(99)

    created = _check_outcome(await asyncio.gather(
        *(services[i % 2].create_entry(board.uuid, Section.PLAN, content(f"e{i}")) for i in range(10)),
        return_exceptions=True,
    ))
    assert sorted(entry.position for entry in created) == list(range(len(created)))

    # index 0 is valid in every section, so only conflicts can fail
    moves = [
        services[i % 2].move_entry(rng.choice(created).uuid, rng.choice(SECTIONS), 0)
        for i in range(10)
    ]
    _check_outcome(await asyncio.gather(*moves, return_exceptions=True))

    assert await services[0].verify_board(board.uuid) == {}
    for section in SECTIONS:
        positions = [position for position, _ in await layout(services[1], board.uuid, section)]
        assert positions == list(range(len(positions)))
