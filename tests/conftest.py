"""Shared fixtures: a fresh SQLite database per test."""

from __future__ import annotations

from pathlib import Path

import pytest

from gapsboard.core.db import build_engine, build_sessionmaker, init_models
from gapsboard.domains.boards.services import BoardService
from gapsboard.domains.entities.entry import EntryContent, Section
from gapsboard.domains.entries.services import EntryService
from gapsboard.domains.entries.store import TransactionalStore


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'board.db'}"


@pytest.fixture
async def engine(database_url: str):
    """Create an engine bound to a temporary database with all tables."""
    engine = build_engine(database_url)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine) -> TransactionalStore:
    """Store that re-checks the position invariant before every commit."""
    return TransactionalStore(
        build_sessionmaker(engine),
        max_retries=5,
        retry_backoff=0.01,
        verify_invariant=True,
    )


@pytest.fixture
def entry_service(store: TransactionalStore) -> EntryService:
    return EntryService(store)


@pytest.fixture
def board_service(store: TransactionalStore) -> BoardService:
    return BoardService(store)


@pytest.fixture
async def board(board_service: BoardService):
    return await board_service.create_board("Test board")


def content(text: str) -> EntryContent:
    return EntryContent(text=text)


async def texts(service: EntryService, board_id, section: Section) -> list[str]:
    """Entry texts of a section in position order."""
    return [entry.content.text for entry in await service.list_section(board_id, section)]


async def layout(service: EntryService, board_id, section: Section) -> list[tuple[int, str]]:
    """(position, text) pairs of a section."""
    return [
        (entry.position, entry.content.text)
        for entry in await service.list_section(board_id, section)
    ]


async def fill(service: EntryService, board_id, section: Section, *names: str) -> dict:
    """Append entries with the given texts and return them keyed by text."""
    created = {}
    for name in names:
        created[name] = await service.create_entry(board_id, section, content(name))
    return created
