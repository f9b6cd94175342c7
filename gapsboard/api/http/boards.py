from fastapi import APIRouter, Depends, status
import uuid

from gapsboard.api.http.errors import to_http_exception
from gapsboard.core.errors import BoardError
from gapsboard.domains.boards.schemas import BoardCreate, BoardResponse, BoardEntriesResponse
from gapsboard.domains.boards.services import BoardService, get_board_service
from gapsboard.domains.entries.schemas import (
    EntryCreate, EntryResponse, BulkReorderRequest, SectionResponse, InvariantReport
)
from gapsboard.domains.entries.services import EntryService, get_entry_service

router = APIRouter(prefix="/boards", tags=["boards"])


@router.post("/", response_model=BoardResponse, status_code=status.HTTP_201_CREATED)
async def create_board(
    board_data: BoardCreate,
    board_service: BoardService = Depends(get_board_service)
):
    """Создание новой доски"""
    try:
        board = await board_service.create_board(board_data.title, board_data.description)
    except BoardError as e:
        raise to_http_exception(e)
    
    return BoardResponse.model_validate(board)


@router.get("/{board_uuid}", response_model=BoardEntriesResponse)
async def get_board(
    board_uuid: uuid.UUID,
    board_service: BoardService = Depends(get_board_service),
    entry_service: EntryService = Depends(get_entry_service)
):
    """Доска со всеми записями по разделам"""
    try:
        board = await board_service.get_board(board_uuid)
        sections = await entry_service.get_board_entries(board_uuid)
    except BoardError as e:
        raise to_http_exception(e)
    
    return BoardEntriesResponse(
        board=BoardResponse.model_validate(board),
        sections={
            section.value: [EntryResponse.from_entity(entry) for entry in entries]
            for section, entries in sections.items()
        }
    )


@router.post("/{board_uuid}/entries", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    board_uuid: uuid.UUID,
    entry_data: EntryCreate,
    entry_service: EntryService = Depends(get_entry_service)
):
    """Добавление записи в конец раздела"""
    try:
        entry = await entry_service.create_entry(board_uuid, entry_data.section, entry_data.to_content())
    except BoardError as e:
        raise to_http_exception(e)
    
    return EntryResponse.from_entity(entry)


@router.get("/{board_uuid}/sections/{section}", response_model=SectionResponse)
async def get_section(
    board_uuid: uuid.UUID,
    section: str,
    entry_service: EntryService = Depends(get_entry_service)
):
    """Записи раздела в порядке позиций"""
    try:
        entries = await entry_service.list_section(board_uuid, section)
    except BoardError as e:
        raise to_http_exception(e)
    
    return SectionResponse(
        section=section,
        entries=[EntryResponse.from_entity(entry) for entry in entries]
    )


@router.put("/{board_uuid}/sections/{section}/order", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_section(
    board_uuid: uuid.UUID,
    section: str,
    reorder_data: BulkReorderRequest,
    entry_service: EntryService = Depends(get_entry_service)
):
    """Полная перестановка записей раздела"""
    try:
        await entry_service.bulk_reorder(board_uuid, section, reorder_data.ordered_ids)
    except BoardError as e:
        raise to_http_exception(e)


@router.get("/{board_uuid}/verify", response_model=InvariantReport)
async def verify_board(
    board_uuid: uuid.UUID,
    entry_service: EntryService = Depends(get_entry_service)
):
    """Проверка инварианта позиций доски"""
    try:
        violations = await entry_service.verify_board(board_uuid)
    except BoardError as e:
        raise to_http_exception(e)
    
    return InvariantReport(
        board_id=board_uuid,
        ok=not violations,
        violations={section.value: problems for section, problems in violations.items()}
    )
