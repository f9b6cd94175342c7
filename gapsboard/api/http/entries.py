from fastapi import APIRouter, Depends, status
import uuid

from gapsboard.api.http.errors import to_http_exception
from gapsboard.core.errors import BoardError
from gapsboard.domains.entries.schemas import EntryUpdate, EntryMove, EntryResponse
from gapsboard.domains.entries.services import EntryService, get_entry_service

router = APIRouter(prefix="/entries", tags=["entries"])


@router.get("/{entry_uuid}", response_model=EntryResponse)
async def get_entry(
    entry_uuid: uuid.UUID,
    entry_service: EntryService = Depends(get_entry_service)
):
    """Получение записи по UUID"""
    try:
        entry = await entry_service.get_entry(entry_uuid)
    except BoardError as e:
        raise to_http_exception(e)
    
    return EntryResponse.from_entity(entry)


@router.put("/{entry_uuid}", response_model=EntryResponse)
async def update_entry(
    entry_uuid: uuid.UUID,
    update_data: EntryUpdate,
    entry_service: EntryService = Depends(get_entry_service)
):
    """Обновление содержимого записи"""
    try:
        entry = await entry_service.update_content(entry_uuid, update_data.to_content())
    except BoardError as e:
        raise to_http_exception(e)
    
    return EntryResponse.from_entity(entry)


@router.patch("/{entry_uuid}/move", response_model=EntryResponse)
async def move_entry(
    entry_uuid: uuid.UUID,
    move_data: EntryMove,
    entry_service: EntryService = Depends(get_entry_service)
):
    """Перемещение записи в раздел и позицию"""
    try:
        entry = await entry_service.move_entry(entry_uuid, move_data.target_section, move_data.target_index)
    except BoardError as e:
        raise to_http_exception(e)
    
    return EntryResponse.from_entity(entry)


@router.delete("/{entry_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_uuid: uuid.UUID,
    entry_service: EntryService = Depends(get_entry_service)
):
    """Удаление записи"""
    try:
        await entry_service.delete_entry(entry_uuid)
    except BoardError as e:
        raise to_http_exception(e)
