from gapsboard.domains.entities.entry import Entry, EntryContent, MovePlan, PositionShift, Section
from gapsboard.domains.entries.ordering import OrderingEngine, check_invariant, find_violations
from gapsboard.domains.entries.schemas import (
    EntryContentBase, EntryCreate, EntryUpdate, EntryMove, BulkReorderRequest,
    EntryResponse, SectionResponse, InvariantReport
)
from gapsboard.domains.entries.store import BoardLockRegistry, TransactionalStore, get_store
from gapsboard.domains.entries.services import EntryService, get_entry_service

__all__ = [
    "Entry", "EntryContent", "MovePlan", "PositionShift", "Section",
    "OrderingEngine", "check_invariant", "find_violations",
    "EntryContentBase", "EntryCreate", "EntryUpdate", "EntryMove", "BulkReorderRequest",
    "EntryResponse", "SectionResponse", "InvariantReport",
    "BoardLockRegistry", "TransactionalStore", "get_store",
    "EntryService", "get_entry_service"
]
