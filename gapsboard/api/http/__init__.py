from gapsboard.api.http.health import router as health_router
from gapsboard.api.http.boards import router as boards_router
from gapsboard.api.http.entries import router as entries_router

__all__ = [
    "health_router",
    "boards_router",
    "entries_router"
]
