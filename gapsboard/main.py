import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gapsboard.api.http.health import router as health_router
from gapsboard.api.http.boards import router as boards_router
from gapsboard.api.http.entries import router as entries_router
from gapsboard.core.config import settings
from gapsboard.core.db import init_models

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    yield


app = FastAPI(
    title="GAPS Board",
    description="Доска заметок с упорядоченными разделами",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В продакшене указать конкретные домены
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключаем роутеры
app.include_router(health_router)
app.include_router(boards_router)
app.include_router(entries_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "GAPS Board API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
