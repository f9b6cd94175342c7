from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from gapsboard.core.config import settings

# Базовый класс для моделей
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Создание асинхронного движка"""
    engine = create_async_engine(database_url, future=True, echo=echo)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _configure_sqlite(dbapi_connection, connection_record):
            # Драйвер сам не открывает транзакцию до первой записи
            dbapi_connection.isolation_level = None
            # SQLite не проверяет внешние ключи без явного включения
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_immediate(conn):
            # Блокировка записи берется до первого чтения транзакции
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_sessionmaker(engine: AsyncEngine) -> sessionmaker:
    """Фабрика сессий для движка"""
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


# Асинхронный движок
engine = build_engine(settings.database_url, echo=settings.database_echo)

# Сессии
SessionLocal = build_sessionmaker(engine)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Создание таблиц для всех моделей"""
    # Регистрируем модели в метаданных
    import gapsboard.db.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
