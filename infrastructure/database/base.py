# infrastructure/database/base.py
"""
🗄️ ПОДКЛЮЧЕНИЕ К БД

- Base: базовый класс для всех моделей
- create_engine_from_settings(): async движок SQLAlchemy (asyncpg)
- create_session_maker(): фабрика сессий
- init_db() / close_db(): создание таблиц и закрытие соединений
"""

import ssl

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from config.settings import Settings

# Все модели наследуются от Base
Base = declarative_base()


def _railway_ssl_context() -> ssl.SSLContext:
    """Railway отдает самоподписанный сертификат - проверку отключаем"""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Создает async движок по настройкам.

    Для PostgreSQL: пул до 20 соединений,
    таймаут подключения 10 секунд.
    """
    url = settings.async_database_url
    options = {
        "echo": settings.debug,
        "pool_pre_ping": True,
    }

    if url.startswith("postgresql+asyncpg://"):
        connect_args = {"timeout": 10}
        if settings.database_requires_ssl:
            connect_args["ssl"] = _railway_ssl_context()
        options.update(
            pool_size=10,
            max_overflow=10,
            pool_recycle=1800,
            connect_args=connect_args,
        )

    return create_async_engine(url, **options)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Создать таблицы, если их нет (CREATE TABLE IF NOT EXISTS)."""

    # Импорт нужен, чтобы модели зарегистрировались в Base.metadata
    from infrastructure.database import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    await engine.dispose()
