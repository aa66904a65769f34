# infrastructure/database/__init__.py
"""
🗄️ DATABASE ИНИЦИАЛИЗАЦИЯ

Экспортируем все нужные функции и объекты.
"""

from infrastructure.database.base import (
    Base,
    create_engine_from_settings,
    create_session_maker,
    init_db,
    close_db,
)

__all__ = [
    "Base",
    "create_engine_from_settings",
    "create_session_maker",
    "init_db",
    "close_db",
]
