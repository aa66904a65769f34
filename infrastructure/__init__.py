# infrastructure/__init__.py
"""Инфраструктура приложения: логирование и хранилища."""

from .logger import setup_logging
from .storage import EntityStore, create_store

__all__ = [
    "setup_logging",
    "EntityStore",
    "create_store",
]
