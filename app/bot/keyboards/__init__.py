# app/bot/keyboards/__init__.py
"""Инициализация клавиатур."""

from .client import admin_keyboard, shop_keyboard, start_keyboard

__all__ = ["admin_keyboard", "shop_keyboard", "start_keyboard"]
