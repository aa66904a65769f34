# app/bot/utils/__init__.py
"""Инициализация утилит."""

from .text import escape_html, format_price

__all__ = [
    "escape_html",
    "format_price",
]
