# app/bot/utils/text.py
"""Форматирование текста для сообщений Telegram (parse_mode=HTML)."""

from html import escape
from typing import Any


def escape_html(value: Any) -> str:
    """Экранировать <, >, & и кавычки. None → пустая строка."""
    if value is None:
        return ""
    return escape(str(value), quote=True)


def format_price(value: float) -> str:
    """500.0 → "500", 99.5 → "99.5"."""
    value = round(float(value), 2)
    if value.is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0")
