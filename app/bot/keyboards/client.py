# app/bot/keyboards/client.py
"""
Клавиатуры бота.

Все кнопки inline с web_app: по нажатию Telegram открывает
мини-приложение магазина (или админку) прямо внутри чата.
"""

from aiogram.types import (
    InlineKeyboardButton,
    # Одна inline-кнопка
    InlineKeyboardMarkup,
    # Кнопки прямо в сообщении
    WebAppInfo,
    # Ссылка на мини-приложение
)

from config.settings import Settings


def shop_button(settings: Settings) -> InlineKeyboardButton:
    return InlineKeyboardButton(
        text="🛍️ Открыть магазин",
        web_app=WebAppInfo(url=settings.miniapp_url),
    )


def admin_button(settings: Settings, text: str = "⚙️ Админ-панель") -> InlineKeyboardButton:
    return InlineKeyboardButton(
        text=text,
        web_app=WebAppInfo(url=settings.admin_url),
    )


def start_keyboard(settings: Settings, is_admin: bool = False) -> InlineKeyboardMarkup:
    """
    Главное меню (/start).

    Админ видит вторую кнопку "⚙️ Админ-панель".
    """
    rows = [[shop_button(settings)]]
    if is_admin:
        rows.append([admin_button(settings)])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def shop_keyboard(settings: Settings) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[shop_button(settings)]])


def admin_keyboard(settings: Settings) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[admin_button(settings, "⚙️ Открыть админ-панель")]]
    )
