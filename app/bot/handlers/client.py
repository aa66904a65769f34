# app/bot/handlers/client.py
"""
Обработчики команд бота.

Здесь живут команды которые доступны в чате с ботом:
- /start - главное меню с кнопкой магазина (и админки для админа)
- /shop (/магазин) - кнопка магазина
- /admin - кнопка админки (только ADMIN_TELEGRAM_ID)
- /help - справка

Пароль админки в чат НИКОГДА не отправляется.
"""

from typing import Optional

import structlog
from aiogram import types

from app.bot.keyboards import admin_keyboard, shop_keyboard, start_keyboard
from app.bot.utils import escape_html
from config.settings import Settings

logger = structlog.get_logger()

HELP_TEXT = (
    "📱 <b>DANISA SHOP BOT</b>\n\n"
    "Доступные команды:\n"
    "/start - Главное меню\n"
    "/shop - Открыть магазин\n"
    "/admin - Админ-панель\n"
    "/help - Помощь"
)


# ==========================================
# ОТВЕТЫ (общие для сообщений и callback)
# ==========================================

async def send_start(message: types.Message, user: Optional[types.User], settings: Settings):
    first_name = user.first_name if user and user.first_name else "User"
    is_admin = settings.is_admin(user.id if user else None)

    await message.answer(
        f"👋 Привет, {escape_html(first_name)}!\n\n"
        "🛍️ Добро пожаловать в <b>DANISA SHOP</b>!\n\n"
        "Выберите действие:",
        parse_mode="HTML",
        reply_markup=start_keyboard(settings, is_admin=is_admin),
    )
    logger.info("client_start", user_id=user.id if user else None, is_admin=is_admin)


async def send_shop(message: types.Message, settings: Settings):
    await message.answer("🛍️ Открывайте магазин!", reply_markup=shop_keyboard(settings))


async def send_admin(message: types.Message, user: Optional[types.User], settings: Settings):
    if not settings.is_admin(user.id if user else None):
        logger.warning("admin_access_denied", user_id=user.id if user else None)
        await message.answer("❌ У вас нет доступа к админ-панели.")
        return

    await message.answer(
        "🔐 <b>Админ-панель</b>\n\nВойдите с паролем администратора.",
        parse_mode="HTML",
        reply_markup=admin_keyboard(settings),
    )


async def send_help(message: types.Message):
    await message.answer(HELP_TEXT, parse_mode="HTML")


# ==========================================
# КОМАНДЫ
# ==========================================

async def cmd_start(message: types.Message, settings: Settings):
    await send_start(message, message.from_user, settings)


async def cmd_shop(message: types.Message, settings: Settings):
    await send_shop(message, settings)


async def cmd_admin(message: types.Message, settings: Settings):
    await send_admin(message, message.from_user, settings)


async def cmd_help(message: types.Message):
    await send_help(message)


# ==========================================
# CALLBACK (нажатие inline-кнопки)
# ==========================================

def command_of(text: Optional[str]) -> Optional[str]:
    """"/start@danisa_bot abc" → "start". Не команда → None."""
    if not text or not text.startswith("/"):
        return None
    return text.split()[0][1:].split("@", 1)[0].lower()


async def on_callback(callback: types.CallbackQuery, settings: Settings):
    """
    Callback с сообщением обрабатываем как это сообщение.

    Права проверяем по тому, кто нажал кнопку.
    """
    await callback.answer()

    message = callback.message
    # InaccessibleMessage (старое сообщение) без text
    command = command_of(getattr(message, "text", None))

    if command == "start":
        await send_start(message, callback.from_user, settings)
    elif command in ("shop", "магазин"):
        await send_shop(message, settings)
    elif command == "admin":
        await send_admin(message, callback.from_user, settings)
    elif command == "help":
        await send_help(message)
    else:
        logger.debug("callback_ignored", user_id=callback.from_user.id, data=callback.data)
