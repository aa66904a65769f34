# app/bot/handlers/__init__.py
"""
🤖 BOT HANDLERS (обработчики команд)

Все команды бота (/start, /shop, /admin, /help).

Router создается функцией: один Router можно подключить
только к одному Dispatcher.
"""

from aiogram import F, Router
from aiogram.filters import Command, CommandStart

from .client import cmd_admin, cmd_help, cmd_shop, cmd_start, on_callback


def build_router() -> Router:
    router = Router(name="shop")

    router.message.register(cmd_start, CommandStart())
    router.message.register(cmd_shop, Command("shop", "магазин"))
    router.message.register(cmd_admin, Command("admin"))
    router.message.register(cmd_help, Command("help"))

    router.callback_query.register(on_callback, F.message.text)
    return router


__all__ = ["build_router"]
