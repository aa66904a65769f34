# app/bot/dispatcher.py
"""
Диспетчер бота.

Бот работает через webhook: Telegram шлет update на POST /telegram,
API передает его сюда (feed_webhook_update). Polling не используется.
"""

import structlog
from aiogram import Dispatcher

from app.bot.handlers import build_router
from app.bot.middlewares import LoggingMiddleware
from config.settings import Settings

logger = structlog.get_logger()


def build_dispatcher(settings: Settings) -> Dispatcher:
    """
    settings попадает во все обработчики как аргумент `settings`.
    """
    dp = Dispatcher(settings=settings)

    # outer = логируем даже то, что ни один обработчик не поймал
    dp.message.outer_middleware(LoggingMiddleware())
    dp.callback_query.outer_middleware(LoggingMiddleware())

    dp.include_router(build_router())
    logger.debug("dispatcher_created")
    return dp
