# app/services/notifications.py
"""
Сервис для отправки уведомлений администратору.

Отправка идет в фоне (asyncio task): ответ клиенту не ждет Telegram,
а ошибка Telegram никогда не ломает заказ, только пишется в лог.
"""

import asyncio
from typing import Optional, Set

import structlog
from aiogram import Bot
from aiogram.client.default import DefaultBotProperties

from app.exceptions import NotificationError
from config.settings import Settings

logger = structlog.get_logger()


class Notifier:
    """Отправляет HTML сообщения в чат администратора."""

    def __init__(self, bot: Optional[Bot], chat_id: Optional[str]):
        self.bot = bot
        self.chat_id = chat_id
        self._tasks: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return self.bot is not None and bool(self.chat_id)

    def notify(self, text: str) -> Optional[asyncio.Task]:
        """
        Запланировать отправку и сразу вернуться.

        Без токена или chat_id ничего не делает (уведомления выключены).
        """
        if not self.enabled:
            logger.debug("notification_skipped", reason="not_configured")
            return None

        task = asyncio.create_task(self._send(text))
        # Держим ссылку, иначе задачу может собрать GC
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _send(self, text: str) -> None:
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=text,
                parse_mode="HTML",
            )
            logger.info("notification_sent", chat_id=self.chat_id)
        except Exception as e:
            error = NotificationError(str(e))
            logger.error(
                "notification_error",
                error=error.message,
                error_type=type(e).__name__,
            )

    async def aclose(self) -> None:
        """Дождаться отправок в полете и закрыть сессию бота."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        if self.bot is not None:
            try:
                await self.bot.session.close()
                logger.info("bot_session_closed")
            except Exception as e:
                logger.error("bot_shutdown_error", error=str(e))


def build_bot(settings: Settings) -> Optional[Bot]:
    """Bot создается только если задан TELEGRAM_BOT_TOKEN."""
    if not settings.telegram_bot_token:
        logger.warning("bot_token_missing", message="TELEGRAM_BOT_TOKEN не установлен")
        return None
    return Bot(
        token=settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode="HTML"),
    )


def build_notifier(settings: Settings) -> Notifier:
    notifier = Notifier(build_bot(settings), settings.admin_chat_id)
    if not notifier.enabled:
        logger.warning("notifications_disabled", has_chat_id=bool(settings.admin_chat_id))
    return notifier
