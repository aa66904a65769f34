# app/bot/middlewares/logging.py
"""
Middleware для логирования всех событий.
"""

from typing import Any, Awaitable, Callable, Dict, Union

import structlog
from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message

logger = structlog.get_logger()


class LoggingMiddleware(BaseMiddleware):
    """Middleware который логирует все события."""

    async def __call__(
        self,
        handler: Callable[[Union[Message, CallbackQuery], Dict[str, Any]], Awaitable[Any]],
        event: Union[Message, CallbackQuery],
        data: Dict[str, Any],
    ) -> Any:
        user = event.from_user
        if isinstance(event, Message):
            logger.info(
                "message_received",
                user_id=user.id if user else None,
                username=user.username if user else None,
                text=event.text[:50] if event.text else None,
            )
        elif isinstance(event, CallbackQuery):
            logger.info(
                "callback_received",
                user_id=user.id,
                callback_data=event.data,
            )

        return await handler(event, data)
