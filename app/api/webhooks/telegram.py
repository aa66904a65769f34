# app/api/webhooks/telegram.py
"""
Обработчик вебхука от Telegram.

Telegram отправляет каждый update (сообщение, нажатие кнопки)
POST запросом на /telegram. Мы передаем его диспетчеру aiogram.

Telegram повторяет доставку, пока не получит 200,
поэтому ошибки обработки только логируются.
"""

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger()
router = APIRouter(tags=["telegram"])


@router.post("/telegram")
async def handle_telegram_webhook(request: Request):
    try:
        update = await request.json()
    except ValueError as e:
        logger.warning("invalid_telegram_update", error=str(e))
        return JSONResponse(status_code=400, content={"ok": False})

    if not isinstance(update, dict):
        logger.warning("invalid_telegram_update", error="not an object")
        return JSONResponse(status_code=400, content={"ok": False})

    bot = request.app.state.bot
    if bot is None:
        logger.warning("telegram_update_ignored", reason="bot_not_configured")
        return {"ok": True}

    try:
        await request.app.state.dispatcher.feed_webhook_update(bot, update)
    except Exception as e:
        logger.error(
            "telegram_update_error",
            update_id=update.get("update_id"),
            error=str(e),
            error_type=type(e).__name__,
        )

    return {"ok": True}
