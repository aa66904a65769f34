# app/api/app.py
"""
FastAPI приложение магазина.

FastAPI = веб-фреймворк для создания REST API.

Через него работают:
- мини-приложение (каталог, корзина, оформление заказа)
- админка (управление каталогом и заказами)
- Telegram (webhook бота)
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request

from app.api.errors import register_error_handlers
from app.api.middlewares import register_middlewares
from app.api.routes.cart import router as cart_router
from app.api.routes.catalog import router as catalog_router
from app.api.routes.orders import router as orders_router
from app.api.webhooks.telegram import router as telegram_router
from app.bot.dispatcher import build_dispatcher
from app.services.notifications import Notifier, build_notifier
from app.services.orders import OrderService
from config.settings import Settings
from infrastructure.storage import EntityStore, create_store

logger = structlog.get_logger()


# ==========================================
# 🔄 LIFESPAN (управление жизненным циклом приложения)
# ==========================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Запуск: готовим хранилище (таблицы / файлы).
    Выключение: ждем отправку уведомлений, закрываем бота и хранилище.
    """
    store: EntityStore = app.state.store
    notifier: Notifier = app.state.notifier

    logger.info("app_startup", storage=store.name, notifications=notifier.enabled)
    await store.init()

    try:
        yield
    finally:
        logger.info("app_shutdown")
        await notifier.aclose()
        try:
            await store.close()
        except Exception as e:
            logger.error("storage_close_error", error=str(e))


# ==========================================
# 🌐 СОЗДАЁМ FASTAPI ПРИЛОЖЕНИЕ
# ==========================================

def create_app(
    settings: Settings,
    store: Optional[EntityStore] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Собрать приложение.

    store и notifier можно передать готовыми (тесты),
    иначе они создаются по настройкам.
    """
    store = store or create_store(settings)
    notifier = notifier or build_notifier(settings)

    app = FastAPI(
        title="DANISA SHOP API",
        description="API мини-приложения и админки магазина",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.notifier = notifier
    app.state.order_service = OrderService(store, notifier)
    app.state.bot = notifier.bot
    app.state.dispatcher = build_dispatcher(settings)

    register_middlewares(app)
    register_error_handlers(app)

    app.include_router(catalog_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(telegram_router)

    @app.get("/health")
    async def health_check(request: Request):
        """Проверка что сервер живой. Используется для мониторинга."""
        return {"status": "ok", "storage": request.app.state.store.name}

    return app
