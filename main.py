# main.py
"""
🚀 ГЛАВНЫЙ ФАЙЛ ЗАПУСКА МАГАЗИНА

Это точка входа - отсюда всё начинается!

Запускает одно FastAPI приложение (uvicorn, один процесс):
API мини-приложения, админки и webhook бота.

Команда для запуска:
    python main.py
"""

import structlog
import uvicorn

from app.api import create_app
from config.settings import get_settings
from infrastructure.logger import setup_logging

logger = structlog.get_logger()


def main():
    settings = get_settings()

    # 1. Логирование (все логи будут видны)
    setup_logging(debug=settings.debug)

    # 2. Приложение: хранилище и бот выбираются по настройкам
    app = create_app(settings)

    logger.info(
        "server_starting",
        host=settings.host,
        port=settings.port,
        storage=app.state.store.name,
        miniapp_url=settings.miniapp_url,
        admin_url=settings.admin_url,
    )

    # 3. Запуск (startup / shutdown через lifespan)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level="info",
        access_log=False,
        # запросы уже логирует middleware
    )


# ==========================================
# 📌 ENTRY POINT (точка входа)
# ==========================================

if __name__ == "__main__":
    main()
