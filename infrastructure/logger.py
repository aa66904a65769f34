# infrastructure/logger.py
"""
📝 ЛОГИРОВАНИЕ

Структурированные логи через structlog.
Каждое событие = короткое имя в snake_case + контекст в kwargs:

    logger.info("order_created", order_id=order.id, total=order.total_price)
"""

import logging
import sys

import structlog


def setup_logging(debug: bool = False):
    """
    Инициализирует логирование.

    Вызывается один раз при старте приложения (main.py).
    """

    level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )


