# app/bot/middlewares/__init__.py
"""
🔄 MIDDLEWARE (перехватчики)

Middleware срабатывают для КАЖДОГО сообщения и callback.
"""

from .logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
