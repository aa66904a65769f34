# app/api/__init__.py
"""
🌐 API (FastAPI)

Маршруты:
- /api/categories, /api/subcategories, /api/products - каталог
- /api/cart/{userId} - корзина
- /api/orders - заказы
- /telegram - webhook бота
- /health - проверка что сервер живой
"""

from .app import create_app

__all__ = ["create_app"]
