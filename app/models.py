# app/models.py
"""
📊 МОДЕЛИ ДАННЫХ (Pydantic)

То, что видят API, сервисы и фронтенд мини-приложения:
- Category (категории)
- Subcategory (подкатегории)
- Product (товары)
- Order + OrderItem (заказы и снимок товаров в заказе)
- Cart (корзина пользователя)

Оба хранилища (PostgreSQL и JSON файлы) возвращают именно эти модели,
поэтому JSON ответа не зависит от того, где лежат данные.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entity(BaseModel):
    """Базовая модель: даты всегда с таймзоной UTC."""

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "completed_at", check_fields=False)
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite и часть драйверов возвращают naive datetime
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# ==========================================
# КАТАЛОГ
# ==========================================

class Category(Entity):
    id: int
    name: str
    created_at: datetime = Field(default_factory=utcnow)


class Subcategory(Entity):
    id: int
    category_id: int
    name: str
    created_at: datetime = Field(default_factory=utcnow)


class Product(Entity):
    id: int
    subcategory_id: int
    name: str
    description: str = ""
    price: float
    main_image: str = ""
    # Первая картинка = главная
    images: List[str] = []
    created_at: datetime = Field(default_factory=utcnow)


# ==========================================
# ЗАКАЗЫ
# ==========================================

class OrderStatus(str, Enum):
    """Статусы заказа: только new → completed."""

    NEW = "new"
    COMPLETED = "completed"


class OrderItem(BaseModel):
    """
    Снимок товара в момент заказа.

    Название и цена копируются, поэтому поздние изменения товара
    не трогают уже оформленные заказы. Лишние поля от клиента сохраняются.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    name: str
    price: float
    quantity: int

    @property
    def total(self) -> float:
        return self.price * self.quantity


class Order(Entity):
    id: int
    telegram_user_id: Optional[int] = None
    username: Optional[str] = None
    contact: str
    total_price: float
    items: List[OrderItem]
    status: OrderStatus = OrderStatus.NEW
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None


# ==========================================
# КОРЗИНА
# ==========================================

class Cart(BaseModel):
    """
    Корзина пользователя.

    Позиции хранятся как пришли от мини-приложения ({id, quantity, price, name}),
    каждое сохранение полностью заменяет корзину.
    """

    items: List[Dict[str, Any]] = []
