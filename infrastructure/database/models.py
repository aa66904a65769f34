# infrastructure/database/models.py
"""
Здесь мы описываем структуру таблиц в базе данных.
SQLAlchemy создаст эти таблицы при первом запуске (init_db).

Каждый класс = одна таблица в БД.

Массивы (картинки товара, позиции заказа и корзины) хранятся
как JSON строка в TEXT и разбираются при каждом чтении.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from infrastructure.database.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ==========================================
# МОДЕЛЬ: Category (Таблица categories)
# ==========================================

class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(Text, nullable=False, unique=True)
    # Уникально по всему магазину (с учетом регистра)

    created_at = Column(DateTime(timezone=True), default=utcnow)


# ==========================================
# МОДЕЛЬ: Subcategory (Таблица subcategories)
# ==========================================

class Subcategory(Base):
    __tablename__ = "subcategories"
    __table_args__ = (
        UniqueConstraint("category_id", "name", name="uq_subcategories_category_name"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(Text, nullable=False)
    # Уникально только внутри своей категории

    created_at = Column(DateTime(timezone=True), default=utcnow)


# ==========================================
# МОДЕЛЬ: Product (Таблица products)
# ==========================================

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)

    subcategory_id = Column(
        Integer,
        ForeignKey("subcategories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)

    main_image = Column(Text, nullable=True)
    # data:image/...;base64 - картинки живут прямо в БД

    images = Column(Text, nullable=True)
    # JSON массив: ["data:image/...", ...]

    created_at = Column(DateTime(timezone=True), default=utcnow)


# ==========================================
# МОДЕЛЬ: Order (Таблица orders)
# ==========================================

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)

    telegram_user_id = Column(BigInteger, nullable=True, index=True)
    username = Column(Text, nullable=True)
    contact = Column(Text, nullable=True)

    total_price = Column(Float, nullable=False)

    items = Column(Text, nullable=False)
    # JSON снимок товаров: [{"id": 1, "name": "Рубашка", "price": 500, "quantity": 2}]
    # Без внешних ключей на products - удаление товара заказ не трогает

    status = Column(String(20), default="new", index=True)
    # new → completed

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)


# ==========================================
# МОДЕЛЬ: Cart (Таблица carts)
# ==========================================

class Cart(Base):
    __tablename__ = "carts"

    telegram_user_id = Column(Text, primary_key=True)
    # Одна корзина на пользователя

    items = Column(Text, nullable=True)
    # JSON массив позиций как их прислало мини-приложение

    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
