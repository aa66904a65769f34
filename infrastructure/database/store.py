# infrastructure/database/store.py
"""
🐘 SQL ХРАНИЛИЩЕ

EntityStore поверх SQLAlchemy (PostgreSQL через asyncpg).

Каждая операция магазина = одна сессия + одна транзакция:
- всё прошло → COMMIT
- любая ошибка → ROLLBACK, наружу StorageError (или ошибка магазина)
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from app import models as entities
from app.exceptions import DuplicateNameError, NotFoundError, ShopError, StorageError
from config.settings import Settings
from infrastructure.database.base import (
    close_db,
    create_engine_from_settings,
    create_session_maker,
    init_db,
)
from infrastructure.database.models import Category, Order, Product, Subcategory
from infrastructure.database.repositories import (
    CartRepository,
    CategoryRepository,
    OrderRepository,
    ProductRepository,
    SubcategoryRepository,
    loads,
)
from infrastructure.storage import EntityStore, extract_image

logger = structlog.get_logger()


# ==========================================
# ORM → модели API
# ==========================================

def to_category(row: Category) -> entities.Category:
    return entities.Category(id=row.id, name=row.name, created_at=row.created_at)


def to_subcategory(row: Subcategory) -> entities.Subcategory:
    return entities.Subcategory(
        id=row.id,
        category_id=row.category_id,
        name=row.name,
        created_at=row.created_at,
    )


def to_product(row: Product) -> entities.Product:
    return entities.Product(
        id=row.id,
        subcategory_id=row.subcategory_id,
        name=row.name,
        description=row.description or "",
        price=float(row.price),
        main_image=row.main_image or "",
        images=loads(row.images, []),
        created_at=row.created_at,
    )


def to_order(row: Order) -> entities.Order:
    return entities.Order(
        id=row.id,
        telegram_user_id=row.telegram_user_id,
        username=row.username,
        contact=row.contact or "",
        total_price=float(row.total_price),
        items=loads(row.items, []),
        status=row.status or entities.OrderStatus.NEW,
        created_at=row.created_at,
        completed_at=row.completed_at,
    )


class SqlStore(EntityStore):
    """Хранилище на SQLAlchemy (async)."""

    name = "postgres"

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_maker = create_session_maker(engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SqlStore":
        return cls(create_engine_from_settings(settings))

    async def init(self) -> None:
        await init_db(self.engine)
        logger.info("database_initialized", dialect=self.engine.dialect.name)

    async def close(self) -> None:
        await close_db(self.engine)

    @asynccontextmanager
    async def _transaction(self, action: str):
        """
        Сессия с открытой транзакцией.

        Ошибки магазина (NotFound, DuplicateName) пробрасываются как есть,
        ошибки БД логируются и превращаются в StorageError.
        """
        try:
            async with self.session_maker.begin() as session:
                yield session
        except ShopError:
            raise
        except SQLAlchemyError as e:
            logger.error(
                "database_error",
                action=action,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageError() from e

    # ==========================================
    # КАТЕГОРИИ
    # ==========================================

    async def list_categories(self) -> List[entities.Category]:
        async with self._transaction("list_categories") as session:
            rows = await CategoryRepository(session).list()
            return [to_category(row) for row in rows]

    async def create_category(self, name: str) -> entities.Category:
        async with self._transaction("create_category") as session:
            repo = CategoryRepository(session)
            if await repo.get_by_name(name):
                raise DuplicateNameError(f"Категория «{name}» уже существует")
            try:
                row = await repo.create(name)
            except IntegrityError as e:
                # Кто-то успел создать такую же между SELECT и INSERT
                raise DuplicateNameError(f"Категория «{name}» уже существует") from e
            logger.info("category_created", category_id=row.id, storage=self.name)
            return to_category(row)

    async def delete_category(self, category_id: int) -> None:
        async with self._transaction("delete_category") as session:
            subcategory_ids = await SubcategoryRepository(session).ids_for_category(category_id)
            product_ids = await ProductRepository(session).ids_for_subcategories(subcategory_ids)

            await CartRepository(session).remove_products(product_ids)
            await ProductRepository(session).delete_many(product_ids)
            await SubcategoryRepository(session).delete_many(subcategory_ids)
            await CategoryRepository(session).delete(category_id)

        logger.info(
            "category_deleted",
            category_id=category_id,
            subcategories=len(subcategory_ids),
            products=len(product_ids),
        )

    # ==========================================
    # ПОДКАТЕГОРИИ
    # ==========================================

    async def list_subcategories(
        self, category_id: Optional[int] = None
    ) -> List[entities.Subcategory]:
        async with self._transaction("list_subcategories") as session:
            rows = await SubcategoryRepository(session).list(category_id)
            return [to_subcategory(row) for row in rows]

    async def create_subcategory(self, category_id: int, name: str) -> entities.Subcategory:
        async with self._transaction("create_subcategory") as session:
            if not await CategoryRepository(session).get_by_id(category_id):
                raise NotFoundError(f"Категория #{category_id} не найдена")

            repo = SubcategoryRepository(session)
            if await repo.get_by_name(category_id, name):
                raise DuplicateNameError(f"Подкатегория «{name}» уже существует")
            try:
                row = await repo.create(category_id, name)
            except IntegrityError as e:
                raise DuplicateNameError(f"Подкатегория «{name}» уже существует") from e
            logger.info("subcategory_created", subcategory_id=row.id, category_id=category_id)
            return to_subcategory(row)

    async def delete_subcategory(self, subcategory_id: int) -> None:
        async with self._transaction("delete_subcategory") as session:
            product_ids = await ProductRepository(session).ids_for_subcategories([subcategory_id])

            await CartRepository(session).remove_products(product_ids)
            await ProductRepository(session).delete_many(product_ids)
            await SubcategoryRepository(session).delete_many([subcategory_id])

        logger.info("subcategory_deleted", subcategory_id=subcategory_id, products=len(product_ids))

    # ==========================================
    # ТОВАРЫ
    # ==========================================

    async def list_products(self, subcategory_id: Optional[int] = None) -> List[entities.Product]:
        async with self._transaction("list_products") as session:
            rows = await ProductRepository(session).list(subcategory_id)
            return [to_product(row) for row in rows]

    async def get_product(self, product_id: int) -> entities.Product:
        async with self._transaction("get_product") as session:
            row = await ProductRepository(session).get_by_id(product_id)
            if not row:
                raise NotFoundError("Товар не найден")
            return to_product(row)

    async def create_product(
        self,
        subcategory_id: int,
        name: str,
        description: Optional[str],
        price: float,
        image_data: Optional[str] = None,
    ) -> entities.Product:
        async with self._transaction("create_product") as session:
            if not await SubcategoryRepository(session).get_by_id(subcategory_id):
                raise NotFoundError(f"Подкатегория #{subcategory_id} не найдена")

            row = await ProductRepository(session).create(
                subcategory_id=subcategory_id,
                name=name,
                description=description or "",
                price=float(price),
                main_image=extract_image(image_data),
            )
            logger.info("product_created", product_id=row.id, subcategory_id=subcategory_id)
            return to_product(row)

    async def update_product(
        self,
        product_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        price: Optional[float] = None,
    ) -> None:
        values: Dict[str, Any] = {}
        if name is not None:
            values["name"] = name
        if description is not None:
            values["description"] = description
        if price is not None:
            values["price"] = float(price)

        async with self._transaction("update_product") as session:
            if not await ProductRepository(session).get_by_id(product_id):
                logger.warning("product_update_missing", product_id=product_id)
                return
            await ProductRepository(session).update(product_id, values)

        logger.info("product_updated", product_id=product_id, fields=sorted(values))

    async def delete_product(self, product_id: int) -> None:
        async with self._transaction("delete_product") as session:
            await CartRepository(session).remove_products({product_id})
            await ProductRepository(session).delete_many([product_id])

        logger.info("product_deleted", product_id=product_id)

    # ==========================================
    # КОРЗИНЫ
    # ==========================================

    async def get_cart(self, user_id: str) -> entities.Cart:
        async with self._transaction("get_cart") as session:
            cart = await CartRepository(session).get(str(user_id))
            return entities.Cart(items=loads(cart.items, []) if cart else [])

    async def save_cart(self, user_id: str, items: List[Dict[str, Any]]) -> None:
        async with self._transaction("save_cart") as session:
            await CartRepository(session).save(str(user_id), list(items))

    # ==========================================
    # ЗАКАЗЫ
    # ==========================================

    async def list_orders(self) -> List[entities.Order]:
        async with self._transaction("list_orders") as session:
            rows = await OrderRepository(session).list_newest_first()
            return [to_order(row) for row in rows]

    async def get_order(self, order_id: int) -> entities.Order:
        async with self._transaction("get_order") as session:
            row = await OrderRepository(session).get_by_id(order_id)
            if not row:
                raise NotFoundError("Заказ не найден")
            return to_order(row)

    async def create_order(
        self,
        telegram_user_id: Optional[int],
        username: Optional[str],
        contact: str,
        total_price: float,
        items: List[entities.OrderItem],
    ) -> entities.Order:
        async with self._transaction("create_order") as session:
            row = await OrderRepository(session).create(
                telegram_user_id=telegram_user_id,
                username=username,
                contact=contact,
                total_price=float(total_price),
                items=[item.model_dump(mode="json") for item in items],
            )
            order = to_order(row)

        logger.info("order_created", order_id=order.id, total=order.total_price, storage=self.name)
        return order

    async def complete_order(self, order_id: int) -> None:
        async with self._transaction("complete_order") as session:
            updated = await OrderRepository(session).complete(order_id)

        if updated:
            logger.info("order_completed", order_id=order_id)

    async def delete_order(self, order_id: int) -> None:
        async with self._transaction("delete_order") as session:
            deleted = await OrderRepository(session).delete(order_id)

        if deleted:
            logger.info("order_deleted", order_id=order_id)
