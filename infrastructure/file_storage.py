# infrastructure/file_storage.py
"""
📁 JSON ХРАНИЛИЩЕ

Запасной вариант, когда PostgreSQL не настроен.

Каждая таблица = один JSON файл в папке data/:
    categories.json, subcategories.json, products.json, orders.json, carts.json

Логика:
1. При старте читаем все файлы в память
2. Любое изменение собирает НОВУЮ таблицу, целиком пишет её на диск
   (через временный файл + replace) и только потом подменяет таблицу в памяти
3. Если запись упала - ни память, ни файл не меняются

Транзакций между таблицами нет, одновременные записи не изолированы:
хранилище рассчитано на один процесс и редкие админские изменения.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os
import structlog

from app.exceptions import DuplicateNameError, NotFoundError, StorageError
from app.models import (
    Cart,
    Category,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    Subcategory,
    utcnow,
)
from infrastructure.storage import EntityStore, extract_image, without_products

logger = structlog.get_logger()

LIST_TABLES = ("categories", "subcategories", "products", "orders")


def next_id(rows: List[Dict[str, Any]]) -> int:
    """max(id) + 1: после удаления остаются дыры, но id не переиспользуются."""
    return max((row["id"] for row in rows), default=0) + 1


class JsonFileStore(EntityStore):
    """Хранилище на JSON файлах (одна таблица = один файл)."""

    name = "json"

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)
        self._tables: Dict[str, Any] = {table: [] for table in LIST_TABLES}
        self._tables["carts"] = {}

    # ==========================================
    # ЧТЕНИЕ / ЗАПИСЬ ФАЙЛОВ
    # ==========================================

    def _path(self, table: str) -> Path:
        return self.data_dir / f"{table}.json"

    async def init(self) -> None:
        await aiofiles.os.makedirs(self.data_dir, exist_ok=True)

        for table in LIST_TABLES:
            self._tables[table] = await self._read(table, [])
        self._tables["carts"] = await self._read("carts", {})

        logger.info(
            "json_storage_loaded",
            data_dir=str(self.data_dir),
            categories=len(self._tables["categories"]),
            products=len(self._tables["products"]),
            orders=len(self._tables["orders"]),
        )

    async def _read(self, table: str, default):
        path = self._path(table)
        if not path.exists():
            return default

        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                data = json.loads(await f.read())
        except (OSError, ValueError) as e:
            # Битый файл не должен ронять магазин
            logger.warning("json_table_unreadable", table=table, error=str(e))
            return default

        if not isinstance(data, type(default)):
            logger.warning("json_table_wrong_type", table=table)
            return default
        return data

    async def _write(self, table: str, data) -> None:
        path = self._path(table)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(data, ensure_ascii=False, indent=2))
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            logger.error("json_table_write_failed", table=table, error=str(e))
            raise StorageError() from e

    async def _commit(self, **tables) -> None:
        """Записать таблицы на диск и только после этого обновить память."""
        for table, data in tables.items():
            await self._write(table, data)
            self._tables[table] = data

    @property
    def _categories(self) -> List[Dict[str, Any]]:
        return self._tables["categories"]

    @property
    def _subcategories(self) -> List[Dict[str, Any]]:
        return self._tables["subcategories"]

    @property
    def _products(self) -> List[Dict[str, Any]]:
        return self._tables["products"]

    @property
    def _orders(self) -> List[Dict[str, Any]]:
        return self._tables["orders"]

    @property
    def _carts(self) -> Dict[str, Any]:
        return self._tables["carts"]

    def _purged_carts(self, product_ids) -> Dict[str, Any]:
        return {
            user_id: {"items": without_products(cart.get("items", []), product_ids)}
            for user_id, cart in self._carts.items()
        }

    # ==========================================
    # КАТЕГОРИИ
    # ==========================================

    async def list_categories(self) -> List[Category]:
        rows = sorted(self._categories, key=lambda row: row["id"])
        return [Category.model_validate(row) for row in rows]

    async def create_category(self, name: str) -> Category:
        if any(row["name"] == name for row in self._categories):
            raise DuplicateNameError(f"Категория «{name}» уже существует")

        category = Category(id=next_id(self._categories), name=name)
        await self._commit(
            categories=[*self._categories, category.model_dump(mode="json")]
        )
        logger.info("category_created", category_id=category.id, storage=self.name)
        return category

    async def delete_category(self, category_id: int) -> None:
        subcategory_ids = {
            row["id"] for row in self._subcategories if row["category_id"] == category_id
        }
        product_ids = {
            row["id"] for row in self._products if row["subcategory_id"] in subcategory_ids
        }

        # Сначала дочерние таблицы: при сбое записи на диске не будет сирот
        changes = {}
        if product_ids:
            changes["carts"] = self._purged_carts(product_ids)
            changes["products"] = [
                row for row in self._products if row["id"] not in product_ids
            ]
        changes["subcategories"] = [
            row for row in self._subcategories if row["id"] not in subcategory_ids
        ]
        changes["categories"] = [row for row in self._categories if row["id"] != category_id]

        await self._commit(**changes)
        logger.info(
            "category_deleted",
            category_id=category_id,
            subcategories=len(subcategory_ids),
            products=len(product_ids),
        )

    # ==========================================
    # ПОДКАТЕГОРИИ
    # ==========================================

    async def list_subcategories(self, category_id: Optional[int] = None) -> List[Subcategory]:
        rows = self._subcategories
        if category_id is not None:
            rows = [row for row in rows if row["category_id"] == category_id]
        return [Subcategory.model_validate(row) for row in sorted(rows, key=lambda row: row["id"])]

    async def create_subcategory(self, category_id: int, name: str) -> Subcategory:
        if not any(row["id"] == category_id for row in self._categories):
            raise NotFoundError(f"Категория #{category_id} не найдена")

        if any(
            row["category_id"] == category_id and row["name"] == name
            for row in self._subcategories
        ):
            raise DuplicateNameError(f"Подкатегория «{name}» уже существует")

        subcategory = Subcategory(
            id=next_id(self._subcategories),
            category_id=category_id,
            name=name,
        )
        await self._commit(
            subcategories=[*self._subcategories, subcategory.model_dump(mode="json")]
        )
        logger.info("subcategory_created", subcategory_id=subcategory.id, category_id=category_id)
        return subcategory

    async def delete_subcategory(self, subcategory_id: int) -> None:
        product_ids = {
            row["id"] for row in self._products if row["subcategory_id"] == subcategory_id
        }

        changes = {}
        if product_ids:
            changes["carts"] = self._purged_carts(product_ids)
            changes["products"] = [
                row for row in self._products if row["id"] not in product_ids
            ]
        changes["subcategories"] = [
            row for row in self._subcategories if row["id"] != subcategory_id
        ]

        await self._commit(**changes)
        logger.info("subcategory_deleted", subcategory_id=subcategory_id, products=len(product_ids))

    # ==========================================
    # ТОВАРЫ
    # ==========================================

    async def list_products(self, subcategory_id: Optional[int] = None) -> List[Product]:
        rows = self._products
        if subcategory_id is not None:
            rows = [row for row in rows if row["subcategory_id"] == subcategory_id]
        return [Product.model_validate(row) for row in sorted(rows, key=lambda row: row["id"])]

    async def get_product(self, product_id: int) -> Product:
        for row in self._products:
            if row["id"] == product_id:
                return Product.model_validate(row)
        raise NotFoundError("Товар не найден")

    async def create_product(
        self,
        subcategory_id: int,
        name: str,
        description: Optional[str],
        price: float,
        image_data: Optional[str] = None,
    ) -> Product:
        if not any(row["id"] == subcategory_id for row in self._subcategories):
            raise NotFoundError(f"Подкатегория #{subcategory_id} не найдена")

        image = extract_image(image_data)
        product = Product(
            id=next_id(self._products),
            subcategory_id=subcategory_id,
            name=name,
            description=description or "",
            price=float(price),
            main_image=image,
            images=[image] if image else [],
        )
        await self._commit(products=[*self._products, product.model_dump(mode="json")])
        logger.info("product_created", product_id=product.id, subcategory_id=subcategory_id)
        return product

    async def update_product(
        self,
        product_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        price: Optional[float] = None,
    ) -> None:
        products = []
        found = False
        for row in self._products:
            if row["id"] == product_id:
                found = True
                row = dict(row)
                if name is not None:
                    row["name"] = name
                if description is not None:
                    row["description"] = description
                if price is not None:
                    row["price"] = float(price)
            products.append(row)

        if not found:
            logger.warning("product_update_missing", product_id=product_id)
            return

        await self._commit(products=products)
        logger.info("product_updated", product_id=product_id)

    async def delete_product(self, product_id: int) -> None:
        if not any(row["id"] == product_id for row in self._products):
            return

        await self._commit(
            carts=self._purged_carts({product_id}),
            products=[row for row in self._products if row["id"] != product_id],
        )
        logger.info("product_deleted", product_id=product_id)

    # ==========================================
    # КОРЗИНЫ
    # ==========================================

    async def get_cart(self, user_id: str) -> Cart:
        cart = self._carts.get(str(user_id)) or {}
        return Cart(items=copy.deepcopy(cart.get("items", [])))

    async def save_cart(self, user_id: str, items: List[Dict[str, Any]]) -> None:
        carts = dict(self._carts)
        carts[str(user_id)] = {"items": copy.deepcopy(list(items))}
        await self._commit(carts=carts)

    # ==========================================
    # ЗАКАЗЫ
    # ==========================================

    async def list_orders(self) -> List[Order]:
        orders = [Order.model_validate(row) for row in self._orders]
        return sorted(orders, key=lambda order: (order.created_at, order.id), reverse=True)

    async def get_order(self, order_id: int) -> Order:
        for row in self._orders:
            if row["id"] == order_id:
                return Order.model_validate(row)
        raise NotFoundError("Заказ не найден")

    async def create_order(
        self,
        telegram_user_id: Optional[int],
        username: Optional[str],
        contact: str,
        total_price: float,
        items: List[OrderItem],
    ) -> Order:
        order = Order(
            id=next_id(self._orders),
            telegram_user_id=telegram_user_id,
            username=username,
            contact=contact,
            total_price=float(total_price),
            items=items,
            status=OrderStatus.NEW,
        )
        await self._commit(orders=[*self._orders, order.model_dump(mode="json")])
        logger.info("order_created", order_id=order.id, total=order.total_price, storage=self.name)
        return order

    async def complete_order(self, order_id: int) -> None:
        orders = []
        changed = False
        for row in self._orders:
            if row["id"] == order_id and row.get("status") != OrderStatus.COMPLETED.value:
                row = dict(row)
                row["status"] = OrderStatus.COMPLETED.value
                row["completed_at"] = utcnow().isoformat()
                changed = True
            orders.append(row)

        if changed:
            await self._commit(orders=orders)
            logger.info("order_completed", order_id=order_id)

    async def delete_order(self, order_id: int) -> None:
        if not any(row["id"] == order_id for row in self._orders):
            return

        await self._commit(orders=[row for row in self._orders if row["id"] != order_id])
        logger.info("order_deleted", order_id=order_id)
