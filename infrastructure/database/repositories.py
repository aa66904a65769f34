# infrastructure/database/repositories.py
"""
Repository паттерн.

Вместо того чтобы писать:
    session.execute(select(...))
везде в коде, мы создаем методы:
    repo.get_by_id(123)
    repo.create(...)

Репозиторий получает открытую сессию и НЕ делает commit:
транзакцией управляет SqlStore (одна операция магазина = одна транзакция),
поэтому каскадные удаления применяются целиком или не применяются вовсе.
"""

import json
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Cart, Category, Order, Product, Subcategory, utcnow
from infrastructure.storage import without_products


def dumps(value) -> str:
    return json.dumps(value, ensure_ascii=False)


def loads(text: Optional[str], default):
    """Разобрать JSON из TEXT столбца. Пусто или мусор = default."""
    if not text:
        return default
    try:
        return json.loads(text)
    except ValueError:
        return default


# ==========================================
# REPOSITORY: Category
# ==========================================

class CategoryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self) -> List[Category]:
        result = await self.session.execute(select(Category).order_by(Category.id))
        return list(result.scalars().all())

    async def get_by_id(self, category_id: int) -> Optional[Category]:
        return await self.session.get(Category, category_id)

    async def get_by_name(self, name: str) -> Optional[Category]:
        result = await self.session.execute(select(Category).where(Category.name == name))
        return result.scalars().first()

    async def create(self, name: str) -> Category:
        category = Category(name=name)
        self.session.add(category)
        await self.session.flush()
        # flush = INSERT без commit, получаем id
        return category

    async def delete(self, category_id: int) -> None:
        await self.session.execute(delete(Category).where(Category.id == category_id))


# ==========================================
# REPOSITORY: Subcategory
# ==========================================

class SubcategoryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self, category_id: Optional[int] = None) -> List[Subcategory]:
        stmt = select(Subcategory)
        if category_id is not None:
            stmt = stmt.where(Subcategory.category_id == category_id)
        result = await self.session.execute(stmt.order_by(Subcategory.id))
        return list(result.scalars().all())

    async def get_by_id(self, subcategory_id: int) -> Optional[Subcategory]:
        return await self.session.get(Subcategory, subcategory_id)

    async def get_by_name(self, category_id: int, name: str) -> Optional[Subcategory]:
        stmt = select(Subcategory).where(
            Subcategory.category_id == category_id,
            Subcategory.name == name,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def ids_for_category(self, category_id: int) -> Set[int]:
        stmt = select(Subcategory.id).where(Subcategory.category_id == category_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def create(self, category_id: int, name: str) -> Subcategory:
        subcategory = Subcategory(category_id=category_id, name=name)
        self.session.add(subcategory)
        await self.session.flush()
        return subcategory

    async def delete_many(self, subcategory_ids: Iterable[int]) -> None:
        subcategory_ids = list(subcategory_ids)
        if subcategory_ids:
            await self.session.execute(
                delete(Subcategory).where(Subcategory.id.in_(subcategory_ids))
            )


# ==========================================
# REPOSITORY: Product
# ==========================================

class ProductRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list(self, subcategory_id: Optional[int] = None) -> List[Product]:
        stmt = select(Product)
        if subcategory_id is not None:
            stmt = stmt.where(Product.subcategory_id == subcategory_id)
        result = await self.session.execute(stmt.order_by(Product.id))
        return list(result.scalars().all())

    async def get_by_id(self, product_id: int) -> Optional[Product]:
        return await self.session.get(Product, product_id)

    async def ids_for_subcategories(self, subcategory_ids: Iterable[int]) -> Set[int]:
        subcategory_ids = list(subcategory_ids)
        if not subcategory_ids:
            return set()
        stmt = select(Product.id).where(Product.subcategory_id.in_(subcategory_ids))
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def create(
        self,
        subcategory_id: int,
        name: str,
        description: str,
        price: float,
        main_image: str,
    ) -> Product:
        product = Product(
            subcategory_id=subcategory_id,
            name=name,
            description=description,
            price=price,
            main_image=main_image,
            images=dumps([main_image] if main_image else []),
        )
        self.session.add(product)
        await self.session.flush()
        return product

    async def update(self, product_id: int, values: Dict[str, Any]) -> int:
        """UPDATE только переданных полей. Возвращает число измененных строк."""
        if not values:
            return 0
        result = await self.session.execute(
            update(Product).where(Product.id == product_id).values(**values)
        )
        return result.rowcount

    async def delete_many(self, product_ids: Iterable[int]) -> None:
        product_ids = list(product_ids)
        if product_ids:
            await self.session.execute(delete(Product).where(Product.id.in_(product_ids)))


# ==========================================
# REPOSITORY: Cart
# ==========================================

class CartRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str) -> Optional[Cart]:
        return await self.session.get(Cart, user_id)

    async def save(self, user_id: str, items: List[Dict[str, Any]]) -> None:
        """Upsert: корзина заменяется целиком."""
        cart = await self.get(user_id)
        if cart:
            cart.items = dumps(items)
            cart.updated_at = utcnow()
        else:
            self.session.add(Cart(telegram_user_id=user_id, items=dumps(items)))
        await self.session.flush()

    async def remove_products(self, product_ids: Set[int]) -> int:
        """
        Убрать товары из всех корзин.

        Возвращает сколько корзин изменилось.
        """
        if not product_ids:
            return 0

        result = await self.session.execute(select(Cart))
        changed = 0
        for cart in result.scalars().all():
            items = loads(cart.items, [])
            kept = without_products(items, product_ids)
            if len(kept) != len(items):
                cart.items = dumps(kept)
                cart.updated_at = utcnow()
                changed += 1
        await self.session.flush()
        return changed


# ==========================================
# REPOSITORY: Order
# ==========================================

class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_newest_first(self) -> List[Order]:
        stmt = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, order_id: int) -> Optional[Order]:
        return await self.session.get(Order, order_id)

    async def create(
        self,
        telegram_user_id: Optional[int],
        username: Optional[str],
        contact: str,
        total_price: float,
        items: List[Dict[str, Any]],
    ) -> Order:
        order = Order(
            telegram_user_id=telegram_user_id,
            username=username,
            contact=contact,
            total_price=total_price,
            items=dumps(items),
            status="new",
        )
        self.session.add(order)
        await self.session.flush()
        return order

    async def complete(self, order_id: int) -> int:
        """new → completed. Уже завершенный заказ не трогаем."""
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status != "completed")
            .values(status="completed", completed_at=utcnow())
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete(self, order_id: int) -> int:
        result = await self.session.execute(delete(Order).where(Order.id == order_id))
        return result.rowcount
