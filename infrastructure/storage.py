# infrastructure/storage.py
"""
🗄️ ХРАНИЛИЩЕ (общий контракт)

Магазин умеет работать с двумя хранилищами:
- PostgreSQL (если задан DATABASE_URL / DATABASE_PUBLIC_URL)
- JSON файлы в папке data/ (запасной вариант)

Сервисы и API знают только про EntityStore,
конкретное хранилище выбирается один раз при старте (create_store).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Set

from app.models import Cart, Category, Order, OrderItem, Product, Subcategory
from config.settings import Settings


class EntityStore(ABC):
    """Контракт хранилища: одинаковые методы для обоих бэкендов."""

    name = "abstract"

    async def init(self) -> None:
        """Подготовить хранилище (создать таблицы / прочитать файлы)."""

    async def close(self) -> None:
        """Освободить ресурсы."""

    # ==========================================
    # КАТЕГОРИИ
    # ==========================================

    @abstractmethod
    async def list_categories(self) -> List[Category]: ...

    @abstractmethod
    async def create_category(self, name: str) -> Category:
        """DuplicateNameError если название уже занято."""

    @abstractmethod
    async def delete_category(self, category_id: int) -> None:
        """Удаляет категорию вместе с подкатегориями и их товарами."""

    # ==========================================
    # ПОДКАТЕГОРИИ
    # ==========================================

    @abstractmethod
    async def list_subcategories(self, category_id: Optional[int] = None) -> List[Subcategory]: ...

    @abstractmethod
    async def create_subcategory(self, category_id: int, name: str) -> Subcategory:
        """NotFoundError если нет категории, DuplicateNameError если имя занято в ней."""

    @abstractmethod
    async def delete_subcategory(self, subcategory_id: int) -> None:
        """Удаляет подкатегорию вместе с товарами."""

    # ==========================================
    # ТОВАРЫ
    # ==========================================

    @abstractmethod
    async def list_products(self, subcategory_id: Optional[int] = None) -> List[Product]: ...

    @abstractmethod
    async def get_product(self, product_id: int) -> Product:
        """NotFoundError если товара нет."""

    @abstractmethod
    async def create_product(
        self,
        subcategory_id: int,
        name: str,
        description: Optional[str],
        price: float,
        image_data: Optional[str] = None,
    ) -> Product: ...

    @abstractmethod
    async def update_product(
        self,
        product_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        price: Optional[float] = None,
    ) -> None:
        """Частичное обновление: None = оставить старое значение."""

    @abstractmethod
    async def delete_product(self, product_id: int) -> None:
        """Удаляет товар и убирает его из всех корзин (но не из заказов)."""

    # ==========================================
    # КОРЗИНЫ
    # ==========================================

    @abstractmethod
    async def get_cart(self, user_id: str) -> Cart:
        """Пустая корзина, если пользователь ещё ничего не сохранял."""

    @abstractmethod
    async def save_cart(self, user_id: str, items: List[Dict[str, Any]]) -> None:
        """Полная замена корзины (upsert)."""

    # ==========================================
    # ЗАКАЗЫ
    # ==========================================

    @abstractmethod
    async def list_orders(self) -> List[Order]:
        """Сначала новые."""

    @abstractmethod
    async def get_order(self, order_id: int) -> Order:
        """NotFoundError если заказа нет."""

    @abstractmethod
    async def create_order(
        self,
        telegram_user_id: Optional[int],
        username: Optional[str],
        contact: str,
        total_price: float,
        items: List[OrderItem],
    ) -> Order: ...

    @abstractmethod
    async def complete_order(self, order_id: int) -> None:
        """new → completed. Повторный вызов и отсутствующий заказ ничего не делают."""

    @abstractmethod
    async def delete_order(self, order_id: int) -> None: ...


# ==========================================
# ОБЩИЕ ФУНКЦИИ ДЛЯ ОБОИХ ХРАНИЛИЩ
# ==========================================

def extract_image(image_data: Optional[str]) -> str:
    """
    Картинка товара хранится прямо в БД как data URL (base64).

    Всё, что не похоже на data:image..., отбрасываем.
    """
    if isinstance(image_data, str) and image_data.startswith("data:image"):
        return image_data
    return ""


def without_products(items: Iterable[Dict[str, Any]], product_ids: Set[int]) -> List[Dict[str, Any]]:
    """Позиции корзины без удаленных товаров."""
    return [item for item in items if _item_product_id(item) not in product_ids]


def _item_product_id(item: Dict[str, Any]) -> Optional[int]:
    try:
        return int(item.get("id"))
    except (TypeError, ValueError):
        return None


def create_store(settings: Settings) -> EntityStore:
    """Выбрать хранилище по настройкам (один раз при старте)."""

    if settings.use_postgres:
        from infrastructure.database.store import SqlStore

        return SqlStore.from_settings(settings)

    from infrastructure.file_storage import JsonFileStore

    return JsonFileStore(settings.data_dir)
