# tests/test_storage.py
"""Контракт хранилища: одинаковое поведение JSON и SQL бэкендов."""

from datetime import timedelta

import aiofiles.os
import pytest

from app.exceptions import DuplicateNameError, NotFoundError, StorageError
from app.models import OrderItem, OrderStatus
from infrastructure.database.store import SqlStore
from infrastructure.file_storage import JsonFileStore
from infrastructure.storage import create_store

IMAGE = "data:image/png;base64,iVBORw0KGgo="


async def make_catalog(store):
    category = await store.create_category("Одежда")
    subcategory = await store.create_subcategory(category.id, "Рубашки")
    product = await store.create_product(subcategory.id, "Рубашка", "Хлопок", 500, IMAGE)
    return category, subcategory, product


# ==========================================
# КАТЕГОРИИ И ПОДКАТЕГОРИИ
# ==========================================

async def test_create_and_list_categories(store):
    first = await store.create_category("Одежда")
    second = await store.create_category("Обувь")

    categories = await store.list_categories()

    assert [c.id for c in categories] == [first.id, second.id]
    assert [c.name for c in categories] == ["Одежда", "Обувь"]
    assert categories[0].created_at.tzinfo is not None


async def test_duplicate_category_name_rejected(store):
    await store.create_category("Одежда")

    with pytest.raises(DuplicateNameError):
        await store.create_category("Одежда")

    assert len(await store.list_categories()) == 1


async def test_category_names_are_case_sensitive(store):
    await store.create_category("Одежда")
    await store.create_category("одежда")

    assert len(await store.list_categories()) == 2


async def test_subcategory_name_unique_only_within_category(store):
    clothes = await store.create_category("Одежда")
    shoes = await store.create_category("Обувь")
    await store.create_subcategory(clothes.id, "Новинки")
    await store.create_subcategory(shoes.id, "Новинки")

    with pytest.raises(DuplicateNameError):
        await store.create_subcategory(clothes.id, "Новинки")

    assert len(await store.list_subcategories()) == 2
    assert [s.category_id for s in await store.list_subcategories(shoes.id)] == [shoes.id]


async def test_subcategory_requires_existing_category(store):
    with pytest.raises(NotFoundError):
        await store.create_subcategory(999, "Рубашки")


async def test_delete_category_cascades_to_products_and_carts(store):
    category, subcategory, product = await make_catalog(store)
    other = await store.create_category("Обувь")
    other_sub = await store.create_subcategory(other.id, "Кеды")
    kept = await store.create_product(other_sub.id, "Кеды", "", 3000)
    await store.save_cart("u1", [
        {"id": product.id, "quantity": 1, "price": 500, "name": "Рубашка"},
        {"id": kept.id, "quantity": 2, "price": 3000, "name": "Кеды"},
    ])

    await store.delete_category(category.id)

    assert [c.id for c in await store.list_categories()] == [other.id]
    assert [s.id for s in await store.list_subcategories()] == [other_sub.id]
    assert [p.id for p in await store.list_products()] == [kept.id]
    with pytest.raises(NotFoundError):
        await store.get_product(product.id)
    cart = await store.get_cart("u1")
    assert [item["id"] for item in cart.items] == [kept.id]


async def test_delete_subcategory_cascades(store):
    category, subcategory, product = await make_catalog(store)
    await store.save_cart("u1", [{"id": product.id, "quantity": 1}])

    await store.delete_subcategory(subcategory.id)

    assert await store.list_subcategories(category.id) == []
    assert await store.list_products() == []
    assert (await store.get_cart("u1")).items == []


async def test_delete_missing_entities_is_noop(store):
    await store.delete_category(404)
    await store.delete_subcategory(404)
    await store.delete_product(404)
    await store.delete_order(404)

    assert await store.list_categories() == []


# ==========================================
# ТОВАРЫ
# ==========================================

async def test_create_product_keeps_data_url_image(store):
    _, subcategory, product = await make_catalog(store)

    loaded = await store.get_product(product.id)

    assert loaded.subcategory_id == subcategory.id
    assert loaded.price == 500
    assert loaded.main_image == IMAGE
    assert loaded.images == [IMAGE]


async def test_create_product_drops_non_data_url_image(store):
    _, subcategory, _ = await make_catalog(store)

    product = await store.create_product(subcategory.id, "Брюки", None, 1200, "http://x/img.png")

    loaded = await store.get_product(product.id)
    assert loaded.main_image == ""
    assert loaded.images == []
    assert loaded.description == ""


async def test_create_product_requires_existing_subcategory(store):
    with pytest.raises(NotFoundError):
        await store.create_product(999, "Рубашка", "", 500)


async def test_list_products_filtered_by_subcategory(store):
    category, shirts, shirt = await make_catalog(store)
    pants = await store.create_subcategory(category.id, "Брюки")
    await store.create_product(pants.id, "Брюки", "", 900)

    assert [p.id for p in await store.list_products(shirts.id)] == [shirt.id]
    assert len(await store.list_products()) == 2


async def test_update_product_is_partial(store):
    _, _, product = await make_catalog(store)

    await store.update_product(product.id, price=750)

    loaded = await store.get_product(product.id)
    assert loaded.price == 750
    assert loaded.name == "Рубашка"
    assert loaded.description == "Хлопок"


async def test_update_missing_product_is_noop(store):
    await store.update_product(404, name="Призрак")

    with pytest.raises(NotFoundError):
        await store.get_product(404)


async def test_delete_product_removes_it_from_every_cart(store):
    _, subcategory, product = await make_catalog(store)
    other = await store.create_product(subcategory.id, "Поло", "", 700)
    await store.save_cart("u1", [{"id": product.id, "quantity": 1}])
    await store.save_cart("u2", [{"id": product.id, "quantity": 3}, {"id": other.id, "quantity": 1}])

    await store.delete_product(product.id)

    assert (await store.get_cart("u1")).items == []
    assert (await store.get_cart("u2")).items == [{"id": other.id, "quantity": 1}]


# ==========================================
# КОРЗИНЫ
# ==========================================

async def test_unknown_cart_is_empty(store):
    assert (await store.get_cart("nobody")).items == []


async def test_save_cart_replaces_items(store):
    await store.save_cart("u1", [{"id": 1, "quantity": 1, "name": "A", "price": 10}])
    await store.save_cart("u1", [{"id": 2, "quantity": 5, "name": "B", "price": 20}])

    cart = await store.get_cart("u1")
    assert cart.items == [{"id": 2, "quantity": 5, "name": "B", "price": 20}]


# ==========================================
# ЗАКАЗЫ
# ==========================================

async def create_order(store, contact="@anna", items=None):
    items = items or [OrderItem(name="Shirt", price=500, quantity=2)]
    return await store.create_order(123, "anna", contact, 1000, items)


async def test_create_order_snapshot(store):
    order = await create_order(store, items=[OrderItem(id=7, name="Shirt", price=500, quantity=2, size="L")])

    loaded = await store.get_order(order.id)

    assert loaded.status == OrderStatus.NEW
    assert loaded.completed_at is None
    assert loaded.created_at.tzinfo is not None
    assert loaded.total_price == 1000
    assert [item.model_dump() for item in loaded.items] == [
        {"id": 7, "name": "Shirt", "price": 500, "quantity": 2, "size": "L"}
    ]


async def test_order_items_survive_product_changes(store):
    _, _, product = await make_catalog(store)
    order = await create_order(store, items=[OrderItem(id=product.id, name="Рубашка", price=500, quantity=1)])

    await store.update_product(product.id, name="Новая рубашка", price=900)
    await store.delete_product(product.id)

    loaded = await store.get_order(order.id)
    assert loaded.items[0].name == "Рубашка"
    assert loaded.items[0].price == 500


async def test_prices_are_stored_without_rounding(store):
    _, subcategory, _ = await make_catalog(store)
    created = await store.create_product(subcategory.id, "Пуговица", "", 0.001)
    order = await store.create_order(
        123, "anna", "@anna", 1_500_000_000.25, [OrderItem(name="Пуговица", price=0.001, quantity=3)]
    )

    loaded = await store.get_product(created.id)
    loaded_order = await store.get_order(order.id)

    assert created.price == loaded.price == 0.001
    assert order.total_price == loaded_order.total_price == 1_500_000_000.25
    assert loaded_order.items[0].price == 0.001


async def test_list_orders_newest_first(store):
    first = await create_order(store, contact="first")
    second = await create_order(store, contact="second")

    assert [o.id for o in await store.list_orders()] == [second.id, first.id]


async def test_get_missing_order(store):
    with pytest.raises(NotFoundError):
        await store.get_order(404)


async def test_complete_order_is_idempotent(store):
    order = await create_order(store)

    await store.complete_order(order.id)
    completed = await store.get_order(order.id)
    await store.complete_order(order.id)
    again = await store.get_order(order.id)

    assert completed.status == OrderStatus.COMPLETED
    assert completed.completed_at is not None
    assert completed.completed_at.utcoffset() == timedelta(0)
    assert again.completed_at == completed.completed_at
    assert again.items == completed.items


async def test_complete_missing_order_is_noop(store):
    await store.complete_order(404)

    assert await store.list_orders() == []


async def test_delete_order(store):
    order = await create_order(store)

    await store.delete_order(order.id)

    with pytest.raises(NotFoundError):
        await store.get_order(order.id)


# ==========================================
# ТОЛЬКО JSON ФАЙЛЫ
# ==========================================

async def test_json_store_persists_between_restarts(tmp_path):
    store = JsonFileStore(tmp_path)
    await store.init()
    category = await store.create_category("Одежда")

    reopened = JsonFileStore(tmp_path)
    await reopened.init()

    assert [c.name for c in await reopened.list_categories()] == ["Одежда"]
    assert (await reopened.create_category("Обувь")).id == category.id + 1


async def test_json_store_ids_are_max_plus_one(tmp_path):
    store = JsonFileStore(tmp_path)
    await store.init()
    first = await store.create_category("A")
    second = await store.create_category("B")
    await store.delete_category(first.id)

    third = await store.create_category("C")

    assert third.id == second.id + 1


async def test_json_store_loads_corrupted_file_as_empty(tmp_path):
    (tmp_path / "categories.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "carts.json").write_text("[]", encoding="utf-8")

    store = JsonFileStore(tmp_path)
    await store.init()

    assert await store.list_categories() == []
    assert (await store.get_cart("u1")).items == []


async def test_json_store_failed_write_keeps_memory_and_disk(tmp_path, monkeypatch):
    store = JsonFileStore(tmp_path)
    await store.init()
    await store.create_category("Одежда")
    before = (tmp_path / "categories.json").read_text(encoding="utf-8")

    async def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(aiofiles.os, "replace", broken_replace)

    with pytest.raises(StorageError):
        await store.create_category("Обувь")

    assert [c.name for c in await store.list_categories()] == ["Одежда"]
    assert (tmp_path / "categories.json").read_text(encoding="utf-8") == before


@pytest.mark.parametrize("delete", ["category", "subcategory"])
async def test_json_store_failed_cascade_leaves_no_orphans(tmp_path, monkeypatch, delete):
    store = JsonFileStore(tmp_path)
    await store.init()
    category, subcategory, product = await make_catalog(store)
    await store.save_cart("u1", [{"id": product.id, "quantity": 1}])
    parent = "categories" if delete == "category" else "subcategories"
    write = store._write

    async def failing_write(table, data):
        if table == parent:
            raise StorageError()
        await write(table, data)

    monkeypatch.setattr(store, "_write", failing_write)

    with pytest.raises(StorageError):
        if delete == "category":
            await store.delete_category(category.id)
        else:
            await store.delete_subcategory(subcategory.id)

    reopened = JsonFileStore(tmp_path)
    await reopened.init()
    category_ids = {c.id for c in await reopened.list_categories()}
    subcategories = await reopened.list_subcategories()
    subcategory_ids = {s.id for s in subcategories}
    assert all(s.category_id in category_ids for s in subcategories)
    assert all(p.subcategory_id in subcategory_ids for p in await reopened.list_products())
    assert (await reopened.get_cart("u1")).items == []


# ==========================================
# ВЫБОР ХРАНИЛИЩА
# ==========================================

async def test_create_store_picks_backend(settings, tmp_path):
    assert isinstance(create_store(settings), JsonFileStore)

    sql_settings = settings.model_copy(update={"database_url": f"sqlite:///{tmp_path / 'shop.db'}"})
    store = create_store(sql_settings)

    assert isinstance(store, SqlStore)
    await store.init()
    assert await store.list_categories() == []
    await store.close()
