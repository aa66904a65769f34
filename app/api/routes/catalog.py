# app/api/routes/catalog.py
"""
Каталог: категории → подкатегории → товары.

Чтение открыто всем (мини-приложение),
изменения только с паролем админа в теле запроса.
"""

from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends

from app.api.dependencies import admin_body, get_store
from app.exceptions import ValidationError
from app.models import Category, Product, Subcategory
from app.services.validation import (
    to_int,
    to_number,
    validate_category,
    validate_product,
    validate_product_update,
    validate_subcategory,
)
from infrastructure.storage import EntityStore

logger = structlog.get_logger()
router = APIRouter(prefix="/api", tags=["catalog"])

SUCCESS = {"success": True}


def ensure_valid(errors: List[str]) -> None:
    if errors:
        raise ValidationError(errors)


# ==========================================
# КАТЕГОРИИ
# ==========================================

@router.get("/categories")
async def list_categories(store: EntityStore = Depends(get_store)) -> List[Category]:
    return await store.list_categories()


@router.post("/categories")
async def create_category(
    body: Dict[str, Any] = Depends(admin_body),
    store: EntityStore = Depends(get_store),
):
    ensure_valid(validate_category(body))
    category = await store.create_category(body["name"].strip())
    return {"id": category.id, "name": category.name}


@router.delete("/categories/{category_id:int}", dependencies=[Depends(admin_body)])
async def delete_category(category_id: int, store: EntityStore = Depends(get_store)):
    await store.delete_category(category_id)
    return SUCCESS


# ==========================================
# ПОДКАТЕГОРИИ
# ==========================================

@router.get("/subcategories")
async def list_subcategories(store: EntityStore = Depends(get_store)) -> List[Subcategory]:
    return await store.list_subcategories()


@router.get("/subcategories/{category_id:int}")
async def list_category_subcategories(
    category_id: int,
    store: EntityStore = Depends(get_store),
) -> List[Subcategory]:
    return await store.list_subcategories(category_id)


@router.post("/subcategories")
async def create_subcategory(
    body: Dict[str, Any] = Depends(admin_body),
    store: EntityStore = Depends(get_store),
):
    ensure_valid(validate_subcategory(body))
    subcategory = await store.create_subcategory(
        to_int(body["categoryId"]),
        body["name"].strip(),
    )
    return {"id": subcategory.id, "name": subcategory.name}


@router.delete("/subcategories/{subcategory_id:int}", dependencies=[Depends(admin_body)])
async def delete_subcategory(subcategory_id: int, store: EntityStore = Depends(get_store)):
    await store.delete_subcategory(subcategory_id)
    return SUCCESS


# ==========================================
# ТОВАРЫ
# ==========================================

@router.get("/products")
async def list_products(
    subcategoryId: Optional[str] = None,
    store: EntityStore = Depends(get_store),
) -> List[Product]:
    subcategory_id = None
    if subcategoryId:
        subcategory_id = to_int(subcategoryId)
        if subcategory_id is None:
            raise ValidationError(["Некорректный subcategoryId"])
    return await store.list_products(subcategory_id)


@router.get("/products/{product_id:int}")
async def get_product(product_id: int, store: EntityStore = Depends(get_store)) -> Product:
    return await store.get_product(product_id)


@router.post("/products")
async def create_product(
    body: Dict[str, Any] = Depends(admin_body),
    store: EntityStore = Depends(get_store),
):
    ensure_valid(validate_product(body))
    product = await store.create_product(
        subcategory_id=to_int(body["subcategoryId"]),
        name=body["name"].strip(),
        description=body.get("description") or "",
        price=to_number(body["price"]),
        image_data=body.get("imageData"),
    )
    return {"id": product.id, "name": product.name}


@router.put("/products/{product_id:int}")
async def update_product(
    product_id: int,
    body: Dict[str, Any] = Depends(admin_body),
    store: EntityStore = Depends(get_store),
):
    ensure_valid(validate_product_update(body))

    name = body.get("name")
    price = body.get("price")
    await store.update_product(
        product_id,
        name=name.strip() if name is not None else None,
        description=body.get("description"),
        price=to_number(price) if price is not None else None,
    )
    return SUCCESS


@router.delete("/products/{product_id:int}", dependencies=[Depends(admin_body)])
async def delete_product(product_id: int, store: EntityStore = Depends(get_store)):
    await store.delete_product(product_id)
    return SUCCESS
