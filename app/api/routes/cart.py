# app/api/routes/cart.py
"""Корзина пользователя мини-приложения (без пароля)."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.api.dependencies import get_store, json_body
from app.exceptions import ValidationError
from app.models import Cart
from app.services.validation import validate_cart
from infrastructure.storage import EntityStore

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("/{user_id}")
async def get_cart(user_id: str, store: EntityStore = Depends(get_store)) -> Cart:
    return await store.get_cart(user_id)


@router.post("/{user_id}")
async def save_cart(
    user_id: str,
    body: Dict[str, Any] = Depends(json_body),
    store: EntityStore = Depends(get_store),
):
    errors = validate_cart(body)
    if errors:
        raise ValidationError(errors)

    # Корзина заменяется целиком
    await store.save_cart(user_id, body.get("items") or [])
    return {"success": True}
