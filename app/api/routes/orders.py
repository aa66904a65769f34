# app/api/routes/orders.py
"""
Заказы.

- POST /api/orders: оформление из мини-приложения (без пароля)
- чтение: пароль админа в query string (?password=...)
- завершение и удаление: пароль админа в теле
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from app.api.dependencies import (
    admin_body,
    admin_query,
    get_order_service,
    get_store,
    json_body,
)
from app.models import Order
from app.services.orders import OrderService
from infrastructure.storage import EntityStore

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", dependencies=[Depends(admin_query)])
async def list_orders(store: EntityStore = Depends(get_store)) -> List[Order]:
    """Сначала новые."""
    return await store.list_orders()


@router.get("/{order_id:int}", dependencies=[Depends(admin_query)])
async def get_order(order_id: int, store: EntityStore = Depends(get_store)) -> Order:
    return await store.get_order(order_id)


@router.post("")
async def place_order(
    body: Dict[str, Any] = Depends(json_body),
    orders: OrderService = Depends(get_order_service),
):
    order = await orders.place_order(body)
    return {"id": order.id, "status": "success"}


@router.post("/{order_id:int}/complete", dependencies=[Depends(admin_body)])
async def complete_order(
    order_id: int,
    orders: OrderService = Depends(get_order_service),
):
    # Статус → completed, заказ остается в архиве
    await orders.complete_order(order_id)
    return {"success": True}


@router.delete("/{order_id:int}", dependencies=[Depends(admin_body)])
async def delete_order(
    order_id: int,
    orders: OrderService = Depends(get_order_service),
):
    await orders.delete_order(order_id)
    return {"success": True}
