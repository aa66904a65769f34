# app/services/orders.py
"""
Сервис заказов.

Бизнес-логика для работы с заказами:
- Оформление (проверка → сохранение → уведомление админу)
- Завершение (new → completed, заказ уходит в архив, НЕ удаляется)
- Удаление (только явно из админки)
"""

from typing import Any, Dict, List

import structlog

from app.bot.utils.text import escape_html, format_price
from app.exceptions import ValidationError
from app.models import Order, OrderItem, OrderStatus
from app.services.notifications import Notifier
from app.services.validation import to_int, to_number, validate_order
from infrastructure.storage import EntityStore

logger = structlog.get_logger()


# ==========================================
# ТЕКСТЫ УВЕДОМЛЕНИЙ
# ==========================================

def new_order_text(order: Order) -> str:
    """Карточка нового заказа для админа (HTML)."""
    username = f"@{escape_html(order.username)}" if order.username else "не указан"

    lines = [
        f"📦 <b>Новый заказ #{order.id}</b>",
        "",
        f"👤 <b>Пользователь:</b> {username}",
        f"📞 <b>Контакт:</b> {escape_html(order.contact)}",
        f"💰 <b>Сумма:</b> {format_price(order.total_price)}₽",
        "",
        "<b>Товары:</b>",
    ]
    for index, item in enumerate(order.items, start=1):
        lines.append(
            f"{index}. {escape_html(item.name)} x{item.quantity} = {format_price(item.total)}₽"
        )
    return "\n".join(lines)


def completed_order_text(order: Order) -> str:
    return f"✅ Заказ #{order.id} завершён и перемещен в архив."


def _snapshot(items: List[Dict[str, Any]]) -> List[OrderItem]:
    """Позиции корзины → снимок для заказа (лишние поля сохраняются)."""
    return [
        OrderItem.model_validate(
            {**item, "price": to_number(item["price"]), "quantity": to_int(item["quantity"])}
        )
        for item in items
    ]


class OrderService:
    """Сервис для работы с заказами."""

    def __init__(self, store: EntityStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    # ==========================================
    # ОФОРМИТЬ ЗАКАЗ
    # ==========================================

    async def place_order(self, payload: Dict[str, Any]) -> Order:
        errors = validate_order(payload)
        if errors:
            logger.warning("order_validation_failed", errors=errors)
            raise ValidationError(errors)

        username = payload.get("username")
        order = await self.store.create_order(
            telegram_user_id=to_int(payload.get("telegramUserId")),
            username=str(username) if username else None,
            contact=payload["contact"].strip(),
            total_price=to_number(payload["totalPrice"]),
            items=_snapshot(payload["items"]),
        )

        # Уведомление в фоне: ошибка Telegram не отменяет заказ
        self.notifier.notify(new_order_text(order))
        return order

    # ==========================================
    # ЗАВЕРШИТЬ ЗАКАЗ
    # ==========================================

    async def complete_order(self, order_id: int) -> Order:
        """
        new → completed.

        NotFoundError если заказа нет. Повторное завершение проходит
        без ошибки и без второго уведомления.
        """
        order = await self.store.get_order(order_id)
        if order.status == OrderStatus.COMPLETED:
            logger.info("order_already_completed", order_id=order_id)
            return order

        await self.store.complete_order(order_id)
        self.notifier.notify(completed_order_text(order))
        return await self.store.get_order(order_id)

    # ==========================================
    # УДАЛИТЬ ЗАКАЗ
    # ==========================================

    async def delete_order(self, order_id: int) -> None:
        await self.store.delete_order(order_id)
        logger.info("order_delete_requested", order_id=order_id)
