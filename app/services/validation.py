# app/services/validation.py
"""
Проверка входящих данных.

Чистые функции без побочных эффектов: принимают сырой JSON (dict)
и возвращают список ошибок в том порядке, в котором их нашли.
Пустой список = данные в порядке.

API вызывает их ДО любого обращения к хранилищу.
"""

import math
from typing import Any, List, Optional

PRODUCT_NAME_MAX = 200
PRODUCT_DESCRIPTION_MAX = 1000
PRODUCT_PRICE_MAX = 1_000_000
CATEGORY_NAME_MAX = 100


# ==========================================
# ПРИВЕДЕНИЕ ТИПОВ
# ==========================================

def to_number(value: Any) -> Optional[float]:
    """Число из JSON (число или строка "500"). None если не число."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_int(value: Any) -> Optional[int]:
    """Целое из JSON (1, 1.0 или "1"). None если не целое."""
    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _check_name(value: Any, max_length: int) -> List[str]:
    if _is_blank(value):
        return ["Название обязательно"]
    if len(value) > max_length:
        return [f"Название слишком длинное (макс {max_length} символов)"]
    return []


def _check_price(value: Any) -> List[str]:
    price = to_number(value)
    if price is None or price <= 0:
        return ["Цена должна быть больше 0"]
    if price > PRODUCT_PRICE_MAX:
        return ["Цена слишком большая"]
    return []


def _check_description(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, str):
        return ["Описание должно быть текстом"]
    if len(value) > PRODUCT_DESCRIPTION_MAX:
        return [f"Описание слишком длинное (макс {PRODUCT_DESCRIPTION_MAX} символов)"]
    return []


# ==========================================
# КАТАЛОГ
# ==========================================

def validate_product(data: dict) -> List[str]:
    errors = []
    errors += _check_name(data.get("name"), PRODUCT_NAME_MAX)
    errors += _check_price(data.get("price"))
    errors += _check_description(data.get("description"))
    if to_int(data.get("subcategoryId")) is None:
        errors.append("Не выбрана подкатегория")
    return errors


def validate_product_update(data: dict) -> List[str]:
    """Частичное обновление: проверяем только присланные поля."""
    errors = []
    if data.get("name") is not None:
        errors += _check_name(data["name"], PRODUCT_NAME_MAX)
    if data.get("price") is not None:
        errors += _check_price(data["price"])
    errors += _check_description(data.get("description"))
    return errors


def validate_category(data: dict) -> List[str]:
    return _check_name(data.get("name"), CATEGORY_NAME_MAX)


def validate_subcategory(data: dict) -> List[str]:
    errors = []
    if to_int(data.get("categoryId")) is None:
        errors.append("Не выбрана категория")
    errors += _check_name(data.get("name"), CATEGORY_NAME_MAX)
    return errors


# ==========================================
# ЗАКАЗЫ И КОРЗИНА
# ==========================================

def validate_order(data: dict) -> List[str]:
    errors = []

    if _is_blank(data.get("contact")):
        errors.append("Контакт обязателен")

    items = data.get("items")
    if not isinstance(items, list) or not items:
        errors.append("Корзина пуста")
    else:
        for index, item in enumerate(items, start=1):
            errors += _check_order_item(index, item)

    total = to_number(data.get("totalPrice"))
    if total is None or total <= 0:
        errors.append("Неверная сумма заказа")

    user_id = data.get("telegramUserId")
    if user_id not in (None, "") and to_int(user_id) is None:
        errors.append("Некорректный telegramUserId")

    return errors


def _check_order_item(index: int, item: Any) -> List[str]:
    if not isinstance(item, dict):
        return [f"Позиция {index}: неверный формат"]

    errors = []
    if not _is_item_id(item.get("id")):
        errors.append(f"Позиция {index}: неверный id")
    if _is_blank(item.get("name")):
        errors.append(f"Позиция {index}: нет названия")
    price = to_number(item.get("price"))
    if price is None or price <= 0:
        errors.append(f"Позиция {index}: неверная цена")
    quantity = to_int(item.get("quantity"))
    if quantity is None or quantity <= 0:
        errors.append(f"Позиция {index}: неверное количество")
    return errors


def _is_item_id(value: Any) -> bool:
    # id позиции: нет, целое или непустая строка
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or not _is_blank(value)


def validate_cart(data: dict) -> List[str]:
    items = data.get("items")
    if items is None:
        return []
    if not isinstance(items, list):
        return ["Позиции корзины должны быть списком"]
    return [
        f"Позиция корзины {index}: неверный формат"
        for index, item in enumerate(items, start=1)
        if not isinstance(item, dict)
    ]
