# app/exceptions.py
"""
Ошибки магазина.

Каждая ошибка знает свой HTTP статус, поэтому API превращает
их в JSON ответ одним обработчиком (см. app/api/errors.py).
"""

from typing import List, Optional


class ShopError(Exception):
    """Базовая ошибка приложения."""

    status_code = 500
    message = "Внутренняя ошибка сервера"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ShopError):
    """Данные запроса не прошли проверку (список сообщений)."""

    status_code = 400

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__(", ".join(self.messages))

    def to_dict(self) -> dict:
        return {"error": self.message, "errors": self.messages}


class BadRequestError(ShopError):
    """Тело запроса не удалось разобрать."""

    status_code = 400
    message = "Некорректный JSON"


class AuthError(ShopError):
    status_code = 401
    message = "Неверный пароль"


class NotFoundError(ShopError):
    status_code = 404
    message = "Не найдено"


class DuplicateNameError(ShopError):
    """Нарушена уникальность названия категории / подкатегории."""

    status_code = 400
    message = "Такое название уже существует"


class StorageError(ShopError):
    """
    Ошибка хранилища (БД или файлов).

    Причина пишется в лог, клиенту уходит только общее сообщение.
    """

    status_code = 500
    message = "Ошибка хранилища"


class NotificationError(ShopError):
    """Не удалось отправить уведомление. Наружу никогда не пробрасывается."""

    message = "Ошибка отправки уведомления"
