# app/api/dependencies.py
"""
Зависимости FastAPI (Depends).

- json_body: тело запроса как dict (400 если это не JSON объект)
- admin_body / admin_query: проверка пароля админа (401)
- get_store / get_order_service: объекты из app.state
"""

import hmac
from typing import Any, Dict, Optional

import structlog
from fastapi import Depends, Query, Request

from app.exceptions import AuthError, BadRequestError
from app.services.orders import OrderService
from config.settings import Settings
from infrastructure.storage import EntityStore

logger = structlog.get_logger()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


# ==========================================
# ТЕЛО ЗАПРОСА
# ==========================================

async def json_body(request: Request) -> Dict[str, Any]:
    """
    Разобрать JSON тело.

    Пустое тело = {} (DELETE без тела просто не пройдет проверку пароля).
    """
    raw = await request.body()
    if not raw.strip():
        return {}

    try:
        data = await request.json()
    except ValueError as e:
        logger.warning("invalid_json_body", path=request.url.path, error=str(e))
        raise BadRequestError() from e

    if not isinstance(data, dict):
        logger.warning("json_body_not_object", path=request.url.path)
        raise BadRequestError("Ожидается JSON объект")
    return data


# ==========================================
# ПРОВЕРКА ПАРОЛЯ АДМИНА
# ==========================================

def check_admin_password(settings: Settings, password: Optional[Any], request: Request) -> None:
    # TIMING-SAFE сравнение
    if not isinstance(password, str) or not hmac.compare_digest(
        password.encode(), settings.admin_password.encode()
    ):
        logger.warning(
            "admin_auth_failed",
            path=request.url.path,
            remote_ip=request.client.host if request.client else "unknown",
        )
        raise AuthError()


async def admin_body(
    request: Request,
    body: Dict[str, Any] = Depends(json_body),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Пароль в теле запроса (все изменяющие запросы админки)."""
    check_admin_password(settings, body.get("password"), request)
    return body


async def admin_query(
    request: Request,
    password: Optional[str] = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Пароль в query string (?password=...) для чтения заказов."""
    check_admin_password(settings, password, request)
