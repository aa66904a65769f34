# app/api/errors.py
"""
Ошибки → JSON ответы.

Все ответы об ошибках имеют вид {"error": "..."};
для ошибок проверки данных добавляется список "errors".
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.exceptions import ShopError, StorageError

logger = structlog.get_logger()

ROUTE_NOT_FOUND = {"error": "Route not found"}


async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    if isinstance(exc, StorageError):
        # Причина уже в логе хранилища, клиенту только общее сообщение
        logger.error("storage_error_response", path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Неизвестный путь и неверный метод на известном пути - одинаково 404
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content=ROUTE_NOT_FOUND)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = [error.get("msg", "invalid") for error in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"error": ", ".join(messages), "errors": messages},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopError, shop_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
