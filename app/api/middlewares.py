# app/api/middlewares.py
"""
HTTP middleware.

Срабатывает для КАЖДОГО запроса:
- OPTIONS (preflight) сразу получает 200
- ко всем ответам добавляются CORS заголовки (мини-приложение и админка
  открываются из Telegram с другого origin)
- непойманные ошибки превращаются в 500 с JSON телом
- каждый запрос пишется в лог
"""

import time
from typing import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

logger = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


async def cors_and_logging_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    started = time.perf_counter()

    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "unhandled_error",
                method=request.method,
                path=request.url.path,
                error=str(e),
                error_type=type(e).__name__,
            )
            response = JSONResponse(status_code=500, content={"error": "Internal server error"})

    response.headers.update(CORS_HEADERS)

    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return response


def register_middlewares(app: FastAPI) -> None:
    app.middleware("http")(cors_and_logging_middleware)
