# tests/test_bot.py
"""Команды бота: кнопки мини-приложения и доступ к админке."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.bot.dispatcher import build_dispatcher
from app.bot.handlers.client import (
    cmd_admin,
    cmd_help,
    cmd_shop,
    cmd_start,
    command_of,
    on_callback,
)
from conftest import ADMIN_PASSWORD, ADMIN_TELEGRAM_ID


def make_message(user_id=1, first_name="Анна", text="/start"):
    return SimpleNamespace(
        from_user=SimpleNamespace(id=user_id, first_name=first_name),
        text=text,
        answer=AsyncMock(),
    )


def buttons(call):
    markup = call.kwargs["reply_markup"]
    return [(row[0].text, row[0].web_app.url) for row in markup.inline_keyboard]


async def test_start_for_client_has_only_shop_button(settings):
    message = make_message()

    await cmd_start(message, settings)

    call = message.answer.await_args
    assert "Привет, Анна!" in call.args[0]
    assert buttons(call) == [("🛍️ Открыть магазин", "https://shop.example/miniapp/")]


async def test_start_for_admin_adds_admin_button(settings):
    message = make_message(user_id=int(ADMIN_TELEGRAM_ID))

    await cmd_start(message, settings)

    assert buttons(message.answer.await_args) == [
        ("🛍️ Открыть магазин", "https://shop.example/miniapp/"),
        ("⚙️ Админ-панель", "https://shop.example/admin/"),
    ]


async def test_start_escapes_first_name(settings):
    message = make_message(first_name="<script>")

    await cmd_start(message, settings)

    assert "&lt;script&gt;" in message.answer.await_args.args[0]


async def test_shop_button(settings):
    message = make_message(text="/shop")

    await cmd_shop(message, settings)

    assert buttons(message.answer.await_args) == [("🛍️ Открыть магазин", "https://shop.example/miniapp/")]


async def test_admin_never_reveals_password(settings):
    message = make_message(user_id=int(ADMIN_TELEGRAM_ID), text="/admin")

    await cmd_admin(message, settings)

    call = message.answer.await_args
    assert ADMIN_PASSWORD not in call.args[0]
    assert buttons(call) == [("⚙️ Открыть админ-панель", "https://shop.example/admin/")]


async def test_admin_denied_for_client(settings):
    message = make_message(user_id=5, text="/admin")

    await cmd_admin(message, settings)

    message.answer.assert_awaited_once_with("❌ У вас нет доступа к админ-панели.")


async def test_help_lists_commands():
    message = make_message(text="/help")

    await cmd_help(message)

    text = message.answer.await_args.args[0]
    for command in ("/start", "/shop", "/admin", "/help"):
        assert command in text


@pytest.mark.parametrize(
    "text, command",
    [("/start", "start"), ("/start@danisa_bot payload", "start"), ("/Shop", "shop"), ("hello", None), (None, None)],
)
def test_command_of(text, command):
    assert command_of(text) == command


async def test_callback_is_handled_like_its_message(settings):
    message = make_message(text="/admin")
    callback = SimpleNamespace(
        message=message,
        from_user=SimpleNamespace(id=int(ADMIN_TELEGRAM_ID), first_name="Админ"),
        data="open",
        answer=AsyncMock(),
    )

    await on_callback(callback, settings)

    callback.answer.assert_awaited_once()
    assert buttons(message.answer.await_args) == [("⚙️ Открыть админ-панель", "https://shop.example/admin/")]


async def test_callback_without_command_is_ignored(settings):
    message = make_message(text="Выберите действие:")
    callback = SimpleNamespace(
        message=message,
        from_user=SimpleNamespace(id=1, first_name="Анна"),
        data="x",
        answer=AsyncMock(),
    )

    await on_callback(callback, settings)

    message.answer.assert_not_awaited()


async def test_callback_on_inaccessible_message_is_ignored(settings):
    # у InaccessibleMessage нет text
    message = SimpleNamespace(chat=SimpleNamespace(id=1), message_id=10, answer=AsyncMock())
    callback = SimpleNamespace(
        message=message,
        from_user=SimpleNamespace(id=int(ADMIN_TELEGRAM_ID), first_name="Админ"),
        data="open",
        answer=AsyncMock(),
    )

    await on_callback(callback, settings)

    callback.answer.assert_awaited_once()
    message.answer.assert_not_awaited()


def test_dispatcher_can_be_built_twice(settings):
    first = build_dispatcher(settings)
    second = build_dispatcher(settings)

    assert first is not second
    assert first["settings"] is settings
