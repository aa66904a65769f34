# tests/test_notifications.py
from app.bot.utils import escape_html, format_price
from app.services.notifications import Notifier, build_notifier
from conftest import FakeBot


async def test_notify_sends_html_message():
    bot = FakeBot()
    notifier = Notifier(bot, "42")

    task = notifier.notify("<b>hi</b>")
    await task

    assert bot.sent == [{"chat_id": "42", "text": "<b>hi</b>", "parse_mode": "HTML"}]


async def test_notify_swallows_telegram_errors():
    notifier = Notifier(FakeBot(fail=True), "42")

    await notifier.notify("hi")
    # ошибка только в логе, задача завершилась без исключения


async def test_notify_without_chat_id_is_noop():
    bot = FakeBot()
    notifier = Notifier(bot, "")

    assert not notifier.enabled
    assert notifier.notify("hi") is None
    assert bot.sent == []


async def test_aclose_drains_pending_sends_and_closes_session():
    bot = FakeBot()
    notifier = Notifier(bot, "42")
    notifier.notify("one")
    notifier.notify("two")

    await notifier.aclose()

    assert [m["text"] for m in bot.sent] == ["one", "two"]
    assert bot.session.closed


def test_build_notifier_without_token_is_disabled(settings):
    notifier = build_notifier(settings)

    assert notifier.bot is None
    assert not notifier.enabled


async def test_build_notifier_with_token(settings):
    settings = settings.model_copy(update={"telegram_bot_token": "123456:ABC-DEF1234ghIkl-zyx57W2v1u123ew11"})

    notifier = build_notifier(settings)

    assert notifier.enabled
    assert notifier.chat_id == "42"
    await notifier.aclose()


def test_text_helpers():
    assert escape_html('<a href="x">&</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;"
    assert escape_html(None) == ""
    assert format_price(500.0) == "500"
    assert format_price(99.5) == "99.5"
    assert format_price(10.25) == "10.25"
