# tests/conftest.py
"""
Общие фикстуры.

Хранилище параметризовано: каждый тест контракта прогоняется
и на JSON файлах, и на SQLAlchemy (sqlite+aiosqlite).
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from app.services.notifications import Notifier
from config.settings import Settings
from infrastructure.database.store import SqlStore
from infrastructure.file_storage import JsonFileStore

ADMIN_PASSWORD = "secret"
ADMIN_CHAT_ID = "42"
ADMIN_TELEGRAM_ID = "777"


class FakeSession:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


class FakeBot:
    """Вместо aiogram.Bot: запоминает отправленные сообщения."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []
        self.session = FakeSession()

    async def send_message(self, chat_id, text, parse_mode=None, **kwargs):
        if self.fail:
            raise RuntimeError("telegram is down")
        self.sent.append({"chat_id": chat_id, "text": text, "parse_mode": parse_mode})


def make_store(kind: str, tmp_path):
    if kind == "json":
        return JsonFileStore(tmp_path / "data")
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}")
    return SqlStore(engine)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url="",
        database_public_url="",
        admin_password=ADMIN_PASSWORD,
        telegram_bot_token="",
        admin_chat_id=ADMIN_CHAT_ID,
        admin_telegram_id=ADMIN_TELEGRAM_ID,
        server_url="https://shop.example",
        data_dir=str(tmp_path / "data"),
    )


@pytest.fixture(params=["json", "sql"])
async def store(request, tmp_path):
    store = make_store(request.param, tmp_path)
    await store.init()
    yield store
    await store.close()


@pytest.fixture
def bot():
    return FakeBot()


@pytest.fixture
def notifier(bot):
    return Notifier(bot, ADMIN_CHAT_ID)
