# tests/test_settings.py
from config.settings import Settings


def make(**kwargs):
    values = {"database_url": "", "database_public_url": ""}
    values.update(kwargs)
    return Settings(_env_file=None, **values)


def test_defaults_use_json_storage():
    settings = make()

    assert not settings.use_postgres
    assert settings.admin_password == "admin123"
    assert settings.port == 3000


def test_public_url_prefered_over_private():
    settings = make(
        database_url="postgresql://u:p@private:5432/db",
        database_public_url="postgres://u:p@public:5432/db",
    )

    assert settings.use_postgres
    assert settings.async_database_url == "postgresql+asyncpg://u:p@public:5432/db"


def test_railway_internal_host_is_rewritten():
    settings = make(
        database_url="postgresql://postgres:x@postgres.railway.internal:5432/railway",
        pghost="roundhouse.proxy.rlwy.net",
        pgport=41234,
        pgpassword="pw",
    )

    assert settings.async_database_url == (
        "postgresql+asyncpg://postgres:pw@roundhouse.proxy.rlwy.net:41234/railway"
    )


def test_sslmode_query_is_dropped_for_asyncpg():
    settings = make(database_url="postgresql://u:p@host.railway.app:5432/db?sslmode=require")

    assert settings.async_database_url == "postgresql+asyncpg://u:p@host.railway.app:5432/db"
    assert settings.database_requires_ssl


def test_urls_for_buttons():
    settings = make(server_url="https://shop.example/")

    assert settings.miniapp_url == "https://shop.example/miniapp/"
    assert settings.admin_url == "https://shop.example/admin/"
    assert make(port=8080).public_url == "http://localhost:8080"


def test_is_admin():
    settings = make(admin_telegram_id="777")

    assert settings.is_admin(777)
    assert not settings.is_admin(1)
    assert not settings.is_admin(None)
    assert not make().is_admin(777)
