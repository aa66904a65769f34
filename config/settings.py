# config/settings.py
"""
Settings файл - здесь живут все настройки приложения.

Логика: когда приложение запускается, оно читает переменные окружения
(и .env файл, если он есть) и создает объект 'config' со всеми
необходимыми значениями.

Объект настроек неизменяемый: его создают один раз при старте
и передают в компоненты (хранилище, уведомления, бот, API).
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Основной класс настроек.

    Имена полей совпадают с переменными окружения (регистр не важен):
    PORT, ADMIN_PASSWORD, TELEGRAM_BOT_TOKEN, ADMIN_CHAT_ID,
    ADMIN_TELEGRAM_ID, SERVER_URL, DATABASE_URL, DATABASE_PUBLIC_URL.
    """

    # ==========================================
    # HTTP
    # ==========================================
    host: str = "0.0.0.0"
    port: int = 3000
    server_url: str = ""

    # ==========================================
    # ADMIN
    # ==========================================
    admin_password: str = "admin123"

    # ==========================================
    # TELEGRAM
    # ==========================================
    telegram_bot_token: str = ""
    admin_chat_id: str = ""
    admin_telegram_id: str = ""

    # ==========================================
    # DATABASE
    # ==========================================
    # Если задан хотя бы один URL - работаем с PostgreSQL,
    # иначе с JSON файлами в data_dir
    database_url: str = ""
    database_public_url: str = ""

    # Railway отдает внутренний хост, снаружи нужен PGHOST/PGPASSWORD
    pghost: str = ""
    pgport: int = 5432
    pguser: str = "postgres"
    pgpassword: str = ""
    pgdatabase: str = "railway"

    data_dir: str = "data"

    # ==========================================
    # ENVIRONMENT
    # ==========================================
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    @property
    def raw_database_url(self) -> str:
        """DATABASE_PUBLIC_URL имеет приоритет над DATABASE_URL"""
        return self.database_public_url or self.database_url

    @property
    def use_postgres(self) -> bool:
        return bool(self.raw_database_url)

    @property
    def connection_url(self) -> str:
        """
        URL подключения с учетом Railway.

        Внутренний адрес postgres.railway.internal недоступен снаружи,
        поэтому при наличии PGHOST и PGPASSWORD собираем внешний URL.
        """
        url = self.raw_database_url
        if "postgres.railway.internal" in url and self.pghost and self.pgpassword:
            url = (
                f"postgresql://{self.pguser}:{self.pgpassword}"
                f"@{self.pghost}:{self.pgport}/{self.pgdatabase}"
            )
        return url

    @property
    def async_database_url(self) -> str:
        """Convert standard PostgreSQL URL to asyncpg format"""
        url = self.connection_url
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("sqlite:///"):
            url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        if "sslmode=" in url:
            # asyncpg не понимает sslmode в query string
            url = url.split("?", 1)[0]
        return url

    @property
    def database_requires_ssl(self) -> bool:
        """Railway принимает только SSL (без проверки сертификата)"""
        return "railway" in self.connection_url

    @property
    def public_url(self) -> str:
        return (self.server_url or f"http://localhost:{self.port}").rstrip("/")

    @property
    def miniapp_url(self) -> str:
        return f"{self.public_url}/miniapp/"

    @property
    def admin_url(self) -> str:
        return f"{self.public_url}/admin/"

    def is_admin(self, telegram_user_id: Optional[int]) -> bool:
        """Является ли пользователь Telegram администратором магазина"""
        if telegram_user_id is None or not self.admin_telegram_id:
            return False
        return str(telegram_user_id) == self.admin_telegram_id.strip()


def get_settings() -> Settings:
    """Прочитать настройки из окружения"""
    return Settings()
