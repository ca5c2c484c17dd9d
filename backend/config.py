# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"
BASE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    # Storage
    DATA_DIR: str = str(BASE_DIR / "data")
    ORDERS_DIR: str = str(BASE_DIR / "data" / "orders")
    UPLOAD_DIR: str = str(BASE_DIR / "static" / "uploads")
    DATABASE_URL: str = "sqlite:///./mebelsklad.db"

    # "json" or "db"; admin routes may point at a different backend
    STORAGE_BACKEND: str = "json"
    ADMIN_STORAGE_BACKEND: Optional[str] = None

    # Admin session
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 240
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "password123"
    ADMIN_COOKIE_NAME: str = "admin-token"
    COOKIE_SECURE: bool = False

    # Order notifications
    TELEGRAM_API_URL: str = "https://api.telegram.org"
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_CHAT_ID: Optional[str] = None

    CURRENCY_LABEL: str = "сум"
    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

    @property
    def admin_backend(self) -> str:
        return self.ADMIN_STORAGE_BACKEND or self.STORAGE_BACKEND


settings = Settings()
