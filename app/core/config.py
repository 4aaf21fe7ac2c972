# food_delivery_api/app/core/config.py
import logging
from typing import Literal
from pydantic_settings import BaseSettings
from pydantic import EmailStr
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE_PATH = BASE_DIR / ".env"

class Settings(BaseSettings):

    # Core
    PROJECT_NAME: str = "Food Delivery API"
    DATABASE_URL: str
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Tokens (one secret/lifetime pair per role)
    ALGORITHM: str = "HS256"
    ACCESS_SECRET: str
    ACCESS_LIFETIME_MINUTES: int = 15
    REFRESH_SECRET: str
    REFRESH_LIFETIME_MINUTES: int = 60 * 24 * 7

    # Passwords
    BCRYPT_ROUNDS: int = 12

    # --- Session cache ---
    CACHE_BACKEND: Literal["redis", "memory"] = "redis"
    REDIS_URL: str = "redis://localhost:6379/0"
    # --- End session cache ---

    # Password Reset
    RESET_CODE_EXPIRE_MINUTES: int = 10
    RESET_CODE_LENGTH: int = 6
    RESET_PASSWORD_REVOKES_SESSIONS: bool = False

    # --- Email (SMTP) ---
    EMAIL_HOST: str = "localhost"
    EMAIL_PORT: int = 587
    EMAIL_USE_TLS: bool = True
    EMAIL_USE_SSL: bool = False
    EMAIL_USERNAME: str | None = None
    EMAIL_PASSWORD: str | None = None
    EMAIL_FROM: EmailStr = "no-reply@fooddelivery.com"
    EMAIL_FROM_NAME: str | None = "Food Delivery"
    # --- End email ---

    # Rate limiting (slowapi)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "10/minute"

    class Config:
        case_sensitive = True
        env_file = ENV_FILE_PATH
        env_file_encoding = 'utf-8'

try:
    settings = Settings()
except Exception as e:
    logging.error(f"FATAL: could not load 'settings' from environment / {ENV_FILE_PATH}: {e}")
    raise e
