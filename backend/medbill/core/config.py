"""Application configuration.

Environment variables override all defaults. A `.env` next to the backend
directory is loaded for local development.
SECRET_KEY must be set in production - startup fails fast if it is missing.
"""

import os
import warnings
from decimal import Decimal
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./medbill.db")

    # Auth token (carried in an httpOnly cookie)
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    if not SECRET_KEY:
        if ENVIRONMENT == "production":
            raise ValueError(
                "SECRET_KEY must be set in production environment. "
                "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        warnings.warn(
            "SECRET_KEY not set in environment. Using development default. "
            "Set SECRET_KEY in .env before deploying.",
            RuntimeWarning,
        )
        SECRET_KEY = "development-only-weak-default-change-in-production"

    ALGORITHM: str = "HS256"
    # Matches the 24h session lifetime of the counter UI
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    AUTH_COOKIE_NAME: str = os.getenv("AUTH_COOKIE_NAME", "medbill_session")
    SECURE_COOKIES: bool = ENVIRONMENT == "production"
    SAME_SITE_COOKIE: str = "lax"

    # CORS (specific origins only)
    CORS_ORIGINS: List[str] = _env_list(
        "CORS_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
    )

    # Prescription uploads
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", str(_BACKEND_DIR / "uploads"))
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
    ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/png", "image/jpg", "image/gif"]

    # Billing and inventory defaults
    DEFAULT_GST_RATE: Decimal = Decimal(os.getenv("DEFAULT_GST_RATE", "18"))
    DEFAULT_LOW_STOCK_THRESHOLD: int = 10
    EXPIRY_ALERT_DAYS: int = int(os.getenv("EXPIRY_ALERT_DAYS", "30"))

    # First-run bootstrap
    SEED_DEMO_DATA: bool = _env_bool("SEED_DEMO_DATA", "true")
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")


settings = Settings()
