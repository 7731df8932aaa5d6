from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Optional
from functools import lru_cache
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./gstbill.db"

    # Database Connection Pool Settings (ignored for SQLite)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # App Settings
    APP_NAME: str = "GST Billing Backend"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - accepts JSON string, comma-separated, or list
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Remote invoice store. When unset, existing invoice numbers come from the local database.
    INVOICE_BACKEND_URL: Optional[str] = None
    INVOICE_BACKEND_TIMEOUT: float = 10.0

    # Defaults proposed for a new invoice
    DEFAULT_CGST_RATE: float = 9.0
    DEFAULT_SGST_RATE: float = 9.0
    DEFAULT_IGST_RATE: float = 0.0
    DEFAULT_TERMS_AND_CONDITIONS: str = (
        "1. Goods once sold will not be taken back.\n"
        "2. Interest @18% p.a. will be charged if the payment is not made within the stipulated time."
    )

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(',')]
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        return self.CORS_ORIGINS

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
