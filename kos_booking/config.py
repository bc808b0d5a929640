"""
Application settings
Read from environment variables (or a .env file)
"""
from typing import List
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Kos Booking"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Database
    DATABASE_URL: str = "sqlite:///./kos_booking.db"

    # JWT (tokens are issued by the identity service sharing this key)
    SECRET_KEY: str = "kos-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Duplicate-request suppression
    IDEMPOTENCY_TTL_SECONDS: int = 86400

    # Nota rendering
    NOTA_TITLE: str = "Nota Pemesanan Kos"
    CURRENCY_PREFIX: str = "Rp"

    model_config = ConfigDict(env_file=".env", case_sensitive=True)


# Global settings instance
settings = Settings()
