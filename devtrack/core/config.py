# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration: all env-driven.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "devtrack-api")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    PORT: int = int(os.getenv("PORT", "5000"))
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production").lower()

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./devtrack.db")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))
    DB_CONNECT_RETRY_SECONDS: float = float(os.getenv("DB_CONNECT_RETRY_SECONDS", "5"))

    # Auth
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me-in-production")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_HOURS: int = int(os.getenv("JWT_EXPIRES_HOURS", "24"))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    DEFAULT_ROLE: str = os.getenv("DEFAULT_ROLE", "Team Member")

    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv("FRONTEND_URL", "http://localhost:3000").split(",")
        if o.strip()
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


settings = Settings()
