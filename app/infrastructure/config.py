"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Store
    table_name: str = "productos"
    store_backend: str = "sqlalchemy"
    database_url: str = "postgresql+asyncpg://catalogo:catalogo_dev_password@db:5432/catalogo"
    default_page_size: int = 20

    # Authentication
    jwt_secret: str = ""
    jwt_algorithms: list[str] = ["HS256", "HS384", "HS512"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings, loaded once."""
    return Settings()
