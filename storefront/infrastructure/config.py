"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://storefront:storefront_dev_password@db:5432/storefront"

    # Catalog backend: "memory" serves the seeded demo catalog, "sql" reads the database
    catalog_backend: str = "memory"
    demo_seed: int = 42

    # Listing
    page_size: int = 32
    attribute_row_limit: int = 50000

    # Facet memoization
    facet_cache_ttl_seconds: float = 300.0
    facet_cache_max_entries: int = 512

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
