"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "Mumtaz"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Supabase ---
    supabase_db_url: str  # direct postgres connection string for asyncpg
    db_pool_min_size: int = 2
    db_pool_max_size: int = 20

    # --- Clerk ---
    clerk_jwks_url: str = "https://api.clerk.com/v1/jwks"

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:3000"]

    # --- Insights ---
    default_timezone: str = "UTC"  # IANA name used when a request gives no tz

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
