"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: a local SQLite file works out of the box
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from catalog_sync.core.domain_types import TargetKind


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite+aiosqlite:///./catalog.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_auto_create: bool = True

    # Resilient store
    store_max_reconnect_attempts: int = 5
    store_reconnect_delay_ms: int = 2000

    # Remote pricing API
    remote_api_url: str = "http://localhost:3000"
    remote_api_email: str = ""
    remote_api_password: str = ""
    remote_api_timeout_seconds: float = 30.0
    remote_api_max_retries: int = 3
    remote_api_base_delay_ms: int = 500

    # Static snapshot consumed by the frontend simulator
    snapshot_path: str = "src/data/servicos.js"

    # Sync
    sync_targets: list[TargetKind] = list(TargetKind)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
