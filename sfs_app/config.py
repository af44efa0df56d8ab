"""Application configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings are loaded in this priority order (highest to lowest):
    1. Environment variables
    2. .env file (for local development)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = "SFS Law DB API"
    debug: bool = False

    # =========================================================================
    # Database
    # =========================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/sfs.db",
        description="SQLite (aiosqlite) connection URL for the embedded store",
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = ["http://localhost:3000"]

    # =========================================================================
    # API Settings
    # =========================================================================
    api_v1_prefix: str = "/api/v1"

    # =========================================================================
    # Search
    # =========================================================================
    search_default_limit: int = Field(default=10, ge=1)
    search_max_limit: int = Field(default=50, ge=1)
    # Tokens around each match in FTS5 snippet() output
    snippet_tokens: int = Field(default=32, ge=1, le=64)
    # As-of searches discard FTS ranking, so the snippet is a plain prefix
    as_of_snippet_chars: int = Field(default=320, ge=1)

    # =========================================================================
    # Change feed
    # =========================================================================
    changes_default_limit: int = Field(default=50, ge=1)
    changes_max_limit: int = Field(default=200, ge=1)


settings = Settings()
