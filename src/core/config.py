"""Application configuration using pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Auth0
    auth0_domain: str = ""
    auth0_audience: str = ""

    # Development mode - bypasses auth for local development
    dev_mode: bool = False

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )

    log_level: str = "INFO"

    # Field limits for enriched bookmarks
    max_title_length: int = 200
    max_summary_length: int = 300
    max_tags: int = 15
    max_tag_length: int = 50

    # Enrichment: per-attempt timeout, retry policy and result cache lifetime
    extraction_timeout: float = 10.0
    retry_max_attempts: int = 3
    retry_initial_delay: float = 1.0
    retry_backoff_factor: float = 1.5
    cache_ttl_seconds: float = 300.0

    # Third-party services used by the enrichment strategies
    favicon_service_url: str = "https://www.google.com/s2/favicons"
    favicon_size: int = 32
    textract_api_url: str = "https://textract.pages.dev/api/extract"
    opengraph_api_url: str = "https://opengraph.io/api/1.1/site"
    opengraph_app_id: str = "demo"
    cors_proxy_url: str = "https://api.allorigins.win/get"
    # Optional summarizer endpoint; the strategy is skipped when empty
    summarizer_api_url: str = ""

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE completely bypasses authentication, so we must ensure it's only
        used with local development databases (localhost or SQLite).
        """
        if not self.dev_mode:
            return self

        try:
            parsed = urlparse(self.database_url)
            scheme = parsed.scheme or ""
            hostname = parsed.hostname or ""
        except ValueError:
            scheme = ""
            hostname = ""

        if scheme.startswith("sqlite"):
            return self

        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def auth0_issuer(self) -> str:
        """Get the Auth0 issuer URL."""
        return f"https://{self.auth0_domain}/"

    @property
    def auth0_jwks_url(self) -> str:
        """Get the Auth0 JWKS URL for fetching public keys."""
        return f"https://{self.auth0_domain}/.well-known/jwks.json"

    @property
    def is_sqlite(self) -> bool:
        """True when the configured database is SQLite (local development and tests)."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
