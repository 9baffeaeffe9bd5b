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
    app_name: str = "TLD Config API"
    debug: bool = False

    # =========================================================================
    # Database
    # =========================================================================
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/tldconfig",
        description="PostgreSQL connection URL",
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
    # TLD rules
    # =========================================================================
    default_currency: str = Field(
        default="USD",
        description="Currency of newly created TLDs unless one is given",
    )

    # Reserved lists starting with this prefix may be applied to any TLD;
    # all others must start with "<tld>_".
    common_reserved_list_prefix: str = "common_"

    # DnsWriter implementations that TLDs may reference.
    dns_writer_names: list[str] = ["VoidDnsWriter"]

    # Invoicing only supports a single renew billing cost; warn when an
    # administrator schedules more than one.
    warn_on_multiple_renew_costs: bool = True


settings = Settings()
