
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Compliance API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (Postgres via asyncpg or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./compliance_dev.db",
        alias="DATABASE_URL",
    )

    # Multi-tenancy default (used when no X-Tenant-Id header is sent)
    default_tenant_id: str = Field(default="default", alias="DEFAULT_TENANT_ID")

    # Dashboard windows
    upcoming_horizon_days: int = Field(
        default=30, alias="UPCOMING_HORIZON_DAYS",
    )
    certification_expiry_window_days: int = Field(
        default=60, alias="CERTIFICATION_EXPIRY_WINDOW_DAYS",
    )

    # Audit runs
    audit_lease_ttl_seconds: int = Field(
        default=300, alias="AUDIT_LEASE_TTL_SECONDS",
    )  # an abandoned run's lease frees itself after this long

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

settings = Settings()
