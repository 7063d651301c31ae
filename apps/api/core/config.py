"""Centralized application configuration via Pydantic Settings.

Loads all env vars into a typed Settings instance. Supabase credentials fall
back to the NEXT_PUBLIC_* names shared with the web frontend.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    SUPABASE_URL: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
        description="Supabase project URL",
    )
    SUPABASE_ANON_KEY: str = Field(
        default="",
        validation_alias=AliasChoices(
            "SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"
        ),
        description="Supabase anon/public key",
    )
    SUPABASE_SERVICE_KEY: str = Field(
        default="",
        validation_alias=AliasChoices(
            "SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_ROLE_KEY"
        ),
        description="Supabase service-role key (command-line import tool)",
    )

    # CORS
    ALLOWED_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Comma-separated allowed origins for CORS",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Python log level")
    ENVIRONMENT: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )

    # App
    APP_VERSION: str = Field(default="0.1.0", description="Application version")

    # Bank statement uploads
    STATEMENTS_BUCKET: str = Field(
        default="bank-statements",
        description="Storage bucket that receives uploaded statement files",
    )
    MAX_UPLOAD_BYTES: int = Field(
        default=10 * 1024 * 1024,
        description="Largest accepted statement upload",
    )
    UPLOAD_ROLE: str = Field(
        default="management",
        description="User role allowed to upload statements",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def json_logs(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)

    model_config = {"env_file": ".env", "extra": "ignore"}


def get_settings() -> Settings:
    """Factory for Settings, allows test override."""
    return Settings()


settings = get_settings()
