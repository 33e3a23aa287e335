"""Application configuration with strict environment validation."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # --- Hosted store ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_SCHEMA: str = "public"
    SUPABASE_TIMEOUT_SECONDS: float = 15.0

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # --- API metadata ---
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Stockdesk"

    # --- Inventory defaults ---
    DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1)
    MIN_STOCK_LEVEL: int = Field(default=10, ge=0)

    @field_validator("SUPABASE_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("SUPABASE_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("SUPABASE_TIMEOUT_SECONDS must be positive.")
        return value

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)


settings = Settings()
