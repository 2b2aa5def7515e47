"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App settings
    app_name: str = "DocProps"
    debug: bool = False
    log_level: str = "INFO"

    # Authentication settings
    require_api_key: bool = False  # Set to True to enable API key authentication

    # API Keys for authentication (comma-separated string in env)
    api_keys_str: str = Field(default="dev-api-key", alias="api_keys")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def api_keys(self) -> List[str]:
        """Parse comma-separated API keys."""
        return [k.strip() for k in self.api_keys_str.split(",") if k.strip()]

    # Schema tables (empty = tables bundled with the package)
    schema_path: Optional[str] = None

    # Extraction settings
    max_upload_bytes: int = 50 * 1024 * 1024
    extraction_timeout_seconds: int = 30
    allow_path_extraction: bool = False  # Reading server-side paths is opt-in


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
