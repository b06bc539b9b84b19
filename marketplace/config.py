"""Client settings loaded from environment variables."""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Absolute path to the .env file next to the project root
ENV_FILE = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="MARKETPLACE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Marketplace-Client"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    # REST backend
    api_base_url: str = "http://localhost:8080/api"
    request_timeout: float = 30.0

    # Presentation defaults
    placeholder_image: str = "/placeholder.svg"
    currency_symbol: str = "$"

    # Pagination
    favorites_page_size: int = 12
    admin_page_size: int = 10
    reports_page_size: int = 10

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("favorites_page_size", "admin_page_size", "reports_page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page sizes must be positive")
        return v


settings = Settings()
