"""Configuration management for Notewise."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NOTEWISE_",
        extra="ignore",
        populate_by_name=True,
    )

    # OpenAI (a missing key leaves every task in "not configured" mode)
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = "gpt-4o-mini"
    openai_vision_model: str = "gpt-4o-mini"
    max_output_tokens: int = 4096
    request_timeout: float = 60.0

    # Server
    port: int = 8430
    host: str = "127.0.0.1"
    allowed_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key.strip())

    def get_allowed_origins(self) -> set[str | None]:
        """Origins allowed to send state-changing requests, including our own."""
        origins: set[str | None] = set(self.allowed_origins)
        origins.add(f"http://{self.host}:{self.port}")
        origins.add(f"http://localhost:{self.port}")
        return origins


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
