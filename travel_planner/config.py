"""
Configuration management for the travel planner.
Settings are read once at process start and passed explicitly to the services.
"""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
VERCEL_BLOB_API_URL = "https://blob.vercel-storage.com"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Configuration (any OpenAI-compatible endpoint)
    llm_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("llm_api_key", "gemini_api_key"),
    )
    llm_base_url: str = GEMINI_OPENAI_BASE_URL
    llm_model: str = Field(
        default="gemini-2.5-flash",
        validation_alias=AliasChoices("llm_model", "generative_model"),
    )
    llm_temperature: float = 0.7
    llm_timeout_seconds: float = 120.0

    # Plan store: blob backend when a token is present, local file otherwise
    blob_read_write_token: str = ""
    blob_api_url: str = VERCEL_BLOB_API_URL
    local_plans_path: Path = Path("local-data") / "plans.json"
    default_country: str = "Japan"

    # Server Configuration
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    @property
    def has_llm_credentials(self) -> bool:
        return bool(self.llm_api_key.strip())

    @property
    def use_blob_store(self) -> bool:
        return bool(self.blob_read_write_token.strip())


def load_settings(**overrides) -> Settings:
    """Build the settings object. Call once at startup."""
    return Settings(**overrides)
