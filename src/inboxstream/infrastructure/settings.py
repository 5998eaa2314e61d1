"""Application settings using Pydantic Settings for configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    app_name: str = "inboxstream"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # PostgreSQL (email store)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: SecretStr = Field(default=SecretStr("postgres"))
    postgres_db: str = "inboxstream"

    # MCP servers
    google_assistant_mcp_url: str = "http://localhost:3001/mcp"
    google_assistant_mcp_health_url: str = "http://localhost:3001/health"
    google_assistant_mcp_enabled: bool = True
    restaurant_booking_mcp_url: str = "http://localhost:3000/mcp"
    restaurant_booking_mcp_health_url: str = "http://localhost:3000/health"
    restaurant_booking_mcp_enabled: bool = True
    time_mcp_url: str = "http://localhost:3000/mcp"
    time_mcp_health_url: str = "http://localhost:3000/health"
    time_mcp_enabled: bool = True
    mcp_timeout_seconds: float = 30.0

    # Gmail ingestion
    gmail_max_results: int = 10
    gmail_query: str = (
        "in:inbox is:unread newer_than:3d -category:promotions -category:social -category:forums"
    )

    # LLM Configuration
    llm_provider: Literal["groq", "openai", "anthropic", "local"] = "groq"
    groq_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None
    llm_temperature: float = 0.7
    llm_max_tokens: int = 1024

    # Local vLLM (for local inference)
    vllm_base_url: str = "http://localhost:8000/v1"
    vllm_model_name: str = "gpt-oss-20b"

    # Chat
    chat_history_limit: int = 50

    @computed_field
    @property
    def postgres_dsn(self) -> str:
        """Construct PostgreSQL connection string."""
        password = self.postgres_password.get_secret_value()
        return f"postgresql://{self.postgres_user}:{password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
