"""
IntelliBid - Configuration Management

Central configuration using Pydantic settings with multi-provider LLM support.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # LLM Provider Configuration
    llm_provider: LLMProvider = Field(
        default=LLMProvider.OPENAI,
        description="LLM provider to use"
    )

    # Provider API Keys
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    google_api_key: Optional[str] = Field(default=None, description="Google API key")

    # Model Configuration
    llm_model: Optional[str] = Field(
        default=None,
        description="Model to use (defaults based on provider)"
    )
    llm_temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature for role evaluations"
    )
    agent_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-agent execution timeout"
    )

    # Agent metrics
    metrics_retention_days: int = Field(
        default=7,
        ge=1,
        description="Days of agent metrics considered by analytics"
    )
    token_cost_input_per_million: float = Field(
        default=2.50,
        description="USD per 1M input tokens"
    )
    token_cost_output_per_million: float = Field(
        default=10.00,
        description="USD per 1M output tokens"
    )

    # Storage Configuration
    data_dir: Path = Field(
        default=Path("./data"),
        description="Data directory for uploads and logs"
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_env: str = Field(default="development", description="API environment")
    log_level: str = Field(default="INFO", description="Root log level")
    rate_limit_enabled: bool = Field(default=True, description="Enforce per-client rate limits")
    cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="CORS origins (comma-separated)"
    )

    # Database Configuration (PostgreSQL)
    database_url: str = Field(
        default="postgresql+asyncpg://localhost/intellibid",
        description="Database connection URL"
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL queries for debugging"
    )

    # Redis Configuration (Job Queue)
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def active_api_key(self) -> Optional[str]:
        """Get the API key for the active provider."""
        key_map = {
            LLMProvider.OPENAI: self.openai_api_key,
            LLMProvider.ANTHROPIC: self.anthropic_api_key,
            LLMProvider.GEMINI: self.google_api_key,
        }
        return key_map.get(self.llm_provider)

    @property
    def default_model(self) -> str:
        """Get the default model for the active provider."""
        if self.llm_model:
            return self.llm_model

        defaults = {
            LLMProvider.OPENAI: "gpt-4o",
            LLMProvider.ANTHROPIC: "claude-3-5-sonnet-20241022",
            LLMProvider.GEMINI: "gemini-1.5-pro",
        }
        return defaults.get(self.llm_provider, "gpt-4o")

    @property
    def uploads_dir(self) -> Path:
        """Directory for uploaded requirement and proposal documents."""
        path = self.data_dir / "uploads"
        path.mkdir(parents=True, exist_ok=True)
        return path


# Global settings instance
settings = Settings()
