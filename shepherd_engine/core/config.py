"""Configuration management for Shepherd Engine."""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    ENGINE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod, test")

    # Provider credentials. Which ones are required depends on the routing table,
    # see ProviderRegistry.validate_routing().
    PERPLEXITY_API_KEY: str | None = Field(default=None, description="Perplexity API key")
    ANTHROPIC_API_KEY: str | None = Field(default=None, description="Anthropic API key")
    GROQ_API_KEY: str | None = Field(default=None, description="Groq API key")
    FIRECRAWL_API_KEY: str | None = Field(default=None, description="Firecrawl API key")

    # Provider default models
    PERPLEXITY_MODEL: str = Field(
        default="sonar-deep-research", description="Default Perplexity research model"
    )
    CLAUDE_MODEL: str = Field(
        default="claude-sonnet-4-20250514", description="Default Claude model"
    )
    GROQ_MODEL: str = Field(default="llama-3.3-70b-versatile", description="Default Groq model")

    # Domain generators
    GENERATION_PROVIDER: Literal["groq", "claude"] = Field(
        default="groq", description="Provider whose model list the generators walk"
    )

    # Firecrawl research configuration
    FIRECRAWL_TIMEOUT: int = Field(default=30, description="Firecrawl request timeout in seconds")
    RESEARCH_SEARCH_LIMIT: int = Field(default=3, description="Results per Firecrawl search")
    RESEARCH_MAX_COMPETITOR_URLS: int = Field(
        default=3, description="Max competitor URLs scraped per research run"
    )
    RESEARCH_SCRAPE_CHARS: int = Field(
        default=1000, description="Max chars kept from each scraped competitor page"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If environment variables have the wrong type
    """
    return Settings()
