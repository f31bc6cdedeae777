"""
Configuration settings for the training flow authoring engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///training_flows.db",
        description="SQLAlchemy connection string (PostgreSQL or SQLite)",
    )

    # ========================================
    # Text Generation (flow + metadata stages)
    # ========================================
    ai_api_key: str | None = Field(
        default=None,
        description="API key for the chat-completions endpoint (unset = fallback generator only)",
    )
    ai_api_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of an OpenAI-compatible chat-completions API",
    )
    ai_model: str = Field(
        default="gpt-4o-mini",
        description="Model used for flow and metadata generation",
    )
    ai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    ai_max_tokens: int = Field(
        default=6000,
        ge=1,
        description="Maximum tokens per completion",
    )
    ai_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for a single generation request (a timeout triggers the fallback)",
    )
    generation_prompt: str = Field(
        default=(
            "Create a training flow based on the document analysis and user configuration.\n\n"
            "Requirements:\n"
            "- Use the specified question count and content mix\n"
            "- Focus on the selected topics\n"
            "- Match the requested difficulty level\n"
            "- Create engaging, practical content\n\n"
            "Generate a well-structured training sequence with clear learning progression."
        ),
        description="Preamble prepended to every flow-generation user prompt",
    )
    analysis_prompt: str = Field(
        default=(
            "Analyze this training document and provide a simple, helpful summary.\n\n"
            "Focus on:\n"
            "- Main topics and themes\n"
            "- Key learning points\n"
            "- Suggested training approach\n"
            "- Content difficulty level\n\n"
            "Keep the response concise and actionable for training developers."
        ),
        description="Prompt used for free-text document analysis",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default="logs/training_flows.log",
        description="Log file path (None for stderr only)",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
