"""
Configuration settings for the TeachMe tutoring app.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

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
    # AI Integration (simulated student)
    # ========================================
    gemini_api_key: str | None = Field(
        default=None,
        description="Google Generative AI (Gemini) API key",
    )
    ai_model: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model that plays the student",
    )
    top_k: int = Field(
        default=40,
        description="Top-k sampling for every generation",
    )
    top_p: float = Field(
        default=0.95,
        description="Nucleus sampling for every generation",
    )
    dialogue_temperature: float = Field(
        default=0.7,
        description="Temperature for student dialogue replies",
    )
    dialogue_max_output_tokens: int = Field(
        default=1024,
        description="Token cap for student dialogue replies",
    )
    grading_temperature: float = Field(
        default=0.4,
        description="Temperature when the student answers the quiz",
    )
    grading_max_output_tokens: int = Field(
        default=2048,
        description="Token cap for quiz answers (includes thinking process)",
    )
    analysis_temperature: float = Field(
        default=0.3,
        description="Temperature for misconception analysis",
    )
    gateway_timeout_seconds: float | None = Field(
        default=None,
        description="Per-call timeout for model requests (None to wait indefinitely)",
    )

    # ========================================
    # Teaching Session
    # ========================================
    readiness_markers: list[str] = Field(
        default=["understand", "ready for", "quiz"],
        description="Phrases that must all appear in a reply to signal quiz readiness",
    )
    fallback_reply: str = Field(
        default="I'm having trouble thinking right now. Could you try rephrasing that?",
        description="Student reply used when the model call fails",
    )
    curriculum_path: str | None = Field(
        default=None,
        description="JSON curriculum file (None for the bundled catalog)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    def has_ai_configured(self) -> bool:
        """Check if the Gemini student is configured."""
        return bool(self.gemini_api_key)

    def get_generation_config(self, kind: Literal["dialogue", "grading", "analysis"]) -> dict[str, Any]:
        """Generation parameters for one of the three model operations."""
        config: dict[str, Any] = {
            "temperature": self.dialogue_temperature,
            "top_k": self.top_k,
            "top_p": self.top_p,
            "max_output_tokens": self.dialogue_max_output_tokens,
        }
        if kind == "grading":
            config["temperature"] = self.grading_temperature
            config["max_output_tokens"] = self.grading_max_output_tokens
        elif kind == "analysis":
            config["temperature"] = self.analysis_temperature
        return config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
