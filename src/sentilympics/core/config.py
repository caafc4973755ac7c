"""Configuration management for Sentilympics."""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    # Gemini API
    gemini_api_key: str = Field("", description="Gemini API key")
    google_api_key: str = Field("", description="Gemini API key (alternative naming)")

    @property
    def effective_gemini_key(self) -> str:
        """Get the effective Gemini API key from either field."""
        return self.gemini_api_key or self.google_api_key

    # OpenAI API
    openai_api_key: str = Field("", description="OpenAI API key")

    # Provider selection
    primary_provider: str = Field("gemini", description="Provider used when several are configured (gemini or openai)")

    # Models
    gemini_analysis_model: str = Field("gemini-3-pro-preview", description="Gemini model for analysis")
    gemini_chat_model: str = Field("gemini-3-flash-preview", description="Gemini model for chat")
    gemini_thinking_budget: int = Field(32768, description="Thinking token budget for Gemini analysis")
    openai_model: str = Field("gpt-4o", description="OpenAI model for analysis")
    openai_chat_model: str = Field("gpt-4o", description="OpenAI model for chat")
    openai_temperature: float = Field(0.3, description="OpenAI sampling temperature for analysis")
    request_timeout: float = Field(120.0, description="Provider request timeout in seconds")

    # Analysis input
    max_review_chars: int = Field(50000, description="Review text is truncated to this many characters")

    # Rate limiting
    analysis_max_requests: int = Field(5, description="Analyses allowed per window")
    analysis_window_ms: int = Field(10 * 60 * 1000, description="Analysis rate-limit window in milliseconds")
    chat_max_requests: int = Field(15, description="Chat messages allowed per window")
    chat_window_ms: int = Field(5 * 60 * 1000, description="Chat rate-limit window in milliseconds")
    rate_limit_dir: str = Field(".cache/rate_limits", description="Directory holding persisted rate-limit counters")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    def configured_providers(self) -> List[str]:
        """Names of providers with a credential, in fixed priority order."""
        providers = []
        if self.effective_gemini_key.strip():
            providers.append("gemini")
        if self.openai_api_key.strip():
            providers.append("openai")
        return providers

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
