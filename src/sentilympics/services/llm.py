"""Provider abstraction for LLM backends."""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from textwrap import dedent
from typing import Any, Dict, Optional

from ..core.config import Settings, settings as default_settings
from ..core.constants import PromptConstants
from ..core.errors import ConfigurationError
from ..core.models import ChatReply
from ..utils.text import truncate_reviews

logger = logging.getLogger(__name__)


class ProviderKind(str, Enum):
    """Supported backends, in fixed fallback order."""
    GEMINI = "gemini"
    OPENAI = "openai"


ANALYSIS_INSTRUCTIONS = dedent(f"""
Analyze the following customer reviews in depth.
- If dates are missing, infer a realistic timeline for the sentiment trend chart.
- Identify clear sentiment trends, recurring complaints and praises, and concrete actionable insights.
- For sentimentTrend give each point a date (YYYY-MM-DD), an integer sentiment from -100 to 100, and a snippet of at most {PromptConstants.MAX_SNIPPET_WORDS} words.
- For wordCloud use meaningful phrases (e.g. "fast shipping", "poor support") with an integer frequency 1-50 and type "complaint" or "praise".
- For summary give a concise executive overview and 1-{PromptConstants.MAX_ACTIONABLE_AREAS} actionable areas with title, description, and priority (High/Medium/Low).
""").strip()


def build_analysis_prompt(text: str, max_chars: int) -> str:
    """User prompt for an analysis call; the review text is truncated to ``max_chars``."""
    return f"{ANALYSIS_INSTRUCTIONS}\n\nReviews:\n{truncate_reviews(text, max_chars)}"


def build_system_instruction(context_summary: Optional[str], search_enabled: bool) -> str:
    """System instruction for a chat session, with or without analysis context."""
    if not context_summary:
        if search_enabled:
            return f"{PromptConstants.GENERIC_CHAT_INSTRUCTION} {PromptConstants.SEARCH_CHAT_SUFFIX}"
        return PromptConstants.GENERIC_CHAT_INSTRUCTION

    parts = [
        "You are an expert analyst for a customer review dashboard. The user has just analyzed reviews.",
        context_summary,
    ]
    if search_enabled:
        parts.append(PromptConstants.CONTEXT_SEARCH_HINT)
    parts.append("Provide concise, professional answers about CX strategy.")
    return "\n\n".join(parts)


class ChatSession(ABC):
    """A stateful conversation with one provider."""

    def __init__(self, system_instruction: str):
        self.system_instruction = system_instruction

    @abstractmethod
    async def send_message(self, text: str) -> ChatReply:
        """Send one user message and return the reply with normalized sources."""


class ProviderClient(ABC):
    """Common capability every backend implements."""

    kind: ProviderKind
    supports_search: bool = False

    def __init__(self, config: Settings):
        self.settings = config

    @abstractmethod
    async def analyze(self, text: str, schema: Dict[str, Any]) -> str:
        """Run a schema-constrained analysis and return the raw response text."""

    @abstractmethod
    def create_chat_session(self, context_summary: Optional[str] = None) -> ChatSession:
        """Open a chat session whose system instruction embeds ``context_summary``."""

    def system_instruction(self, context_summary: Optional[str]) -> str:
        return build_system_instruction(context_summary, self.supports_search)


class ProviderFactory:
    """Picks exactly one provider per call from the configured credentials."""

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings

    def select(self) -> ProviderKind:
        """Configured ``primary_provider`` if it has a key, else the first keyed provider."""
        configured = self.settings.configured_providers()
        if not configured:
            raise ConfigurationError("No provider API key configured (set GEMINI_API_KEY or OPENAI_API_KEY)")

        primary = (self.settings.primary_provider or "").strip().lower()
        if primary in configured:
            return ProviderKind(primary)
        if primary and primary not in {k.value for k in ProviderKind}:
            logger.warning(f"Unknown primary provider '{primary}', using {configured[0]}")
        return ProviderKind(configured[0])

    def create(self) -> ProviderClient:
        """Create the selected provider client."""
        kind = self.select()
        if kind is ProviderKind.GEMINI:
            from .gemini_client import GeminiProvider
            return GeminiProvider(self.settings)
        from .openai_client import OpenAIProvider
        return OpenAIProvider(self.settings)
