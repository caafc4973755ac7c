"""Sentilympics - LLM-backed customer review analysis and chat."""

__version__ = "1.0.0"
__author__ = "Sentilympics Team"

from .core.models import *
from .core.config import settings
from .core.errors import *
from .services.analysis import AnalysisOrchestrator
from .services.chat import ChatOrchestrator
from .services.llm import ProviderFactory, ProviderKind

__all__ = [
    "settings",
    "AnalysisOrchestrator",
    "ChatOrchestrator",
    "ProviderFactory",
    "ProviderKind",
    "AnalysisResult",
    "ChatMessage",
    "Source",
]
