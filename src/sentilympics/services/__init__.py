"""Services for Sentilympics."""

from .llm import ProviderFactory, ProviderKind
from .analysis import AnalysisOrchestrator
from .chat import ChatOrchestrator

__all__ = [
    "ProviderFactory",
    "ProviderKind",
    "AnalysisOrchestrator",
    "ChatOrchestrator",
]
