"""Core modules for Sentilympics."""

from .models import *
from .config import settings
from .errors import *
from .rate_limiter import RateLimiter, check_rate_limit, get_wait_time_minutes
from .schema import ANALYSIS_SCHEMA, parse_analysis

__all__ = [
    "settings",
    "AnalysisResult",
    "ReviewPoint",
    "WordFrequency",
    "ActionableArea",
    "Summary",
    "Source",
    "ChatMessage",
    "ChatReply",
    "RateLimitStatus",
    "RateLimiter",
    "check_rate_limit",
    "get_wait_time_minutes",
    "ANALYSIS_SCHEMA",
    "parse_analysis",
]
