"""Utility modules for Sentilympics."""

from .text import strip_code_fences, truncate_reviews

__all__ = [
    "strip_code_fences",
    "truncate_reviews",
]
