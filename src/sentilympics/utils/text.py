"""Text helpers shared by the provider clients."""

import logging
import re

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?|```$", flags=re.IGNORECASE | re.MULTILINE)


def strip_code_fences(s: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    return _FENCE_RE.sub("", (s or "").strip()).strip()


def truncate_reviews(text: str, max_chars: int) -> str:
    """Bound the review text sent to a provider. Truncation is silent."""
    text = text or ""
    if len(text) > max_chars:
        logger.info(f"Review text truncated from {len(text)} to {max_chars} characters")
        return text[:max_chars]
    return text
