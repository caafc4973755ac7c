"""Analysis orchestration: provider selection, rate limiting, parsing."""

import logging
from typing import Callable, Optional

from ..core.config import Settings, settings as default_settings
from ..core.constants import RateLimitConstants
from ..core.errors import (
    AnalysisError,
    AnalysisInProgressError,
    ProviderTransportError,
    RateLimitError,
)
from ..core.models import AnalysisResult
from ..core.rate_limiter import RateLimiter, get_default_limiter
from ..core.schema import ANALYSIS_SCHEMA, parse_analysis
from .llm import ProviderClient, ProviderFactory

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """Turns raw review text into an ``AnalysisResult``.

    One call runs against exactly one provider with no automatic retries;
    retrying is left to the caller so quota is never spent silently. At most
    one analysis may be in flight per orchestrator.
    """

    def __init__(
        self,
        provider_factory: Optional[Callable[[], ProviderClient]] = None,
        rate_limiter: Optional[RateLimiter] = None,
        config: Optional[Settings] = None,
    ):
        self.settings = config or default_settings
        self.provider_factory = provider_factory or ProviderFactory(self.settings).create
        self._rate_limiter = rate_limiter
        self._provider: Optional[ProviderClient] = None
        self._in_flight = False

    @property
    def rate_limiter(self) -> RateLimiter:
        if self._rate_limiter is None:
            self._rate_limiter = get_default_limiter()
        return self._rate_limiter

    @property
    def is_analyzing(self) -> bool:
        return self._in_flight

    @property
    def provider(self) -> ProviderClient:
        """Active provider, resolved on first use (raises ``ConfigurationError``)."""
        if self._provider is None:
            self._provider = self.provider_factory()
        return self._provider

    async def analyze(self, raw_text: str) -> AnalysisResult:
        if not raw_text or not raw_text.strip():
            raise ValueError("Review text is empty")
        if self._in_flight:
            raise AnalysisInProgressError("An analysis is already in progress")

        self._in_flight = True
        try:
            provider = self.provider

            status = self.rate_limiter.check(
                RateLimitConstants.ANALYSIS_KEY,
                self.settings.analysis_max_requests,
                self.settings.analysis_window_ms,
            )
            if not status.allowed:
                raise RateLimitError(status.reset_time)

            logger.info(f"Analyzing {len(raw_text)} characters with {provider.kind.value} ({status.remaining} analyses left in window)")
            try:
                raw = await provider.analyze(raw_text, ANALYSIS_SCHEMA)
            except ProviderTransportError as e:
                raise AnalysisError(f"Analysis request failed: {e}", cause=e) from e

            result = parse_analysis(raw)
            logger.info(
                f"Analysis complete: {len(result.sentiment_trend)} trend points, "
                f"{len(result.word_cloud)} keywords, {len(result.summary.actionable_areas)} actionable areas"
            )
            return result
        finally:
            self._in_flight = False
