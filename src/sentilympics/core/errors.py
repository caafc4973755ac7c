"""Error taxonomy for analysis and chat calls."""

from typing import Optional

from .constants import RateLimitConstants, ErrorConstants
from .rate_limiter import get_wait_time_minutes

__all__ = [
    "SentilympicsError",
    "ConfigurationError",
    "RateLimitError",
    "ProviderTransportError",
    "AnalysisError",
    "MalformedResponseError",
    "AnalysisInProgressError",
    "user_message",
]


class SentilympicsError(Exception):
    """Base class for all errors raised by Sentilympics."""


class ConfigurationError(SentilympicsError):
    """No provider credential is available."""


class RateLimitError(SentilympicsError):
    """The client-side quota for an operation is exhausted.

    ``str(error)`` is ``RATE_LIMIT_EXCEEDED|<resetTimeEpochMillis>`` so callers
    that parse the legacy string form keep working.
    """

    def __init__(self, reset_time: int):
        self.reset_time = int(reset_time)
        super().__init__(
            f"{RateLimitConstants.RESET_SIGNAL}{RateLimitConstants.RESET_SIGNAL_DELIMITER}{self.reset_time}"
        )

    @classmethod
    def from_message(cls, message: str) -> Optional["RateLimitError"]:
        """Parse the string form back into an error, or None if it is not one."""
        prefix, sep, value = (message or "").partition(RateLimitConstants.RESET_SIGNAL_DELIMITER)
        if prefix != RateLimitConstants.RESET_SIGNAL or not sep:
            return None
        try:
            return cls(int(value))
        except ValueError:
            return None

    def wait_time(self, now: Optional[int] = None) -> str:
        """Human readable wait estimate, e.g. ``"2 minutes"``."""
        return get_wait_time_minutes(self.reset_time, now)


class ProviderTransportError(SentilympicsError):
    """Network, HTTP or SDK level failure talking to a provider."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class AnalysisError(SentilympicsError):
    """An analysis call failed; ``cause`` holds the underlying error."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class MalformedResponseError(AnalysisError):
    """Provider output is not parseable JSON or does not match the schema.

    The raw payload is kept on ``raw`` for diagnosis and is never part of the
    message.
    """

    def __init__(self, message: str, raw: Optional[str] = None, cause: Optional[BaseException] = None):
        self.raw = raw
        super().__init__(message, cause)


class AnalysisInProgressError(SentilympicsError):
    """Another analysis is still in flight on the same orchestrator."""


def user_message(exc: BaseException, now: Optional[int] = None) -> str:
    """Map an error to the text a user interface should display."""
    if isinstance(exc, RateLimitError):
        return f"Rate limit exceeded. Please try again in {exc.wait_time(now)}."
    if isinstance(exc, ConfigurationError):
        return ErrorConstants.CONFIGURATION_HINT
    if isinstance(exc, MalformedResponseError):
        return ErrorConstants.MALFORMED_HINT
    if isinstance(exc, AnalysisInProgressError):
        return ErrorConstants.BUSY_HINT
    return ErrorConstants.TRANSPORT_HINT
