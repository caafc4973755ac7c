"""Chat orchestration bound to an optional analysis context."""

import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..core.config import Settings, settings as default_settings
from ..core.constants import ChatConstants, RateLimitConstants
from ..core.errors import ConfigurationError, ProviderTransportError, RateLimitError
from ..core.models import AnalysisResult, ChatMessage, Source
from ..core.rate_limiter import RateLimiter, get_default_limiter
from ..core.schema import build_context_digest
from .llm import ChatSession, ProviderClient, ProviderFactory

logger = logging.getLogger(__name__)


def _message(role: str, text: str, sources: Optional[List[Source]] = None, message_id: Optional[str] = None) -> ChatMessage:
    return ChatMessage(
        id=message_id or uuid.uuid4().hex,
        role=role,
        text=text,
        timestamp=datetime.now(),
        sources=list(sources or []),
    )


class ChatOrchestrator:
    """Owns one chat session and its visible transcript.

    The session is recreated whenever the analysis context changes. Each
    context gets a new generation number; replies that arrive for an older
    generation are discarded. Only one send per generation may be in flight.
    """

    def __init__(
        self,
        context: Optional[AnalysisResult] = None,
        provider_factory: Optional[Callable[[], ProviderClient]] = None,
        rate_limiter: Optional[RateLimiter] = None,
        config: Optional[Settings] = None,
    ):
        self.settings = config or default_settings
        self.provider_factory = provider_factory or ProviderFactory(self.settings).create
        self._rate_limiter = rate_limiter
        self._provider: Optional[ProviderClient] = None
        self._session: Optional[ChatSession] = None
        self._context: Optional[AnalysisResult] = None
        self._messages: List[ChatMessage] = []
        self._generation = 0
        self._in_flight: Optional[int] = None
        self.set_context(context)

    @property
    def rate_limiter(self) -> RateLimiter:
        if self._rate_limiter is None:
            self._rate_limiter = get_default_limiter()
        return self._rate_limiter

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def has_context(self) -> bool:
        return self._context is not None

    @property
    def has_session(self) -> bool:
        return self._session is not None

    @property
    def is_sending(self) -> bool:
        return self._in_flight == self._generation

    def _create_session(self) -> ChatSession:
        if self._provider is None:
            self._provider = self.provider_factory()
        digest = build_context_digest(self._context) if self._context is not None else None
        return self._provider.create_chat_session(digest)

    def set_context(self, context: Optional[AnalysisResult]) -> None:
        """Discard the current session and start over for ``context``."""
        self._context = context
        self._generation += 1
        self._session = None
        try:
            self._session = self._create_session()
        except ConfigurationError as e:
            # Surfaced again on the first send.
            logger.warning(f"Chat session not created: {e}")

        welcome = ChatConstants.WELCOME_WITH_CONTEXT if context is not None else ChatConstants.WELCOME_WITHOUT_CONTEXT
        self._messages = [_message("model", welcome, message_id=ChatConstants.WELCOME_ID)]
        logger.debug(f"Chat context reset (generation {self._generation}, context={'yes' if context else 'no'})")

    async def send(self, user_text: str) -> Optional[ChatMessage]:
        """Send ``user_text`` and return the model message that was appended.

        Returns None without side effects for blank text or while a send is in
        flight, and None when the context changed before the reply arrived.
        Raises ``RateLimitError`` (nothing appended) or ``ConfigurationError``.
        """
        if not user_text or not user_text.strip() or self.is_sending:
            return None

        if self._session is None:
            self._session = self._create_session()

        status = self.rate_limiter.check(
            RateLimitConstants.CHAT_KEY,
            self.settings.chat_max_requests,
            self.settings.chat_window_ms,
        )
        if not status.allowed:
            raise RateLimitError(status.reset_time)

        generation = self._generation
        session = self._session
        self._messages.append(_message("user", user_text))
        self._in_flight = generation
        try:
            try:
                reply = await session.send_message(user_text)
            except ProviderTransportError as e:
                logger.error(f"Chat error: {e}")
                if generation != self._generation:
                    return None
                model_msg = _message("model", ChatConstants.CONNECTION_ERROR)
            else:
                if generation != self._generation:
                    logger.info("Discarding chat reply for a replaced session")
                    return None
                model_msg = _message("model", reply.text or ChatConstants.EMPTY_REPLY, reply.sources)
            self._messages.append(model_msg)
            return model_msg
        finally:
            if self._in_flight == generation:
                self._in_flight = None
