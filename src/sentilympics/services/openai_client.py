"""OpenAI provider built on the openai SDK."""

import logging
from typing import Any, Dict, List, Optional

import openai

from ..core.config import Settings
from ..core.constants import PromptConstants
from ..core.errors import MalformedResponseError, ProviderTransportError
from ..core.models import ChatReply
from .llm import ChatSession, ProviderClient, ProviderKind, build_analysis_prompt

logger = logging.getLogger(__name__)


class OpenAIChatSession(ChatSession):
    """Chat completions are stateless, so the session replays its own history."""

    def __init__(self, client: Any, model: str, system_instruction: str):
        super().__init__(system_instruction)
        self.client = client
        self.model = model
        self.history: List[Dict[str, str]] = []

    def _messages(self, text: str) -> List[Dict[str, str]]:
        return (
            [{"role": "system", "content": self.system_instruction}]
            + self.history
            + [{"role": "user", "content": text}]
        )

    async def send_message(self, text: str) -> ChatReply:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=self._messages(text),
            )
        except Exception as e:
            logger.error(f"OpenAI chat request failed: {e}")
            raise ProviderTransportError(ProviderKind.OPENAI.value, str(e)) from e

        reply = (response.choices[0].message.content or "").strip() if response.choices else ""
        # Only completed round trips join the history.
        self.history.append({"role": "user", "content": text})
        self.history.append({"role": "assistant", "content": reply})
        return ChatReply(text=reply, sources=[])


class OpenAIProvider(ProviderClient):
    """OpenAI backend using strict JSON-schema structured output."""

    kind = ProviderKind.OPENAI
    supports_search = False

    def __init__(self, config: Settings, client: Optional[Any] = None):
        super().__init__(config)
        self.client = client or openai.AsyncOpenAI(
            api_key=config.openai_api_key,
            timeout=config.request_timeout,
        )
        self.model = config.openai_model
        self.chat_model = config.openai_chat_model
        logger.info(f"OpenAI provider initialized (analysis={self.model}, chat={self.chat_model})")

    async def analyze(self, text: str, schema: Dict[str, Any]) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": PromptConstants.ANALYSIS_SYSTEM_PROMPT},
                    {"role": "user", "content": build_analysis_prompt(text, self.settings.max_review_chars)},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": "analysis_result", "schema": schema, "strict": True},
                },
                temperature=self.settings.openai_temperature,
            )
        except Exception as e:
            logger.error(f"OpenAI analysis request failed: {e}")
            raise ProviderTransportError(ProviderKind.OPENAI.value, str(e)) from e

        raw = response.choices[0].message.content if response.choices else None
        if not raw or not raw.strip():
            raise MalformedResponseError("No response from OpenAI", raw=raw)
        return raw.strip()

    def create_chat_session(self, context_summary: Optional[str] = None) -> ChatSession:
        return OpenAIChatSession(self.client, self.chat_model, self.system_instruction(context_summary))
