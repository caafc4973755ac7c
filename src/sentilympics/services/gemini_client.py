"""Gemini provider built on the google-genai SDK."""

import logging
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from ..core.config import Settings
from ..core.errors import MalformedResponseError, ProviderTransportError
from ..core.models import ChatReply, Source
from .llm import ChatSession, ProviderClient, ProviderKind, build_analysis_prompt

logger = logging.getLogger(__name__)

_GEMINI_SCHEMA_KEYS = {"type", "description", "enum", "properties", "required", "items"}


def to_gemini_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Convert the JSON-Schema contract to the OpenAPI subset Gemini accepts."""
    out: Dict[str, Any] = {}
    for key, value in schema.items():
        if key not in _GEMINI_SCHEMA_KEYS:
            continue
        if key == "type":
            out[key] = value.upper()
        elif key == "properties":
            out[key] = {name: to_gemini_schema(prop) for name, prop in value.items()}
        elif key == "items":
            out[key] = to_gemini_schema(value)
        else:
            out[key] = value
    return out


def extract_grounding_sources(response: Any) -> List[Source]:
    """Normalize ``grounding_metadata.grounding_chunks[].web`` into sources."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None) if web else None
        if not uri:
            continue
        sources.append(Source(title=getattr(web, "title", None) or uri, uri=uri))
    return sources


class GeminiChatSession(ChatSession):
    """Server-side stateful chat; the SDK chat object keeps the history."""

    def __init__(self, chat: Any, system_instruction: str):
        super().__init__(system_instruction)
        self.chat = chat

    async def send_message(self, text: str) -> ChatReply:
        try:
            response = await self.chat.send_message(text)
        except Exception as e:
            logger.error(f"Gemini chat request failed: {e}")
            raise ProviderTransportError(ProviderKind.GEMINI.value, str(e)) from e
        return ChatReply(text=response.text or "", sources=extract_grounding_sources(response))


class GeminiProvider(ProviderClient):
    """Gemini backend with structured output and Google Search grounding."""

    kind = ProviderKind.GEMINI
    supports_search = True

    def __init__(self, config: Settings, client: Optional[Any] = None):
        super().__init__(config)
        self.client = client or genai.Client(
            api_key=config.effective_gemini_key,
            http_options=types.HttpOptions(timeout=int(config.request_timeout * 1000)),
        )
        self.analysis_model = config.gemini_analysis_model
        self.chat_model = config.gemini_chat_model
        logger.info(f"Gemini provider initialized (analysis={self.analysis_model}, chat={self.chat_model})")

    async def analyze(self, text: str, schema: Dict[str, Any]) -> str:
        prompt = build_analysis_prompt(text, self.settings.max_review_chars)
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=to_gemini_schema(schema),
            thinking_config=types.ThinkingConfig(thinking_budget=self.settings.gemini_thinking_budget),
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.analysis_model,
                contents=prompt,
                config=config,
            )
        except Exception as e:
            logger.error(f"Gemini analysis request failed: {e}")
            raise ProviderTransportError(ProviderKind.GEMINI.value, str(e)) from e

        raw = response.text
        if not raw or not raw.strip():
            raise MalformedResponseError("No response from Gemini", raw=raw)
        return raw.strip()

    def create_chat_session(self, context_summary: Optional[str] = None) -> ChatSession:
        instruction = self.system_instruction(context_summary)
        chat = self.client.aio.chats.create(
            model=self.chat_model,
            config=types.GenerateContentConfig(
                system_instruction=instruction,
                tools=[types.Tool(google_search=types.GoogleSearch())],
            ),
        )
        return GeminiChatSession(chat, instruction)
