"""Tests for the chat orchestrator."""

import asyncio
import json

import pytest

from sentilympics.core.constants import ChatConstants
from sentilympics.core.errors import ConfigurationError, RateLimitError
from sentilympics.core.models import AnalysisResult, ChatReply
from sentilympics.services.chat import ChatOrchestrator
from sentilympics.services.llm import ProviderFactory

from .conftest import SAMPLE_ANALYSIS, FakeProvider, make_settings


@pytest.fixture
def context():
    return AnalysisResult.model_validate(SAMPLE_ANALYSIS)


def make_chat(provider, limiter, settings, context=None):
    return ChatOrchestrator(context, provider_factory=lambda: provider, rate_limiter=limiter, config=settings)


class TestWelcome:
    def test_generic_welcome_without_context(self, provider, limiter, settings):
        chat = make_chat(provider, limiter, settings)

        assert len(chat.messages) == 1
        welcome = chat.messages[0]
        assert welcome.id == ChatConstants.WELCOME_ID
        assert welcome.role == "model"
        assert welcome.text == ChatConstants.WELCOME_WITHOUT_CONTEXT
        assert not chat.has_context
        assert provider.sessions[0].received == []

    def test_context_welcome(self, provider, limiter, settings, context):
        chat = make_chat(provider, limiter, settings, context)

        assert [m.text for m in chat.messages] == [ChatConstants.WELCOME_WITH_CONTEXT]
        assert chat.has_context
        # No model call for the welcome message.
        assert provider.sessions[0].received == []
        assert provider.analyze_calls == []

    def test_session_gets_context_digest(self, provider, limiter, settings, context):
        make_chat(provider, limiter, settings, context)
        session = provider.sessions[0]
        assert "Top complaints: expensive, customer support" in session.context_summary
        assert session.context_summary in session.system_instruction

    def test_no_context_uses_generic_instruction(self, provider, limiter, settings):
        make_chat(provider, limiter, settings)
        assert provider.sessions[0].context_summary is None
        assert provider.sessions[0].system_instruction.startswith("You are a helpful customer experience analyst")


class TestSend:
    @pytest.mark.asyncio
    async def test_round_trip(self, provider, limiter, settings, web_source):
        provider.next_session_kwargs = {"replies": [ChatReply(text="Benchmarks say...", sources=[web_source])]}
        chat = make_chat(provider, limiter, settings)

        reply = await chat.send("How do we compare?")

        assert reply.text == "Benchmarks say..."
        assert reply.sources == [web_source]
        assert [m.role for m in chat.messages] == ["model", "user", "model"]
        assert chat.messages[1].text == "How do we compare?"
        assert chat.messages[2] is reply
        assert not chat.is_sending

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_text_is_ignored(self, provider, limiter, settings, store, text):
        chat = make_chat(provider, limiter, settings)
        assert await chat.send(text) is None
        assert len(chat.messages) == 1
        assert store.get("rate_limit_chat") is None

    @pytest.mark.asyncio
    async def test_empty_reply_uses_fallback_text(self, provider, limiter, settings):
        provider.next_session_kwargs = {"replies": [ChatReply(text="")]}
        chat = make_chat(provider, limiter, settings)

        reply = await chat.send("hello")
        assert reply.text == ChatConstants.EMPTY_REPLY

    @pytest.mark.asyncio
    async def test_transport_error_keeps_user_message(self, provider, limiter, settings, transport_error):
        provider.next_session_kwargs = {"error": transport_error}
        chat = make_chat(provider, limiter, settings)

        reply = await chat.send("Are you there?")

        assert reply.role == "model"
        assert reply.text == ChatConstants.CONNECTION_ERROR
        assert [m.text for m in chat.messages[1:]] == ["Are you there?", ChatConstants.CONNECTION_ERROR]
        assert not chat.is_sending

    @pytest.mark.asyncio
    async def test_rate_limited_appends_nothing(self, provider, limiter, settings):
        settings = make_settings(gemini_api_key="k", chat_max_requests=2)
        chat = make_chat(provider, limiter, settings)
        await chat.send("one")
        await chat.send("two")

        with pytest.raises(RateLimitError):
            await chat.send("three")

        assert len(chat.messages) == 5
        assert "three" not in [m.text for m in chat.messages]

    @pytest.mark.asyncio
    async def test_chat_and_analysis_counters_are_separate(self, provider, limiter, settings, store):
        store.set("rate_limit_analysis", json.dumps([limiter.clock()] * 5))
        chat = make_chat(provider, limiter, settings)

        reply = await chat.send("still allowed?")
        assert reply is not None
        assert len(json.loads(store.get("rate_limit_chat"))) == 1

    @pytest.mark.asyncio
    async def test_second_send_while_pending_is_ignored(self, provider, limiter, settings, store):
        gate = asyncio.Event()
        provider.next_session_kwargs = {"gate": gate}
        chat = make_chat(provider, limiter, settings)

        first = asyncio.ensure_future(chat.send("first"))
        await asyncio.sleep(0)
        assert chat.is_sending

        assert await chat.send("second") is None
        gate.set()
        reply = await first

        assert reply.text == "echo: first"
        assert [m.text for m in chat.messages[1:]] == ["first", "echo: first"]
        assert provider.sessions[0].received == ["first"]
        assert len(json.loads(store.get("rate_limit_chat"))) == 1

    @pytest.mark.asyncio
    async def test_context_change_discards_stale_reply(self, provider, limiter, settings, context):
        gate = asyncio.Event()
        provider.next_session_kwargs = {"gate": gate}
        chat = make_chat(provider, limiter, settings)

        pending = asyncio.ensure_future(chat.send("question for the old session"))
        await asyncio.sleep(0)

        provider.next_session_kwargs = {}
        chat.set_context(context)
        assert not chat.is_sending
        gate.set()

        assert await pending is None
        assert [m.text for m in chat.messages] == [ChatConstants.WELCOME_WITH_CONTEXT]
        assert len(provider.sessions) == 2

        # The new session is usable right away.
        reply = await chat.send("new question")
        assert reply.text == "echo: new question"
        assert provider.sessions[1].received == ["new question"]


class TestConfiguration:
    @pytest.mark.asyncio
    async def test_missing_credentials_surface_on_first_send(self, limiter, store):
        settings = make_settings()
        chat = ChatOrchestrator(
            provider_factory=ProviderFactory(settings).create, rate_limiter=limiter, config=settings
        )

        assert not chat.has_session
        assert chat.messages[0].text == ChatConstants.WELCOME_WITHOUT_CONTEXT

        with pytest.raises(ConfigurationError):
            await chat.send("hello")
        assert len(chat.messages) == 1
        assert store.get("rate_limit_chat") is None
