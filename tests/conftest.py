"""Shared fixtures: fake providers, in-memory store and a controllable clock."""

import copy
import json

import pytest

from sentilympics.core.config import Settings
from sentilympics.core.errors import ProviderTransportError
from sentilympics.core.models import ChatReply, Source
from sentilympics.core.rate_limiter import RateLimiter
from sentilympics.core.storage import MemoryStore
from sentilympics.services.llm import ChatSession, ProviderClient, ProviderKind

T0 = 1_700_000_000_000

SAMPLE_ANALYSIS = {
    "sentimentTrend": [
        {"date": "2023-10-01", "sentiment": 65, "snippet": "Great start"},
        {"date": "2023-10-10", "sentiment": -20, "snippet": "Crashing often"},
        {"date": "2023-10-05", "sentiment": 45, "snippet": "Minor bugs"},
    ],
    "wordCloud": [
        {"text": "fast shipping", "value": 45, "type": "praise"},
        {"text": "expensive", "value": 30, "type": "complaint"},
        {"text": "customer support", "value": 20, "type": "complaint"},
    ],
    "summary": {
        "overview": "Sentiment dipped mid-month because of stability issues.",
        "actionableAreas": [
            {"title": "Stabilize Application", "description": "Fix the crash reports.", "priority": "High"},
            {"title": "Review Pricing", "description": "Consider a lower tier.", "priority": "Medium"},
        ],
    },
}


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class FakeChatSession(ChatSession):
    def __init__(self, system_instruction, replies=None, gate=None, error=None):
        super().__init__(system_instruction)
        self.replies = list(replies or [])
        self.gate = gate
        self.error = error
        self.received = []

    async def send_message(self, text):
        self.received.append(text)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return ChatReply(text=f"echo: {text}")


class FakeProvider(ProviderClient):
    kind = ProviderKind.GEMINI
    supports_search = True

    def __init__(self, config=None, response=None, error=None, gate=None):
        super().__init__(config or make_settings(gemini_api_key="test"))
        self.response = json.dumps(SAMPLE_ANALYSIS) if response is None else response
        self.error = error
        self.gate = gate
        self.analyze_calls = []
        self.sessions = []
        self.next_session_kwargs = {}

    async def analyze(self, text, schema):
        self.analyze_calls.append((text, schema))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response

    def create_chat_session(self, context_summary=None):
        session = FakeChatSession(self.system_instruction(context_summary), **self.next_session_kwargs)
        session.context_summary = context_summary
        self.sessions.append(session)
        return session


def make_settings(**overrides):
    values = {
        "gemini_api_key": "",
        "google_api_key": "",
        "openai_api_key": "",
        "primary_provider": "gemini",
        "_env_file": None,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def sample_analysis():
    return copy.deepcopy(SAMPLE_ANALYSIS)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def limiter(store, clock):
    return RateLimiter(store, clock=clock)


@pytest.fixture
def settings():
    return make_settings(gemini_api_key="test")


@pytest.fixture
def provider(settings):
    return FakeProvider(settings)


@pytest.fixture
def transport_error():
    return ProviderTransportError("gemini", "connection reset")


@pytest.fixture
def web_source():
    return Source(title="CX Benchmarks 2024", uri="https://example.com/benchmarks")
