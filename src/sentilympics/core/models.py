"""Data models for Sentilympics."""

import json
from dataclasses import dataclass, field
import datetime as dt
from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "ReviewPoint",
    "WordFrequency",
    "ActionableArea",
    "Summary",
    "AnalysisResult",
    "Source",
    "ChatReply",
    "ChatMessage",
    "RateLimitStatus",
]


class _ContractModel(BaseModel):
    """Immutable model using the camelCase field names of the JSON contract."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ReviewPoint(_ContractModel):
    """One point of the sentiment trend."""
    date: dt.date
    sentiment: int = Field(ge=-100, le=100, strict=True)
    snippet: str


class WordFrequency(_ContractModel):
    """A keyword or phrase with its frequency and polarity."""
    text: str
    value: int = Field(strict=True)
    type: Literal["complaint", "praise"]


class ActionableArea(_ContractModel):
    """A recommended improvement area."""
    title: str
    description: str
    priority: Literal["High", "Medium", "Low"]


class Summary(_ContractModel):
    """Executive summary of the analysed reviews."""
    overview: str
    actionable_areas: List[ActionableArea] = Field(alias="actionableAreas")


class AnalysisResult(_ContractModel):
    """Structured result of one successful analysis call."""
    sentiment_trend: List[ReviewPoint] = Field(alias="sentimentTrend")
    word_cloud: List[WordFrequency] = Field(alias="wordCloud")
    summary: Summary

    def complaints(self) -> List[WordFrequency]:
        return [w for w in self.word_cloud if w.type == "complaint"]

    def praises(self) -> List[WordFrequency]:
        return [w for w in self.word_cloud if w.type == "praise"]

    def sorted_trend(self) -> List[ReviewPoint]:
        """Trend points in chronological order (stable for equal dates)."""
        return sorted(self.sentiment_trend, key=lambda p: p.date)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, data: str) -> "AnalysisResult":
        return cls.model_validate_json(data)


@dataclass(frozen=True)
class Source:
    """A citation attached to a chat reply."""
    title: str
    uri: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "uri": self.uri}


@dataclass
class ChatReply:
    """Provider reply to one chat message."""
    text: str
    sources: List[Source] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "sources": [s.to_dict() for s in self.sources]}


@dataclass(frozen=True)
class ChatMessage:
    """A single entry of the visible chat transcript."""
    id: str
    role: str  # "user" or "model"
    text: str
    timestamp: dt.datetime
    sources: List[Source] = field(default_factory=list)


@dataclass(frozen=True)
class RateLimitStatus:
    """Outcome of a rate-limit check."""
    allowed: bool
    remaining: int
    reset_time: int  # epoch milliseconds
