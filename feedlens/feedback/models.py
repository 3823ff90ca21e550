"""
Data models for the feedback component.

This module provides the feedback table, the parsed analysis contract and
the small result types passed between the analyzer and the digest pipeline.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlmodel import Field, SQLModel


class Sentiment(str, Enum):
    """Sentiment assigned by analysis."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Urgency(str, Enum):
    """Urgency assigned by analysis."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FeedbackItem(SQLModel, table=True):
    """
    A single piece of user feedback and its analysis fields.

    ``theme`` being null marks the row as unanalyzed. The four analysis
    fields are only ever written together.
    """
    __tablename__ = "feedback"

    id: Optional[int] = Field(default=None, primary_key=True)
    message: str
    source: str = Field(index=True)
    created_at: datetime = Field(default_factory=_utcnow, index=True)
    theme: Optional[str] = None
    sentiment: Optional[str] = None
    urgency: Optional[str] = None
    summary: Optional[str] = None

    @property
    def is_analyzed(self) -> bool:
        return self.theme is not None


class FeedbackAnalysis(BaseModel):
    """
    Classification of one feedback message as returned by the model.
    """
    theme: str
    sentiment: str
    urgency: str
    summary: str


class ParsedAnalysis(BaseModel):
    """Successful parse of model output."""
    kind: Literal["parsed"] = "parsed"
    analysis: FeedbackAnalysis


class ParseFailure(BaseModel):
    """Model output that could not be turned into a FeedbackAnalysis."""
    kind: Literal["failure"] = "failure"
    reason: str
    raw_text: str = ""


ParseResult = Union[ParsedAnalysis, ParseFailure]


class AnalyzeRequest(BaseModel):
    """Body of POST /api/analyze."""
    id: int


class BackfillReport(BaseModel):
    """Outcome of analyzing every pending row."""
    analyzed: List[int] = []
    failed: Dict[int, str] = {}

    @property
    def total(self) -> int:
        return len(self.analyzed) + len(self.failed)


class DigestStats(BaseModel):
    """
    Aggregate counts included in every digest.
    """
    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    negative: int = 0
    high_urgency: int = PydanticField(default=0, alias="highUrgency")


class DigestResult(BaseModel):
    """Ephemeral digest: counts plus the generated summary."""
    stats: DigestStats
    summary: str


class DispatchResult(BaseModel):
    """Result of posting a digest to the chat webhook."""
    sent: bool
    status: Optional[int] = None
    reason: Optional[str] = None
