"""
Feedback component.

Store, classify and serve user feedback items.
"""

from feedlens.feedback.models import (
    FeedbackItem,
    FeedbackAnalysis,
    ParsedAnalysis,
    ParseFailure,
    Sentiment,
    Urgency,
    BackfillReport
)
from feedlens.feedback.store import FeedbackStore
from feedlens.feedback.analyzer import FeedbackAnalyzer, extract_json_object, parse_analysis

__all__ = [
    "FeedbackItem",
    "FeedbackAnalysis",
    "ParsedAnalysis",
    "ParseFailure",
    "Sentiment",
    "Urgency",
    "BackfillReport",
    "FeedbackStore",
    "FeedbackAnalyzer",
    "extract_json_object",
    "parse_analysis"
]
