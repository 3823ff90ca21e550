"""
Client-side filtering and stats for the feedback dashboard.
"""

from typing import List, Sequence

from pydantic import BaseModel

from feedlens.feedback.models import FeedbackItem, Sentiment, Urgency

ALL = "all"


class FeedbackFilters(BaseModel):
    """Independent dashboard filters; "all" disables a filter."""
    source: str = ALL
    urgency: str = ALL
    sentiment: str = ALL


class DashboardStats(BaseModel):
    total: int = 0
    negative: int = 0
    positive: int = 0
    high_urgency: int = 0
    analyzed: int = 0
    sources: List[str] = []


def matches(item: FeedbackItem, filters: FeedbackFilters) -> bool:
    """True if the item satisfies every active filter."""
    if filters.source != ALL and item.source != filters.source:
        return False
    if filters.urgency != ALL and item.urgency != filters.urgency:
        return False
    if filters.sentiment != ALL and item.sentiment != filters.sentiment:
        return False
    return True


def apply_filters(items: Sequence[FeedbackItem], filters: FeedbackFilters) -> List[FeedbackItem]:
    """Keep the items matching all active filters, in their original order."""
    return [item for item in items if matches(item, filters)]


def compute_dashboard_stats(items: Sequence[FeedbackItem]) -> DashboardStats:
    """Aggregate counts over the loaded (unfiltered) list."""
    sources: List[str] = []
    for item in items:
        if item.source not in sources:
            sources.append(item.source)

    return DashboardStats(
        total=len(items),
        negative=sum(1 for i in items if i.sentiment == Sentiment.NEGATIVE.value),
        positive=sum(1 for i in items if i.sentiment == Sentiment.POSITIVE.value),
        high_urgency=sum(1 for i in items if i.urgency == Urgency.HIGH.value),
        analyzed=sum(1 for i in items if i.is_analyzed),
        sources=sources,
    )
