"""
HTTP client for the Feedlens API, used by dashboards and scripts.

This module mirrors what the browser dashboard does: load the feedback
list, analyze unanalyzed rows one at a time, and trigger insights.
"""

import logging
from typing import Callable, List, Optional

import aiohttp
from pydantic import BaseModel

from feedlens.feedback.models import FeedbackItem


logger = logging.getLogger(__name__)


class InsightsResult(BaseModel):
    """Outcome of the "Get Insights" action."""
    summary: Optional[str] = None
    error: Optional[str] = None
    digest_id: Optional[str] = None
    sent_to_discord: bool = False

    @property
    def text(self) -> Optional[str]:
        return self.summary or self.error


class DashboardClient:
    """
    Async client for the feedback HTTP surface.
    """

    def __init__(self, base_url: str = "http://localhost:8000"):
        """
        Initialize the client.

        Args:
            base_url: Root URL of a running Feedlens gateway
        """
        self.base_url = base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def load_feedback(self) -> List[FeedbackItem]:
        """Fetch the full feedback list, most recent first."""
        async with aiohttp.ClientSession() as session:
            async with session.get(self._url("/api/feedback")) as response:
                response.raise_for_status()
                data = await response.json()
        return [FeedbackItem.model_validate(row) for row in data]

    async def analyze(self, feedback_id: int) -> FeedbackItem:
        """Analyze one row and return the updated row."""
        async with aiohttp.ClientSession() as session:
            async with session.post(self._url("/api/analyze"), json={"id": feedback_id}) as response:
                response.raise_for_status()
                data = await response.json()
        return FeedbackItem.model_validate(data)

    async def backfill(self,
                       items: List[FeedbackItem],
                       on_update: Optional[Callable[[List[FeedbackItem]], None]] = None) -> List[FeedbackItem]:
        """
        Analyze every row with a null theme, one request at a time.

        Each completed row replaces its entry in the local list. A failed row
        is logged and left unanalyzed.

        Args:
            items: Loaded feedback list
            on_update: Called with the current list after each completed row

        Returns:
            The updated list
        """
        current = list(items)
        pending = [item.id for item in current if not item.is_analyzed]

        for feedback_id in pending:
            try:
                updated = await self.analyze(feedback_id)
            except aiohttp.ClientResponseError as e:
                logger.warning(f"Analysis of feedback {feedback_id} failed: HTTP {e.status}")
                continue

            current = [updated if item.id == feedback_id else item for item in current]
            if on_update is not None:
                on_update(current)

        return current

    async def get_insights(self) -> InsightsResult:
        """
        Generate the executive summary, then start the digest workflow.
        """
        result = InsightsResult()

        async with aiohttp.ClientSession() as session:
            async with session.post(self._url("/api/summary")) as response:
                data = await response.json()
                result.summary = data.get("summary")
                result.error = data.get("error")

            async with session.post(self._url("/api/send-digest")) as response:
                response.raise_for_status()
                data = await response.json()
                result.digest_id = data.get("id")
                result.sent_to_discord = True

        return result
