"""
Digest Dispatcher for delivering digests to a Discord-style webhook.

This module builds the embed payload and posts it once. Delivery is not
retried here.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

import aiohttp

from feedlens.config import Settings, settings as default_settings
from feedlens.feedback.models import DigestStats, DispatchResult, FeedbackItem, Sentiment, Urgency
from feedlens.utils.error_handling import DeliveryError


logger = logging.getLogger(__name__)

EMBED_TITLE = "📊 Daily Feedback Digest"
EMBED_COLOR = 0x5865F2
EMBED_FOOTER = "Feedback Analyzer • Auto-generated digest"
NOT_CONFIGURED_REASON = "No webhook URL configured"


def compute_stats(rows: Sequence[FeedbackItem]) -> DigestStats:
    """Count total, negative and high-urgency rows."""
    return DigestStats(
        total=len(rows),
        negative=sum(1 for row in rows if row.sentiment == Sentiment.NEGATIVE.value),
        high_urgency=sum(1 for row in rows if row.urgency == Urgency.HIGH.value),
    )


def build_payload(summary: str, stats: DigestStats, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Build the webhook body.

    Args:
        summary: Generated digest text
        stats: Aggregate counts
        timestamp: Embed timestamp (defaults to now, UTC)

    Returns:
        JSON-serializable payload with a single embed
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    embed = {
        "title": EMBED_TITLE,
        "description": summary,
        "color": EMBED_COLOR,
        "fields": [
            {"name": "📝 Total Feedback", "value": str(stats.total), "inline": True},
            {"name": "😞 Negative", "value": str(stats.negative), "inline": True},
            {"name": "🔴 High Urgency", "value": str(stats.high_urgency), "inline": True},
        ],
        "footer": {"text": EMBED_FOOTER},
        "timestamp": timestamp.isoformat(),
    }
    return {"embeds": [embed]}


class DigestDispatcher:
    """
    Posts digests to the configured webhook.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    @property
    def webhook_url(self) -> Optional[str]:
        return self.config.discord_webhook_url

    async def dispatch(self, summary: str, rows: Sequence[FeedbackItem]) -> DispatchResult:
        """
        Deliver a digest.

        Args:
            summary: Generated digest text
            rows: The rows the digest was generated from

        Returns:
            DispatchResult; ``sent`` is False when no webhook is configured
            or the webhook answered with a non-2xx status

        Raises:
            DeliveryError: The request could not be sent
        """
        if not self.webhook_url:
            logger.info("Skipping digest delivery: no webhook URL configured")
            return DispatchResult(sent=False, reason=NOT_CONFIGURED_REASON)

        payload = build_payload(summary, compute_stats(rows))

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.webhook_url, json=payload) as response:
                    status = response.status
        except aiohttp.ClientError as e:
            logger.error(f"Digest delivery failed: {e}")
            raise DeliveryError(
                f"Webhook request failed: {e}",
                component="digest_dispatcher",
                details={"original_error": e.__class__.__name__}
            ) from e

        sent = 200 <= status < 300
        if sent:
            logger.info(f"Digest delivered (HTTP {status})")
        else:
            logger.warning(f"Webhook rejected digest with HTTP {status}")

        return DispatchResult(sent=sent, status=status)
