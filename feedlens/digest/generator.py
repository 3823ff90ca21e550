"""
Digest Generator for producing prose summaries of analyzed feedback.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

from feedlens.config import Settings, settings as default_settings
from feedlens.feedback.models import FeedbackItem
from feedlens.utils.error_handling import LLMError, NoAnalyzedFeedbackError
from feedlens.utils.llm_client import LLMClient


logger = logging.getLogger(__name__)


class SummaryStyle(str, Enum):
    """Which prompt to use for the summary."""
    EXECUTIVE = "executive"
    DIGEST = "digest"


EXECUTIVE_PROMPT_TEMPLATE = """You are a PM assistant. Given this analyzed user feedback, provide a brief executive summary with:
1. Key themes (top 2-3 issues)
2. Overall sentiment breakdown
3. Recommended priorities

Respond in plain text, be concise (max 150 words).

Feedback:
{feedback_list}"""

DIGEST_PROMPT_TEMPLATE = """You are a PM assistant. Summarize this feedback for a daily digest:
1. Top issues requiring attention
2. Sentiment overview
3. Quick wins

Be concise (100 words max).

{feedback_list}"""


def format_feedback_line(item: FeedbackItem, style: SummaryStyle = SummaryStyle.EXECUTIVE) -> str:
    """Serialize one analyzed row as a single prompt line."""
    if style == SummaryStyle.DIGEST:
        return f"- [{item.sentiment}, {item.urgency}] {item.theme}: {item.summary}"
    return f"- [{item.sentiment}, {item.urgency} urgency, {item.source}] {item.theme}: {item.summary}"


def build_summary_prompt(rows: Sequence[FeedbackItem], style: SummaryStyle = SummaryStyle.EXECUTIVE) -> str:
    """Build the summary prompt for a sequence of analyzed rows."""
    feedback_list = "\n".join(format_feedback_line(row, style) for row in rows)
    template = DIGEST_PROMPT_TEMPLATE if style == SummaryStyle.DIGEST else EXECUTIVE_PROMPT_TEMPLATE
    return template.format(feedback_list=feedback_list)


class DigestGenerator:
    """
    Generates an aggregate summary with one model call.
    """

    def __init__(self, llm: LLMClient, config: Optional[Settings] = None):
        self.llm = llm
        self.config = config or default_settings

    def _max_tokens(self, style: SummaryStyle) -> int:
        if style == SummaryStyle.DIGEST:
            return self.config.digest_max_tokens
        return self.config.summary_max_tokens

    async def generate_summary(self,
                               rows: Sequence[FeedbackItem],
                               style: SummaryStyle = SummaryStyle.EXECUTIVE) -> str:
        """
        Summarize analyzed feedback.

        The model's reply is returned verbatim.

        Args:
            rows: Analyzed rows, in the order they should appear
            style: Prompt variant

        Returns:
            Summary text

        Raises:
            NoAnalyzedFeedbackError: rows is empty
            LLMError: The model returned no text
        """
        if not rows:
            raise NoAnalyzedFeedbackError("No analyzed feedback yet", component="digest_generator")

        prompt = build_summary_prompt(rows, style)
        logger.info(f"Generating {style.value} summary over {len(rows)} rows")

        summary = await self.llm.complete(prompt, max_tokens=self._max_tokens(style))
        if not summary.strip():
            raise LLMError("Model returned an empty summary", component="digest_generator")

        return summary
