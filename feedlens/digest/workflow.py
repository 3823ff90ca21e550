"""
Digest workflow: fetch analyzed feedback, summarize it, post it.
"""

import logging
from typing import Any, Dict, List, Optional

from feedlens.config import Settings, settings as default_settings
from feedlens.digest.dispatcher import DigestDispatcher
from feedlens.digest.generator import DigestGenerator, SummaryStyle
from feedlens.feedback.models import FeedbackItem
from feedlens.feedback.store import FeedbackStore
from feedlens.workflow.runtime import Step


logger = logging.getLogger(__name__)

DIGEST_WORKFLOW = "digest"


def _to_rows(data: List[Dict[str, Any]]) -> List[FeedbackItem]:
    return [FeedbackItem.model_validate(row) for row in data]


class DigestWorkflow:
    """
    Three ordered steps. Each step only reads current store state and the
    outputs of earlier steps, so a replay recomputes nothing that finished.
    """

    def __init__(self,
                 store: FeedbackStore,
                 generator: DigestGenerator,
                 dispatcher: DigestDispatcher,
                 config: Optional[Settings] = None):
        self.store = store
        self.generator = generator
        self.dispatcher = dispatcher
        self.config = config or default_settings

    async def run(self, step: Step) -> Dict[str, Any]:
        async def fetch_feedback():
            rows = self.store.list_analyzed(limit=self.config.digest_row_limit)
            return [row.model_dump(mode="json") for row in rows]

        feedback = await step.do("fetch-feedback", fetch_feedback)

        if not feedback:
            logger.info("Digest skipped: no analyzed feedback")
            return {"status": "skipped", "reason": "No analyzed feedback"}

        rows = _to_rows(feedback)

        async def generate_summary():
            return await self.generator.generate_summary(rows, style=SummaryStyle.DIGEST)

        summary = await step.do("generate-summary", generate_summary)

        async def send_discord():
            result = await self.dispatcher.dispatch(summary, rows)
            return result.model_dump(exclude_none=True)

        discord_result = await step.do("send-discord", send_discord)

        return {"status": "completed", "discord": discord_result}
