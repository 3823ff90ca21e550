"""
Component wiring for Feedlens.

Builds every component from one Settings instance so nothing reads the
environment at call time.
"""

import logging
from typing import Optional

from feedlens.config import Settings, settings as default_settings
from feedlens.digest.dispatcher import DigestDispatcher
from feedlens.digest.generator import DigestGenerator
from feedlens.digest.workflow import DIGEST_WORKFLOW, DigestWorkflow
from feedlens.feedback.analyzer import FeedbackAnalyzer
from feedlens.feedback.store import FeedbackStore
from feedlens.utils.database import get_engine, init_db
from feedlens.utils.llm_client import LLMClient
from feedlens.workflow.runtime import WorkflowRuntime


logger = logging.getLogger(__name__)


class FeedlensServices:
    """
    Holds the initialized components for one configuration.
    """

    def __init__(self, config: Optional[Settings] = None, llm: Optional[LLMClient] = None):
        """
        Initialize all components.

        Args:
            config: Settings to build from (defaults to the global settings)
            llm: Language model client override
        """
        self.config = config or default_settings

        self.engine = get_engine(self.config)
        init_db(self.engine)

        self.store = FeedbackStore(self.engine)
        self.llm = llm or LLMClient(self.config)
        self.analyzer = FeedbackAnalyzer(self.store, self.llm, self.config)
        self.generator = DigestGenerator(self.llm, self.config)
        self.dispatcher = DigestDispatcher(self.config)

        self.runtime = WorkflowRuntime(self.engine, max_attempts=self.config.workflow_step_retries)
        self.runtime.register(DIGEST_WORKFLOW, self.digest_workflow)

        logger.info("Feedlens components initialized")

    def digest_workflow(self) -> DigestWorkflow:
        """Build a digest workflow bound to these components."""
        return DigestWorkflow(self.store, self.generator, self.dispatcher, self.config)
