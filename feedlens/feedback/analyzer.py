"""
Feedback Analyzer for classifying individual feedback items.

Each item is sent to the language model with a fixed instruction prompt. The
reply is free-form text, so extraction (finding the JSON object) and
validation (checking its shape and enumerated values) are separate steps.
"""

import asyncio
import json
import logging
import re
from typing import Callable, Optional

from pydantic import ValidationError

from feedlens.config import Settings, settings as default_settings
from feedlens.feedback.models import (
    BackfillReport,
    FeedbackAnalysis,
    FeedbackItem,
    ParsedAnalysis,
    ParseFailure,
    ParseResult,
    Sentiment,
    Urgency,
)
from feedlens.feedback.store import FeedbackStore
from feedlens.utils.error_handling import AnalysisParseError, FeedlensError, NotFoundError
from feedlens.utils.llm_client import LLMClient


logger = logging.getLogger(__name__)

# First "{" through last "}", across newlines
_JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

ANALYSIS_PROMPT_TEMPLATE = """Analyze this user feedback and respond with ONLY a JSON object (no markdown, no explanation):
{{
  "theme": "<main topic in 2-3 words>",
  "sentiment": "<positive|negative|neutral>",
  "urgency": "<high|medium|low>",
  "summary": "<one sentence summary>"
}}

Feedback: "{message}\""""


def build_analysis_prompt(message: str) -> str:
    """Build the classification prompt for one feedback message."""
    return ANALYSIS_PROMPT_TEMPLATE.format(message=message)


def extract_json_object(text: str) -> Optional[str]:
    """
    Return the brace-delimited substring of a model reply.

    Models sometimes wrap the object in prose or code fences; everything
    before the first "{" and after the last "}" is dropped.
    """
    if not text:
        return None
    match = _JSON_OBJECT_PATTERN.search(text)
    return match.group(0) if match else None


def parse_analysis(text: str, strict: bool = True) -> ParseResult:
    """
    Turn raw model output into a tagged parse result.

    Args:
        text: Raw model reply
        strict: Reject empty fields and sentiment/urgency values outside
            their enumerations

    Returns:
        ParsedAnalysis on success, ParseFailure otherwise
    """
    candidate = extract_json_object(text)
    if candidate is None:
        return ParseFailure(reason="No JSON object found in model output", raw_text=text or "")

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        return ParseFailure(reason=f"Invalid JSON: {e.msg}", raw_text=text)

    if not isinstance(data, dict):
        return ParseFailure(reason="Model output is not a JSON object", raw_text=text)

    blank = (None, "") if strict else (None,)
    missing = [key for key in FeedbackAnalysis.model_fields if data.get(key) in blank]
    if missing:
        return ParseFailure(reason=f"Missing fields: {', '.join(missing)}", raw_text=text)

    try:
        analysis = FeedbackAnalysis(**{
            key: str(data[key]).strip() for key in FeedbackAnalysis.model_fields
        })
    except ValidationError as e:
        return ParseFailure(reason=str(e), raw_text=text)

    if strict:
        sentiment = analysis.sentiment.lower()
        urgency = analysis.urgency.lower()
        if sentiment not in {s.value for s in Sentiment}:
            return ParseFailure(reason=f"Unknown sentiment: {analysis.sentiment}", raw_text=text)
        if urgency not in {u.value for u in Urgency}:
            return ParseFailure(reason=f"Unknown urgency: {analysis.urgency}", raw_text=text)
        analysis = analysis.model_copy(update={"sentiment": sentiment, "urgency": urgency})

    return ParsedAnalysis(analysis=analysis)


class FeedbackAnalyzer:
    """
    Classifies feedback rows and persists the result.
    """

    def __init__(self,
                 store: FeedbackStore,
                 llm: LLMClient,
                 config: Optional[Settings] = None):
        """
        Initialize the feedback analyzer.

        Args:
            store: Feedback store to read from and write to
            llm: Language model client
            config: Settings (token budget, validation mode)
        """
        self.store = store
        self.llm = llm
        self.config = config or default_settings

    async def analyze(self, feedback_id: int) -> FeedbackItem:
        """
        Analyze one feedback row.

        Args:
            feedback_id: Id of an existing row

        Returns:
            The updated row

        Raises:
            NotFoundError: No row with this id
            AnalysisParseError: Model output unusable; the row is left untouched
        """
        item = self.store.get(feedback_id)
        if item is None:
            raise NotFoundError(
                "Feedback not found",
                component="feedback_analyzer",
                details={"id": feedback_id}
            )

        prompt = build_analysis_prompt(item.message)
        text = await self.llm.complete(prompt, max_tokens=self.config.analysis_max_tokens)

        result = parse_analysis(text, strict=self.config.strict_analysis_validation)
        if isinstance(result, ParseFailure):
            logger.warning(f"Could not parse analysis for feedback {feedback_id}: {result.reason}")
            raise AnalysisParseError(
                "Failed to parse AI response",
                component="feedback_analyzer",
                details={"id": feedback_id, "reason": result.reason}
            )

        self.store.apply_analysis(feedback_id, result.analysis)
        logger.info(
            f"Analyzed feedback {feedback_id}: {result.analysis.theme} "
            f"({result.analysis.sentiment}, {result.analysis.urgency})"
        )

        return self.store.get(feedback_id)

    async def analyze_pending(self,
                              concurrency: int = 1,
                              on_update: Optional[Callable[[FeedbackItem], None]] = None) -> BackfillReport:
        """
        Analyze every row whose theme is null.

        Rows are processed one at a time unless ``concurrency`` is raised, in
        which case at most that many model calls run at once. A row never has
        more than one call in flight.

        Args:
            concurrency: Maximum concurrent analyses
            on_update: Called with each updated row as it completes

        Returns:
            Report of analyzed and failed ids
        """
        pending = self.store.list_unanalyzed()
        report = BackfillReport()

        if not pending:
            return report

        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def _run(item: FeedbackItem):
            async with semaphore:
                try:
                    updated = await self.analyze(item.id)
                except FeedlensError as e:
                    report.failed[item.id] = e.message
                    return
                report.analyzed.append(item.id)
                if on_update is not None:
                    on_update(updated)

        if concurrency <= 1:
            for item in pending:
                await _run(item)
        else:
            await asyncio.gather(*(_run(item) for item in pending))

        logger.info(f"Backfill finished: {len(report.analyzed)} analyzed, {len(report.failed)} failed")
        return report
