"""
HTML routes for the feedback dashboard.
"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from feedlens.dashboard.client import InsightsResult
from feedlens.dashboard.filters import ALL, FeedbackFilters
from feedlens.dashboard.render import render_dashboard
from feedlens.digest.workflow import DIGEST_WORKFLOW
from feedlens.feedback.api import get_services
from feedlens.services import FeedlensServices
from feedlens.utils.error_handling import FeedlensError


logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])


@router.get("/", response_class=HTMLResponse)
async def dashboard(
    source: str = Query(ALL),
    urgency: str = Query(ALL),
    sentiment: str = Query(ALL),
    services: FeedlensServices = Depends(get_services)
):
    """Render the dashboard with the given filters."""
    filters = FeedbackFilters(source=source, urgency=urgency, sentiment=sentiment)
    return render_dashboard(services.store.list_feedback(), filters)


@router.post("/insights", response_class=HTMLResponse)
async def insights(services: FeedlensServices = Depends(get_services)):
    """Generate a summary, start the digest workflow, and render the result."""
    result = InsightsResult()
    try:
        result.summary = await services.generator.generate_summary(services.store.list_analyzed())
    except FeedlensError as e:
        logger.warning(f"Insights summary failed: {e.message}")
        result.error = e.message

    instance = await services.runtime.create(DIGEST_WORKFLOW)
    result.digest_id = instance.id
    result.sent_to_discord = True

    return render_dashboard(services.store.list_feedback(), insights=result)
