"""
API endpoints for feedback analysis and digests.

This module provides the FastAPI routes under /api. Errors raised by the
components are translated to JSON responses by the gateway's exception
handlers.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, Path, Request

from feedlens.digest.workflow import DIGEST_WORKFLOW
from feedlens.feedback.models import AnalyzeRequest, FeedbackItem
from feedlens.services import FeedlensServices
from feedlens.workflow.models import InstanceView


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["feedback"],
    responses={404: {"description": "Not found"}}
)


def get_services(request: Request) -> FeedlensServices:
    """Get the components attached to the running app."""
    return request.app.state.services


@router.get("/feedback", response_model=List[FeedbackItem])
async def list_feedback(services: FeedlensServices = Depends(get_services)):
    """
    List all feedback, most recent first.
    """
    return services.store.list_feedback()


@router.post("/analyze", response_model=FeedbackItem)
async def analyze_feedback(
    body: AnalyzeRequest,
    services: FeedlensServices = Depends(get_services)
):
    """
    Analyze a single feedback item.

    Args:
        body: {"id": <feedback id>}

    Returns:
        The updated feedback item
    """
    return await services.analyzer.analyze(body.id)


@router.post("/summary", response_model=Dict[str, str])
async def generate_summary(services: FeedlensServices = Depends(get_services)):
    """
    Generate an executive summary over all analyzed feedback.
    """
    rows = services.store.list_analyzed()
    summary = await services.generator.generate_summary(rows)
    return {"summary": summary}


@router.post("/send-digest", response_model=Dict[str, str])
async def send_digest(services: FeedlensServices = Depends(get_services)):
    """
    Start the digest workflow.

    Returns:
        Message and workflow instance id
    """
    instance = await services.runtime.create(DIGEST_WORKFLOW)
    return {"message": "Digest workflow started", "id": instance.id}


@router.get("/digest/{instance_id}", response_model=InstanceView)
async def get_digest_status(
    instance_id: str = Path(..., description="Workflow instance id"),
    services: FeedlensServices = Depends(get_services)
):
    """
    Get the status of a digest workflow instance.
    """
    return services.runtime.status(instance_id)
