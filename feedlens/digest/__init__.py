"""
Digest component.

Summarize analyzed feedback and deliver it to a chat webhook.
"""

from feedlens.digest.generator import DigestGenerator, SummaryStyle
from feedlens.digest.dispatcher import DigestDispatcher, build_payload, compute_stats
from feedlens.digest.workflow import DigestWorkflow, DIGEST_WORKFLOW

__all__ = [
    "DigestGenerator",
    "SummaryStyle",
    "DigestDispatcher",
    "build_payload",
    "compute_stats",
    "DigestWorkflow",
    "DIGEST_WORKFLOW"
]
